# famfin/services/visibility.py
"""
Family-based visibility, re-derived on every read.

A record owned by someone else is visible to the viewer only when both
belong to the same family and the owner flagged the record is_shared.
Nothing is cached; every query joins through family_member again.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_, false, or_
from sqlmodel import Session, select

from famfin.models import Category, FamilyMember


def membership_of(session: Session, user_id: int) -> Optional[FamilyMember]:
    """The user's family membership row, if any (there is at most one)."""
    return session.exec(
        select(FamilyMember).where(FamilyMember.user_id == user_id)
    ).first()


def family_user_ids(session: Session, user_id: int) -> List[int]:
    """Ids of every member of the user's family, the user included. [] if none."""
    member = membership_of(session, user_id)
    if member is None:
        return []
    return list(
        session.exec(
            select(FamilyMember.user_id).where(FamilyMember.family_id == member.family_id)
        ).all()
    )


def same_family(session: Session, user_a: int, user_b: int) -> bool:
    a = membership_of(session, user_a)
    b = membership_of(session, user_b)
    return a is not None and b is not None and a.family_id == b.family_id


def shared_by_family(owner_column, shared_column, peer_ids: List[int]):
    """SQL clause: row is flagged shared and owned by someone in peer_ids."""
    if not peer_ids:
        return false()
    return and_(shared_column.is_(True), owner_column.in_(peer_ids))


def visible_categories_clause(session: Session, user_id: int):
    """Defaults, the user's own categories, and categories shared in the family."""
    peers = family_user_ids(session, user_id)
    return or_(
        Category.is_default.is_(True),
        Category.created_by_id == user_id,
        shared_by_family(Category.created_by_id, Category.is_shared, peers),
    )
