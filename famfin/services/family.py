# famfin/services/family.py
"""
Family membership, the invitation state machine and the sharing toggle.

Invitation states:
    PENDING -> ACCEPTED   (invitee joins as MEMBER)
    PENDING -> REJECTED   (invitee declined, or the invitation expired)
Both outcomes are terminal. A user is in at most one family at a time.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlmodel import Session, select

from famfin.config import get_settings
from famfin.errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    InvitationExpired,
    NotFound,
)
from famfin.models import (
    BankAccount,
    Card,
    Category,
    Family,
    FamilyInvitation,
    FamilyMember,
    Goal,
    InvitationStatus,
    MemberRole,
    Transaction,
    User,
    utcnow,
)
from famfin.periods import days_ago
from famfin.services.visibility import membership_of, same_family

logger = logging.getLogger("famfin.family")

MEMBER_DATA_TRANSACTIONS = 100


# ---------- Family ----------


def family_members(session: Session, family_id: int) -> List[Tuple[FamilyMember, User]]:
    stmt = (
        select(FamilyMember, User)
        .join(User, User.id == FamilyMember.user_id)
        .where(FamilyMember.family_id == family_id)
        .order_by(FamilyMember.joined_at, FamilyMember.id)
    )
    return list(session.exec(stmt).all())


def get_family(
    session: Session, user_id: int
) -> Tuple[Optional[Family], Optional[FamilyMember]]:
    """The user's family and their own membership row, or (None, None)."""
    member = membership_of(session, user_id)
    if member is None:
        return None, None
    return session.get(Family, member.family_id), member


def create_family(session: Session, user_id: int, name: str) -> Family:
    if membership_of(session, user_id) is not None:
        raise Conflict("You already belong to a family")

    family = Family(name=name.strip(), created_by_id=user_id)
    session.add(family)
    session.flush()
    session.add(FamilyMember(family_id=family.id, user_id=user_id, role=MemberRole.OWNER))
    session.commit()
    session.refresh(family)
    logger.info("family %s created by user=%s", family.id, user_id)
    return family


def leave_family(session: Session, user_id: int) -> str:
    """
    MEMBER: leaves. Sole OWNER: the family is disbanded.
    OWNER with other members: refused until they are gone.
    Returns "left" or "disbanded".
    """
    member = membership_of(session, user_id)
    if member is None:
        raise NotFound("You are not in a family")

    if member.role != MemberRole.OWNER:
        session.delete(member)
        session.commit()
        return "left"

    members = family_members(session, member.family_id)
    if len(members) > 1:
        raise Conflict("Remove the other members before leaving the family")

    family_id = member.family_id
    invitations = session.exec(
        select(FamilyInvitation).where(FamilyInvitation.family_id == family_id)
    ).all()
    for invitation in invitations:
        session.delete(invitation)
    session.delete(member)
    session.flush()
    session.delete(session.get(Family, family_id))
    session.commit()
    logger.info("family %s disbanded by user=%s", family_id, user_id)
    return "disbanded"


def _owner_membership(session: Session, user_id: int) -> FamilyMember:
    member = membership_of(session, user_id)
    if member is None or member.role != MemberRole.OWNER:
        raise Forbidden("Only the family owner can do this")
    return member


def remove_member(session: Session, user_id: int, member_id: int) -> None:
    owner = _owner_membership(session, user_id)
    target = session.get(FamilyMember, member_id)
    if target is None:
        raise NotFound("Member not found")
    if target.family_id != owner.family_id:
        raise Forbidden("This member does not belong to your family")
    if target.user_id == user_id:
        raise InvalidInput("You cannot remove yourself from the family")
    session.delete(target)
    session.commit()
    logger.info("user=%s removed from family %s", target.user_id, owner.family_id)


# ---------- Invitations ----------


def _is_expired(invitation: FamilyInvitation, now=None) -> bool:
    ttl = get_settings().invitation_ttl_days
    return invitation.created_at < days_ago(now or utcnow(), ttl)


def invite(session: Session, user_id: int, email: str) -> FamilyInvitation:
    member = membership_of(session, user_id)
    if member is None:
        raise InvalidInput("Create a family before inviting members")
    if member.role != MemberRole.OWNER:
        raise Forbidden("Only the family owner can invite members")

    invited = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if invited is None:
        raise NotFound("No user with this email")
    if invited.id == user_id:
        raise InvalidInput("You cannot invite yourself")
    if membership_of(session, invited.id) is not None:
        raise Conflict("This user already belongs to a family")

    existing = session.exec(
        select(FamilyInvitation).where(
            FamilyInvitation.family_id == member.family_id,
            FamilyInvitation.invited_id == invited.id,
        )
    ).first()
    if existing is not None:
        if existing.status == InvitationStatus.PENDING and not _is_expired(existing):
            raise Conflict("An invitation is already pending for this user")
        # answered (or stale) invitations make room for a fresh one
        session.delete(existing)
        session.flush()

    invitation = FamilyInvitation(
        family_id=member.family_id,
        invited_id=invited.id,
        invited_by_id=user_id,
    )
    session.add(invitation)
    session.commit()
    session.refresh(invitation)
    return invitation


def list_invitations(
    session: Session, user_id: int
) -> List[Tuple[FamilyInvitation, Family, User]]:
    """
    The user's pending invitations, newest first, with family and inviter.
    Expired ones are moved to REJECTED here and left out.
    """
    pending = session.exec(
        select(FamilyInvitation)
        .where(
            FamilyInvitation.invited_id == user_id,
            FamilyInvitation.status == InvitationStatus.PENDING,
        )
        .order_by(FamilyInvitation.created_at.desc(), FamilyInvitation.id.desc())
    ).all()

    now = utcnow()
    live = []
    expired = 0
    for invitation in pending:
        if _is_expired(invitation, now):
            invitation.status = InvitationStatus.REJECTED
            invitation.responded_at = now
            session.add(invitation)
            expired += 1
        else:
            live.append(invitation)
    if expired:
        session.commit()
        logger.info("%s stale invitation(s) expired for user=%s", expired, user_id)

    result = []
    for invitation in live:
        family = session.get(Family, invitation.family_id)
        inviter = session.get(User, invitation.invited_by_id)
        result.append((invitation, family, inviter))
    return result


def respond_invitation(
    session: Session, user_id: int, invitation_id: int, action: str
) -> Optional[int]:
    """
    Accept or reject an invitation. Returns the family id when accepted.
    Accepting writes the membership and the status change in one commit.
    """
    invitation = session.get(FamilyInvitation, invitation_id)
    if invitation is None:
        raise NotFound("Invitation not found")
    if invitation.invited_id != user_id:
        raise Forbidden("This invitation is not for you")
    if invitation.status != InvitationStatus.PENDING:
        raise InvalidInput("This invitation has already been answered")

    now = utcnow()
    if _is_expired(invitation, now):
        invitation.status = InvitationStatus.REJECTED
        invitation.responded_at = now
        session.add(invitation)
        session.commit()
        logger.info("invitation %s expired on response by user=%s", invitation_id, user_id)
        raise InvitationExpired()

    if action == "reject":
        invitation.status = InvitationStatus.REJECTED
        invitation.responded_at = now
        session.add(invitation)
        session.commit()
        return None

    if membership_of(session, user_id) is not None:
        raise Conflict("You already belong to a family")

    session.add(
        FamilyMember(family_id=invitation.family_id, user_id=user_id, role=MemberRole.MEMBER)
    )
    invitation.status = InvitationStatus.ACCEPTED
    invitation.responded_at = now
    session.add(invitation)
    session.commit()
    logger.info("user=%s joined family %s", user_id, invitation.family_id)
    return invitation.family_id


# ---------- Sharing ----------

# share type -> (model, owner column name)
SHAREABLE: Dict[str, tuple] = {
    "bankAccount": (BankAccount, "created_by_id"),
    "card": (Card, "user_id"),
    "category": (Category, "created_by_id"),
    "transaction": (Transaction, "user_id"),
    "goal": (Goal, "created_by_id"),
}


def set_shared(session: Session, user_id: int, type: str, item_id: int, shared: bool):
    """Flip is_shared on a record the user owns. Sharing needs a family."""
    if type not in SHAREABLE:
        raise InvalidInput("Unknown item type")
    if shared and membership_of(session, user_id) is None:
        raise InvalidInput("You need to be in a family to share items")

    model, owner_field = SHAREABLE[type]
    item = session.get(model, item_id)
    if item is None or getattr(item, owner_field) != user_id:
        raise Forbidden("Item not found or you do not have permission")

    item.is_shared = shared
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def member_shared_data(
    session: Session,
    viewer_id: int,
    member_user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict[str, list]:
    """Everything the member flagged as shared, for another member of the same family."""
    if membership_of(session, viewer_id) is None:
        raise Forbidden("You are not in a family")
    if not same_family(session, viewer_id, member_user_id):
        raise Forbidden("This user is not in your family")
    user = session.get(User, member_user_id)
    if user is None:
        raise NotFound("User not found")

    accounts = session.exec(
        select(BankAccount)
        .where(BankAccount.created_by_id == member_user_id, BankAccount.is_shared.is_(True))
        .order_by(BankAccount.created_at.desc())
    ).all()
    cards = session.exec(
        select(Card)
        .where(Card.user_id == member_user_id, Card.is_shared.is_(True))
        .order_by(Card.created_at.desc())
    ).all()

    tx_stmt = select(Transaction).where(
        Transaction.user_id == member_user_id,
        Transaction.is_shared.is_(True),
        Transaction.current_installment != 0,
    )
    if start_date is not None:
        tx_stmt = tx_stmt.where(Transaction.date >= start_date)
    if end_date is not None:
        tx_stmt = tx_stmt.where(Transaction.date <= end_date)
    transactions = session.exec(
        tx_stmt.order_by(Transaction.date.desc(), Transaction.id.desc()).limit(
            MEMBER_DATA_TRANSACTIONS
        )
    ).all()

    goals = session.exec(
        select(Goal)
        .where(Goal.created_by_id == member_user_id, Goal.is_shared.is_(True))
        .order_by(Goal.created_at.desc())
    ).all()
    categories = session.exec(
        select(Category)
        .where(
            Category.created_by_id == member_user_id,
            Category.is_shared.is_(True),
            Category.is_default.is_(False),
        )
        .order_by(Category.name)
    ).all()

    return {
        "user": user,
        "accounts": list(accounts),
        "cards": list(cards),
        "transactions": list(transactions),
        "goals": list(goals),
        "categories": list(categories),
    }
