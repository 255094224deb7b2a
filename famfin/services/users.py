# famfin/services/users.py
"""User accounts, roles and credential checks."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from famfin.errors import Conflict, NotFound
from famfin.models import Card, Role, Transaction, User
from famfin.security import USER_ROLE, hash_password, verify_password
from famfin.services.lifecycle import count_where


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == normalize_email(email))).first()


def get_role_by_name(session: Session, name: str) -> Optional[Role]:
    return session.exec(select(Role).where(Role.name == name)).first()


def create_user(
    session: Session,
    name: str,
    email: str,
    password: str,
    role_id: Optional[int] = None,
) -> User:
    """
    New user with a hashed password. Without role_id the "User" role is
    attached when it exists (the seed command creates it).
    """
    email = normalize_email(email)
    if find_user_by_email(session, email) is not None:
        raise Conflict("A user with this email already exists")

    if role_id is not None:
        if session.get(Role, role_id) is None:
            raise NotFound("Role not found")
    else:
        default_role = get_role_by_name(session, USER_ROLE)
        role_id = default_role.id if default_role else None

    user = User(
        name=name.strip(),
        email=email,
        hashed_password=hash_password(password),
        role_id=role_id,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def authenticate(session: Session, email: str, password: str) -> Optional[User]:
    user = find_user_by_email(session, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def role_name(session: Session, user: User) -> Optional[str]:
    role = session.get(Role, user.role_id) if user.role_id else None
    return role.name if role else None


def user_counts(session: Session, user_id: int) -> Dict[str, int]:
    return {
        "transaction_count": count_where(session, Transaction.user_id, user_id),
        "card_count": count_where(session, Card.user_id, user_id),
    }


def list_users(session: Session) -> List[User]:
    return list(session.exec(select(User).order_by(User.created_at.desc(), User.id.desc())).all())


def list_roles(session: Session) -> List[Tuple[Role, int]]:
    """Roles ordered by name, each with the number of users holding it."""
    stmt = (
        select(Role, func.count(User.id))
        .join(User, User.role_id == Role.id, isouter=True)
        .group_by(Role.id)
        .order_by(Role.name)
    )
    return list(session.exec(stmt).all())
