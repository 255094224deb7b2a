# famfin/security.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.requests import Request
from passlib.context import CryptContext
from sqlmodel import Session

from famfin.db import get_session
from famfin.errors import Forbidden, Unauthenticated
from famfin.models import Role, User

# Password hashing context (bcrypt by default)
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN_ROLE = "Admin"
USER_ROLE = "User"


# ------------ Password helpers ------------


def hash_password(plain: str) -> str:
    """Return a secure hash for a plaintext password."""
    return _pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    return _pwd.verify(plain, hashed)


# ------------ Session / Auth helpers ------------


def get_user_id_from_session(request: Request) -> Optional[int]:
    """
    Read user_id from the session (if present). Returns int or None.
    """
    if "session" not in request.scope:
        return None
    uid = request.session.get("user_id")  # set during /auth/signin
    return int(uid) if uid is not None else None


def require_user_id(request: Request) -> int:
    """
    FastAPI dependency: the signed-in user's id, or a 401 before the handler runs.
    Usage:  user_id: int = Depends(require_user_id)
    """
    uid = get_user_id_from_session(request)
    if uid is None:
        raise Unauthenticated()
    return uid


def require_admin(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
) -> int:
    """Like require_user_id, but the user must also hold the Admin role."""
    user = session.get(User, user_id)
    if user is None:
        # session cookie outlived the account
        raise Unauthenticated()
    role = session.get(Role, user.role_id) if user.role_id else None
    if role is None or role.name != ADMIN_ROLE:
        raise Forbidden("Only administrators can do this")
    return user_id


__all__ = [
    "ADMIN_ROLE",
    "USER_ROLE",
    "hash_password",
    "verify_password",
    "get_user_id_from_session",
    "require_user_id",
    "require_admin",
]
