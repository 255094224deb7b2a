# famfin/seed.py
"""
Reference data: roles, default categories and an optional bootstrap admin.

Run with `python -m famfin.seed`. Safe to run repeatedly; existing rows are
left alone.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlmodel import Session, select

from famfin.config import Settings, get_settings
from famfin.db import engine
from famfin.models import Category, Role, TransactionType
from famfin.observability import configure_logging
from famfin.security import ADMIN_ROLE, USER_ROLE
from famfin.services import users as users_service

logger = logging.getLogger("famfin.seed")

ROLES = [
    (ADMIN_ROLE, "System administrator with full access"),
    (USER_ROLE, "Regular user"),
]

# (name, icon, color)
EXPENSE_CATEGORIES = [
    ("Food", "🍔", "#FF6B6B"),
    ("Transport", "🚗", "#4ECDC4"),
    ("Housing", "🏠", "#45B7D1"),
    ("Bills", "📄", "#FFA07A"),
    ("Health", "⚕️", "#98D8C8"),
    ("Education", "📚", "#6C5CE7"),
    ("Leisure", "🎮", "#A29BFE"),
    ("Clothing", "👕", "#FD79A8"),
    ("Beauty", "💄", "#FDCB6E"),
    ("Pets", "🐾", "#E17055"),
    ("Groceries", "🛒", "#00B894"),
    ("Restaurants", "🍽️", "#FF7675"),
    ("Internet", "🌐", "#74B9FF"),
    ("Phone", "📱", "#A29BFE"),
    ("Streaming", "📺", "#FD79A8"),
    ("Gym", "💪", "#FDCB6E"),
    ("Gifts", "🎁", "#FF6B9D"),
    ("Taxes", "🏛️", "#636E72"),
    ("Insurance", "🛡️", "#2D3436"),
    ("Investments", "📈", "#00B894"),
    ("Travel", "✈️", "#0984E3"),
    ("Other", "📦", "#B2BEC3"),
]

INCOME_CATEGORIES = [
    ("Salary", "💰", "#00B894"),
    ("Freelance", "💼", "#6C5CE7"),
    ("Investments", "📈", "#0984E3"),
    ("Sales", "🛍️", "#FDCB6E"),
    ("Rent", "🏘️", "#45B7D1"),
    ("Prizes", "🏆", "#FD79A8"),
    ("Bonus", "💵", "#00B894"),
    ("Refunds", "🔄", "#74B9FF"),
    ("Other", "💸", "#55EFC4"),
]


def seed_roles(session: Session) -> int:
    created = 0
    for name, description in ROLES:
        if users_service.get_role_by_name(session, name) is None:
            session.add(Role(name=name, description=description))
            created += 1
    session.commit()
    return created


def seed_categories(session: Session) -> int:
    created = 0
    for tx_type, rows in (
        (TransactionType.EXPENSE, EXPENSE_CATEGORIES),
        (TransactionType.INCOME, INCOME_CATEGORIES),
    ):
        for name, icon, color in rows:
            existing = session.exec(
                select(Category).where(
                    Category.name == name,
                    Category.type == tx_type,
                    Category.is_default.is_(True),
                )
            ).first()
            if existing is None:
                session.add(
                    Category(name=name, icon=icon, color=color, type=tx_type, is_default=True)
                )
                created += 1
    session.commit()
    return created


def seed_admin(session: Session, settings: Settings) -> Optional[int]:
    """Create the bootstrap admin when ADMIN_EMAIL/ADMIN_PASSWORD are set."""
    if not (settings.admin_email and settings.admin_password):
        return None
    if users_service.find_user_by_email(session, settings.admin_email) is not None:
        return None
    admin_role = users_service.get_role_by_name(session, ADMIN_ROLE)
    user = users_service.create_user(
        session,
        "Administrator",
        settings.admin_email,
        settings.admin_password,
        role_id=admin_role.id if admin_role else None,
    )
    return user.id


def seed(session: Session, settings: Optional[Settings] = None) -> Dict[str, object]:
    settings = settings or get_settings()
    return {
        "roles": seed_roles(session),
        "categories": seed_categories(session),
        "admin_id": seed_admin(session, settings),
    }


def main() -> None:
    configure_logging()
    with Session(engine) as session:
        result = seed(session)
    logger.info(
        "seed done: %s role(s), %s categories created, admin=%s",
        result["roles"],
        result["categories"],
        result["admin_id"],
    )


if __name__ == "__main__":
    main()
