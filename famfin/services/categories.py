# famfin/services/categories.py
"""
Categories: system defaults plus user-created ones.

A user sees defaults, their own categories and categories shared inside
their family. Within that set a (name, type) pair must be unique.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func
from sqlmodel import Session, select

from famfin.errors import Conflict, NotFound
from famfin.models import Budget, Category, Transaction, TransactionType
from famfin.schemas import CategoryCreate
from famfin.services.lifecycle import is_referenced
from famfin.services.visibility import visible_categories_clause


def list_categories(
    session: Session, user_id: int, type: Optional[TransactionType] = None
) -> List[Category]:
    stmt = select(Category).where(visible_categories_clause(session, user_id))
    if type is not None:
        stmt = stmt.where(Category.type == type)
    stmt = stmt.order_by(Category.is_default.desc(), Category.name, Category.id)
    return list(session.exec(stmt).all())


def get_visible_category(
    session: Session,
    user_id: int,
    category_id: int,
    type: Optional[Union[TransactionType, str]] = None,
) -> Category:
    """The category if the user may use it (optionally of a given type), else NotFound."""
    stmt = select(Category).where(
        Category.id == category_id, visible_categories_clause(session, user_id)
    )
    if type is not None:
        stmt = stmt.where(Category.type == TransactionType(type))
    category = session.exec(stmt).first()
    if category is None:
        raise NotFound("Category not found")
    return category


def _ensure_unique(
    session: Session,
    user_id: int,
    name: str,
    type: TransactionType,
    exclude_id: Optional[int] = None,
) -> None:
    stmt = select(Category.id).where(
        func.lower(Category.name) == name.lower(),
        Category.type == type,
        visible_categories_clause(session, user_id),
    )
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    if session.exec(stmt).first() is not None:
        raise Conflict("A category with this name and type already exists")


def create_category(session: Session, user_id: int, data: CategoryCreate) -> Category:
    name = data.name.strip()
    _ensure_unique(session, user_id, name, data.type)
    category = Category(
        name=name,
        icon=data.icon,
        color=data.color,
        type=data.type,
        is_shared=data.is_shared,
        is_default=False,
        created_by_id=user_id,
    )
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def get_own_category(session: Session, user_id: int, category_id: int) -> Category:
    """Only custom categories created by the user can be changed."""
    category = session.get(Category, category_id)
    if category is None or category.is_default or category.created_by_id != user_id:
        raise NotFound("Category not found or cannot be changed")
    return category


def update_category(
    session: Session, user_id: int, category_id: int, changes: Dict[str, Any]
) -> Category:
    category = get_own_category(session, user_id, category_id)

    name = changes.get("name")
    if name:
        name = name.strip()
        if name != category.name:
            _ensure_unique(session, user_id, name, category.type, exclude_id=category.id)
        category.name = name
    if "icon" in changes:
        category.icon = changes["icon"]
    if "color" in changes:
        category.color = changes["color"]

    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def delete_category(session: Session, user_id: int, category_id: int) -> None:
    category = get_own_category(session, user_id, category_id)
    if is_referenced(session, category.id, [Transaction.category_id, Budget.category_id]):
        raise Conflict("Cannot delete a category that transactions or budgets use")
    session.delete(category)
    session.commit()
