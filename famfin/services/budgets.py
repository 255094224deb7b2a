# famfin/services/budgets.py
"""Monthly spending ceilings per category. "spent" is summed on every read."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from famfin.errors import Conflict, NotFound
from famfin.models import Budget, Transaction, TransactionType
from famfin.periods import month_bounds
from famfin.schemas import BudgetCreate
from famfin.services.categories import get_visible_category


def budget_spent(session: Session, budget: Budget) -> Decimal:
    """Paid EXPENSE installments/transactions of the budget's category and month."""
    start, end = month_bounds(budget.year, budget.month)
    total = session.exec(
        select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.user_id == budget.user_id,
            Transaction.category_id == budget.category_id,
            Transaction.type == TransactionType.EXPENSE,
            Transaction.is_paid.is_(True),
            Transaction.current_installment != 0,
            Transaction.date >= start,
            Transaction.date < end,
        )
    ).one()
    return Decimal(str(total)).quantize(Decimal("0.01"))


def budget_progress(session: Session, budget: Budget) -> Dict[str, Any]:
    spent = budget_spent(session, budget)
    amount = Decimal(budget.amount)
    percentage = float(spent / amount * 100) if amount else 0.0
    return {
        "spent": spent,
        "remaining": amount - spent,
        "percentage_used": round(percentage, 2),
    }


def _ensure_free_period(
    session: Session, user_id: int, category_id: int, month: int, year: int
) -> None:
    existing = session.exec(
        select(Budget.id).where(
            Budget.user_id == user_id,
            Budget.category_id == category_id,
            Budget.month == month,
            Budget.year == year,
        )
    ).first()
    if existing is not None:
        raise Conflict("A budget for this category and month already exists")


def create_budget(session: Session, user_id: int, data: BudgetCreate) -> Budget:
    get_visible_category(session, user_id, data.category_id, TransactionType.EXPENSE)
    _ensure_free_period(session, user_id, data.category_id, data.month, data.year)
    budget = Budget(
        amount=data.amount,
        month=data.month,
        year=data.year,
        category_id=data.category_id,
        user_id=user_id,
    )
    session.add(budget)
    session.commit()
    session.refresh(budget)
    return budget


def list_budgets(
    session: Session,
    user_id: int,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> List[Budget]:
    stmt = select(Budget).where(Budget.user_id == user_id)
    if month is not None:
        stmt = stmt.where(Budget.month == month)
    if year is not None:
        stmt = stmt.where(Budget.year == year)
    stmt = stmt.order_by(Budget.year.desc(), Budget.month.desc(), Budget.id)
    return list(session.exec(stmt).all())


def get_budget(session: Session, user_id: int, budget_id: int) -> Budget:
    budget = session.get(Budget, budget_id)
    if budget is None or budget.user_id != user_id:
        raise NotFound("Budget not found")
    return budget


def update_budget(
    session: Session, user_id: int, budget_id: int, amount: Optional[Decimal]
) -> Budget:
    budget = get_budget(session, user_id, budget_id)
    if amount is not None:
        budget.amount = amount
        session.add(budget)
        session.commit()
        session.refresh(budget)
    return budget


def delete_budget(session: Session, user_id: int, budget_id: int) -> None:
    budget = get_budget(session, user_id, budget_id)
    session.delete(budget)
    session.commit()
