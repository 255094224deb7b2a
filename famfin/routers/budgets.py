# famfin/routers/budgets.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.models import Budget, Category
from famfin.schemas import BudgetCreate, BudgetRead, BudgetUpdate, CategoryRead, Message
from famfin.security import require_user_id
from famfin.services import budgets as budgets_service

router = APIRouter(prefix="/budgets", tags=["budgets"])


def budget_read(session: Session, budget: Budget) -> BudgetRead:
    category = session.get(Category, budget.category_id)
    return BudgetRead.model_validate(budget).model_copy(
        update={
            "category": CategoryRead.model_validate(category) if category else None,
            **budgets_service.budget_progress(session, budget),
        }
    )


@router.get("", response_model=List[BudgetRead])
def list_budgets(
    month: Optional[int] = Query(default=None, ge=1, le=12),
    year: Optional[int] = Query(default=None),
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return [
        budget_read(session, budget)
        for budget in budgets_service.list_budgets(session, user_id, month, year)
    ]


@router.post("", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
def create_budget(
    body: BudgetCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return budget_read(session, budgets_service.create_budget(session, user_id, body))


@router.get("/{budget_id}", response_model=BudgetRead)
def get_budget(
    budget_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return budget_read(session, budgets_service.get_budget(session, user_id, budget_id))


@router.patch("/{budget_id}", response_model=BudgetRead)
def update_budget(
    budget_id: int,
    body: BudgetUpdate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    budget = budgets_service.update_budget(session, user_id, budget_id, body.amount)
    return budget_read(session, budget)


@router.delete("/{budget_id}", response_model=Message)
def delete_budget(
    budget_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    budgets_service.delete_budget(session, user_id, budget_id)
    return Message(message="Budget deleted")
