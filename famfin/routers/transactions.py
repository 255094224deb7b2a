# famfin/routers/transactions.py
from __future__ import annotations

import math
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.models import TransactionType
from famfin.schemas import (
    InstallmentSeriesRead,
    Pagination,
    TransactionCreate,
    TransactionDeleted,
    TransactionDetail,
    TransactionPage,
    TransactionRead,
    TransactionUpdate,
)
from famfin.security import require_user_id
from famfin.services import transactions as tx_service

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionPage)
def list_transactions(
    type: Optional[TransactionType] = Query(default=None),
    category_id: Optional[int] = Query(default=None, alias="categoryId"),
    bank_account_id: Optional[int] = Query(default=None, alias="bankAccountId"),
    card_id: Optional[int] = Query(default=None, alias="cardId"),
    is_paid: Optional[bool] = Query(default=None, alias="isPaid"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    rows, total = tx_service.list_transactions(
        session,
        user_id,
        type=type,
        category_id=category_id,
        bank_account_id=bank_account_id,
        card_id=card_id,
        is_paid=is_paid,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return TransactionPage(
        transactions=[TransactionRead.model_validate(t) for t in rows],
        pagination=Pagination(
            total=total, page=page, limit=limit, total_pages=math.ceil(total / limit)
        ),
    )


# single transaction or {parent, installments}, depending on the request
@router.post("", response_model=None, status_code=status.HTTP_201_CREATED)
def create_transaction(
    body: TransactionCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    created = tx_service.create_transaction(session, user_id, body)
    if isinstance(created, tx_service.InstallmentSeries):
        return InstallmentSeriesRead(
            parent=TransactionRead.model_validate(created.parent),
            installments=[TransactionRead.model_validate(t) for t in created.installments],
        )
    return TransactionRead.model_validate(created)


@router.get("/{transaction_id}", response_model=TransactionDetail)
def get_transaction(
    transaction_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    txn = tx_service.get_transaction(session, user_id, transaction_id)
    children = tx_service.installments_of(session, txn.id)
    return TransactionDetail.model_validate(txn).model_copy(
        update={"child_transactions": [TransactionRead.model_validate(c) for c in children]}
    )


@router.patch("/{transaction_id}", response_model=TransactionRead)
def update_transaction(
    transaction_id: int,
    body: TransactionUpdate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return tx_service.update_transaction(
        session, user_id, transaction_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{transaction_id}", response_model=TransactionDeleted)
def delete_transaction(
    transaction_id: int,
    delete_all: bool = Query(default=False, alias="deleteAll"),
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    count = tx_service.delete_transaction(session, user_id, transaction_id, delete_all)
    if count > 1:
        message = f"{count} installments deleted"
    else:
        message = "Transaction deleted"
    return TransactionDeleted(message=message, deleted_count=count)
