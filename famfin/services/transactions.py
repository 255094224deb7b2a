# famfin/services/transactions.py
"""
Transaction bookkeeping: creation (single or installment series), listing,
updates and deletion, with the bank-account balance kept in step.

Every public function here is one unit of work: it commits once at the end,
so a failure halfway through an installment cascade leaves nothing behind
(the request session rolls back on close).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import func
from sqlmodel import Session, select

from famfin.errors import InvalidInput, NotFound
from famfin.models import Transaction, TransactionType, utcnow
from famfin.periods import add_months
from famfin.schemas import TransactionCreate
from famfin.services.accounts import ensure_can_book, get_own_card
from famfin.services.balances import (
    apply_paid_effect,
    paid_effect,
    reverse_paid_effect,
    shift_balance,
)
from famfin.services.categories import get_visible_category

logger = logging.getLogger("famfin.tx")

CENT = Decimal("0.01")


def to_money(value: Union[Decimal, float, int, str]) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class InstallmentSeries:
    parent: Transaction
    installments: List[Transaction]


# ---------- Creation ----------


def _check_references(
    session: Session,
    user_id: int,
    *,
    category_id: Optional[int] = None,
    bank_account_id: Optional[int] = None,
    card_id: Optional[int] = None,
) -> None:
    if category_id is not None:
        get_visible_category(session, user_id, category_id)
    if bank_account_id is not None:
        ensure_can_book(session, user_id, bank_account_id)
    if card_id is not None:
        get_own_card(session, user_id, card_id)


def create_transaction(
    session: Session, user_id: int, data: TransactionCreate
) -> Union[Transaction, InstallmentSeries]:
    """
    Create one transaction, or a parent row plus N installments when
    data.installments > 1. Paid rows are booked against the account.
    """
    _check_references(
        session,
        user_id,
        category_id=data.category_id,
        bank_account_id=data.bank_account_id,
        card_id=data.card_id,
    )
    base_date = data.date or date.today()

    if data.installments > 1:
        return _create_installments(session, user_id, data, base_date)

    txn = Transaction(
        description=data.description.strip(),
        amount=to_money(data.amount),
        type=data.type,
        date=base_date,
        category_id=data.category_id,
        bank_account_id=data.bank_account_id,
        card_id=data.card_id,
        is_paid=data.is_paid,
        is_recurring=data.is_recurring,
        recurring_type=data.recurring_type if data.is_recurring else None,
        installments=1,
        current_installment=1,
        notes=data.notes,
        user_id=user_id,
    )
    session.add(txn)
    apply_paid_effect(session, txn)
    session.commit()
    session.refresh(txn)
    return txn


def _create_installments(
    session: Session, user_id: int, data: TransactionCreate, base_date: date
) -> InstallmentSeries:
    count = data.installments
    total = to_money(data.amount)
    description = data.description.strip()

    # even split; remainder cents are not redistributed
    share = to_money(total / count)
    if share < CENT:
        raise InvalidInput(
            f"Each of the {count} installments would be less than 0.01; "
            "use fewer installments"
        )

    parent = Transaction(
        description=f"{description} ({count}x)",
        amount=total,
        type=data.type,
        date=base_date,
        category_id=data.category_id,
        bank_account_id=data.bank_account_id,
        card_id=data.card_id,
        is_paid=False,
        is_recurring=False,
        installments=count,
        current_installment=0,
        notes=data.notes,
        user_id=user_id,
    )
    session.add(parent)
    session.flush()

    children = []
    for number in range(1, count + 1):
        child = Transaction(
            description=f"{description} ({number}/{count})",
            amount=share,
            type=data.type,
            date=add_months(base_date, number - 1),
            category_id=data.category_id,
            bank_account_id=data.bank_account_id,
            card_id=data.card_id,
            # only the first installment can start out paid
            is_paid=bool(data.is_paid and number == 1),
            is_recurring=False,
            installments=count,
            current_installment=number,
            parent_transaction_id=parent.id,
            notes=data.notes,
            user_id=user_id,
        )
        session.add(child)
        apply_paid_effect(session, child)
        children.append(child)

    session.commit()
    session.refresh(parent)
    for child in children:
        session.refresh(child)
    logger.info(
        "installment series %s created: %s x %s for user=%s",
        parent.id,
        count,
        share,
        user_id,
    )
    return InstallmentSeries(parent=parent, installments=children)


# ---------- Reads ----------


def get_transaction(session: Session, user_id: int, transaction_id: int) -> Transaction:
    txn = session.get(Transaction, transaction_id)
    if txn is None or txn.user_id != user_id:
        raise NotFound("Transaction not found")
    return txn


def installments_of(session: Session, parent_id: int) -> List[Transaction]:
    stmt = (
        select(Transaction)
        .where(Transaction.parent_transaction_id == parent_id)
        .order_by(Transaction.current_installment)
    )
    return list(session.exec(stmt).all())


def list_transactions(
    session: Session,
    user_id: int,
    *,
    type: Optional[TransactionType] = None,
    category_id: Optional[int] = None,
    bank_account_id: Optional[int] = None,
    card_id: Optional[int] = None,
    is_paid: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Transaction], int]:
    """One page of the user's transactions (series parents excluded) and the total."""
    conditions = [
        Transaction.user_id == user_id,
        Transaction.current_installment != 0,
    ]
    if type is not None:
        conditions.append(Transaction.type == type)
    if category_id is not None:
        conditions.append(Transaction.category_id == category_id)
    if bank_account_id is not None:
        conditions.append(Transaction.bank_account_id == bank_account_id)
    if card_id is not None:
        conditions.append(Transaction.card_id == card_id)
    if is_paid is not None:
        conditions.append(Transaction.is_paid == is_paid)
    if start_date is not None:
        conditions.append(Transaction.date >= start_date)
    if end_date is not None:
        conditions.append(Transaction.date <= end_date)

    total = session.exec(select(func.count(Transaction.id)).where(*conditions)).one()
    rows = session.exec(
        select(Transaction)
        .where(*conditions)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return list(rows), total


# ---------- Updates ----------


def update_transaction(
    session: Session, user_id: int, transaction_id: int, changes: Dict[str, Any]
) -> Transaction:
    """
    Apply a partial update. Whatever the row contributed to an account balance
    before the change is taken back, and its new contribution is booked, so
    paid/unpaid flips as well as amount or account edits stay consistent.
    """
    txn = get_transaction(session, user_id, transaction_id)

    if txn.current_installment == 0 and changes.get("is_paid"):
        raise InvalidInput("A series parent cannot be paid; pay its installments instead")

    new_account = changes.get("bank_account_id")
    new_card = changes.get("card_id")
    _check_references(
        session,
        user_id,
        category_id=changes.get("category_id"),
        bank_account_id=new_account if new_account != txn.bank_account_id else None,
        card_id=new_card if new_card != txn.card_id else None,
    )

    before = paid_effect(txn)

    for field, value in changes.items():
        if value is None and field not in ("bank_account_id", "card_id", "notes"):
            continue  # required columns ignore explicit nulls
        if field == "amount":
            value = to_money(value)
        elif field == "description":
            value = value.strip()
        setattr(txn, field, value)

    if txn.bank_account_id is None and txn.card_id is None:
        raise InvalidInput("Select a bank account or a card")

    after = paid_effect(txn)
    if before != after:
        if before is not None:
            shift_balance(session, before[0], -before[1])
        if after is not None:
            shift_balance(session, after[0], after[1])

    txn.updated_at = utcnow()
    session.add(txn)
    session.commit()
    session.refresh(txn)
    return txn


# ---------- Deletion ----------


def delete_transaction(
    session: Session, user_id: int, transaction_id: int, delete_all: bool = False
) -> int:
    """
    Delete a transaction and undo its balance effect. Returns rows removed.

    - a series parent (current_installment=0): removes every installment and
      the parent; the count is the number of installments.
    - an installment with delete_all=True: same as deleting its parent.
    - anything else: only this row.
    """
    txn = get_transaction(session, user_id, transaction_id)

    parent = None
    if txn.current_installment == 0:
        parent = txn
    elif delete_all and txn.parent_transaction_id is not None:
        parent = session.get(Transaction, txn.parent_transaction_id)

    if parent is None:
        reverse_paid_effect(session, txn)
        session.delete(txn)
        session.commit()
        return 1

    children = installments_of(session, parent.id)
    for child in children:
        reverse_paid_effect(session, child)
        session.delete(child)
    session.flush()  # installments reference the parent row
    reverse_paid_effect(session, parent)
    session.delete(parent)
    session.commit()
    logger.info(
        "installment series %s deleted (%s installments) by user=%s",
        parent.id,
        len(children),
        user_id,
    )
    return len(children)
