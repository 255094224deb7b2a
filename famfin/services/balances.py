# famfin/services/balances.py
"""
Account balance reconciliation.

current_balance moves only when a transaction tied to the account becomes
paid, stops being paid, or is deleted while paid. Updates are issued as a
single UPDATE ... SET current_balance = current_balance + :delta so two
requests toggling transactions on the same account cannot lose a write.

These helpers never commit; the calling service owns the unit of work.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import update
from sqlmodel import Session

from famfin.models import BankAccount, Transaction, TransactionType, utcnow

logger = logging.getLogger("famfin.balances")


def signed_amount(amount: Decimal, tx_type: Union[TransactionType, str]) -> Decimal:
    """INCOME adds to the balance, EXPENSE subtracts."""
    if TransactionType(tx_type) is TransactionType.INCOME:
        return Decimal(amount)
    return -Decimal(amount)


def shift_balance(session: Session, account_id: Optional[int], delta: Decimal) -> None:
    """current_balance += delta, as one statement."""
    if account_id is None or not delta:
        return
    session.exec(
        update(BankAccount)
        .where(BankAccount.id == account_id)
        .values(
            current_balance=BankAccount.current_balance + delta,
            updated_at=utcnow(),
        )
    )
    logger.debug("account=%s balance %+s", account_id, delta)


def apply_balance_delta(
    session: Session,
    account_id: Optional[int],
    amount: Decimal,
    tx_type: Union[TransactionType, str],
) -> None:
    """Move the account balance by `amount` in the direction of `tx_type`."""
    shift_balance(session, account_id, signed_amount(amount, tx_type))


def paid_effect(txn: Transaction) -> Optional[tuple[int, Decimal]]:
    """(account_id, signed delta) a transaction currently contributes, or None."""
    if not txn.is_paid or txn.bank_account_id is None:
        return None
    return txn.bank_account_id, signed_amount(txn.amount, txn.type)


def apply_paid_effect(session: Session, txn: Transaction) -> None:
    """Book a paid transaction against its account (no-op without one)."""
    if txn.is_paid and txn.bank_account_id is not None:
        apply_balance_delta(session, txn.bank_account_id, txn.amount, txn.type)


def reverse_paid_effect(session: Session, txn: Transaction) -> None:
    """Undo apply_paid_effect: same amount, inverted type."""
    if txn.is_paid and txn.bank_account_id is not None:
        apply_balance_delta(
            session, txn.bank_account_id, txn.amount, TransactionType(txn.type).inverted()
        )
