# famfin/services/accounts.py
"""Bank accounts (with owner/member links) and cards."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlmodel import Session, select

from famfin.errors import Forbidden, NotFound
from famfin.models import (
    BankAccount,
    Card,
    MemberRole,
    RecordStatus,
    Transaction,
    User,
    UserBankAccount,
    utcnow,
)
from famfin.schemas import BankAccountCreate, CardCreate
from famfin.services.lifecycle import count_where, retire
from famfin.services.visibility import membership_of

logger = logging.getLogger("famfin.accounts")


# ---------- Access checks ----------


def account_link(
    session: Session, user_id: int, account_id: int
) -> Optional[UserBankAccount]:
    return session.exec(
        select(UserBankAccount).where(
            UserBankAccount.bank_account_id == account_id,
            UserBankAccount.user_id == user_id,
        )
    ).first()


def require_account_access(session: Session, user_id: int, account_id: int) -> BankAccount:
    """Any linked user (OWNER or MEMBER) may read and book against the account."""
    link = account_link(session, user_id, account_id)
    account = session.get(BankAccount, account_id) if link else None
    if account is None:
        raise NotFound("Bank account not found")
    return account


def require_account_owner(session: Session, user_id: int, account_id: int) -> BankAccount:
    link = account_link(session, user_id, account_id)
    account = session.get(BankAccount, account_id) if link else None
    if account is None:
        raise NotFound("Bank account not found")
    if link.role != MemberRole.OWNER:
        raise Forbidden("Only the account owner can change this account")
    return account


def ensure_can_book(session: Session, user_id: int, account_id: int) -> None:
    """Transactions and cards may only reference accounts the user is linked to."""
    if account_link(session, user_id, account_id) is None:
        raise Forbidden("You do not have access to this bank account")


# ---------- Bank accounts ----------


def create_bank_account(
    session: Session, user_id: int, data: BankAccountCreate
) -> BankAccount:
    """
    Create the account plus its links: the creator as the single OWNER and
    every other listed user as MEMBER.
    """
    account = BankAccount(
        name=data.name.strip(),
        institution=data.institution.strip(),
        type=data.type,
        initial_balance=data.initial_balance,
        current_balance=data.initial_balance,
        color=data.color,
        is_shared=data.is_shared,
        created_by_id=user_id,
    )
    session.add(account)
    session.flush()

    session.add(
        UserBankAccount(user_id=user_id, bank_account_id=account.id, role=MemberRole.OWNER)
    )
    for other_id in dict.fromkeys(data.shared_with_user_ids):
        if other_id == user_id:
            continue
        if session.get(User, other_id) is None:
            raise NotFound(f"User {other_id} not found")
        session.add(
            UserBankAccount(
                user_id=other_id, bank_account_id=account.id, role=MemberRole.MEMBER
            )
        )

    session.commit()
    session.refresh(account)
    return account


def list_bank_accounts(session: Session, user_id: int) -> List[BankAccount]:
    stmt = (
        select(BankAccount)
        .join(UserBankAccount, UserBankAccount.bank_account_id == BankAccount.id)
        .where(UserBankAccount.user_id == user_id)
        .order_by(BankAccount.created_at.desc(), BankAccount.id.desc())
    )
    return list(session.exec(stmt).all())


def account_members(session: Session, account_id: int) -> List[Tuple[UserBankAccount, User]]:
    stmt = (
        select(UserBankAccount, User)
        .join(User, User.id == UserBankAccount.user_id)
        .where(UserBankAccount.bank_account_id == account_id)
        .order_by(UserBankAccount.id)
    )
    return list(session.exec(stmt).all())


def account_counts(session: Session, account_id: int) -> Dict[str, int]:
    return {
        "transaction_count": count_where(session, Transaction.bank_account_id, account_id),
        "card_count": count_where(session, Card.bank_account_id, account_id),
    }


def account_activity(
    session: Session, account_id: int, limit: int = 10
) -> Tuple[List[Card], List[Transaction]]:
    """Active cards on the account and its most recent listed transactions."""
    cards = session.exec(
        select(Card).where(
            Card.bank_account_id == account_id, Card.status == RecordStatus.ACTIVE
        )
    ).all()
    recent = session.exec(
        select(Transaction)
        .where(
            Transaction.bank_account_id == account_id,
            Transaction.current_installment != 0,
        )
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .limit(limit)
    ).all()
    return list(cards), list(recent)


def update_bank_account(
    session: Session, user_id: int, account_id: int, changes: Dict[str, Any]
) -> BankAccount:
    account = require_account_owner(session, user_id, account_id)
    for field, value in changes.items():
        if value is None and field != "color":
            continue  # required columns ignore explicit nulls
        if field in ("name", "institution"):
            value = value.strip()
        setattr(account, field, value)
    account.updated_at = utcnow()
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


def delete_bank_account(session: Session, user_id: int, account_id: int) -> RecordStatus | None:
    """Archive when transactions or cards still use the account, else delete it."""
    account = require_account_owner(session, user_id, account_id)
    links = session.exec(
        select(UserBankAccount).where(UserBankAccount.bank_account_id == account_id)
    ).all()
    outcome = retire(
        session,
        account,
        referenced_by=[Transaction.bank_account_id, Card.bank_account_id],
        dependents=links,
    )
    session.commit()
    logger.info(
        "bank account %s %s by user=%s",
        account_id,
        "archived" if outcome else "deleted",
        user_id,
    )
    return outcome


# ---------- Cards ----------


def get_own_card(session: Session, user_id: int, card_id: int) -> Card:
    card = session.get(Card, card_id)
    if card is None or card.user_id != user_id:
        raise NotFound("Card not found")
    return card


def create_card(session: Session, user_id: int, data: CardCreate) -> Card:
    """New cards are shared by default while the owner belongs to a family."""
    if data.bank_account_id is not None:
        ensure_can_book(session, user_id, data.bank_account_id)

    card = Card(
        name=data.name.strip(),
        last_digits=data.last_digits,
        type=data.type,
        brand=data.brand,
        credit_limit=data.credit_limit,
        due_day=data.due_day,
        closing_day=data.closing_day,
        color=data.color,
        bank_account_id=data.bank_account_id,
        user_id=user_id,
        is_shared=membership_of(session, user_id) is not None,
    )
    session.add(card)
    session.commit()
    session.refresh(card)
    return card


def list_cards(session: Session, user_id: int) -> List[Card]:
    stmt = (
        select(Card)
        .where(Card.user_id == user_id)
        .order_by(Card.created_at.desc(), Card.id.desc())
    )
    return list(session.exec(stmt).all())


def update_card(
    session: Session, user_id: int, card_id: int, changes: Dict[str, Any]
) -> Card:
    card = get_own_card(session, user_id, card_id)

    new_account = changes.get("bank_account_id")
    if new_account is not None and new_account != card.bank_account_id:
        ensure_can_book(session, user_id, new_account)

    for field, value in changes.items():
        if value is None and field in ("name", "last_digits", "type", "status"):
            continue
        setattr(card, field, value)
    card.updated_at = utcnow()
    session.add(card)
    session.commit()
    session.refresh(card)
    return card


def delete_card(session: Session, user_id: int, card_id: int) -> RecordStatus | None:
    card = get_own_card(session, user_id, card_id)
    outcome = retire(session, card, referenced_by=[Transaction.card_id])
    session.commit()
    return outcome
