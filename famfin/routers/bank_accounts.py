# famfin/routers/bank_accounts.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.models import BankAccount
from famfin.schemas import (
    AccountMemberRead,
    BankAccountCreate,
    BankAccountDetail,
    BankAccountRead,
    BankAccountUpdate,
    CardRead,
    Message,
    TransactionRead,
)
from famfin.security import require_user_id
from famfin.services import accounts as accounts_service

router = APIRouter(prefix="/bank-accounts", tags=["bank-accounts"])


def account_read(session: Session, account: BankAccount) -> BankAccountRead:
    members = [
        AccountMemberRead(user_id=user.id, role=link.role, name=user.name, email=user.email)
        for link, user in accounts_service.account_members(session, account.id)
    ]
    return BankAccountRead.model_validate(account).model_copy(
        update={"members": members, **accounts_service.account_counts(session, account.id)}
    )


@router.get("", response_model=List[BankAccountRead])
def list_accounts(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return [
        account_read(session, account)
        for account in accounts_service.list_bank_accounts(session, user_id)
    ]


@router.post("", response_model=BankAccountRead, status_code=status.HTTP_201_CREATED)
def create_account(
    body: BankAccountCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    account = accounts_service.create_bank_account(session, user_id, body)
    return account_read(session, account)


@router.get("/{account_id}", response_model=BankAccountDetail)
def get_account(
    account_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    account = accounts_service.require_account_access(session, user_id, account_id)
    cards, recent = accounts_service.account_activity(session, account.id)
    base = account_read(session, account)
    return BankAccountDetail(
        **base.model_dump(),
        cards=[CardRead.model_validate(card) for card in cards],
        recent_transactions=[TransactionRead.model_validate(txn) for txn in recent],
    )


@router.patch("/{account_id}", response_model=BankAccountRead)
def update_account(
    account_id: int,
    body: BankAccountUpdate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    account = accounts_service.update_bank_account(
        session, user_id, account_id, body.model_dump(exclude_unset=True)
    )
    return account_read(session, account)


@router.delete("/{account_id}", response_model=Message)
def delete_account(
    account_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    outcome = accounts_service.delete_bank_account(session, user_id, account_id)
    if outcome is not None:
        return Message(message="Bank account archived because it still has history")
    return Message(message="Bank account deleted")
