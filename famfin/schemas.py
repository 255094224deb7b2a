# famfin/schemas.py
"""
Request and response bodies for the JSON API.

Wire format is camelCase (isPaid, bankAccountId, ...); snake_case input is
accepted as well. Money travels as Decimal and is serialized as a string.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel

from famfin.models import (
    AccountType,
    CardBrand,
    CardType,
    InvitationStatus,
    MemberRole,
    RecordStatus,
    RecurringType,
    TransactionType,
)

# amounts are stored as Numeric(12, 2); anything finer than a cent is refused
PositiveAmount = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
NonNegativeAmount = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
Cents = Annotated[Decimal, Field(max_digits=12, decimal_places=2)]
DayOfMonth = Annotated[int, Field(ge=1, le=31)]

MAX_INSTALLMENTS = 60


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class Message(APIModel):
    message: str


# ---------- Auth / users ----------


class SignupIn(APIModel):
    name: str = Field(min_length=3)
    email: EmailStr
    password: str = Field(min_length=6)


class SigninIn(APIModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserCreate(SignupIn):
    role_id: Optional[int] = None


class UserRead(APIModel):
    id: int
    name: str
    email: str
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    created_at: dt.datetime
    transaction_count: int = 0
    card_count: int = 0


class UserBrief(APIModel):
    id: int
    name: str
    email: str


class RoleRead(APIModel):
    id: int
    name: str
    description: Optional[str] = None
    user_count: int = 0


# ---------- Bank accounts ----------


class BankAccountCreate(APIModel):
    name: str = Field(min_length=1)
    institution: str = Field(min_length=1)
    type: AccountType = AccountType.CHECKING
    initial_balance: NonNegativeAmount = Decimal("0")
    color: Optional[str] = None
    is_shared: bool = False
    shared_with_user_ids: List[int] = Field(default_factory=list)


class BankAccountUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1)
    institution: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AccountType] = None
    color: Optional[str] = None
    status: Optional[RecordStatus] = None


class AccountMemberRead(APIModel):
    user_id: int
    role: MemberRole
    name: str
    email: str


class BankAccountRead(APIModel):
    id: int
    name: str
    institution: str
    type: AccountType
    initial_balance: Decimal
    current_balance: Decimal
    color: Optional[str] = None
    status: RecordStatus
    is_shared: bool
    created_by_id: int
    created_at: dt.datetime
    members: List[AccountMemberRead] = Field(default_factory=list)
    transaction_count: int = 0
    card_count: int = 0


# ---------- Cards ----------


def _limit_field():
    # the column is credit_limit; the wire name stays "limit"
    return Field(
        default=None,
        validation_alias=AliasChoices("limit", "creditLimit", "credit_limit"),
        serialization_alias="limit",
    )


class CardCreate(APIModel):
    name: str = Field(min_length=1)
    last_digits: str = Field(pattern=r"^\d{4}$")
    type: CardType = CardType.CREDIT
    brand: Optional[CardBrand] = None
    credit_limit: Optional[NonNegativeAmount] = _limit_field()
    due_day: Optional[DayOfMonth] = None
    closing_day: Optional[DayOfMonth] = None
    color: Optional[str] = None
    bank_account_id: Optional[int] = None


class CardUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1)
    last_digits: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    type: Optional[CardType] = None
    brand: Optional[CardBrand] = None
    credit_limit: Optional[NonNegativeAmount] = _limit_field()
    due_day: Optional[DayOfMonth] = None
    closing_day: Optional[DayOfMonth] = None
    color: Optional[str] = None
    status: Optional[RecordStatus] = None
    bank_account_id: Optional[int] = None


class CardRead(APIModel):
    id: int
    name: str
    last_digits: str
    type: CardType
    brand: Optional[CardBrand] = None
    credit_limit: Optional[Decimal] = _limit_field()
    due_day: Optional[int] = None
    closing_day: Optional[int] = None
    color: Optional[str] = None
    status: RecordStatus
    is_shared: bool
    user_id: int
    bank_account_id: Optional[int] = None
    created_at: dt.datetime
    transaction_count: int = 0


# ---------- Categories ----------


class CategoryCreate(APIModel):
    name: str = Field(min_length=1)
    type: TransactionType
    icon: Optional[str] = None
    color: Optional[str] = None
    is_shared: bool = False


class CategoryUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1)
    icon: Optional[str] = None
    color: Optional[str] = None


class CategoryRead(APIModel):
    id: int
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    type: TransactionType
    is_default: bool
    is_shared: bool
    created_by_id: Optional[int] = None


# ---------- Transactions ----------


class TransactionCreate(APIModel):
    description: str = Field(min_length=1)
    amount: PositiveAmount
    type: TransactionType
    date: Optional[dt.date] = None  # defaults to today
    category_id: int
    bank_account_id: Optional[int] = None
    card_id: Optional[int] = None
    is_paid: bool = False
    is_recurring: bool = False
    recurring_type: Optional[RecurringType] = None
    installments: int = Field(default=1, ge=1, le=MAX_INSTALLMENTS)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _needs_account_or_card(self) -> "TransactionCreate":
        if self.bank_account_id is None and self.card_id is None:
            raise ValueError("Select a bank account or a card")
        return self


class TransactionUpdate(APIModel):
    description: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[PositiveAmount] = None
    date: Optional[dt.date] = None
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    card_id: Optional[int] = None
    is_paid: Optional[bool] = None
    notes: Optional[str] = None


class TransactionRead(APIModel):
    id: int
    description: str
    amount: Decimal
    type: TransactionType
    date: dt.date
    category_id: int
    bank_account_id: Optional[int] = None
    card_id: Optional[int] = None
    is_paid: bool
    is_recurring: bool
    recurring_type: Optional[RecurringType] = None
    installments: int
    current_installment: int
    parent_transaction_id: Optional[int] = None
    is_shared: bool
    notes: Optional[str] = None
    user_id: int
    created_at: dt.datetime


class TransactionDetail(TransactionRead):
    child_transactions: List[TransactionRead] = Field(default_factory=list)


class InstallmentSeriesRead(APIModel):
    parent: TransactionRead
    installments: List[TransactionRead]


class Pagination(APIModel):
    total: int
    page: int
    limit: int
    total_pages: int


class TransactionPage(APIModel):
    transactions: List[TransactionRead]
    pagination: Pagination


class TransactionDeleted(Message):
    deleted_count: int


class BankAccountDetail(BankAccountRead):
    cards: List[CardRead] = Field(default_factory=list)
    recent_transactions: List[TransactionRead] = Field(default_factory=list)


# ---------- Goals ----------


class GoalCreate(APIModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    target_amount: PositiveAmount
    deadline: Optional[dt.date] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    shared_with_user_ids: List[int] = Field(default_factory=list)


class GoalUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    target_amount: Optional[PositiveAmount] = None
    deadline: Optional[dt.date] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_completed: Optional[bool] = None


class ContributionIn(APIModel):
    # sign is checked by the service so the error reads as InvalidAmount
    amount: Cents


class GoalParticipantRead(APIModel):
    user_id: int
    name: str
    contribution: Decimal


class GoalRead(APIModel):
    id: int
    name: str
    description: Optional[str] = None
    target_amount: Decimal
    current_amount: Decimal
    deadline: Optional[dt.date] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_completed: bool
    is_shared: bool
    created_by_id: int
    created_at: dt.datetime
    participants: List[GoalParticipantRead] = Field(default_factory=list)


# ---------- Budgets ----------


class BudgetCreate(APIModel):
    category_id: int
    amount: PositiveAmount
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)


class BudgetUpdate(APIModel):
    amount: Optional[PositiveAmount] = None


class BudgetRead(APIModel):
    id: int
    amount: Decimal
    month: int
    year: int
    user_id: int
    category_id: int
    category: Optional[CategoryRead] = None
    spent: Decimal = Decimal("0")
    remaining: Decimal = Decimal("0")
    percentage_used: float = 0.0


# ---------- Family ----------


class FamilyCreate(APIModel):
    name: str = Field(min_length=1)


class FamilyMemberRead(APIModel):
    id: int
    user_id: int
    role: MemberRole
    joined_at: dt.datetime
    name: str
    email: str


class FamilyRead(APIModel):
    id: int
    name: str
    created_by_id: int
    created_at: dt.datetime
    members: List[FamilyMemberRead] = Field(default_factory=list)


class FamilyOverview(APIModel):
    family: Optional[FamilyRead] = None
    user_role: Optional[MemberRole] = None


class InvitationCreate(APIModel):
    email: EmailStr


class InvitationAction(APIModel):
    action: Literal["accept", "reject"]


class InvitationRead(APIModel):
    id: int
    family_id: int
    family_name: str
    invited_id: int
    invited_by_id: int
    inviter_name: str
    status: InvitationStatus
    created_at: dt.datetime
    responded_at: Optional[dt.datetime] = None


class InvitationAnswered(Message):
    family_id: Optional[int] = None


ShareableType = Literal["bankAccount", "card", "category", "transaction", "goal"]


class ShareIn(APIModel):
    type: ShareableType
    item_id: int
    shared: bool


class ShareResult(Message):
    type: ShareableType
    item_id: int
    is_shared: bool


class MemberData(APIModel):
    user: UserBrief
    accounts: List[BankAccountRead]
    cards: List[CardRead]
    transactions: List[TransactionRead]
    goals: List[GoalRead]
    categories: List[CategoryRead]
