# famfin/models.py
import datetime as dt  # module alias: "date" is also a column name below
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel, UniqueConstraint


def utcnow() -> dt.datetime:
    # naive UTC in plain DateTime columns (sa_type=DateTime below); SQLite
    # drops tzinfo on the way back anyway
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


MONEY = {"max_digits": 12, "decimal_places": 2}


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    def inverted(self) -> "TransactionType":
        """The type whose balance effect cancels this one."""
        if self is TransactionType.INCOME:
            return TransactionType.EXPENSE
        return TransactionType.INCOME


class RecurringType(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class RecordStatus(str, Enum):
    """Lifecycle of accounts and cards. Archived rows keep their history."""

    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class AccountType(str, Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    INVESTMENT = "INVESTMENT"
    CASH = "CASH"
    OTHER = "OTHER"


class CardType(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class CardBrand(str, Enum):
    VISA = "VISA"
    MASTERCARD = "MASTERCARD"
    ELO = "ELO"
    AMEX = "AMEX"
    HIPERCARD = "HIPERCARD"
    OTHER = "OTHER"


class MemberRole(str, Enum):
    """Role on a family membership or on a bank-account link."""

    OWNER = "OWNER"
    MEMBER = "MEMBER"


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# ---------- Identity ----------


class Role(SQLModel, table=True):
    __tablename__ = "role"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)  # "Admin" | "User"
    description: Optional[str] = None


class User(SQLModel, table=True):
    __tablename__ = "user"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True)
    hashed_password: str  # never the plain password
    role_id: Optional[int] = Field(default=None, foreign_key="role.id")
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)

    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)


# ---------- Family ----------


class Family(SQLModel, table=True):
    __tablename__ = "family"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    created_by_id: int = Field(foreign_key="user.id", index=True)
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)


class FamilyMember(SQLModel, table=True):
    __tablename__ = "family_member"
    id: int | None = Field(default=None, primary_key=True)
    family_id: int = Field(foreign_key="family.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    role: MemberRole = Field(default=MemberRole.MEMBER)
    joined_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # a user belongs to at most one family
    __table_args__ = (UniqueConstraint("user_id", name="uq_family_member_user"),)


class FamilyInvitation(SQLModel, table=True):
    __tablename__ = "family_invitation"
    id: int | None = Field(default=None, primary_key=True)
    family_id: int = Field(foreign_key="family.id", index=True)
    invited_id: int = Field(foreign_key="user.id", index=True)
    invited_by_id: int = Field(foreign_key="user.id")
    status: InvitationStatus = Field(default=InvitationStatus.PENDING, index=True)
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)
    responded_at: Optional[dt.datetime] = Field(default=None, sa_type=DateTime)

    __table_args__ = (
        UniqueConstraint("family_id", "invited_id", name="uq_invitation_family_user"),
    )


# ---------- Money holders ----------


class BankAccount(SQLModel, table=True):
    __tablename__ = "bank_account"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    institution: str
    type: AccountType = Field(default=AccountType.CHECKING)
    initial_balance: Decimal = Field(default=Decimal("0"), **MONEY)
    # only paid-transaction side effects move this
    current_balance: Decimal = Field(default=Decimal("0"), **MONEY)
    color: Optional[str] = None
    status: RecordStatus = Field(default=RecordStatus.ACTIVE, index=True)
    is_shared: bool = Field(default=False)
    created_by_id: int = Field(foreign_key="user.id", index=True)
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)


class UserBankAccount(SQLModel, table=True):
    """Link between a user and an account; exactly one OWNER per account."""

    __tablename__ = "user_bank_account"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    bank_account_id: int = Field(foreign_key="bank_account.id", index=True)
    role: MemberRole = Field(default=MemberRole.MEMBER)

    __table_args__ = (
        UniqueConstraint("user_id", "bank_account_id", name="uq_user_bank_account"),
    )


class Card(SQLModel, table=True):
    __tablename__ = "card"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    last_digits: str = Field(max_length=4)
    type: CardType = Field(default=CardType.CREDIT)
    brand: Optional[CardBrand] = None
    credit_limit: Optional[Decimal] = Field(default=None, **MONEY)
    due_day: Optional[int] = None
    closing_day: Optional[int] = None
    color: Optional[str] = None
    status: RecordStatus = Field(default=RecordStatus.ACTIVE, index=True)
    is_shared: bool = Field(default=False)
    user_id: int = Field(foreign_key="user.id", index=True)
    bank_account_id: Optional[int] = Field(default=None, foreign_key="bank_account.id")
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Category(SQLModel, table=True):
    __tablename__ = "category"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    icon: Optional[str] = None
    color: Optional[str] = None
    type: TransactionType = Field(index=True)
    is_default: bool = Field(default=False, index=True)  # system category
    is_shared: bool = Field(default=False)
    created_by_id: Optional[int] = Field(default=None, foreign_key="user.id")
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Transaction(SQLModel, table=True):
    """
    One money movement, or one piece of an installment series.

    Series layout: a parent row with current_installment=0 carries the full
    amount and is never listed or summed; its N children (1..N) carry the
    per-installment amount and their own paid flag and date.
    A plain transaction has installments=1, current_installment=1.
    """

    __tablename__ = "transaction"
    id: int | None = Field(default=None, primary_key=True)
    description: str
    amount: Decimal = Field(**MONEY)  # always positive; type gives the sign
    type: TransactionType = Field(index=True)
    date: dt.date = Field(index=True)
    category_id: int = Field(foreign_key="category.id", index=True)
    bank_account_id: Optional[int] = Field(
        default=None, foreign_key="bank_account.id", index=True
    )
    card_id: Optional[int] = Field(default=None, foreign_key="card.id", index=True)
    is_paid: bool = Field(default=False, index=True)
    is_recurring: bool = Field(default=False)
    recurring_type: Optional[RecurringType] = None
    installments: int = Field(default=1)
    current_installment: int = Field(default=1, index=True)
    parent_transaction_id: Optional[int] = Field(
        default=None, foreign_key="transaction.id", index=True
    )
    is_shared: bool = Field(default=False)
    notes: Optional[str] = None
    user_id: int = Field(foreign_key="user.id", index=True)
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)


# ---------- Planning ----------


class Goal(SQLModel, table=True):
    __tablename__ = "goal"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    target_amount: Decimal = Field(**MONEY)
    current_amount: Decimal = Field(default=Decimal("0"), **MONEY)
    deadline: Optional[dt.date] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_completed: bool = Field(default=False)  # set once, never unset
    is_shared: bool = Field(default=False)
    created_by_id: int = Field(foreign_key="user.id", index=True)
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)


class UserGoal(SQLModel, table=True):
    __tablename__ = "user_goal"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    goal_id: int = Field(foreign_key="goal.id", index=True)
    contribution: Decimal = Field(default=Decimal("0"), **MONEY)  # this user's tally

    __table_args__ = (UniqueConstraint("user_id", "goal_id", name="uq_user_goal"),)


class Budget(SQLModel, table=True):
    """Spending ceiling for one category in one month; "spent" is derived."""

    __tablename__ = "budget"
    id: int | None = Field(default=None, primary_key=True)
    amount: Decimal = Field(**MONEY)
    month: int = Field(index=True)  # 1-12
    year: int = Field(index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    category_id: int = Field(foreign_key="category.id", index=True)
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "category_id", "month", "year", name="uq_budget_period"
        ),
    )
