"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(precision=12, scale=2)

transaction_type = sa.Enum("INCOME", "EXPENSE", name="transactiontype")
recurring_type = sa.Enum("DAILY", "WEEKLY", "MONTHLY", "YEARLY", name="recurringtype")
record_status = sa.Enum("ACTIVE", "ARCHIVED", name="recordstatus")
account_type = sa.Enum(
    "CHECKING", "SAVINGS", "INVESTMENT", "CASH", "OTHER", name="accounttype"
)
card_type = sa.Enum("CREDIT", "DEBIT", name="cardtype")
card_brand = sa.Enum(
    "VISA", "MASTERCARD", "ELO", "AMEX", "HIPERCARD", "OTHER", name="cardbrand"
)
member_role = sa.Enum("OWNER", "MEMBER", name="memberrole")
invitation_status = sa.Enum("PENDING", "ACCEPTED", "REJECTED", name="invitationstatus")

text = sqlmodel.sql.sqltypes.AutoString


def upgrade() -> None:
    op.create_table(
        "role",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", text(), nullable=False),
        sa.Column("description", text(), nullable=True),
    )
    op.create_index("ix_role_name", "role", ["name"], unique=True)

    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", text(), nullable=False),
        sa.Column("email", text(), nullable=False),
        sa.Column("hashed_password", text(), nullable=False),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("role.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )
    op.create_index("ix_user_email", "user", ["email"])

    op.create_table(
        "family",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", text(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_family_created_by_id", "family", ["created_by_id"])

    op.create_table(
        "family_member",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("family_id", sa.Integer(), sa.ForeignKey("family.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("role", member_role, nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", name="uq_family_member_user"),
    )
    op.create_index("ix_family_member_family_id", "family_member", ["family_id"])
    op.create_index("ix_family_member_user_id", "family_member", ["user_id"])

    op.create_table(
        "family_invitation",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("family_id", sa.Integer(), sa.ForeignKey("family.id"), nullable=False),
        sa.Column("invited_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("invited_by_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("status", invitation_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("responded_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("family_id", "invited_id", name="uq_invitation_family_user"),
    )
    op.create_index("ix_family_invitation_family_id", "family_invitation", ["family_id"])
    op.create_index("ix_family_invitation_invited_id", "family_invitation", ["invited_id"])
    op.create_index("ix_family_invitation_status", "family_invitation", ["status"])

    op.create_table(
        "bank_account",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", text(), nullable=False),
        sa.Column("institution", text(), nullable=False),
        sa.Column("type", account_type, nullable=False),
        sa.Column("initial_balance", MONEY, nullable=False),
        sa.Column("current_balance", MONEY, nullable=False),
        sa.Column("color", text(), nullable=True),
        sa.Column("status", record_status, nullable=False),
        sa.Column("is_shared", sa.Boolean(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_bank_account_status", "bank_account", ["status"])
    op.create_index("ix_bank_account_created_by_id", "bank_account", ["created_by_id"])

    op.create_table(
        "user_bank_account",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column(
            "bank_account_id", sa.Integer(), sa.ForeignKey("bank_account.id"), nullable=False
        ),
        sa.Column("role", member_role, nullable=False),
        sa.UniqueConstraint("user_id", "bank_account_id", name="uq_user_bank_account"),
    )
    op.create_index("ix_user_bank_account_user_id", "user_bank_account", ["user_id"])
    op.create_index(
        "ix_user_bank_account_bank_account_id", "user_bank_account", ["bank_account_id"]
    )

    op.create_table(
        "card",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", text(), nullable=False),
        sa.Column("last_digits", text(length=4), nullable=False),
        sa.Column("type", card_type, nullable=False),
        sa.Column("brand", card_brand, nullable=True),
        sa.Column("credit_limit", MONEY, nullable=True),
        sa.Column("due_day", sa.Integer(), nullable=True),
        sa.Column("closing_day", sa.Integer(), nullable=True),
        sa.Column("color", text(), nullable=True),
        sa.Column("status", record_status, nullable=False),
        sa.Column("is_shared", sa.Boolean(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column(
            "bank_account_id", sa.Integer(), sa.ForeignKey("bank_account.id"), nullable=True
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_card_status", "card", ["status"])
    op.create_index("ix_card_user_id", "card", ["user_id"])

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", text(), nullable=False),
        sa.Column("icon", text(), nullable=True),
        sa.Column("color", text(), nullable=True),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_shared", sa.Boolean(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_category_name", "category", ["name"])
    op.create_index("ix_category_type", "category", ["type"])
    op.create_index("ix_category_is_default", "category", ["is_default"])

    op.create_table(
        "transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("description", text(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column(
            "bank_account_id", sa.Integer(), sa.ForeignKey("bank_account.id"), nullable=True
        ),
        sa.Column("card_id", sa.Integer(), sa.ForeignKey("card.id"), nullable=True),
        sa.Column("is_paid", sa.Boolean(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column("recurring_type", recurring_type, nullable=True),
        sa.Column("installments", sa.Integer(), nullable=False),
        sa.Column("current_installment", sa.Integer(), nullable=False),
        sa.Column(
            "parent_transaction_id",
            sa.Integer(),
            sa.ForeignKey("transaction.id"),
            nullable=True,
        ),
        sa.Column("is_shared", sa.Boolean(), nullable=False),
        sa.Column("notes", text(), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    for column in (
        "type",
        "date",
        "category_id",
        "bank_account_id",
        "card_id",
        "is_paid",
        "current_installment",
        "parent_transaction_id",
        "user_id",
    ):
        op.create_index(f"ix_transaction_{column}", "transaction", [column])

    op.create_table(
        "goal",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", text(), nullable=False),
        sa.Column("description", text(), nullable=True),
        sa.Column("target_amount", MONEY, nullable=False),
        sa.Column("current_amount", MONEY, nullable=False),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("icon", text(), nullable=True),
        sa.Column("color", text(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("is_shared", sa.Boolean(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_goal_created_by_id", "goal", ["created_by_id"])

    op.create_table(
        "user_goal",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("goal_id", sa.Integer(), sa.ForeignKey("goal.id"), nullable=False),
        sa.Column("contribution", MONEY, nullable=False),
        sa.UniqueConstraint("user_id", "goal_id", name="uq_user_goal"),
    )
    op.create_index("ix_user_goal_user_id", "user_goal", ["user_id"])
    op.create_index("ix_user_goal_goal_id", "user_goal", ["goal_id"])

    op.create_table(
        "budget",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "user_id", "category_id", "month", "year", name="uq_budget_period"
        ),
    )
    for column in ("month", "year", "user_id", "category_id"):
        op.create_index(f"ix_budget_{column}", "budget", [column])


def downgrade() -> None:
    for table in (
        "budget",
        "user_goal",
        "goal",
        "transaction",
        "category",
        "card",
        "user_bank_account",
        "bank_account",
        "family_invitation",
        "family_member",
        "family",
        "user",
        "role",
    ):
        op.drop_table(table)
