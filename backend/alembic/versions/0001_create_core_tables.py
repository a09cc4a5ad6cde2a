"""create ledger tables

Revision ID: 0001
Revises: None
Create Date: 2025-03-01
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(14, 2)
ID = sa.String(length=36)


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("position", sa.String(length=200), nullable=True),
        sa.Column("monthly_salary", MONEY, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("auto_payment", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_employees_brand_id", "employees", ["brand_id"], unique=False)

    op.create_table(
        "cash_transactions",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("section", sa.String(length=20), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("reference_type", sa.String(length=50), nullable=True),
        sa.Column("reference_id", ID, nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cash_transactions_brand_date", "cash_transactions", ["brand_id", "date"], unique=False)

    op.create_table(
        "salary_payments",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("employee_id", ID, nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("period_month", sa.String(length=50), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("cash_transaction_id", ID, nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.ForeignKeyConstraint(["cash_transaction_id"], ["cash_transactions.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_salary_payments_brand_id", "salary_payments", ["brand_id"], unique=False)

    op.create_table(
        "pending_costs",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("employee_id", ID, nullable=True),
        sa.Column("salary_payment_id", ID, nullable=True),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("approved_by", ID, nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'declined')", name="ck_pending_costs_status"),
    )
    op.create_index("ix_pending_costs_brand_status", "pending_costs", ["brand_id", "status"], unique=False)

    op.create_table(
        "costs",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("source", sa.String(length=50), nullable=False, server_default="manual"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_costs_brand_date", "costs", ["brand_id", "date"], unique=False)

    op.create_table(
        "wallets",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False, server_default="cash"),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="EGP"),
        sa.Column("current_balance", MONEY, nullable=False, server_default="0"),
        sa.Column("monthly_budget", MONEY, nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_basic", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_wallets_brand_id", "wallets", ["brand_id"], unique=False)

    op.create_table(
        "wallet_transactions",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("wallet_id", ID, nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("transaction_type", sa.String(length=30), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("reference_type", sa.String(length=50), nullable=True),
        sa.Column("reference_id", ID, nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["wallet_id"], ["wallets.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_wallet_transactions_wallet_date", "wallet_transactions", ["wallet_id", "transaction_date"], unique=False
    )

    op.create_table(
        "wallet_transfers",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("from_wallet_id", ID, nullable=False),
        sa.Column("to_wallet_id", ID, nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("transfer_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["from_wallet_id"], ["wallets.id"]),
        sa.ForeignKeyConstraint(["to_wallet_id"], ["wallets.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_wallet_transfers_brand_id"), "wallet_transfers", ["brand_id"], unique=False)

    op.create_table(
        "monthly_budgets",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("budget_limit", MONEY, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("brand_id", "month", name="uq_monthly_budgets_brand_month"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", ID, nullable=False),
        sa.Column("brand_id", ID, nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("action_url", sa.String(length=200), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_brand_created", "notifications", ["brand_id", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_notifications_brand_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("monthly_budgets")
    op.drop_index(op.f("ix_wallet_transfers_brand_id"), table_name="wallet_transfers")
    op.drop_table("wallet_transfers")
    op.drop_index("ix_wallet_transactions_wallet_date", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")
    op.drop_index("ix_wallets_brand_id", table_name="wallets")
    op.drop_table("wallets")
    op.drop_index("ix_costs_brand_date", table_name="costs")
    op.drop_table("costs")
    op.drop_index("ix_pending_costs_brand_status", table_name="pending_costs")
    op.drop_table("pending_costs")
    op.drop_index("ix_salary_payments_brand_id", table_name="salary_payments")
    op.drop_table("salary_payments")
    op.drop_index("ix_cash_transactions_brand_date", table_name="cash_transactions")
    op.drop_table("cash_transactions")
    op.drop_index("ix_employees_brand_id", table_name="employees")
    op.drop_table("employees")
