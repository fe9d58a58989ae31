"""cash drawer: visits, expenses, cash records and closings

Revision ID: 0001_cash_drawer
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_cash_drawer"
down_revision = None
branch_labels = None
depends_on = None


def _payment_method(name: str) -> sa.Enum:
    return sa.Enum("CASH", "CARD", "TRANSFER", name=name, create_constraint=True)


def upgrade() -> None:
    op.create_table(
        "visits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("visit_date", sa.Date(), nullable=False),
        sa.Column("chart_number", sa.String(length=20), nullable=False),
        sa.Column("patient_name", sa.String(length=100), nullable=False),
        sa.Column("doctor", sa.String(length=100), nullable=True),
        sa.Column("treatment_type", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_visits_visit_date", "visits", ["visit_date"])
    op.create_index("ix_visits_chart_number", "visits", ["chart_number"])

    op.create_table(
        "visit_payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("visit_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column(
            "method", _payment_method("visit_payment_method_enum"), nullable=False
        ),
        sa.Column("card_company", sa.String(length=50), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"]),
    )
    op.create_index("ix_visit_payments_visit_id", "visit_payments", ["visit_id"])
    op.create_index("ix_visit_payments_date", "visit_payments", ["date"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("vendor", sa.String(length=100), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("method", _payment_method("expense_method_enum"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_expenses_date", "expenses", ["date"])

    op.create_table(
        "cash_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "kind",
            sa.Enum(
                "INCOME", "EXPENSE", "MANUAL_DEPOSIT",
                name="ledger_kind_enum",
                create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("source_visit_payment_id", sa.Integer(), nullable=True),
        sa.Column("source_expense_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["source_visit_payment_id"], ["visit_payments.id"]
        ),
        sa.ForeignKeyConstraint(["source_expense_id"], ["expenses.id"]),
        sa.CheckConstraint("amount >= 0", name="ck_cash_records_amount"),
        sa.CheckConstraint(
            "source_visit_payment_id IS NULL OR source_expense_id IS NULL",
            name="ck_cash_records_single_source",
        ),
        sa.CheckConstraint(
            "source_visit_payment_id IS NULL OR kind = 'INCOME'",
            name="ck_cash_records_visit_income",
        ),
        sa.CheckConstraint(
            "source_expense_id IS NULL OR kind = 'EXPENSE'",
            name="ck_cash_records_expense_kind",
        ),
        sa.CheckConstraint(
            "source_visit_payment_id IS NOT NULL "
            "OR source_expense_id IS NOT NULL "
            "OR kind = 'MANUAL_DEPOSIT'",
            name="ck_cash_records_manual_kind",
        ),
    )
    op.create_index("ix_cash_records_date", "cash_records", ["date"])
    op.create_index(
        "ix_cash_records_source_visit_payment_id",
        "cash_records",
        ["source_visit_payment_id"],
    )
    op.create_index(
        "ix_cash_records_source_expense_id",
        "cash_records",
        ["source_expense_id"],
    )

    op.create_table(
        "cash_closings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("closing_amount", sa.Integer(), nullable=False),
        sa.Column("counted_amount", sa.Integer(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_cash_closings_date", "cash_closings", ["date"], unique=True
    )


def downgrade() -> None:
    op.drop_table("cash_closings")
    op.drop_table("cash_records")
    op.drop_table("expenses")
    op.drop_table("visit_payments")
    op.drop_table("visits")
    for name in (
        "ledger_kind_enum",
        "expense_method_enum",
        "visit_payment_method_enum",
    ):
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
