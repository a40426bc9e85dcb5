"""create recurring_transactions

Revision ID: 001
Revises: 
Create Date: 2026-10-12 09:30:00
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "recurring_transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("merchant_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("frequency", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("last_date", sa.Date(), nullable=False),
        sa.Column("next_date", sa.Date(), nullable=False),
        sa.Column("confidence", sa.Numeric(3, 2), nullable=False, server_default="1.0"),
        sa.Column("icon_url", sa.Text(), nullable=True),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "frequency in ('weekly', 'bi-weekly', 'monthly', 'yearly')",
            name="ck_recurring_frequency",
        ),
        sa.CheckConstraint("status in ('active', 'ignored')", name="ck_recurring_status"),
    )
    op.create_index("idx_recurring_transactions_user_id", "recurring_transactions", ["user_id"])
    op.create_index("idx_recurring_transactions_next_date", "recurring_transactions", ["next_date"])


def downgrade() -> None:
    op.drop_index("idx_recurring_transactions_next_date", table_name="recurring_transactions")
    op.drop_index("idx_recurring_transactions_user_id", table_name="recurring_transactions")
    op.drop_table("recurring_transactions")
