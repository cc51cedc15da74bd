"""create payment_links table

Revision ID: a7c3e9f1b2d4
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a7c3e9f1b2d4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "payment_links",
        sa.Column("link_id", sa.String(length=16), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("invoice_number", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("owner_email", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("masked_card_number", sa.String(length=32), nullable=True),
        sa.Column("processor_customer_id", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("link_id"),
    )
    op.create_index("ix_payment_links_status", "payment_links", ["status"])
    op.create_index("ix_payment_links_created_at", "payment_links", ["created_at"])
    op.create_index("ix_payment_links_expires_at", "payment_links", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_payment_links_expires_at", table_name="payment_links")
    op.drop_index("ix_payment_links_created_at", table_name="payment_links")
    op.drop_index("ix_payment_links_status", table_name="payment_links")
    op.drop_table("payment_links")
