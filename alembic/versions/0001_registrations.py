"""registrations

Revision ID: 0001_registrations
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_registrations"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ticket_id", sa.String(length=36), nullable=False),
        sa.Column("short_ticket_id", sa.String(length=16), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("college", sa.Text(), nullable=False),
        sa.Column("branch", sa.Text(), nullable=False),
        sa.Column("year", sa.String(length=1), nullable=False),
        sa.Column("gender", sa.String(length=10), nullable=False),
        sa.Column("accommodation", sa.String(length=3), nullable=False),
        sa.Column("food_preference", sa.String(length=10), nullable=False),
        sa.Column("ieee_status", sa.String(length=12), nullable=False),
        sa.Column("ieee_membership_id", sa.Text(), nullable=True),
        sa.Column("ticket_type", sa.String(length=10), nullable=False),
        sa.Column("agree_to_terms", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("transaction_screenshot_url", sa.Text(), nullable=False),
        sa.Column("transaction_screenshot_delete_url", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=12), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_tickets_ticket_id", "tickets", ["ticket_id"], unique=True)
    op.create_index("ix_tickets_short_ticket_id", "tickets", ["short_ticket_id"], unique=True)
    op.create_index("ix_tickets_email", "tickets", ["email"], unique=True)
    op.create_index("ix_tickets_status", "tickets", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_tickets_status", table_name="tickets")
    op.drop_index("ix_tickets_email", table_name="tickets")
    op.drop_index("ix_tickets_short_ticket_id", table_name="tickets")
    op.drop_index("ix_tickets_ticket_id", table_name="tickets")
    op.drop_table("tickets")
