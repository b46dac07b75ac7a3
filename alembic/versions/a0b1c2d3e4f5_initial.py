"""initial

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "a0b1c2d3e4f5"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Tenancy ─────────────────────────────────────────────────────────────

    op.create_table(
        "rooms",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("room_number", sa.String(length=20), nullable=False),
        sa.Column("rent", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="available"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rooms_room_number"), "rooms", ["room_number"], unique=True)

    op.create_table(
        "tenants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=50), nullable=True),
        sa.Column("line_id", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("room_number", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["room_number"], ["rooms.room_number"], onupdate="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_number"),
    )
    op.create_index(op.f("ix_tenants_username"), "tenants", ["username"], unique=True)

    # ── Billing ─────────────────────────────────────────────────────────────

    op.create_table(
        "bills",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=True),
        sa.Column("room_number", sa.String(length=20), nullable=False),
        sa.Column("water_units", sa.Numeric(10, 2), nullable=False),
        sa.Column("electricity_units", sa.Numeric(10, 2), nullable=False),
        sa.Column("water_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("electricity_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("rent_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("meter", sa.String(length=100), nullable=True),
        sa.Column("slip_path", sa.String(length=500), nullable=True),
        sa.Column("payment_state", sa.String(length=10), nullable=False, server_default="unpaid"),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bills_tenant_id"), "bills", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_bills_room_number"), "bills", ["room_number"], unique=False)
    op.create_index(op.f("ix_bills_payment_state"), "bills", ["payment_state"], unique=False)

    op.create_table(
        "payment_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("bill_id", sa.Uuid(), nullable=False),
        sa.Column("amount_paid", sa.Numeric(14, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("slip_path", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["bill_id"], ["bills.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payment_history_bill_id"), "payment_history", ["bill_id"], unique=True)

    # ── Repairs & announcements ─────────────────────────────────────────────

    op.create_table(
        "repairs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("room_number", sa.String(length=20), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("repair_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_repairs_tenant_id"), "repairs", ["tenant_id"], unique=False)

    op.create_table(
        "announcements",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("detail", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("announcements")
    op.drop_index(op.f("ix_repairs_tenant_id"), table_name="repairs")
    op.drop_table("repairs")
    op.drop_index(op.f("ix_payment_history_bill_id"), table_name="payment_history")
    op.drop_table("payment_history")
    op.drop_index(op.f("ix_bills_payment_state"), table_name="bills")
    op.drop_index(op.f("ix_bills_room_number"), table_name="bills")
    op.drop_index(op.f("ix_bills_tenant_id"), table_name="bills")
    op.drop_table("bills")
    op.drop_index(op.f("ix_tenants_username"), table_name="tenants")
    op.drop_table("tenants")
    op.drop_index(op.f("ix_rooms_room_number"), table_name="rooms")
    op.drop_table("rooms")
