"""Create booking tables

Revision ID: 3f9c1a7d2b64
Revises:
Create Date: 2026-10-19 09:12:31.118204

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]
from retreat_booking.config import SCHEMA

# revision identifiers, used by Alembic.
revision = "3f9c1a7d2b64"
down_revision = None
branch_labels = None
depends_on = None


def _fk(target: str) -> str:
    return f"{SCHEMA}.{target}" if SCHEMA else target


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "retreats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("instructor", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("status", sa.String(), server_default=sa.text("'ACTIVE'"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("capacity > 0", name="ck_retreats_capacity_positive"),
        sa.CheckConstraint("start_date <= end_date", name="ck_retreats_date_order"),
        schema=SCHEMA,
    )
    op.create_index("ix_retreats_start_date", "retreats", ["start_date"], schema=SCHEMA)
    op.create_index("ix_retreats_end_date", "retreats", ["end_date"], schema=SCHEMA)

    op.create_table(
        "schedule_activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "retreat_id",
            sa.Integer(),
            sa.ForeignKey(_fk("retreats.id"), ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), server_default=sa.text("60"), nullable=False),
        sa.Column("instructor", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("capacity", sa.Integer(), server_default=sa.text("20"), nullable=False),
        sa.CheckConstraint("day >= 1", name="ck_schedule_activities_day"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_schedule_activities_retreat_id", "schedule_activities", ["retreat_id"], schema=SCHEMA
    )

    op.create_table(
        "guests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), server_default=sa.text("''"), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("loyalty_points", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("loyalty_tier", sa.String(), server_default=sa.text("'BRONZE'"), nullable=False),
        sa.Column(
            "loyalty_program_active", sa.Boolean(), server_default=sa.text("FALSE"), nullable=False
        ),
        *_timestamps(),
        sa.CheckConstraint("loyalty_points >= 0", name="ck_guests_loyalty_points"),
        schema=SCHEMA,
    )
    op.create_index("ix_guests_email", "guests", ["email"], schema=SCHEMA)

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "retreat_id",
            sa.Integer(),
            sa.ForeignKey(_fk("retreats.id"), ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "guest_id",
            sa.Integer(),
            sa.ForeignKey(_fk("guests.id"), ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "payment_status", sa.String(), server_default=sa.text("'PENDING'"), nullable=False
        ),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("room_number", sa.String(), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("actual_check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_in_staff", sa.String(), nullable=True),
        sa.Column("actual_check_out_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_staff", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("number_of_guests > 0", name="ck_reservations_party_size"),
        sa.CheckConstraint("check_in_date <= check_out_date", name="ck_reservations_date_order"),
        sa.CheckConstraint("paid_amount >= 0", name="ck_reservations_paid_amount"),
        schema=SCHEMA,
    )
    op.create_index("ix_reservations_retreat_id", "reservations", ["retreat_id"], schema=SCHEMA)
    op.create_index("ix_reservations_guest_id", "reservations", ["guest_id"], schema=SCHEMA)
    op.create_index("ix_reservations_status", "reservations", ["status"], schema=SCHEMA)

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("reference", sa.String(), nullable=True),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey(_fk("reservations.id"), ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("retreat_id", sa.Integer(), sa.ForeignKey(_fk("retreats.id")), nullable=True),
        sa.Column("status", sa.String(), server_default=sa.text("'PENDING'"), nullable=False),
        *_timestamps(),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_ledger_entries_reservation_id", "ledger_entries", ["reservation_id"], schema=SCHEMA
    )
    op.create_index(
        "uq_ledger_entries_booking_income",
        "ledger_entries",
        ["reservation_id"],
        unique=True,
        schema=SCHEMA,
        postgresql_where=sa.text("type = 'INCOME' AND category = 'RETREAT_BOOKING'"),
        sqlite_where=sa.text("type = 'INCOME' AND category = 'RETREAT_BOOKING'"),
    )

    op.create_table(
        "loyalty_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "guest_id",
            sa.Integer(),
            sa.ForeignKey(_fk("guests.id"), ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey(_fk("reservations.id"), ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_loyalty_transactions_guest_id", "loyalty_transactions", ["guest_id"], schema=SCHEMA
    )
    op.create_index(
        "ix_loyalty_transactions_reservation_id",
        "loyalty_transactions",
        ["reservation_id"],
        schema=SCHEMA,
    )

    op.create_table(
        "guest_communications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "guest_id",
            sa.Integer(),
            sa.ForeignKey(_fk("guests.id"), ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey(_fk("reservations.id"), ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("direction", sa.String(), nullable=False),
        sa.Column("channel", sa.String(), nullable=False),
        sa.Column("staff_member", sa.String(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_guest_communications_guest_id", "guest_communications", ["guest_id"], schema=SCHEMA
    )
    op.create_index(
        "ix_guest_communications_reservation_id",
        "guest_communications",
        ["reservation_id"],
        schema=SCHEMA,
    )

    op.create_table(
        "waitlist_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "retreat_id",
            sa.Integer(),
            sa.ForeignKey(_fk("retreats.id"), ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "guest_id",
            sa.Integer(),
            sa.ForeignKey(_fk("guests.id"), ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("special_requests", sa.String(), nullable=True),
        sa.Column("priority", sa.String(), server_default=sa.text("'NORMAL'"), nullable=False),
        sa.Column("status", sa.String(), server_default=sa.text("'WAITING'"), nullable=False),
        sa.Column(
            "promoted_reservation_id",
            sa.Integer(),
            sa.ForeignKey(_fk("reservations.id")),
            nullable=True,
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("number_of_guests > 0", name="ck_waitlist_entries_party_size"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_waitlist_entries_retreat_id", "waitlist_entries", ["retreat_id"], schema=SCHEMA
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "waitlist_entries",
        "guest_communications",
        "loyalty_transactions",
        "ledger_entries",
        "reservations",
        "guests",
        "schedule_activities",
        "retreats",
    ):
        op.drop_table(table, schema=SCHEMA)
