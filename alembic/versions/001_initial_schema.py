"""Initial schema: users, events, payment orders, tickets, comments, applications.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'fan'")),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column("google_sub", sa.String(255), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('fan', 'organizer', 'artist')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_online", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        # NULL = unlimited
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("tickets_issued", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("allow_artist_applications", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("organizer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("organizer_name", sa.String(100), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        sa.CheckConstraint("capacity IS NULL OR capacity > 0", name="check_event_capacity_positive"),
        sa.CheckConstraint("tickets_issued >= 0", name="check_tickets_issued_non_negative"),
        # Schema-level backstop for the guarded UPDATE in ticket issuance
        sa.CheckConstraint(
            "capacity IS NULL OR tickets_issued <= capacity",
            name="check_tickets_issued_lte_capacity",
        ),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_date", "events", ["date"])
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])

    op.create_table(
        "payment_orders",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'created'")),
        sa.Column("payment_id", sa.String(64), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="check_order_quantity_positive"),
        sa.CheckConstraint("amount > 0", name="check_order_amount_positive"),
        sa.CheckConstraint("status IN ('created', 'paid')", name="check_order_status"),
    )
    op.create_index("ix_payment_orders_event_id", "payment_orders", ["event_id"])
    op.create_index("ix_payment_orders_user_id", "payment_orders", ["user_id"])

    op.create_table(
        "tickets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("holder_name", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("order_id", sa.String(64), sa.ForeignKey("payment_orders.id"), nullable=True),
        sa.Column("payment_id", sa.String(64), nullable=True),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('pending', 'paid', 'checked-in')", name="check_ticket_status"),
    )
    op.create_index("ix_tickets_event_id", "tickets", ["event_id"])
    op.create_index("ix_tickets_user_id", "tickets", ["user_id"])
    op.create_index("ix_tickets_order_id", "tickets", ["order_id"])
    # One free ticket per fan per event; paid tickets are unlimited
    op.create_index(
        "uq_free_ticket_per_user",
        "tickets",
        ["event_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("payment_id IS NULL"),
        sqlite_where=sa.text("payment_id IS NULL"),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("user_name", sa.String(100), nullable=False),
        sa.Column("text", sa.String(1000), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_comments_id", "comments", ["id"])
    op.create_index("ix_comments_event_id", "comments", ["event_id"])

    op.create_table(
        "artist_applications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("artist_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("artist_name", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        *_timestamps(),
        sa.UniqueConstraint("event_id", "artist_id", name="uq_artist_application"),
    )
    op.create_index("ix_artist_applications_id", "artist_applications", ["id"])
    op.create_index("ix_artist_applications_event_id", "artist_applications", ["event_id"])

    for table in ("user_joined_events", "user_applied_events"):
        op.create_table(
            table,
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
            sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), primary_key=True),
        )
        op.create_index(f"ix_{table}_event_id", table, ["event_id"])


def downgrade() -> None:
    op.drop_table("user_applied_events")
    op.drop_table("user_joined_events")
    op.drop_table("artist_applications")
    op.drop_table("comments")
    op.drop_table("tickets")
    op.drop_table("payment_orders")
    op.drop_table("events")
    op.drop_table("users")
