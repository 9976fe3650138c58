"""
Ticket model: one admission unit for one event and one holder.

Key design decisions:
- The primary key is a random UUID string, never a position in a list,
  and doubles as the QR payload key
- Status moves forward only: pending|paid -> checked-in
- Free tickets carry no payment reference; the partial unique index allows
  at most one of them per (event, user) while paid tickets are unlimited
"""

import enum
import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint, text

from ticketing.db.base import Base, TimestampMixin


class TicketStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    CHECKED_IN = "checked-in"


def new_ticket_id() -> str:
    return str(uuid.uuid4())


class Ticket(Base, TimestampMixin):
    __tablename__ = "tickets"

    id = Column(String(36), primary_key=True, default=new_ticket_id)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    holder_name = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default=TicketStatus.PENDING.value)
    order_id = Column(String(64), ForeignKey("payment_orders.id"), nullable=True, index=True)
    payment_id = Column(String(64), nullable=True)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'paid', 'checked-in')", name="check_ticket_status"
        ),
        Index(
            "uq_free_ticket_per_user",
            "event_id",
            "user_id",
            unique=True,
            postgresql_where=text("payment_id IS NULL"),
            sqlite_where=text("payment_id IS NULL"),
        ),
    )

    @property
    def scan_payload(self) -> str:
        return f"{self.event_id}-{self.id}"

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, event={self.event_id}, user={self.user_id}, status={self.status})>"
