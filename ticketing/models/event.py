"""
Event model with ticket capacity tracking.

Key design decisions:
- `capacity` is nullable: NULL means the event is unbounded
- `tickets_issued` is denormalized so the capacity guard is a single-row
  conditional UPDATE instead of a COUNT over tickets
- The CHECK constraint on `tickets_issued <= capacity` is the last line of
  defence if an application bug ever skipped the guard
- `price` and `capacity` are never updated after creation
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Index, Numeric, CheckConstraint,
)

from ticketing.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=True)
    is_online = Column(Boolean, nullable=False, default=False)
    category = Column(String(50), nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    capacity = Column(Integer, nullable=True)
    tickets_issued = Column(Integer, nullable=False, default=0)
    allow_artist_applications = Column(Boolean, nullable=False, default=False)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    organizer_name = Column(String(100), nullable=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="check_event_capacity_positive"),
        CheckConstraint("tickets_issued >= 0", name="check_tickets_issued_non_negative"),
        CheckConstraint(
            "capacity IS NULL OR tickets_issued <= capacity",
            name="check_tickets_issued_lte_capacity",
        ),
        Index("ix_events_date", "date"),
    )

    @property
    def is_free(self) -> bool:
        return not self.price or self.price <= 0

    @property
    def tickets_remaining(self):
        if self.capacity is None:
            return None
        return max(self.capacity - self.tickets_issued, 0)

    def summary(self) -> dict:
        """Plain-data view handed to the notification dispatcher."""
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date.isoformat() if self.date else None,
            "location": "Online" if self.is_online else (self.location or "TBA"),
        }

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, issued={self.tickets_issued}/{self.capacity})>"
