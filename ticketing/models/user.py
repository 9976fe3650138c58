"""
User model and the per-user joined/applied event sets.

Key design decisions:
- `hashed_password` is nullable: accounts linked to a federated identity
  (`google_sub`) have no local credential
- Joined and applied events are association tables keyed on
  (user_id, event_id), so adding the same event twice is a no-op
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Table, CheckConstraint

from ticketing.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    FAN = "fan"
    ORGANIZER = "organizer"
    ARTIST = "artist"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.FAN.value)
    hashed_password = Column(String(255), nullable=True)
    google_sub = Column(String(255), unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('fan', 'organizer', 'artist')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


user_joined_events = Table(
    "user_joined_events",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("event_id", Integer, ForeignKey("events.id"), primary_key=True, index=True),
)

user_applied_events = Table(
    "user_applied_events",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("event_id", Integer, ForeignKey("events.id"), primary_key=True, index=True),
)
