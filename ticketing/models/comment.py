"""
Comments and artist applications owned by an event.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint

from ticketing.db.base import Base, TimestampMixin


class Comment(Base, TimestampMixin):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    user_name = Column(String(100), nullable=False)
    text = Column(String(1000), nullable=False)


class ArtistApplication(Base, TimestampMixin):
    __tablename__ = "artist_applications"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    artist_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    artist_name = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="pending")

    __table_args__ = (
        UniqueConstraint("event_id", "artist_id", name="uq_artist_application"),
    )
