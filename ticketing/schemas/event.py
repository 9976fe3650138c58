"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    date: datetime
    location: Optional[str] = Field(None, max_length=255)
    is_online: bool = False
    category: Optional[str] = Field(None, max_length=50)
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    # None means unlimited
    capacity: Optional[int] = Field(None, gt=0, le=1_000_000)
    allow_artist_applications: bool = False

    @field_validator("date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    date: datetime
    location: Optional[str]
    is_online: bool
    category: Optional[str]
    price: float
    capacity: Optional[int]
    tickets_issued: int
    tickets_remaining: Optional[int]
    allow_artist_applications: bool
    organizer_id: int
    organizer_name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
