"""
Pydantic schemas for comments and artist applications.
"""

from datetime import datetime
from pydantic import BaseModel, Field

from ticketing.schemas.ticket import RowId


class CommentCreate(BaseModel):
    event_id: RowId
    text: str = Field(..., min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    id: int
    event_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ApplyRequest(BaseModel):
    event_id: RowId
