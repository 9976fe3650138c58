"""
Pydantic schemas for ticket issuance, payment and check-in.
"""

from datetime import datetime
from typing import Annotated, Optional
from pydantic import BaseModel, Field, model_validator

from ticketing.db.base import MAX_ROW_ID

RowId = Annotated[int, Field(gt=0, le=MAX_ROW_ID)]


class JoinRequest(BaseModel):
    event_id: RowId


class CreateOrderRequest(BaseModel):
    event_id: RowId
    quantity: int = Field(default=1, ge=1, le=10)


class OrderResponse(BaseModel):
    order_id: str
    event_id: int
    quantity: int
    amount: int
    currency: str
    key_id: str


class VerifyPaymentRequest(BaseModel):
    event_id: RowId
    quantity: int = Field(default=1, ge=1, le=10)
    order_id: str = Field(..., min_length=1, max_length=64)
    payment_id: str = Field(..., min_length=1, max_length=64)
    signature: str = Field(..., min_length=1, max_length=128)


class TicketResponse(BaseModel):
    id: str
    event_id: int
    user_id: int
    holder_name: str
    status: str
    payment_id: Optional[str]
    scan_payload: str
    created_at: datetime
    checked_in_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class IssueResponse(BaseModel):
    message: str
    event_id: int
    tickets: list[TicketResponse]


class CheckInRequest(BaseModel):
    """Either the raw scanned string or the two ids it encodes."""

    payload: Optional[str] = None
    event_id: Optional[RowId] = None
    ticket_id: Optional[str] = None

    @model_validator(mode="after")
    def payload_or_ids(self):
        if self.payload is None and (self.event_id is None or not self.ticket_id):
            raise ValueError("Provide a scanned payload or both event_id and ticket_id")
        return self


class CheckInResponse(BaseModel):
    message: str
    ticket: TicketResponse
