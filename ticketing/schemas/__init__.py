from ticketing.schemas.user import UserCreate, UserResponse, UserLogin, ProfileResponse, Token
from ticketing.schemas.event import EventCreate, EventResponse, EventListResponse
from ticketing.schemas.ticket import (
    JoinRequest, CreateOrderRequest, OrderResponse, VerifyPaymentRequest,
    TicketResponse, IssueResponse, CheckInRequest, CheckInResponse,
)
from ticketing.schemas.comment import CommentCreate, CommentResponse, ApplyRequest

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "ProfileResponse", "Token",
    "EventCreate", "EventResponse", "EventListResponse",
    "JoinRequest", "CreateOrderRequest", "OrderResponse", "VerifyPaymentRequest",
    "TicketResponse", "IssueResponse", "CheckInRequest", "CheckInResponse",
    "CommentCreate", "CommentResponse", "ApplyRequest",
]
