from ticketing.models.user import User, UserRole, user_joined_events, user_applied_events
from ticketing.models.event import Event
from ticketing.models.payment_order import PaymentOrder, OrderStatus
from ticketing.models.ticket import Ticket, TicketStatus
from ticketing.models.comment import Comment, ArtistApplication

__all__ = [
    "User", "UserRole", "user_joined_events", "user_applied_events",
    "Event", "PaymentOrder", "OrderStatus", "Ticket", "TicketStatus",
    "Comment", "ArtistApplication",
]
