"""
Ticket endpoints: free join, paid checkout, and door check-in.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.db.session import get_db
from ticketing.models.user import User, UserRole
from ticketing.schemas.ticket import (
    JoinRequest, CreateOrderRequest, OrderResponse, VerifyPaymentRequest,
    TicketResponse, IssueResponse, CheckInRequest, CheckInResponse,
)
from ticketing.services.checkin_service import check_in, check_in_payload
from ticketing.services.gateway_factory import get_gateway
from ticketing.services.interfaces.payment_gateway import PaymentGateway
from ticketing.services.notification_service import NotificationDispatcher, get_dispatcher
from ticketing.services.payment_proof import PaymentProof
from ticketing.services.payment_service import create_order
from ticketing.services.ticket_service import issue_tickets, list_user_tickets
from ticketing.services.cache_service import invalidate_event_cache
from ticketing.core.security import get_current_user, require_roles

router = APIRouter(prefix="/events", tags=["Tickets"])
tickets_router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.post("/join", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def join_event(
    body: JoinRequest,
    fan: User = Depends(require_roles(UserRole.FAN)),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    db: AsyncSession = Depends(get_db),
):
    """
    Take a free ticket.

    One ticket per fan per free event. Paid events must go through
    create-order / verify-payment instead.
    """
    tickets = await issue_tickets(
        db,
        event_id=body.event_id,
        user_id=fan.id,
        holder_name=fan.name,
        quantity=1,
        recipient=fan.email,
        dispatcher=dispatcher,
    )
    await invalidate_event_cache()
    return IssueResponse(
        message="Successfully joined!",
        event_id=body.event_id,
        tickets=[TicketResponse.model_validate(t) for t in tickets],
    )


@router.post("/create-order", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order_endpoint(
    body: CreateOrderRequest,
    fan: User = Depends(require_roles(UserRole.FAN)),
    gateway: PaymentGateway = Depends(get_gateway),
    db: AsyncSession = Depends(get_db),
):
    """Open a gateway order for ``quantity`` tickets; returns what checkout needs."""
    order = await create_order(db, gateway, event_id=body.event_id, user=fan, quantity=body.quantity)
    return OrderResponse(
        order_id=order.id,
        event_id=order.event_id,
        quantity=order.quantity,
        amount=order.amount,
        currency=order.currency,
        key_id=gateway.key_id,
    )


@router.post("/verify-payment", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def verify_payment_endpoint(
    body: VerifyPaymentRequest,
    fan: User = Depends(require_roles(UserRole.FAN)),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm a gateway payment and issue the paid tickets.

    The signature is checked locally against the key secret; the order is
    consumed in the same transaction as the tickets are created.
    """
    tickets = await issue_tickets(
        db,
        event_id=body.event_id,
        user_id=fan.id,
        holder_name=fan.name,
        quantity=body.quantity,
        proof=PaymentProof(
            order_id=body.order_id,
            payment_id=body.payment_id,
            signature=body.signature,
        ),
        recipient=fan.email,
        dispatcher=dispatcher,
    )
    await invalidate_event_cache()
    return IssueResponse(
        message="Payment verified, tickets issued",
        event_id=body.event_id,
        tickets=[TicketResponse.model_validate(t) for t in tickets],
    )


@router.post("/checkin", response_model=CheckInResponse)
async def checkin_endpoint(
    body: CheckInRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Consume a scanned ticket. Event owner or any organizer."""
    if body.payload is not None:
        ticket = await check_in_payload(db, body.payload, user)
    else:
        ticket = await check_in(db, event_id=body.event_id, ticket_id=body.ticket_id, requester=user)
    return CheckInResponse(message="Check-in successful", ticket=TicketResponse.model_validate(ticket))


@tickets_router.get("/", response_model=list[TicketResponse])
async def my_tickets(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All tickets held by the caller, newest first."""
    return await list_user_tickets(db, user.id)
