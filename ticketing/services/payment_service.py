"""
Checkout: pricing and gateway order creation for paid events.

Creating an order does not reserve capacity. The capacity check made here
is advisory (it keeps fans from paying for an event that is already sold
out); the binding decision is the guarded UPDATE in ticket issuance.
"""

from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.config import get_settings
from ticketing.core.errors import AuthorizationError, CapacityError, ErrorCode, NotFoundError, ValidationError
from ticketing.core.logging import get_logger
from ticketing.infrastructure import catalog_store
from ticketing.models.payment_order import OrderStatus, PaymentOrder
from ticketing.models.user import User
from ticketing.services.interfaces.payment_gateway import PaymentGateway
from ticketing.services.ticket_service import validate_quantity

logger = get_logger(__name__)
settings = get_settings()


def to_minor_units(price) -> int:
    return int((Decimal(price) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


async def create_order(
    db: AsyncSession,
    gateway: PaymentGateway,
    *,
    event_id: int,
    user: User,
    quantity: int,
) -> PaymentOrder:
    """Price ``quantity`` tickets, open a gateway order and remember what it was for."""
    validate_quantity(quantity)

    event = await catalog_store.find_event_by_id(db, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found", code=ErrorCode.EVENT_NOT_FOUND)
    if event.organizer_id == user.id:
        raise AuthorizationError("Organizers cannot buy tickets to their own event")
    if event.is_free:
        raise ValidationError("This event is free; join it directly", code=ErrorCode.EVENT_NOT_FREE)
    if event.capacity is not None and event.tickets_issued + quantity > event.capacity:
        raise CapacityError(
            f"Not enough tickets left. Requested: {quantity}, Available: {event.tickets_remaining}"
        )

    amount = to_minor_units(event.price) * quantity
    gateway_order = await gateway.create_order(
        amount=amount,
        currency=settings.PAYMENT_CURRENCY,
        receipt=f"evt{event.id}-usr{user.id}",
    )

    order = PaymentOrder(
        id=gateway_order.id,
        event_id=event.id,
        user_id=user.id,
        quantity=quantity,
        amount=gateway_order.amount,
        currency=gateway_order.currency,
        status=OrderStatus.CREATED.value,
    )
    db.add(order)
    await db.flush()

    logger.info(
        "payment_order_created",
        order_id=order.id,
        event_id=event.id,
        user_id=user.id,
        quantity=quantity,
        amount=order.amount,
    )
    return order
