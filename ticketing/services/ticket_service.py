"""
Ticket issuance.

CONCURRENCY STRATEGY: Guarded single-row UPDATE
===============================================

Problem:
  Two fans try to take the last ticket at the same time.
  Both read tickets_issued=99 of capacity 100, both insert a ticket.
  Result: 101 tickets for 100 places.

Solution:
  The capacity decision is made by the database, not by Python:

  1. UPDATE events SET tickets_issued = tickets_issued + :qty
     WHERE id = :event_id
       AND organizer_id != :user_id
       AND (capacity IS NULL OR tickets_issued + :qty <= capacity)
  2. rowcount == 0 -> the event cannot take :qty more tickets, stop
  3. INSERT the ticket rows in the same transaction and commit

  Concurrent UPDATEs on one event row are serialized by the row lock, and
  the loser re-evaluates the WHERE clause against the committed count, so
  the guard can never be passed on stale data. The CHECK constraint
  `tickets_issued <= capacity` backs this up at the schema level.

  Paid tickets additionally claim their payment order (created -> paid)
  inside the same transaction, so one payment mints tickets at most once.
  Free tickets are limited to one per (event, user) by a partial unique
  index; losing that race surfaces as a ConflictError.

  Notification happens after commit and is never awaited.
"""

import time
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.config import get_settings
from ticketing.core.errors import (
    AuthorizationError,
    CapacityError,
    ConflictError,
    DomainError,
    ErrorCode,
    NotFoundError,
    PaymentError,
    ValidationError,
)
from ticketing.core.logging import get_logger
from ticketing.core.metrics import issuance_latency, record_issuance
from ticketing.infrastructure import catalog_store, identity_store
from ticketing.infrastructure.catalog_store import AppendPredicate
from ticketing.models.ticket import Ticket, TicketStatus, new_ticket_id
from ticketing.services.notification_service import NotificationDispatcher
from ticketing.services.payment_proof import PaymentProof, verify_payment_signature

logger = get_logger(__name__)
settings = get_settings()


def validate_quantity(quantity: int, maximum: Optional[int] = None) -> None:
    maximum = maximum or settings.MAX_TICKETS_PER_ORDER
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= maximum:
        raise ValidationError(
            f"Quantity must be between 1 and {maximum}",
            code=ErrorCode.INVALID_QUANTITY,
        )


async def issue_tickets(
    db: AsyncSession,
    *,
    event_id: int,
    user_id: int,
    holder_name: str,
    quantity: int = 1,
    proof: Optional[PaymentProof] = None,
    recipient: Optional[str] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> list[Ticket]:
    """
    Issue ``quantity`` tickets for ``event_id`` to ``user_id``.

    Free events issue one `pending` ticket per attendee and ignore any proof.
    Paid events require a valid ``proof`` for an unclaimed order matching
    this user, event and quantity, and issue `paid` tickets.

    Raises:
        ValidationError: quantity out of range, or more than one free ticket
        NotFoundError: event does not exist
        AuthorizationError: the organizer tried to join their own event
        PaymentError: proof missing, signature invalid, or order unusable
        CapacityError: the event cannot take ``quantity`` more tickets
        ConflictError: a concurrent request already took the free ticket
    """
    start = time.perf_counter()
    try:
        tickets, event = await _issue(
            db,
            event_id=event_id,
            user_id=user_id,
            holder_name=holder_name,
            quantity=quantity,
            proof=proof,
        )
    except DomainError as e:
        record_issuance(e.code.value.lower())
        logger.warning(
            "issuance_rejected",
            event_id=event_id,
            user_id=user_id,
            quantity=quantity,
            reason=e.code.value,
        )
        raise
    finally:
        issuance_latency.observe(time.perf_counter() - start)

    kind = "free" if event.is_free else "paid"
    record_issuance("issued", kind=kind, count=len(tickets))
    logger.info(
        "tickets_issued",
        event_id=event_id,
        user_id=user_id,
        kind=kind,
        ticket_ids=[t.id for t in tickets],
    )

    if dispatcher is not None:
        dispatcher.dispatch(tickets, recipient, event.summary())
    return tickets


async def _issue(
    db: AsyncSession,
    *,
    event_id: int,
    user_id: int,
    holder_name: str,
    quantity: int,
    proof: Optional[PaymentProof],
):
    validate_quantity(quantity)

    event = await catalog_store.find_event_by_id(db, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found", code=ErrorCode.EVENT_NOT_FOUND)

    # Ownership never changes, so this read cannot go stale; the UPDATE
    # guard repeats the check anyway
    if event.organizer_id == user_id:
        raise AuthorizationError("Organizers cannot take tickets to their own event")

    is_free = event.is_free
    order_id = payment_id = None
    if is_free:
        if quantity != 1:
            raise ValidationError(
                "Free events issue one ticket per attendee",
                code=ErrorCode.INVALID_QUANTITY,
            )
        if await catalog_store.has_free_ticket(db, event_id, user_id):
            raise ConflictError("You have already joined this event", code=ErrorCode.ALREADY_JOINED)
        status = TicketStatus.PENDING
    else:
        if proof is None:
            raise PaymentError("This event requires payment", code=ErrorCode.PAYMENT_REQUIRED)
        verify_payment_signature(proof, settings.PAYMENT_KEY_SECRET)

        claimed = await catalog_store.claim_payment_order(
            db,
            proof.order_id,
            event_id=event_id,
            user_id=user_id,
            quantity=quantity,
            payment_id=proof.payment_id,
        )
        if not claimed:
            await db.rollback()
            raise PaymentError(
                "Payment order not found, already used, or does not match this request",
                code=ErrorCode.ORDER_NOT_FOUND,
                status_code=409,
            )
        order_id, payment_id = proof.order_id, proof.payment_id
        status = TicketStatus.PAID

    tickets = [
        Ticket(
            id=new_ticket_id(),
            event_id=event_id,
            user_id=user_id,
            holder_name=holder_name,
            status=status.value,
            order_id=order_id,
            payment_id=payment_id,
        )
        for _ in range(quantity)
    ]

    try:
        appended = await catalog_store.conditional_append_tickets(
            db, event_id, AppendPredicate(quantity=quantity, requester_id=user_id), tickets
        )
    except IntegrityError:
        await db.rollback()
        code = ErrorCode.ALREADY_JOINED if is_free else ErrorCode.CONFLICT
        raise ConflictError("Tickets could not be issued, please try again", code=code)

    if not appended:
        await db.rollback()
        raise CapacityError(f"Not enough tickets left for event {event_id}")

    await identity_store.add_joined_event(db, user_id, event_id)
    await db.commit()
    return tickets, event


async def list_user_tickets(db: AsyncSession, user_id: int) -> list[Ticket]:
    return await catalog_store.list_user_tickets(db, user_id)
