"""
Admission verifier: consumes a scanned ticket at the door.

The QR code on a ticket encodes ``"<event_id>-<ticket_id>"``. Ticket ids
are UUIDs and contain dashes themselves, so the payload is split on the
first dash only.

A ticket is consumed by one guarded UPDATE that only matches while its
status is still pending or paid. Two scanners racing on the same ticket
cannot both admit it: the second UPDATE matches nothing. A repeat scan is
reported as AlreadyCheckedInError rather than a silent success, so door
staff see reused tickets.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.errors import (
    AlreadyCheckedInError,
    AuthorizationError,
    DomainError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_checkin
from ticketing.db.base import MAX_ROW_ID
from ticketing.infrastructure import catalog_store
from ticketing.models.ticket import Ticket, TicketStatus
from ticketing.models.user import User, UserRole

logger = get_logger(__name__)

SEPARATOR = "-"


@dataclass(frozen=True)
class ScanPayload:
    event_id: str
    ticket_id: str


def format_scan_payload(event_id, ticket_id: str) -> str:
    return f"{event_id}{SEPARATOR}{ticket_id}"


def parse_scan_payload(payload) -> ScanPayload:
    """Split a scanned payload on its first separator; never raises anything but ValidationError."""
    if not isinstance(payload, str):
        raise ValidationError("Scan payload must be a string", code=ErrorCode.INVALID_PAYLOAD)

    event_part, separator, ticket_part = payload.strip().partition(SEPARATOR)
    if not separator or not event_part or not ticket_part:
        raise ValidationError(
            "Scan payload must look like <event_id>-<ticket_id>",
            code=ErrorCode.INVALID_PAYLOAD,
        )
    return ScanPayload(event_id=event_part, ticket_id=ticket_part)


def _event_id_from_payload(scan: ScanPayload) -> int:
    try:
        event_id = int(scan.event_id)
    except ValueError:
        event_id = 0
    if not 0 < event_id <= MAX_ROW_ID:
        raise ValidationError(
            f"Unknown event reference {scan.event_id!r}", code=ErrorCode.INVALID_PAYLOAD
        )
    return event_id


def can_check_in(user: User, organizer_id: int) -> bool:
    """Event owners and any organizer-role (staff) account may scan."""
    return user.role == UserRole.ORGANIZER.value or user.id == organizer_id


async def check_in(db: AsyncSession, *, event_id: int, ticket_id: str, requester: User) -> Ticket:
    """
    Mark a ticket as checked in, exactly once.

    Raises:
        NotFoundError: unknown event, or no such ticket in this event
        AuthorizationError: requester neither owns the event nor is an organizer
        AlreadyCheckedInError: the ticket was already consumed
    """
    try:
        ticket = await _check_in(db, event_id=event_id, ticket_id=ticket_id, requester=requester)
    except DomainError as e:
        record_checkin(e.code.value.lower())
        logger.warning(
            "checkin_rejected",
            event_id=event_id,
            ticket_id=ticket_id,
            requester_id=requester.id,
            reason=e.code.value,
        )
        raise

    record_checkin("admitted")
    logger.info("checkin_succeeded", event_id=event_id, ticket_id=ticket_id, requester_id=requester.id)
    return ticket


async def check_in_payload(db: AsyncSession, payload: str, requester: User) -> Ticket:
    try:
        scan = parse_scan_payload(payload)
        event_id = _event_id_from_payload(scan)
    except ValidationError as e:
        record_checkin(e.code.value.lower())
        logger.warning("checkin_rejected", requester_id=requester.id, reason=e.code.value)
        raise
    return await check_in(db, event_id=event_id, ticket_id=scan.ticket_id, requester=requester)


async def _check_in(db: AsyncSession, *, event_id: int, ticket_id: str, requester: User) -> Ticket:
    event = await catalog_store.find_event_by_id(db, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found", code=ErrorCode.EVENT_NOT_FOUND)

    if not can_check_in(requester, event.organizer_id):
        raise AuthorizationError("Only the event owner or an organizer can check guests in")

    moved = await catalog_store.conditional_set_ticket_status(
        db, event_id, ticket_id, TicketStatus.CHECKED_IN
    )
    if not moved:
        existing = await catalog_store.find_ticket(db, event_id, ticket_id)
        if existing is None:
            raise NotFoundError("Ticket not found for this event", code=ErrorCode.TICKET_NOT_FOUND)
        raise AlreadyCheckedInError(ticket_id)

    await db.commit()
    return await catalog_store.find_ticket(db, event_id, ticket_id)
