"""
Event service handling CRUD operations.
"""

from datetime import datetime, timezone
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.errors import AuthorizationError, ErrorCode, NotFoundError, ValidationError
from ticketing.infrastructure import catalog_store, identity_store
from ticketing.models.event import Event
from ticketing.models.ticket import Ticket
from ticketing.models.user import User, UserRole
from ticketing.schemas.event import EventCreate
from ticketing.core.logging import get_logger

logger = get_logger(__name__)


async def create_event(db: AsyncSession, event_data: EventCreate, organizer: User) -> Event:
    """Create a new event owned by ``organizer``; nothing issued yet."""
    if event_data.date <= datetime.now(timezone.utc):
        raise ValidationError("Event date must be in the future")

    event = Event(
        title=event_data.title,
        description=event_data.description,
        date=event_data.date,
        location=event_data.location,
        is_online=event_data.is_online,
        category=event_data.category,
        price=event_data.price,
        capacity=event_data.capacity,
        tickets_issued=0,
        allow_artist_applications=event_data.allow_artist_applications,
        organizer_id=organizer.id,
        organizer_name=organizer.name,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info(
        "event_created",
        event_id=event.id,
        title=event.title,
        capacity=event.capacity,
        price=str(event.price),
    )
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    event = await catalog_store.find_event_by_id(db, event_id)
    if not event:
        raise NotFoundError(f"Event {event_id} not found", code=ErrorCode.EVENT_NOT_FOUND)
    return event


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    upcoming_only: bool = True,
) -> tuple[list[Event], int]:
    """
    List events with pagination.
    Uses the ix_events_date index for efficient date filtering.
    """
    query = select(Event)

    if upcoming_only:
        query = query.where(Event.date >= datetime.now(timezone.utc))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.date.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total


async def delete_event(db: AsyncSession, event_id: int, requester: User) -> None:
    """
    Delete an event and everything it owns.
    Only the owning organizer may delete; every user's joined/applied
    references to the event go with it.
    """
    event = await get_event(db, event_id)
    if event.organizer_id != requester.id:
        raise AuthorizationError("Only the event owner can delete it")

    if not await catalog_store.lock_owned_event(db, event_id, requester.id):
        raise NotFoundError(f"Event {event_id} not found", code=ErrorCode.EVENT_NOT_FOUND)

    unlinked = await identity_store.remove_event_from_all_users(db, event_id)
    deleted = await catalog_store.delete_event_cascade(db, event_id, requester.id)
    if not deleted:
        await db.rollback()
        raise NotFoundError(f"Event {event_id} not found", code=ErrorCode.EVENT_NOT_FOUND)

    logger.info("event_deleted", event_id=event_id, users_unlinked=unlinked)


async def list_attendees(db: AsyncSession, event_id: int, requester: User) -> list[Ticket]:
    """Guest list for the door: the owner or any organizer may read it."""
    event = await get_event(db, event_id)
    if requester.role != UserRole.ORGANIZER.value and event.organizer_id != requester.id:
        raise AuthorizationError("Only the event owner or an organizer can view the guest list")
    return await catalog_store.list_event_tickets(db, event_id)
