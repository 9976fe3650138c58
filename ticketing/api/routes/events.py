"""
Event endpoints with Redis caching on list operations.
"""

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.db.base import MAX_ROW_ID
from ticketing.db.session import get_db
from ticketing.models.user import User, UserRole
from ticketing.schemas.event import EventCreate, EventResponse, EventListResponse
from ticketing.schemas.ticket import TicketResponse
from ticketing.services.event_service import create_event, get_event, list_events, delete_event, list_attendees
from ticketing.services.cache_service import get_cached_events, set_cached_events, invalidate_event_cache
from ticketing.core.security import get_current_user, require_roles
from ticketing.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    organizer: User = Depends(require_roles(UserRole.ORGANIZER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new event. Organizers only."""
    event = await create_event(db, event_data, organizer)
    await invalidate_event_cache()
    return event


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    upcoming_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with pagination.
    Cached in Redis; invalidated when events change or tickets are issued.
    """
    cached = await get_cached_events(page, page_size, upcoming_only)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, page, page_size, upcoming_only)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }

    await set_cached_events(page, page_size, upcoming_only, response_data)

    return EventListResponse(**response_data)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: int = Path(gt=0, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_db),
):
    """Get a single event by ID. Not cached (live ticket counts)."""
    return await get_event(db, event_id)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_endpoint(
    event_id: int = Path(gt=0, le=MAX_ROW_ID),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event. Owner only; removes it from every attendee's list."""
    await delete_event(db, event_id, user)
    await invalidate_event_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/attendees", response_model=list[TicketResponse])
async def list_attendees_endpoint(
    event_id: int = Path(gt=0, le=MAX_ROW_ID),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Guest list used by the door scanner."""
    return await list_attendees(db, event_id, user)
