"""
Catalog store: event rows and the records they own.

Every write here is a single guarded statement. Callers never read a row,
decide in Python and write it back; the WHERE clause carries the decision so
two requests racing on the same event are serialized by the database.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import and_, delete, exists, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.infrastructure.sql import insert_ignore
from ticketing.models.comment import ArtistApplication, Comment
from ticketing.models.event import Event
from ticketing.models.payment_order import OrderStatus, PaymentOrder
from ticketing.models.ticket import Ticket, TicketStatus


@dataclass(frozen=True)
class AppendPredicate:
    """Conditions the event row must satisfy for tickets to be appended."""

    quantity: int
    requester_id: int


async def find_event_by_id(db: AsyncSession, event_id: int) -> Optional[Event]:
    # populate_existing: guarded UPDATEs bypass the identity map
    result = await db.execute(
        select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def conditional_append_tickets(
    db: AsyncSession,
    event_id: int,
    predicate: AppendPredicate,
    tickets: Sequence[Ticket],
) -> bool:
    """
    Reserve room for ``tickets`` on the event and stage them for insert.

    The reservation is one UPDATE guarded by capacity and ownership; the
    ticket rows are added to the same transaction, so they either commit
    together with the counter bump or not at all. Returns False (and stages
    nothing) when the guard did not match.
    """
    result = await db.execute(
        update(Event)
        .where(
            Event.id == event_id,
            Event.organizer_id != predicate.requester_id,
            or_(
                Event.capacity.is_(None),
                Event.tickets_issued + predicate.quantity <= Event.capacity,
            ),
        )
        .values(tickets_issued=Event.tickets_issued + predicate.quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False

    db.add_all(tickets)
    await db.flush()
    return True


async def conditional_set_ticket_status(
    db: AsyncSession,
    event_id: int,
    ticket_id: str,
    new_status: TicketStatus,
) -> bool:
    """Move a ticket forward to ``new_status``; False if no ticket moved."""
    if new_status is not TicketStatus.CHECKED_IN:
        raise ValueError(f"Tickets can only move forward to {TicketStatus.CHECKED_IN.value}")

    result = await db.execute(
        update(Ticket)
        .where(
            Ticket.id == ticket_id,
            Ticket.event_id == event_id,
            Ticket.status.in_([TicketStatus.PENDING.value, TicketStatus.PAID.value]),
        )
        .values(status=new_status.value, checked_in_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def find_ticket(db: AsyncSession, event_id: int, ticket_id: str) -> Optional[Ticket]:
    result = await db.execute(
        select(Ticket)
        .where(Ticket.id == ticket_id, Ticket.event_id == event_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def has_free_ticket(db: AsyncSession, event_id: int, user_id: int) -> bool:
    result = await db.execute(
        select(
            exists().where(
                Ticket.event_id == event_id,
                Ticket.user_id == user_id,
                Ticket.payment_id.is_(None),
            )
        )
    )
    return bool(result.scalar())


async def list_event_tickets(db: AsyncSession, event_id: int) -> list[Ticket]:
    result = await db.execute(
        select(Ticket).where(Ticket.event_id == event_id).order_by(Ticket.created_at.asc())
    )
    return list(result.scalars().all())


async def list_user_tickets(db: AsyncSession, user_id: int) -> list[Ticket]:
    result = await db.execute(
        select(Ticket).where(Ticket.user_id == user_id).order_by(Ticket.created_at.desc())
    )
    return list(result.scalars().all())


async def claim_payment_order(
    db: AsyncSession,
    order_id: str,
    *,
    event_id: int,
    user_id: int,
    quantity: int,
    payment_id: str,
) -> bool:
    """Mark an order paid, only if it is still unclaimed and matches the request."""
    result = await db.execute(
        update(PaymentOrder)
        .where(
            PaymentOrder.id == order_id,
            PaymentOrder.event_id == event_id,
            PaymentOrder.user_id == user_id,
            PaymentOrder.quantity == quantity,
            PaymentOrder.status == OrderStatus.CREATED.value,
        )
        .values(status=OrderStatus.PAID.value, payment_id=payment_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def add_artist_application(
    db: AsyncSession, event_id: int, artist_id: int, artist_name: str
) -> bool:
    """Insert an application; False if this artist already applied."""
    result = await db.execute(
        insert_ignore(
            db,
            ArtistApplication.__table__,
            event_id=event_id,
            artist_id=artist_id,
            artist_name=artist_name,
            status="pending",
        )
    )
    return result.rowcount == 1


async def lock_owned_event(db: AsyncSession, event_id: int, owner_id: int) -> bool:
    """Row-lock an event owned by ``owner_id`` until the transaction ends; False if none."""
    result = await db.execute(
        select(Event.id)
        .where(and_(Event.id == event_id, Event.organizer_id == owner_id))
        .with_for_update()
    )
    return result.scalar_one_or_none() is not None


async def delete_event_cascade(db: AsyncSession, event_id: int, owner_id: int) -> bool:
    """
    Delete an event and everything it owns; False if not owned by ``owner_id``.

    Call after lock_owned_event so no ticket can be appended between the
    ticket delete and the event delete.
    """
    await db.execute(delete(Ticket).where(Ticket.event_id == event_id))
    await db.execute(delete(PaymentOrder).where(PaymentOrder.event_id == event_id))
    await db.execute(delete(Comment).where(Comment.event_id == event_id))
    await db.execute(delete(ArtistApplication).where(ArtistApplication.event_id == event_id))
    result = await db.execute(
        delete(Event).where(Event.id == event_id, Event.organizer_id == owner_id)
    )
    return result.rowcount == 1
