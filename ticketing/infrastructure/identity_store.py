"""
Identity store: the per-user joined and applied event sets.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.infrastructure.sql import insert_ignore
from ticketing.models.user import user_applied_events, user_joined_events


async def add_joined_event(db: AsyncSession, user_id: int, event_id: int) -> bool:
    """Set-add; returns False when the user had already joined."""
    result = await db.execute(
        insert_ignore(db, user_joined_events, user_id=user_id, event_id=event_id)
    )
    return result.rowcount == 1


async def add_applied_event(db: AsyncSession, user_id: int, event_id: int) -> bool:
    result = await db.execute(
        insert_ignore(db, user_applied_events, user_id=user_id, event_id=event_id)
    )
    return result.rowcount == 1


async def list_joined_event_ids(db: AsyncSession, user_id: int) -> list[int]:
    result = await db.execute(
        select(user_joined_events.c.event_id)
        .where(user_joined_events.c.user_id == user_id)
        .order_by(user_joined_events.c.event_id)
    )
    return list(result.scalars().all())


async def list_applied_event_ids(db: AsyncSession, user_id: int) -> list[int]:
    result = await db.execute(
        select(user_applied_events.c.event_id)
        .where(user_applied_events.c.user_id == user_id)
        .order_by(user_applied_events.c.event_id)
    )
    return list(result.scalars().all())


async def remove_event_from_all_users(db: AsyncSession, event_id: int) -> int:
    """Drop ``event_id`` from every user's joined and applied sets."""
    joined = await db.execute(
        delete(user_joined_events).where(user_joined_events.c.event_id == event_id)
    )
    await db.execute(
        delete(user_applied_events).where(user_applied_events.c.event_id == event_id)
    )
    return joined.rowcount
