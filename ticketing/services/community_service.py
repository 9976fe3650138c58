"""
Comments and artist applications on events.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.errors import AuthorizationError, ConflictError, ErrorCode, ValidationError
from ticketing.core.logging import get_logger
from ticketing.infrastructure import catalog_store, identity_store
from ticketing.models.comment import Comment
from ticketing.models.user import User
from ticketing.services.event_service import get_event

logger = get_logger(__name__)


async def add_comment(db: AsyncSession, event_id: int, author: User, text: str) -> Comment:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Comment text must not be empty")

    await get_event(db, event_id)
    comment = Comment(event_id=event_id, user_id=author.id, user_name=author.name, text=text)
    db.add(comment)
    await db.flush()
    await db.refresh(comment)

    logger.info("comment_added", event_id=event_id, comment_id=comment.id, user_id=author.id)
    return comment


async def list_comments(db: AsyncSession, event_id: int) -> list[Comment]:
    await get_event(db, event_id)
    result = await db.execute(
        select(Comment).where(Comment.event_id == event_id).order_by(Comment.created_at.asc())
    )
    return list(result.scalars().all())


async def delete_comment(db: AsyncSession, event_id: int, comment_id: int, author: User) -> None:
    """Authors delete their own comments; anything else matches nothing and is refused."""
    result = await db.execute(
        delete(Comment).where(
            Comment.id == comment_id,
            Comment.event_id == event_id,
            Comment.user_id == author.id,
        )
    )
    if result.rowcount != 1:
        raise AuthorizationError("Comment not found or not yours to delete")
    logger.info("comment_deleted", event_id=event_id, comment_id=comment_id, user_id=author.id)


async def apply_as_artist(db: AsyncSession, event_id: int, artist: User) -> None:
    event = await get_event(db, event_id)
    if not event.allow_artist_applications:
        raise ValidationError(
            "This event does not accept artist applications",
            code=ErrorCode.APPLICATIONS_CLOSED,
        )

    added = await catalog_store.add_artist_application(db, event_id, artist.id, artist.name)
    if not added:
        raise ConflictError("You have already applied to this event", code=ErrorCode.ALREADY_APPLIED)
    await identity_store.add_applied_event(db, artist.id, event_id)

    logger.info("artist_applied", event_id=event_id, artist_id=artist.id)
