"""
Comment and artist application endpoints.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.db.base import MAX_ROW_ID
from ticketing.db.session import get_db
from ticketing.models.user import User, UserRole
from ticketing.schemas.comment import CommentCreate, CommentResponse, ApplyRequest
from ticketing.services.community_service import add_comment, list_comments, delete_comment, apply_as_artist
from ticketing.core.security import get_current_user, require_roles

router = APIRouter(prefix="/events", tags=["Community"])


@router.post("/comment", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment_endpoint(
    body: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await add_comment(db, body.event_id, user, body.text)


@router.get("/{event_id}/comments", response_model=list[CommentResponse])
async def list_comments_endpoint(
    event_id: int = Path(gt=0, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_db),
):
    return await list_comments(db, event_id)


@router.delete("/{event_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment_endpoint(
    event_id: int = Path(gt=0, le=MAX_ROW_ID),
    comment_id: int = Path(gt=0, le=MAX_ROW_ID),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Authors only."""
    await delete_comment(db, event_id, comment_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/apply", status_code=status.HTTP_201_CREATED)
async def apply_endpoint(
    body: ApplyRequest,
    artist: User = Depends(require_roles(UserRole.ARTIST)),
    db: AsyncSession = Depends(get_db),
):
    """Apply to perform at an event that accepts artist applications."""
    await apply_as_artist(db, body.event_id, artist)
    return {"success": True, "message": "Application submitted"}
