"""
API endpoints for editing and deleting video comments
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vtube.core.deps import get_current_user
from vtube.core.responses import api_response
from vtube.db.database import get_db
from vtube.models.user import User
from vtube.schemas.video import CommentUpdate
from vtube.services.comment_service import CommentService
from vtube.services.projections import comment_preview
from vtube.utils.validators import parse_uuid

router = APIRouter()


@router.patch("/{comment_id}")
async def edit_comment(
    comment_id: str,
    payload: CommentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Edit a comment (author only)"""
    comment = await CommentService.edit_comment(
        db, parse_uuid(comment_id, "commentId"), payload, current_user.id
    )
    return api_response(comment_preview(comment, current_user), "Comment updated successfully")


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a comment (author only)"""
    comment = await CommentService.delete_comment(
        db, parse_uuid(comment_id, "commentId"), current_user.id
    )
    return api_response({"id": comment.id}, "Comment deleted successfully")
