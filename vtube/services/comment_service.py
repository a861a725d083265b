"""
Comment service layer - Business logic for video comments
"""

from typing import Optional, Dict, Any
from uuid import UUID

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from vtube.core.exceptions import NotFoundError, PermissionDeniedError
from vtube.models.user import User
from vtube.models.video import Video
from vtube.models.video_engagement import VideoComment
from vtube.schemas.video import CommentCreate, CommentUpdate
from vtube.services.projections import comment_preview

logger = structlog.get_logger()


class CommentService:
    """Service for comment operations"""

    @staticmethod
    async def _authored_comment(db: AsyncSession, comment_id: UUID, user_id: UUID, operation: str) -> VideoComment:
        comment = await db.get(VideoComment, comment_id)
        if comment is None:
            raise NotFoundError("comment", comment_id)
        if comment.user_id != user_id:
            raise PermissionDeniedError(operation, "comment")
        return comment

    @staticmethod
    async def add_comment(
        db: AsyncSession,
        video_id: UUID,
        comment_data: CommentCreate,
        user_id: UUID
    ) -> VideoComment:
        """
        Add a comment to a video
        """
        video_found = await db.scalar(select(Video.id).where(Video.id == video_id))
        if video_found is None:
            raise NotFoundError("video", video_id)

        comment = VideoComment(
            video_id=video_id,
            user_id=user_id,
            content=comment_data.content
        )
        db.add(comment)
        await db.commit()
        await db.refresh(comment)

        logger.info("Comment added", comment_id=str(comment.id), video_id=str(video_id))
        return comment

    @staticmethod
    async def edit_comment(
        db: AsyncSession,
        comment_id: UUID,
        comment_data: CommentUpdate,
        user_id: UUID
    ) -> VideoComment:
        """
        Edit a comment (author only)
        """
        comment = await CommentService._authored_comment(db, comment_id, user_id, "edit")

        comment.content = comment_data.content
        comment.is_edited = True
        await db.commit()
        await db.refresh(comment)

        return comment

    @staticmethod
    async def delete_comment(db: AsyncSession, comment_id: UUID, user_id: UUID) -> VideoComment:
        comment = await CommentService._authored_comment(db, comment_id, user_id, "delete")

        await db.delete(comment)
        await db.commit()

        logger.info("Comment deleted", comment_id=str(comment_id))
        return comment

    @staticmethod
    async def list_comments(
        db: AsyncSession,
        video_id: UUID,
        page: int = 1,
        limit: int = 10,
        order: Optional[str] = "newest"
    ) -> Dict[str, Any]:
        """
        Comments on a video with their authors, paginated
        """
        video_found = await db.scalar(select(Video.id).where(Video.id == video_id))
        if video_found is None:
            raise NotFoundError("video", video_id)

        total = await db.scalar(
            select(func.count(VideoComment.id)).where(VideoComment.video_id == video_id)
        )

        ordering = VideoComment.created_at.asc() if order == "oldest" else VideoComment.created_at.desc()
        result = await db.execute(
            select(VideoComment, User)
            .outerjoin(User, User.id == VideoComment.user_id)
            .where(VideoComment.video_id == video_id)
            .order_by(ordering, VideoComment.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )

        total = total or 0
        return {
            "comments": [comment_preview(comment, author) for comment, author in result.all()],
            "totalComments": total,
            "totalPages": (total + limit - 1) // limit if limit else 0,
            "page": page,
            "limit": limit,
        }
