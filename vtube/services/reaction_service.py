"""
Reaction service layer - like/dislike toggling
A user's reaction to a video is a single row, so the like and dislike sets never overlap
"""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy import select, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from vtube.core.exceptions import NotFoundError
from vtube.models.video import Video
from vtube.models.video_engagement import VideoReaction, LIKE, DISLIKE
from vtube.schemas.engagement import ReactionSummary
from vtube.utils.date_utils import utcnow

logger = structlog.get_logger()


def _insert_for(db: AsyncSession):
    """Dialect-specific insert construct supporting ON CONFLICT"""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Reaction upsert not supported on {dialect}")


class ReactionService:
    """Service for like/dislike operations"""

    @staticmethod
    async def _require_video(db: AsyncSession, video_id: UUID) -> None:
        video_found = await db.scalar(select(Video.id).where(Video.id == video_id))
        if video_found is None:
            raise NotFoundError("video", video_id)

    @staticmethod
    async def _toggle(db: AsyncSession, video_id: UUID, user_id: UUID, vote: int) -> ReactionSummary:
        await ReactionService._require_video(db, video_id)

        # Already in this set: leave it
        removed = await db.execute(
            delete(VideoReaction)
            .where(
                VideoReaction.user_id == user_id,
                VideoReaction.video_id == video_id,
                VideoReaction.vote == vote
            )
            .execution_options(synchronize_session=False)
        )

        if removed.rowcount == 0:
            # Join this set, leaving the opposite one in the same statement
            now = utcnow()
            insert = _insert_for(db)
            stmt = insert(VideoReaction.__table__).values(
                user_id=user_id,
                video_id=video_id,
                vote=vote,
                created_at=now,
                updated_at=now
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "video_id"],
                set_={"vote": vote, "updated_at": now}
            )
            await db.execute(stmt)

        await db.commit()

        summary = await ReactionService.get_reaction_summary(db, video_id, user_id)
        logger.info(
            "Reaction toggled",
            video_id=str(video_id),
            user_id=str(user_id),
            vote=vote,
            removed=removed.rowcount > 0,
            likes=summary.likes,
            dislikes=summary.dislikes
        )
        return summary

    @staticmethod
    async def toggle_like(db: AsyncSession, video_id: UUID, user_id: UUID) -> ReactionSummary:
        """Add the user to the like set, or remove them if already there"""
        return await ReactionService._toggle(db, video_id, user_id, LIKE)

    @staticmethod
    async def toggle_dislike(db: AsyncSession, video_id: UUID, user_id: UUID) -> ReactionSummary:
        """Add the user to the dislike set, or remove them if already there"""
        return await ReactionService._toggle(db, video_id, user_id, DISLIKE)

    @staticmethod
    async def get_reaction_summary(
        db: AsyncSession,
        video_id: UUID,
        user_id: Optional[UUID] = None,
        require_video: bool = False
    ) -> ReactionSummary:
        """Like/dislike counts for a video and the caller's current vote"""
        if require_video:
            await ReactionService._require_video(db, video_id)

        result = await db.execute(
            select(VideoReaction.vote, func.count())
            .where(VideoReaction.video_id == video_id)
            .group_by(VideoReaction.vote)
        )
        counts = dict(result.all())

        vote = None
        if user_id is not None:
            vote = await db.scalar(
                select(VideoReaction.vote).where(
                    VideoReaction.user_id == user_id,
                    VideoReaction.video_id == video_id
                )
            )

        return ReactionSummary(
            video_id=video_id,
            likes=counts.get(LIKE, 0),
            dislikes=counts.get(DISLIKE, 0),
            is_liked=vote == LIKE,
            is_disliked=vote == DISLIKE
        )
