"""
Video query service - read side
Runs the listing/detail queries and hands rows to the projections
"""

from typing import Optional, List, Dict, Any, Sequence
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from vtube.core.config import settings
from vtube.core.exceptions import NotFoundError
from vtube.models.user import User
from vtube.models.video import Video
from vtube.models.video_engagement import VideoReaction, VideoComment, LIKE, DISLIKE
from vtube.services.follow_service import FollowService
from vtube.services.projections import (
    owner_summary,
    video_card,
    video_detail,
    viewer_state,
    page_meta,
    group_comments,
)
from vtube.services.reaction_service import ReactionService
from vtube.services.watch_history_service import WatchHistoryService
from vtube.utils.validators import require_text


class VideoQueryService:
    """Service for video listings and details"""

    @staticmethod
    async def _reaction_counts(db: AsyncSession, video_ids: Sequence[UUID]) -> Dict[UUID, Dict[int, int]]:
        if not video_ids:
            return {}
        result = await db.execute(
            select(VideoReaction.video_id, VideoReaction.vote, func.count())
            .where(VideoReaction.video_id.in_(video_ids))
            .group_by(VideoReaction.video_id, VideoReaction.vote)
        )
        counts: Dict[UUID, Dict[int, int]] = {}
        for video_id, vote, count in result.all():
            counts.setdefault(video_id, {})[vote] = count
        return counts

    @staticmethod
    async def _comment_counts(db: AsyncSession, video_ids: Sequence[UUID]) -> Dict[UUID, int]:
        if not video_ids:
            return {}
        result = await db.execute(
            select(VideoComment.video_id, func.count(VideoComment.id))
            .where(VideoComment.video_id.in_(video_ids))
            .group_by(VideoComment.video_id)
        )
        return dict(result.all())

    @staticmethod
    async def _recent_comments(db: AsyncSession, video_ids: Sequence[UUID]) -> Dict[UUID, List[Dict[str, Any]]]:
        """Newest comments per video, capped at COMMENT_PREVIEW_LIMIT each"""
        if not video_ids:
            return {}
        limit = settings.COMMENT_PREVIEW_LIMIT
        ranked = (
            select(
                VideoComment.id.label("comment_id"),
                func.row_number().over(
                    partition_by=VideoComment.video_id,
                    order_by=(VideoComment.created_at.desc(), VideoComment.id)
                ).label("position")
            )
            .where(VideoComment.video_id.in_(video_ids))
            .subquery()
        )
        result = await db.execute(
            select(VideoComment, User)
            .join(ranked, ranked.c.comment_id == VideoComment.id)
            .outerjoin(User, User.id == VideoComment.user_id)
            .where(ranked.c.position <= limit)
            .order_by(VideoComment.video_id, ranked.c.position)
        )
        return group_comments(result.all(), limit)

    @staticmethod
    async def _cards(
        db: AsyncSession,
        rows: Sequence[Any],
        viewer_id: Optional[UUID] = None
    ) -> List[Dict[str, Any]]:
        """Project (video, owner) rows with their counts and comment previews"""
        video_ids = [video.id for video, _ in rows]
        reactions = await VideoQueryService._reaction_counts(db, video_ids)
        comment_counts = await VideoQueryService._comment_counts(db, video_ids)
        comments = await VideoQueryService._recent_comments(db, video_ids)

        cards = []
        for video, owner in rows:
            votes = reactions.get(video.id, {})
            cards.append(video_card(
                video,
                owner,
                likes=votes.get(LIKE, 0),
                dislikes=votes.get(DISLIKE, 0),
                comment_count=comment_counts.get(video.id, 0),
                comments=comments.get(video.id, []),
                viewer_id=viewer_id
            ))
        return cards

    @staticmethod
    async def _page(
        db: AsyncSession,
        where: Sequence[Any],
        page: int,
        limit: int,
        viewer_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        total = await db.scalar(select(func.count(Video.id)).where(*where))

        result = await db.execute(
            select(Video, User)
            .outerjoin(User, User.id == Video.owner_id)
            .where(*where)
            .order_by(Video.created_at.desc(), Video.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        cards = await VideoQueryService._cards(db, result.all(), viewer_id)

        return {"videos": cards, **page_meta(total or 0, page, limit)}

    @staticmethod
    async def list_videos(
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        viewer_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        """All videos, newest first"""
        return await VideoQueryService._page(db, [], page, limit, viewer_id)

    @staticmethod
    async def list_user_videos(
        db: AsyncSession,
        owner_id: UUID,
        page: int = 1,
        limit: int = 10,
        viewer_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        """One user's videos, newest first, with totals and an ownership flag"""
        owner = await db.get(User, owner_id)
        if owner is None:
            raise NotFoundError("user", owner_id)

        listing = await VideoQueryService._page(db, [Video.owner_id == owner_id], page, limit, viewer_id)
        listing["owner"] = owner_summary(owner)
        listing["isOwner"] = viewer_id is not None and viewer_id == owner_id
        return listing

    @staticmethod
    async def search_videos(
        db: AsyncSession,
        title: Optional[str],
        page: int = 1,
        limit: int = 10,
        viewer_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        """Case-insensitive title substring search"""
        term = require_text(title, "title")
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        where = [Video.title.ilike(f"%{escaped}%", escape="\\")]
        listing = await VideoQueryService._page(db, where, page, limit, viewer_id)
        listing["query"] = term
        return listing

    @staticmethod
    async def get_video_detail(
        db: AsyncSession,
        video_id: UUID,
        viewer_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        """
        Full view of a video

        Includes reaction counts, the caller's state, the owner's follower
        count and the most recent comments.
        """
        result = await db.execute(
            select(Video, User)
            .outerjoin(User, User.id == Video.owner_id)
            .where(Video.id == video_id)
            .execution_options(populate_existing=True)
        )
        row = result.first()
        if row is None:
            raise NotFoundError("video", video_id)
        video, owner = row

        reactions = await ReactionService.get_reaction_summary(db, video_id, viewer_id)
        comment_counts = await VideoQueryService._comment_counts(db, [video_id])
        comments = await VideoQueryService._recent_comments(db, [video_id])
        owner_followers = await FollowService.follower_count(db, video.owner_id)

        vote = None
        following_owner = False
        watched = False
        if viewer_id is not None:
            vote = LIKE if reactions.is_liked else DISLIKE if reactions.is_disliked else None
            if viewer_id != video.owner_id:
                following_owner = await FollowService.is_following(db, viewer_id, video.owner_id)
            watched = await WatchHistoryService.has_watched(db, viewer_id, video_id)

        return video_detail(
            video,
            owner,
            likes=reactions.likes,
            dislikes=reactions.dislikes,
            comment_count=comment_counts.get(video_id, 0),
            comments=comments.get(video_id, []),
            state=viewer_state(viewer_id, video.owner_id, vote, following_owner, watched),
            owner_followers=owner_followers
        )
