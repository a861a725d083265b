"""
Watch history service layer
View classification, the view counter and history retention
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from uuid import UUID

import structlog
from sqlalchemy import select, update, delete, exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vtube.core.config import settings
from vtube.core.exceptions import ValidationError
from vtube.models.user import User
from vtube.models.video import Video
from vtube.models.watch_history import WatchHistoryEntry
from vtube.schemas.engagement import ViewResult
from vtube.services.projections import history_item
from vtube.utils.date_utils import utcnow, window_start

logger = structlog.get_logger()

DELETE_MODES = ("all", "one", "window", "24hours")


class WatchHistoryService:
    """Service for watch history operations"""

    @staticmethod
    def _cutoff(now: Optional[datetime]) -> datetime:
        return window_start(settings.WATCH_HISTORY_WINDOW_HOURS, now)

    @staticmethod
    async def record_view(
        db: AsyncSession,
        user_id: UUID,
        video_id: UUID,
        now: Optional[datetime] = None
    ) -> ViewResult:
        """
        Record that a user viewed a video

        A view is new when the user has no entry for the video inside the
        watch window. Only new views increment the video's counter. The video
        may have been deleted; the entry is still kept and the result reports
        that the counter was not incremented.
        """
        now = now or utcnow()
        cutoff = WatchHistoryService._cutoff(now)

        result = await db.execute(
            select(WatchHistoryEntry).where(
                WatchHistoryEntry.user_id == user_id,
                WatchHistoryEntry.video_id == video_id,
                WatchHistoryEntry.created_at >= cutoff
            )
        )
        entry = result.scalar_one_or_none()
        if entry is not None:
            logger.debug("View already counted", user_id=str(user_id), video_id=str(video_id))
            return ViewResult(video_id=video_id, entry_id=entry.id, is_new=False, counted=False)

        # Retention runs before insert so a stale entry for this pair is evicted
        await db.execute(
            delete(WatchHistoryEntry).where(
                WatchHistoryEntry.user_id == user_id,
                WatchHistoryEntry.created_at < cutoff
            ).execution_options(synchronize_session=False)
        )

        entry = WatchHistoryEntry(user_id=user_id, video_id=video_id, created_at=now)
        db.add(entry)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent request created the entry first
            await db.rollback()
            logger.info("Concurrent view classified as already counted", user_id=str(user_id), video_id=str(video_id))
            return ViewResult(video_id=video_id, is_new=False, counted=False)

        counter = await db.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(views=Video.views + 1)
            .execution_options(synchronize_session="evaluate")
        )
        counted = counter.rowcount > 0
        entry_id = entry.id
        await db.commit()

        if counted:
            logger.info("View recorded", user_id=str(user_id), video_id=str(video_id))
        else:
            logger.warning("View recorded for missing video", user_id=str(user_id), video_id=str(video_id))

        return ViewResult(video_id=video_id, entry_id=entry_id, is_new=True, counted=counted)

    @staticmethod
    async def get_recent_history(
        db: AsyncSession,
        user_id: UUID,
        now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """
        Entries inside the watch window, newest first, resolved to their videos

        Entries whose video no longer exists are left out.
        """
        cutoff = WatchHistoryService._cutoff(now)

        result = await db.execute(
            select(WatchHistoryEntry, Video, User)
            .join(Video, Video.id == WatchHistoryEntry.video_id)
            .outerjoin(User, User.id == Video.owner_id)
            .where(
                WatchHistoryEntry.user_id == user_id,
                WatchHistoryEntry.created_at >= cutoff
            )
            .order_by(WatchHistoryEntry.created_at.desc(), WatchHistoryEntry.id)
        )

        return [history_item(entry, video, owner) for entry, video, owner in result.all()]

    @staticmethod
    async def delete_history(
        db: AsyncSession,
        user_id: UUID,
        mode: str = "all",
        video_id: Optional[UUID] = None,
        now: Optional[datetime] = None
    ) -> int:
        """
        Delete a user's history

        Modes:
            all: every entry of the user
            one: the entry for ``video_id``
            window (or 24hours): entries inside the trailing watch window

        Returns:
            Number of entries removed
        """
        mode = (mode or "").strip().lower()
        if mode not in DELETE_MODES:
            raise ValidationError(
                f"Invalid mode '{mode}'. Use one of: all, one, window",
                field="mode",
                value=mode
            )

        stmt = delete(WatchHistoryEntry).where(WatchHistoryEntry.user_id == user_id)
        if mode == "one":
            if video_id is None:
                raise ValidationError("videoId is required when mode is 'one'", field="videoId")
            stmt = stmt.where(WatchHistoryEntry.video_id == video_id)
        elif mode in ("window", "24hours"):
            stmt = stmt.where(WatchHistoryEntry.created_at >= WatchHistoryService._cutoff(now))

        result = await db.execute(stmt.execution_options(synchronize_session=False))
        await db.commit()

        logger.info("Watch history deleted", user_id=str(user_id), mode=mode, removed=result.rowcount)
        return result.rowcount

    @staticmethod
    async def purge_expired(
        db: AsyncSession,
        user_id: Optional[UUID] = None,
        now: Optional[datetime] = None
    ) -> int:
        """Remove entries older than the watch window, for one user or everyone"""
        stmt = delete(WatchHistoryEntry).where(
            WatchHistoryEntry.created_at < WatchHistoryService._cutoff(now)
        )
        if user_id is not None:
            stmt = stmt.where(WatchHistoryEntry.user_id == user_id)

        result = await db.execute(stmt.execution_options(synchronize_session=False))
        await db.commit()

        logger.info("Expired watch history purged", user_id=str(user_id) if user_id else None, removed=result.rowcount)
        return result.rowcount

    @staticmethod
    async def has_watched(
        db: AsyncSession,
        user_id: UUID,
        video_id: UUID,
        now: Optional[datetime] = None
    ) -> bool:
        """Whether the user has an entry for the video inside the watch window"""
        result = await db.execute(
            select(
                exists().where(
                    WatchHistoryEntry.user_id == user_id,
                    WatchHistoryEntry.video_id == video_id,
                    WatchHistoryEntry.created_at >= WatchHistoryService._cutoff(now)
                )
            )
        )
        return bool(result.scalar())
