"""
Video service layer - write side
Upload, edit and delete videos together with their stored media
"""

from typing import Optional
from uuid import UUID

import structlog
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vtube.core.config import settings
from vtube.core.exceptions import (
    ValidationError,
    NotFoundError,
    PermissionDeniedError,
)
from vtube.models.video import Video
from vtube.services.media_store import MediaStore
from vtube.utils.validators import require_text

logger = structlog.get_logger()


class VideoService:
    """Service for video write operations"""

    @staticmethod
    async def _owned_video(db: AsyncSession, video_id: UUID, owner_id: UUID, operation: str) -> Video:
        video = await db.get(Video, video_id)
        if video is None:
            raise NotFoundError("video", video_id)
        if video.owner_id != owner_id:
            raise PermissionDeniedError(operation, "video")
        return video

    @staticmethod
    async def upload_video(
        db: AsyncSession,
        media_store: MediaStore,
        owner_id: UUID,
        title: Optional[str],
        description: Optional[str],
        video_file: Optional[UploadFile],
        thumbnail_file: Optional[UploadFile]
    ) -> Video:
        """
        Store the media files and create the video row

        The thumbnail is only stored once the video passes the duration
        check. Stored media is removed again if the row cannot be created.
        """
        title = require_text(title, "title")
        description = require_text(description, "description")
        if video_file is None or not video_file.filename:
            raise ValidationError("Video file is required", field="video")
        if thumbnail_file is None or not thumbnail_file.filename:
            raise ValidationError("Thumbnail is required", field="thumbnail")

        stored_video = await media_store.store(video_file, "video")

        duration = stored_video.duration or 0
        if duration < settings.MIN_VIDEO_DURATION_SECONDS:
            await media_store.remove(stored_video.external_id, stored_video.kind)
            raise ValidationError(
                f"Video must be at least {settings.MIN_VIDEO_DURATION_SECONDS} seconds long",
                field="video",
                value=duration
            )

        try:
            stored_thumbnail = await media_store.store(thumbnail_file, "image")
        except Exception:
            await media_store.remove(stored_video.external_id, stored_video.kind)
            raise

        video = Video(
            title=title,
            description=description,
            thumbnail_url=stored_thumbnail.url,
            thumbnail_kind=stored_thumbnail.kind,
            thumbnail_external_id=stored_thumbnail.external_id,
            file_url=stored_video.url,
            file_kind=stored_video.kind,
            file_external_id=stored_video.external_id,
            duration=duration,
            views=0,
            owner_id=owner_id
        )
        db.add(video)
        try:
            await db.commit()
        except Exception:
            await db.rollback()
            await media_store.remove(stored_video.external_id, stored_video.kind)
            await media_store.remove(stored_thumbnail.external_id, stored_thumbnail.kind)
            raise

        logger.info("Video uploaded", video_id=str(video.id), owner_id=str(owner_id), duration=duration)
        return video

    @staticmethod
    async def update_video(
        db: AsyncSession,
        video_id: UUID,
        owner_id: UUID,
        title: Optional[str] = None,
        description: Optional[str] = None
    ) -> Video:
        """Change a video's title and/or description; owner only"""
        if title is None and description is None:
            raise ValidationError("Provide a title or a description to update")

        video = await VideoService._owned_video(db, video_id, owner_id, "update")

        if title is not None:
            video.title = require_text(title, "title")
        if description is not None:
            video.description = require_text(description, "description")

        await db.commit()
        await db.refresh(video)

        logger.info("Video updated", video_id=str(video_id))
        return video

    @staticmethod
    async def delete_video(
        db: AsyncSession,
        media_store: MediaStore,
        video_id: UUID,
        owner_id: UUID
    ) -> Video:
        """
        Delete a video, then its stored media

        The row deletion is committed first. Media removal afterwards is
        best-effort; leftover objects are only logged.
        """
        video = await VideoService._owned_video(db, video_id, owner_id, "delete")

        await db.delete(video)
        await db.commit()
        logger.info("Video deleted", video_id=str(video_id), owner_id=str(owner_id))

        await media_store.remove(video.file_external_id, video.file_kind)
        await media_store.remove(video.thumbnail_external_id, video.thumbnail_kind)
        return video
