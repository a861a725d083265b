"""
Media store adapter
Stores uploaded thumbnails and video files locally or in Cloudflare R2
"""

import asyncio
from pathlib import Path
from typing import Optional
from uuid import uuid4

import aiofiles
import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from pydantic import BaseModel

from vtube.core.config import settings
from vtube.core.exceptions import MediaSizeError, MediaTypeError, MediaUploadError
from vtube.utils.video_utils import get_video_duration

logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024


class MediaReference(BaseModel):
    """Where a stored object lives and what it is"""
    url: str
    external_id: str
    kind: str
    duration: Optional[int] = None


class MediaStore:
    """Uploads and removes media objects"""

    ALLOWED_IMAGE_TYPES = {
        "image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"
    }

    ALLOWED_VIDEO_TYPES = {
        "video/mp4", "video/webm", "video/ogg", "video/quicktime", "video/x-matroska"
    }

    EXTENSION_MAPPING = {
        "image/jpeg": ".jpg",
        "image/jpg": ".jpg",
        "image/png": ".png",
        "image/gif": ".gif",
        "image/webp": ".webp",
        "video/mp4": ".mp4",
        "video/webm": ".webm",
        "video/ogg": ".ogv",
        "video/quicktime": ".mov",
        "video/x-matroska": ".mkv",
    }

    def __init__(self, upload_dir: Optional[str] = None, use_r2: Optional[bool] = None):
        """
        Initialize the media store

        Args:
            upload_dir: Base directory for local storage and temp spooling
            use_r2: Force R2 on or off; defaults to USE_R2_STORAGE
        """
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.use_r2 = settings.USE_R2_STORAGE.lower() == "true" if use_r2 is None else use_r2
        self.r2_bucket = settings.R2_BUCKET_NAME
        self.r2_endpoint = settings.R2_ENDPOINT_URL
        self.r2_access_key = settings.R2_ACCESS_KEY_ID
        self.r2_secret_key = settings.R2_SECRET_ACCESS_KEY
        self.r2_public_url = settings.R2_PUBLIC_URL

    def _get_r2_client(self):
        """Initialize R2 client using boto3 S3-compatible API"""
        if not all([self.r2_endpoint, self.r2_access_key, self.r2_secret_key, self.r2_bucket]):
            raise MediaUploadError("R2 credentials not configured")

        return boto3.client(
            's3',
            endpoint_url=self.r2_endpoint,
            aws_access_key_id=self.r2_access_key,
            aws_secret_access_key=self.r2_secret_key,
            region_name='auto'
        )

    def _allowed_types(self, kind: str) -> set:
        if kind == "image":
            return self.ALLOWED_IMAGE_TYPES
        if kind == "video":
            return self.ALLOWED_VIDEO_TYPES
        raise MediaUploadError(f"Unknown media kind '{kind}'", kind=kind)

    def _max_size(self, kind: str) -> int:
        return settings.MAX_VIDEO_SIZE if kind == "video" else settings.MAX_IMAGE_SIZE

    def _object_key(self, kind: str, filename: str, content_type: str) -> str:
        extension = self.EXTENSION_MAPPING.get(content_type) or Path(filename).suffix.lower()
        return f"{kind}s/{uuid4()}{extension}"

    def _public_url(self, key: str) -> str:
        if self.use_r2:
            if self.r2_public_url:
                return f"{self.r2_public_url.rstrip('/')}/{key}"
            return key
        return f"{settings.MEDIA_BASE_URL.rstrip('/')}/{key}"

    def _local_path(self, key: str) -> Path:
        base = self.upload_dir.resolve()
        path = (base / key).resolve()
        if base not in path.parents:
            raise ValueError(f"Media key escapes upload directory: {key}")
        return path

    async def _spool(self, upload: UploadFile, temp_path: Path, max_size: int) -> int:
        """Copy the upload to a temp file chunk by chunk, enforcing the size limit"""
        size = 0
        async with aiofiles.open(temp_path, 'wb') as f:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_size:
                    raise MediaSizeError(upload.filename, size, max_size)
                await f.write(chunk)
        return size

    async def store(self, upload: UploadFile, kind: str) -> MediaReference:
        """
        Store an uploaded file

        Args:
            upload: FastAPI UploadFile
            kind: "image" or "video"

        Returns:
            MediaReference with the public URL, storage key, kind and, for
            videos, the probed duration in seconds

        Raises:
            MediaTypeError: content type not accepted for this kind
            MediaSizeError: file larger than the configured limit
            MediaUploadError: storage backend failure
        """
        if upload is None or not upload.filename:
            raise MediaUploadError("No file provided", kind=kind)

        allowed = self._allowed_types(kind)
        content_type = (upload.content_type or "").lower()
        if content_type not in allowed:
            raise MediaTypeError(upload.filename, content_type or "unknown", list(allowed))

        key = self._object_key(kind, upload.filename, content_type)
        temp_dir = self.upload_dir / "temp"
        temp_path = temp_dir / Path(key).name

        try:
            temp_dir.mkdir(parents=True, exist_ok=True)
            size = await self._spool(upload, temp_path, self._max_size(kind))

            duration = None
            if kind == "video":
                duration = await asyncio.to_thread(get_video_duration, str(temp_path))

            if self.use_r2:
                r2_client = self._get_r2_client()
                await asyncio.to_thread(
                    r2_client.upload_file,
                    str(temp_path),
                    self.r2_bucket,
                    key,
                    ExtraArgs={"ContentType": content_type},
                )
            else:
                final_path = self._local_path(key)
                final_path.parent.mkdir(parents=True, exist_ok=True)
                temp_path.replace(final_path)

            logger.info(
                "Media stored",
                key=key,
                kind=kind,
                size=size,
                duration=duration,
                backend="r2" if self.use_r2 else "local",
            )
            return MediaReference(url=self._public_url(key), external_id=key, kind=kind, duration=duration)

        except (MediaTypeError, MediaSizeError, MediaUploadError):
            raise
        except (ClientError, BotoCoreError, OSError, ValueError) as e:
            logger.error("Media upload failed", error=str(e), filename=upload.filename, kind=kind)
            raise MediaUploadError(f"Upload failed: {str(e)}", upload.filename, kind)
        finally:
            temp_path.unlink(missing_ok=True)

    async def remove(self, external_id: Optional[str], kind: Optional[str] = None) -> bool:
        """
        Remove a stored object; failures are logged, never raised

        Returns:
            True if the object was removed
        """
        if not external_id:
            return False

        try:
            if self.use_r2:
                r2_client = self._get_r2_client()
                await asyncio.to_thread(r2_client.delete_object, Bucket=self.r2_bucket, Key=external_id)
            else:
                path = self._local_path(external_id)
                if not path.is_file():
                    logger.warning("Media object not found", key=external_id, kind=kind)
                    return False
                path.unlink()
            logger.info("Media removed", key=external_id, kind=kind)
            return True
        except (MediaUploadError, ClientError, BotoCoreError, OSError, ValueError) as e:
            logger.error("Media removal failed", key=external_id, kind=kind, error=str(e))
            return False


media_store = MediaStore()
