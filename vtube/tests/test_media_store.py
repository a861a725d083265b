"""
Tests for the media store adapter
"""

import pytest
from io import BytesIO

import ffmpeg
from botocore.exceptions import ClientError
from fastapi import UploadFile
from starlette.datastructures import Headers

from vtube.core.config import settings
from vtube.core.exceptions import MediaSizeError, MediaTypeError, MediaUploadError
from vtube.services import media_store as media_store_module
from vtube.services.media_store import MediaStore
from vtube.utils.video_utils import get_video_duration


def make_upload(filename: str, content: bytes, content_type: str) -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


class FakeR2Client:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploaded = []
        self.deleted = []

    def upload_file(self, filename, bucket, key, ExtraArgs=None):
        if self.fail:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        with open(filename, "rb") as f:
            self.uploaded.append((bucket, key, f.read(), ExtraArgs))

    def delete_object(self, Bucket, Key):
        self.deleted.append((Bucket, Key))


@pytest.fixture
def fixed_duration(monkeypatch):
    monkeypatch.setattr(media_store_module, "get_video_duration", lambda path: 42)


@pytest.fixture
def local_store(tmp_path) -> MediaStore:
    return MediaStore(upload_dir=str(tmp_path), use_r2=False)


def _temp_files(store: MediaStore):
    temp_dir = store.upload_dir / "temp"
    return list(temp_dir.iterdir()) if temp_dir.exists() else []


class TestLocalMediaStore:
    """Test local disk storage"""

    async def test_store_video(self, local_store, fixed_duration):
        upload = make_upload("clip.mp4", b"video-bytes", "video/mp4")

        reference = await local_store.store(upload, "video")

        assert reference.kind == "video"
        assert reference.duration == 42
        assert reference.external_id.startswith("videos/")
        assert reference.external_id.endswith(".mp4")
        assert reference.url == f"{settings.MEDIA_BASE_URL.rstrip('/')}/{reference.external_id}"
        assert (local_store.upload_dir / reference.external_id).read_bytes() == b"video-bytes"
        assert _temp_files(local_store) == []

    async def test_store_image_has_no_duration(self, local_store):
        upload = make_upload("thumb.png", b"png-bytes", "image/png")

        reference = await local_store.store(upload, "image")

        assert reference.duration is None
        assert reference.external_id.startswith("images/")

    async def test_rejects_wrong_type(self, local_store):
        upload = make_upload("notes.txt", b"text", "text/plain")

        with pytest.raises(MediaTypeError):
            await local_store.store(upload, "image")

    async def test_rejects_oversized_file(self, local_store, monkeypatch):
        """Test the size limit is enforced and the temp file cleaned up"""
        monkeypatch.setattr(settings, "MAX_IMAGE_SIZE", 4)
        upload = make_upload("big.jpg", b"0123456789", "image/jpeg")

        with pytest.raises(MediaSizeError):
            await local_store.store(upload, "image")

        assert _temp_files(local_store) == []

    async def test_rejects_missing_file(self, local_store):
        with pytest.raises(MediaUploadError):
            await local_store.store(None, "video")

    async def test_remove(self, local_store):
        reference = await local_store.store(make_upload("t.jpg", b"jpg", "image/jpeg"), "image")

        assert await local_store.remove(reference.external_id, "image") is True
        assert not (local_store.upload_dir / reference.external_id).exists()

    async def test_remove_missing_object_does_not_raise(self, local_store):
        assert await local_store.remove("images/missing.jpg", "image") is False
        assert await local_store.remove(None) is False

    async def test_remove_outside_upload_dir(self, local_store):
        assert await local_store.remove("../../etc/passwd", "image") is False


class TestR2MediaStore:
    """Test R2 storage through a fake boto3 client"""

    async def test_store_to_r2(self, tmp_path, monkeypatch, fixed_duration):
        client = FakeR2Client()
        store = MediaStore(upload_dir=str(tmp_path), use_r2=True)
        store.r2_bucket = "media"
        store.r2_public_url = "https://media.test/"
        monkeypatch.setattr(store, "_get_r2_client", lambda: client)

        reference = await store.store(make_upload("clip.webm", b"webm", "video/webm"), "video")

        bucket, key, body, extra = client.uploaded[0]
        assert (bucket, key, body) == ("media", reference.external_id, b"webm")
        assert extra == {"ContentType": "video/webm"}
        assert reference.url == f"https://media.test/{reference.external_id}"
        assert _temp_files(store) == []

    async def test_r2_failure_raises_upload_error(self, tmp_path, monkeypatch, fixed_duration):
        store = MediaStore(upload_dir=str(tmp_path), use_r2=True)
        monkeypatch.setattr(store, "_get_r2_client", lambda: FakeR2Client(fail=True))

        with pytest.raises(MediaUploadError) as exc_info:
            await store.store(make_upload("clip.mp4", b"mp4", "video/mp4"), "video")

        assert exc_info.value.status_code == 500
        assert _temp_files(store) == []

    async def test_remove_from_r2(self, tmp_path, monkeypatch):
        client = FakeR2Client()
        store = MediaStore(upload_dir=str(tmp_path), use_r2=True)
        store.r2_bucket = "media"
        monkeypatch.setattr(store, "_get_r2_client", lambda: client)

        assert await store.remove("videos/abc.mp4", "video") is True
        assert client.deleted == [("media", "videos/abc.mp4")]

    async def test_remove_without_credentials_is_logged_only(self, tmp_path):
        store = MediaStore(upload_dir=str(tmp_path), use_r2=True)
        store.r2_endpoint = None

        assert await store.remove("videos/abc.mp4", "video") is False


class TestVideoDuration:
    """Test duration probing"""

    def test_duration_rounded(self, monkeypatch):
        monkeypatch.setattr(ffmpeg, "probe", lambda path: {"format": {"duration": "12.6"}})

        assert get_video_duration("clip.mp4") == 13

    def test_probe_failure_returns_zero(self, monkeypatch):
        def failing_probe(path):
            raise ffmpeg.Error("ffprobe", b"", b"invalid data")

        monkeypatch.setattr(ffmpeg, "probe", failing_probe)

        assert get_video_duration("broken.mp4") == 0
