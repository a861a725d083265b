"""
Tests for configuration, validation helpers, error envelopes and logging
"""

import json
import logging
import pytest
from uuid import uuid4

from vtube.core.config import Settings, validate_settings
from vtube.core.exceptions import (
    NotFoundError,
    DuplicateFollowError,
    MediaSizeError,
    ValidationError,
    create_error_response,
)
from vtube.core.logging_config import JSONFormatter
from vtube.core.responses import api_response
from vtube.utils.validators import parse_uuid, optional_uuid, normalize_pagination, require_text


class TestSettings:
    """Test settings normalisation"""

    def test_postgres_url_uses_asyncpg(self):
        settings = Settings(DATABASE_URL="postgres://u:p@db:5432/vtube")

        assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db:5432/vtube"

    def test_postgresql_url_uses_asyncpg(self):
        settings = Settings(DATABASE_URL="postgresql://u:p@db:5432/vtube")

        assert settings.DATABASE_URL.startswith("postgresql+asyncpg://")

    def test_defaults(self):
        settings = Settings()

        assert settings.WATCH_HISTORY_WINDOW_HOURS == 24
        assert settings.FOLLOW_DEFAULT_STATUS == "pending"
        assert settings.COMMENT_PREVIEW_LIMIT == 10

    def test_unsupported_database_backend_rejected(self):
        with pytest.raises(ValueError, match="mysql"):
            validate_settings(Settings(DATABASE_URL="mysql+aiomysql://u:p@db:3306/vtube"))

    def test_sqlite_backend_accepted(self):
        validate_settings(Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:"))

    def test_invalid_follow_status_rejected(self):
        with pytest.raises(ValueError):
            validate_settings(Settings(FOLLOW_DEFAULT_STATUS="blocked"))


class TestValidators:
    """Test input helpers"""

    def test_parse_uuid(self):
        value = uuid4()

        assert parse_uuid(str(value)) == value
        assert parse_uuid(value) is value

    @pytest.mark.parametrize("raw", ["", "   ", None, "not-a-uuid", "1234"])
    def test_parse_uuid_rejects(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_uuid(raw, "videoId")

        assert exc_info.value.status_code == 400
        assert exc_info.value.details["field"] == "videoId"

    def test_optional_uuid(self):
        assert optional_uuid("") is None
        assert optional_uuid(None) is None

    def test_normalize_pagination(self):
        assert normalize_pagination(None, None, 10, 100) == (1, 10)
        assert normalize_pagination(0, -5, 10, 100) == (1, 10)
        assert normalize_pagination(3, 500, 10, 100) == (3, 100)

    def test_require_text(self):
        assert require_text("  hi  ", "title") == "hi"
        with pytest.raises(ValidationError):
            require_text("   ", "title")


class TestErrorEnvelope:
    """Test error and success envelopes"""

    def test_not_found_envelope(self):
        body = create_error_response(NotFoundError("video", "abc"))

        assert body["statusCode"] == 404
        assert body["data"] is None
        assert body["success"] is False
        assert body["message"] == "Video with ID abc not found"
        assert body["error_type"] == "NotFoundError"

    def test_duplicate_follow_details(self):
        following = uuid4()
        error = DuplicateFollowError(following, "pending")

        assert error.status_code == 409
        assert error.details == {"following_id": str(following), "status": "pending"}

    def test_media_size_is_validation_error(self):
        error = MediaSizeError("clip.mp4", 20, 10)

        assert isinstance(error, ValidationError)
        assert error.status_code == 400

    def test_api_response(self):
        response = api_response({"id": uuid4()}, "Created", 201)
        body = json.loads(response.body)

        assert response.status_code == 201
        assert body["statusCode"] == 201
        assert body["success"] is True
        assert body["message"] == "Created"
        assert isinstance(body["data"]["id"], str)


class TestJSONFormatter:
    def test_formats_extra_fields(self):
        record = logging.LogRecord("vtube", logging.INFO, __file__, 10, "View recorded", None, None)
        record.video_id = "abc"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "View recorded"
        assert entry["level"] == "INFO"
        assert entry["video_id"] == "abc"
