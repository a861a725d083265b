"""
Test configuration and fixtures
"""

import pytest
from typing import AsyncGenerator, Optional
from datetime import datetime
from uuid import uuid4

from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy import Insert, event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from vtube.main import app
from vtube.core.config import settings
from vtube.core.deps import get_media_store
from vtube.core.exceptions import MediaUploadError
from vtube.db.database import Base, get_db
from vtube.models import User, Video
from vtube.services.media_store import MediaReference


# Test database setup
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeMediaStore:
    """In-memory media store recording what was stored and removed"""

    def __init__(self, duration: int = 30):
        self.duration = duration
        self.stored = []
        self.removed = []
        self.fail_kinds = set()

    async def store(self, upload, kind: str) -> MediaReference:
        if kind in self.fail_kinds:
            raise MediaUploadError("Upload failed: backend unavailable", upload.filename, kind)
        key = f"{kind}s/{uuid4()}"
        self.stored.append(key)
        return MediaReference(
            url=f"https://cdn.test/{key}",
            external_id=key,
            kind=kind,
            duration=self.duration if kind == "video" else None
        )

    async def remove(self, external_id: Optional[str], kind: Optional[str] = None) -> bool:
        self.removed.append(external_id)
        return True


class InterleavedSession(AsyncSession):
    """
    Session that lets a competing request run to completion right before
    its next write (a flush or an INSERT statement)
    """

    interleave = None

    async def _run_interleave(self):
        if self.interleave is not None:
            competing, self.interleave = self.interleave, None
            await competing()

    async def flush(self, objects=None):
        await self._run_interleave()
        await super().flush(objects)

    async def execute(self, statement, *args, **kwargs):
        if isinstance(statement, Insert):
            await self._run_interleave()
        return await super().execute(statement, *args, **kwargs)


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session


@pytest.fixture
async def racing_sessions(test_engine):
    """Two sessions; the first lets the second run before its next write"""
    async with InterleavedSession(test_engine, expire_on_commit=False) as first, \
            AsyncSession(test_engine, expire_on_commit=False) as second:
        yield first, second


@pytest.fixture
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
async def client(test_db: AsyncSession, media_store: FakeMediaStore) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and media store overrides"""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_store] = lambda: media_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://localhost") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(test_db: AsyncSession):
    """Factory creating users with unique usernames"""

    async def _make_user(username: str, is_active: bool = True) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            full_name=username.capitalize(),
            avatar_url=f"https://cdn.test/avatars/{username}.png",
            is_active=is_active
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_video(test_db: AsyncSession):
    """Factory creating videos owned by a user"""

    async def _make_video(
        owner: User,
        title: str = "Test Video",
        created_at: Optional[datetime] = None,
        views: int = 0
    ) -> Video:
        video = Video(
            title=title,
            description=f"Description of {title}",
            thumbnail_url=f"https://cdn.test/images/{uuid4()}.jpg",
            thumbnail_kind="image",
            thumbnail_external_id=f"images/{uuid4()}.jpg",
            file_url=f"https://cdn.test/videos/{uuid4()}.mp4",
            file_kind="video",
            file_external_id=f"videos/{uuid4()}.mp4",
            duration=42,
            views=views,
            owner_id=owner.id
        )
        if created_at is not None:
            video.created_at = created_at
        test_db.add(video)
        await test_db.commit()
        await test_db.refresh(video)
        return video

    return _make_video


@pytest.fixture
async def alice(make_user) -> User:
    return await make_user("alice")


@pytest.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
async def carol(make_user) -> User:
    return await make_user("carol")


@pytest.fixture
async def alice_video(make_video, alice) -> Video:
    return await make_video(alice, title="Alice in the forest")


def create_token(user_id) -> str:
    return jwt.encode({"sub": str(user_id)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user"""

    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_token(user.id)}"}

    return _headers
