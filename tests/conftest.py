"""Shared pytest fixtures for the storyloom test suite."""

import os
from datetime import datetime, timezone

# Must be set before storyloom.users / storyloom.database are imported.
os.environ.setdefault("SECRET", "test-secret-not-for-production")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storyloom.database import Base, get_db
from storyloom.models import Page, PageStatus, User, Work, WorkCollaborator


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_maker() as session:
        yield session


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(db):
    async def _make(username: str) -> User:
        user = User(
            email=f"{username}@example.com",
            username=username,
            hashed_password="not-a-real-hash",
            is_active=True,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_work(db):
    async def _make(author: User, *, allow_collaboration: bool = True, page_char_limit: int = 2000) -> Work:
        work = Work(
            title="The Long Road",
            description="A test work",
            author_id=author.id,
            allow_collaboration=allow_collaboration,
            page_char_limit=page_char_limit,
        )
        db.add(work)
        await db.commit()
        await db.refresh(work)
        return work
    return _make


@pytest_asyncio.fixture
async def owner(make_user):
    return await make_user("testuser")


@pytest_asyncio.fixture
async def other_user(make_user):
    return await make_user("anotheruser")


@pytest_asyncio.fixture
async def third_user(make_user):
    return await make_user("charlie")


@pytest_asyncio.fixture
async def work(make_work, owner):
    """Collaborative work owned by ``owner``."""
    return await make_work(owner)


@pytest_asyncio.fixture
async def closed_work(make_work, owner):
    """Work that does not accept contributions."""
    return await make_work(owner, allow_collaboration=False)


@pytest.fixture
def add_collaborator(db):
    async def _add(work: Work, user: User, *, approved: bool) -> WorkCollaborator:
        row = WorkCollaborator(
            work_id=work.id,
            user_id=user.id,
            approved_at=datetime.now(timezone.utc) if approved else None,
        )
        db.add(row)
        await db.commit()
        return row
    return _add


@pytest.fixture
def approved_numbers(db):
    """Page numbers of the approved pages of a work, as stored."""
    async def _numbers(work_id: int) -> list[int]:
        rows = await db.execute(
            select(Page.page_number)
            .where(Page.work_id == work_id, Page.status == PageStatus.approved)
            .order_by(Page.page_number)
        )
        return list(rows.scalars().all())
    return _numbers


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(db):
    """AsyncClient bound to the app with the test session injected."""
    from storyloom.main import app

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Authenticate subsequent requests as ``user`` (None = anonymous)."""
    from storyloom.main import app
    from storyloom.utils import require_authenticated_user

    def _act_as(user):
        if user is None:
            app.dependency_overrides.pop(require_authenticated_user, None)
        else:
            app.dependency_overrides[require_authenticated_user] = lambda: user
    return _act_as
