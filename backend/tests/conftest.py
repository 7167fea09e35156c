import os

# Set test environment
os.environ["DEBUG"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["CLICKUP_CLIENT_ID"] = "test-client-id"
os.environ["CLICKUP_CLIENT_SECRET"] = "test-client-secret"
os.environ["CLICKUP_REDIRECT_URI"] = "http://test/oauth/callback"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["AI_BASE_URL"] = "http://ai.test/v1"
os.environ["AI_TEXT_MODEL"] = "test-model"
os.environ["COOKIE_SECURE"] = "false"
os.environ["COOKIE_SAMESITE"] = "lax"

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from task_summarizer.config import get_settings
from task_summarizer.database import Base, get_db
from task_summarizer.dependencies import get_ai_service, get_clickup_client
from task_summarizer.main import app
from task_summarizer.models import Identity, LoginSession
from task_summarizer.services.ai_service import AIService
from task_summarizer.services.clickup_client import ClickUpClient

from fakes import SAMPLE_SUMMARY, FakeUpstream, chat_completion, clickup_ms

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest.fixture
def settings():
    return get_settings()


@pytest_asyncio.fixture(scope="function")
async def async_engine():
    """Create an isolated in-memory database for each test."""
    kwargs: dict[str, Any] = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory database
        kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def clickup_api() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def ai_api() -> FakeUpstream:
    upstream = FakeUpstream()
    upstream.add("POST", "/v1/chat/completions", chat_completion(SAMPLE_SUMMARY))
    return upstream


@pytest_asyncio.fixture
async def clickup_client(clickup_api: FakeUpstream, settings) -> AsyncGenerator[ClickUpClient, None]:
    http = clickup_api.client()
    yield ClickUpClient(http, settings)
    await http.aclose()


@pytest_asyncio.fixture
async def ai_service(ai_api: FakeUpstream, settings) -> AsyncGenerator[AIService, None]:
    http = ai_api.client()
    yield AIService(http, settings)
    await http.aclose()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    clickup_client: ClickUpClient,
    ai_service: AIService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database and upstream overrides."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clickup_client] = lambda: clickup_client
    app.dependency_overrides[get_ai_service] = lambda: ai_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_identity(db_session: AsyncSession) -> Identity:
    identity = Identity(
        clickup_user_id="4242",
        access_token="pk_test_token",
        username="Ada Lovelace",
        email="ada@example.com",
    )
    db_session.add(identity)
    await db_session.commit()
    await db_session.refresh(identity)
    return identity


@pytest_asyncio.fixture
async def auth_headers(db_session: AsyncSession, test_identity: Identity, settings) -> dict[str, str]:
    """Cookie header for a valid, unexpired session bound to test_identity."""
    session = LoginSession(
        id="valid-session-id",
        clickup_user_id=test_identity.clickup_user_id,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=24),
    )
    db_session.add(session)
    await db_session.commit()
    return {"Cookie": f"{settings.session_cookie_name}={session.id}"}


@pytest.fixture
def sample_task() -> dict[str, Any]:
    """A ClickUp task payload as returned by GET /task/{id}."""
    now = datetime.now(timezone.utc)
    return {
        "id": "T1",
        "name": "Build login page",
        "text_content": "Implement the OAuth login page.",
        "status": {"status": "in progress", "color": "#d3d3d3"},
        "priority": {"id": "2", "priority": "high", "color": "#ffcc00"},
        "assignees": [
            {"id": 1, "username": "Ada Lovelace", "email": "ada@example.com"},
            {"id": 2, "username": "Grace Hopper", "email": "grace@example.com"},
        ],
        "start_date": clickup_ms(now - timedelta(days=2)),
        "due_date": clickup_ms(now + timedelta(days=3)),
        "time_estimate": 7200000,
        "url": "https://app.clickup.com/t/T1",
    }


@pytest.fixture
def sample_comments() -> dict[str, Any]:
    return {
        "comments": [
            {"id": "c1", "comment_text": "Design approved by product.", "user": {"username": "Ada"}},
            {"id": "c2", "comment_text": "Backend endpoint still in review.", "user": {"username": "Grace"}},
        ]
    }
