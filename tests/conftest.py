"""
Tuiter Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:        Async SQLite engine on a temporary file, tables created
    ├── stores:        Store bundle bound to that engine
    ├── app:           create_app(bind=engine)
    ├── test_client:   HTTPX AsyncClient talking to that app
    └── tracker:       In-flight counter shared by FakePairStore instances

Helpers:
    FakePairStore:     In-memory stand-in for a like/dislike/bookmark store
                       with latency and failure injection
    make_user / make_tuit / make_tuit_response
"""

import asyncio
import os
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Iterable, Optional, Set, Tuple

# Override settings for testing BEFORE any tuiter imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./tuiter_test.db"
os.environ["SESSION_SECRET"] = "test-session-secret-not-real"
os.environ["BCRYPT_ROUNDS"] = "4"  # Fast hashing
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tuiter.database import build_engine, build_session_factory, init_models
from tuiter.schemas.tuit import TuitResponse
from tuiter.schemas.user import UserResponse
from tuiter.stores import Stores, build_stores


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    Provides an async engine on a throwaway SQLite file.

    A file (not :memory:) so every pooled connection sees the same tables.
    """
    db_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'tuiter.db'}")
    await init_models(db_engine)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def stores(engine) -> Stores:
    return build_stores(build_session_factory(engine))


@pytest.fixture
def app(engine):
    """A fresh FastAPI app bound to the test engine; ``app.state.stores`` is patchable."""
    from tuiter.main import create_app

    return create_app(bind=engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to the ``app`` fixture.
    How:     Uses ASGITransport to route requests directly to the app. The
             client keeps cookies, so the session survives between calls.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Record Helpers
# ══════════════════════════════════════════════════════════════════════════

async def make_user(stores: Stores, username: str):
    return await stores.users.create(
        {"username": username, "password": "not-a-hash", "email": f"{username}@example.com"}
    )


async def make_tuit(stores: Stores, user_id: uuid.UUID, text: str = "hello"):
    return await stores.tuits.create(user_id, {"tuit": text})


def make_tuit_response(author_id: Optional[uuid.UUID] = None, text: str = "tuit") -> TuitResponse:
    """A tuit snapshot, optionally without an author."""
    posted_by = None
    if author_id is not None:
        posted_by = UserResponse(id=author_id, username=f"user-{author_id.hex[:6]}")
    return TuitResponse(
        id=uuid.uuid4(),
        tuit=text,
        posted_on=datetime.now(timezone.utc),
        posted_by=posted_by,
    )


# ══════════════════════════════════════════════════════════════════════════
# In-memory Relation Store
# ══════════════════════════════════════════════════════════════════════════

class InFlightTracker:
    """Counts lookups currently running and remembers the peak."""

    def __init__(self):
        self.current = 0
        self.peak = 0
        self.calls = 0

    def enter(self):
        self.calls += 1
        self.current += 1
        self.peak = max(self.peak, self.current)

    def exit(self):
        self.current -= 1


class FakePairStore:
    """
    Answers find_by_pair from a set of (user_id, tuit_id) string pairs.

    Args:
        pairs:    Pairs that exist
        tracker:  Shared InFlightTracker
        delay:    Simulated lookup latency in seconds
        fail_for: Tuit ids whose lookup raises RuntimeError
    """

    def __init__(
        self,
        pairs: Iterable[Tuple[object, object]] = (),
        tracker: Optional[InFlightTracker] = None,
        delay: float = 0.01,
        fail_for: Iterable[object] = (),
    ):
        self.pairs: Set[Tuple[str, str]] = {(str(u), str(t)) for u, t in pairs}
        self.tracker = tracker or InFlightTracker()
        self.delay = delay
        self.fail_for = {str(t) for t in fail_for}

    async def find_by_pair(self, user_id, tuit_id):
        self.tracker.enter()
        try:
            await asyncio.sleep(self.delay)
            if str(tuit_id) in self.fail_for:
                raise RuntimeError("connection reset")
            if (str(user_id), str(tuit_id)) in self.pairs:
                return SimpleNamespace(user_id=user_id, tuit_id=tuit_id)
            return None
        finally:
            self.tracker.exit()


@pytest.fixture
def tracker() -> InFlightTracker:
    return InFlightTracker()
