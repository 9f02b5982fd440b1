"""Shared test fixtures for pytest"""
import asyncio
import os

# Settings are read at import time; configure before importing align
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./align_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production-0123456789")
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["LLM_API_KEY"] = ""

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from align.application.interfaces.llm import ModelRequest  # noqa: E402
from align.domain.exceptions import UpstreamModelError  # noqa: E402
from align.infrastructure.persistence.database import Database  # noqa: E402
from align.infrastructure.persistence.repositories import SubjectRepository  # noqa: E402
from align.infrastructure.security import create_access_token, get_password_hash  # noqa: E402
from align.main import create_app  # noqa: E402

DEFAULT_REPLY = "It sounds like you felt dismissed. What happened right before?"


class FakeModelClient:
    """
    Scripted language model client.

    Queued items are consumed per call: a string is returned, an exception
    is raised. Once the queue is empty every call returns `default`.
    """

    def __init__(self, default: str = DEFAULT_REPLY, delay: float = 0.0):
        self.default = default
        self.delay = delay
        self.queue: list[str | BaseException] = []
        self.requests: list[ModelRequest] = []
        self.closed = False

    def script(self, *items: str | BaseException) -> "FakeModelClient":
        self.queue.extend(items)
        return self

    def fail_always(self) -> "FakeModelClient":
        self.default = None
        return self

    async def complete(self, request: ModelRequest) -> str:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self.queue.pop(0) if self.queue else self.default
        if item is None:
            raise UpstreamModelError("HTTP 503")
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
async def database(tmp_path):
    """Fresh SQLite database per test"""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'align.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def model() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def app(database, model):
    return create_app(database=database, llm_client=model)


@pytest.fixture
async def client(app):
    """HTTP client for API testing"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _create_subject(database: Database, email: str, name: str):
    async with database.transaction() as db:
        return await SubjectRepository(db).create_subject(
            email=email, password_hash=get_password_hash("correct horse"), name=name
        )


@pytest.fixture
async def test_subject(database):
    return await _create_subject(database, "Ana@Example.com ", "Ana")


@pytest.fixture
async def other_subject(database):
    return await _create_subject(database, "ben@example.com", "Ben")


def bearer(subject_id: int) -> dict[str, str]:
    token = create_access_token(data={"sub": str(subject_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_auth_headers():
    """Factory for headers carrying a token for an arbitrary subject id"""
    return bearer


@pytest.fixture
def auth_headers(test_subject):
    """Generate auth headers with JWT token"""
    return bearer(test_subject.id)


@pytest.fixture
def other_auth_headers(other_subject):
    return bearer(other_subject.id)
