"""Pytest fixtures for the document workflow.

Provides reusable test fixtures for:
- In-memory SQLite database (real SQL repositories, fresh schema per test)
- In-memory object storage
- Applications in a given lifecycle status
- Actors (owning host, other host, administrator)
- A fully wired DocumentWorkflowService

Usage:
    @pytest.mark.asyncio
    async def test_upload(service, application_factory, host, make_file):
        app_id = await application_factory(owner=host)
        await service.upload_document(app_id, DocumentCategory.IDENTITY, make_file("id.pdf"), host)
"""

import os

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid
from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hostcert.core.exceptions import NotFoundError
from hostcert.db.base import Base, enable_sqlite_foreign_keys
from hostcert.domain import Application
from hostcert.domain.enums import ApplicationStatus, UserRole
from hostcert.repositories.application import SqlApplicationRepository
from hostcert.repositories.document import SqlDocumentRepository
from hostcert.services.audit import SqlAuditSink
from hostcert.services.documents import DocumentWorkflowService
from hostcert.services.permissions import Actor
from hostcert.services.policy import UploadedFile
from hostcert.services.ports import AuditSink, StorageBackend, StoredObject


class InMemoryStorage(StorageBackend):
    """Dict-backed object store; streams content back in small chunks."""

    chunk_size = 4

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple[str, str, str]] = []

    async def put(self, key: str, data: bytes, content_type: str, actor: Actor) -> StoredObject:
        self.calls.append(("put", key, actor.id))
        self.objects[key] = (data, content_type)
        return StoredObject(key=key, url=f"memory://{key}", size=len(data))

    async def get(self, key: str, actor: Actor) -> AsyncIterator[bytes]:
        self.calls.append(("get", key, actor.id))
        if key not in self.objects:
            raise NotFoundError("Stored object", key)
        data = self.objects[key][0]

        async def _chunks() -> AsyncIterator[bytes]:
            for start in range(0, len(data), self.chunk_size):
                yield data[start:start + self.chunk_size]

        return _chunks()

    async def delete(self, key: str, actor: Actor) -> None:
        self.calls.append(("delete", key, actor.id))
        self.objects.pop(key, None)


class UnreachableStorage(InMemoryStorage):
    """Every write times out, as an unreachable object store would."""

    async def put(self, key: str, data: bytes, content_type: str, actor: Actor) -> StoredObject:
        raise TimeoutError("object store did not answer")

    async def delete(self, key: str, actor: Actor) -> None:
        raise ConnectionError("object store refused the connection")


class BrokenAuditSink(AuditSink):
    async def record(self, event_type: str, subject_id: str, actor: Actor, metadata: dict[str, Any]) -> None:
        raise RuntimeError("audit database is read-only")


async def read_stream(stream: AsyncIterator[bytes]) -> bytes:
    return b"".join([chunk async for chunk in stream])


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def application_factory(session_factory):
    """Insert an application owned by *owner* and return its id."""

    async def _create(owner: Actor, status: ApplicationStatus = ApplicationStatus.DRAFT) -> str:
        application_id = str(uuid.uuid4())
        async with session_factory() as session:
            session.add(Application(id=application_id, host_id=owner.id, status=status))
            await session.commit()
        return application_id

    return _create


@pytest.fixture
def set_status(session_factory):
    """Move an application to another lifecycle status."""

    async def _set(application_id: str, status: ApplicationStatus) -> None:
        async with session_factory() as session:
            await session.execute(
                update(Application).where(Application.id == application_id).values(status=status)
            )
            await session.commit()

    return _set


# ---------------------------------------------------------------------------
# Actors and files
# ---------------------------------------------------------------------------

@pytest.fixture
def host() -> Actor:
    return Actor(id="host-1", email="host@example.com", role=UserRole.HOST)


@pytest.fixture
def other_host() -> Actor:
    return Actor(id="host-2", email="other@example.com", role=UserRole.HOST)


@pytest.fixture
def admin() -> Actor:
    return Actor(id="admin-1", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def make_file():
    def _make(
        filename: str = "document.pdf",
        content_type: str = "application/pdf",
        size: int = 1024,
        data: bytes | None = None,
    ) -> UploadedFile:
        return UploadedFile(
            filename=filename,
            content_type=content_type,
            data=data if data is not None else b"%" * size,
        )

    return _make


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def application_repo(session_factory) -> SqlApplicationRepository:
    return SqlApplicationRepository(session_factory)


@pytest.fixture
def document_repo(session_factory) -> SqlDocumentRepository:
    return SqlDocumentRepository(session_factory)


@pytest.fixture
def service(application_repo, document_repo, storage, session_factory) -> DocumentWorkflowService:
    return DocumentWorkflowService(
        application_repo,
        document_repo,
        storage,
        SqlAuditSink(session_factory),
    )
