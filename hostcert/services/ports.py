"""Collaborator ports used by the document workflow.

The workflow only ever talks to these interfaces. SQL adapters for the two
repositories live in :mod:`hostcert.repositories`, the SQL audit sink in
:mod:`hostcert.services.audit`. The object store is supplied by the deployment.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from hostcert.domain.document import Document
from hostcert.domain.enums import DocumentCategory
from hostcert.services.permissions import Actor, ApplicationSnapshot


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful storage write."""

    key: str
    url: str
    size: int


@dataclass(frozen=True)
class NewDocument:
    """Metadata for a document record about to be persisted."""

    id: str
    application_id: str
    category: DocumentCategory
    storage_key: str
    original_name: str
    mime_type: str
    size_bytes: int


class StorageBackend(ABC):
    """Object store holding document bytes.

    The actor is passed for the backend's own logging only, never for
    authorization. Implementations raise :class:`StorageUnavailable` on
    transport failures and timeouts.
    """

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str, actor: Actor) -> StoredObject:
        ...

    @abstractmethod
    async def get(self, key: str, actor: Actor) -> AsyncIterator[bytes]:
        """Return a stream of chunks; callers must not assume it is buffered."""

    @abstractmethod
    async def delete(self, key: str, actor: Actor) -> None:
        ...


class ApplicationRepository(ABC):
    @abstractmethod
    async def get(self, application_id: str) -> ApplicationSnapshot:
        """Raise :class:`NotFoundError` when the application does not exist."""


class DocumentRepository(ABC):
    """Document metadata store.

    Must reject a second live document for the same (application, category)
    for every category except ``other``, surfacing it as
    :class:`DuplicateDocumentError`.
    """

    @abstractmethod
    async def create(self, record: NewDocument) -> Document:
        ...

    @abstractmethod
    async def find_by_application(self, application_id: str) -> list[Document]:
        """Documents of one application, most recent upload first."""

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Document:
        """Raise :class:`NotFoundError` when the document does not exist."""

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        ...

    @abstractmethod
    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        filters: dict[str, Any] | None = None,
        order_by: str = "uploaded_at",
        order: str = "desc",
    ) -> tuple[list[Document], int]:
        ...


class AuditSink(ABC):
    @abstractmethod
    async def record(
        self,
        event_type: str,
        subject_id: str,
        actor: Actor,
        metadata: dict[str, Any],
    ) -> None:
        ...
