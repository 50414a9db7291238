"""Document repository — metadata persistence for uploaded documents.

The partial unique index on (application_id, category) is the authoritative
duplicate guard; a violation surfaces as DuplicateDocumentError.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from hostcert.core.exceptions import DuplicateDocumentError, NotFoundError
from hostcert.domain.document import CATEGORY_UNIQUE_INDEX, Document
from hostcert.repositories.base import BaseRepository
from hostcert.services.ports import DocumentRepository, NewDocument

logger = logging.getLogger(__name__)

# SQLite reports the indexed columns, PostgreSQL the index name.
_SQLITE_CATEGORY_UNIQUE = "UNIQUE constraint failed: documents.application_id, documents.category"


def _violates_category_index(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return CATEGORY_UNIQUE_INDEX in message or _SQLITE_CATEGORY_UNIQUE in message


def _violates_foreign_key(exc: IntegrityError) -> bool:
    return "foreign key" in str(exc.orig).lower()


class SqlDocumentRepository(BaseRepository[Document], DocumentRepository):
    model = Document

    async def create(self, record: NewDocument) -> Document:  # type: ignore[override]
        try:
            return await super().create(
                id=record.id,
                application_id=record.application_id,
                category=record.category,
                storage_key=record.storage_key,
                original_name=record.original_name,
                mime_type=record.mime_type,
                size_bytes=record.size_bytes,
            )
        except IntegrityError as exc:
            if _violates_category_index(exc):
                raise DuplicateDocumentError(record.category.value, record.application_id) from exc
            if _violates_foreign_key(exc):
                logger.warning(
                    "Document insert for missing application %s rejected: %s",
                    record.application_id, exc.orig,
                )
                raise NotFoundError("Application", record.application_id) from exc
            raise

    async def find_by_application(self, application_id: str) -> list[Document]:
        async with self._session() as session:
            result = await session.execute(
                self._base_query()
                .where(Document.application_id == application_id)
                .order_by(Document.uploaded_at.desc())
            )
            return list(result.scalars().all())

    async def find_by_id(self, document_id: str) -> Document:
        document = await self.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document", document_id)
        return document

    async def delete(self, document_id: str) -> None:
        deleted = await self.hard_delete(document_id)
        if not deleted:
            raise NotFoundError("Document", document_id)

    async def list(  # type: ignore[override]
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        filters: dict[str, Any] | None = None,
        order_by: str = "uploaded_at",
        order: str = "desc",
    ) -> tuple[list[Document], int]:
        return await super().list(
            offset=offset, limit=limit, order_by=order_by, order=order, filters=filters
        )
