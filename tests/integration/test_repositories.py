"""SQL repositories against the real schema (in-memory SQLite)."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete, func, select, update

from hostcert.core.exceptions import DuplicateDocumentError, NotFoundError
from hostcert.domain.application import Application
from hostcert.domain.document import Document
from hostcert.domain.enums import ApplicationStatus, DocumentCategory
from hostcert.services.ports import NewDocument


def _record(application_id: str, category: DocumentCategory, name: str = "file.pdf") -> NewDocument:
    document_id = str(uuid.uuid4())
    return NewDocument(
        id=document_id,
        application_id=application_id,
        category=category,
        storage_key=f"applications/{application_id}/documents/{document_id}.pdf",
        original_name=name,
        mime_type="application/pdf",
        size_bytes=128,
    )


async def _backdate(session_factory, document_id: str, minutes: int) -> None:
    async with session_factory() as session:
        await session.execute(
            update(Document)
            .where(Document.id == document_id)
            .values(uploaded_at=datetime.now(timezone.utc) - timedelta(minutes=minutes))
        )
        await session.commit()


class TestApplicationRepository:
    @pytest.mark.asyncio
    async def test_snapshot_maps_owner_and_status(self, application_repo, application_factory, host):
        app_id = await application_factory(owner=host, status=ApplicationStatus.UNDER_REVIEW)

        snapshot = await application_repo.get(app_id)

        assert snapshot.id == app_id
        assert snapshot.owner_id == host.id
        assert snapshot.status is ApplicationStatus.UNDER_REVIEW

    @pytest.mark.asyncio
    async def test_unknown_application(self, application_repo):
        with pytest.raises(NotFoundError) as exc_info:
            await application_repo.get("missing")
        assert exc_info.value.details == {"entity": "application", "id": "missing"}


class TestDocumentRepository:
    @pytest.mark.asyncio
    async def test_create_sets_upload_time(self, document_repo, application_factory, host):
        app_id = await application_factory(owner=host)

        document = await document_repo.create(_record(app_id, DocumentCategory.IDENTITY))

        assert document.uploaded_at is not None
        assert document.category is DocumentCategory.IDENTITY

    @pytest.mark.asyncio
    async def test_unique_index_rejects_second_single_category(self, document_repo, application_factory, host):
        app_id = await application_factory(owner=host)
        await document_repo.create(_record(app_id, DocumentCategory.SAFETY_PERMIT))

        with pytest.raises(DuplicateDocumentError):
            await document_repo.create(_record(app_id, DocumentCategory.SAFETY_PERMIT))

        assert len(await document_repo.find_by_application(app_id)) == 1

    @pytest.mark.asyncio
    async def test_same_category_on_different_applications(self, document_repo, application_factory, host):
        first = await application_factory(owner=host)
        second = await application_factory(owner=host)

        await document_repo.create(_record(first, DocumentCategory.IDENTITY))
        await document_repo.create(_record(second, DocumentCategory.IDENTITY))

        assert len(await document_repo.find_by_application(first)) == 1
        assert len(await document_repo.find_by_application(second)) == 1

    @pytest.mark.asyncio
    async def test_other_category_is_not_unique(self, document_repo, application_factory, host):
        app_id = await application_factory(owner=host)

        for _ in range(3):
            await document_repo.create(_record(app_id, DocumentCategory.OTHER))

        assert len(await document_repo.find_by_application(app_id)) == 3

    @pytest.mark.asyncio
    async def test_find_by_application_newest_first(self, document_repo, session_factory, application_factory, host):
        app_id = await application_factory(owner=host)
        oldest = await document_repo.create(_record(app_id, DocumentCategory.IDENTITY, "oldest.pdf"))
        middle = await document_repo.create(_record(app_id, DocumentCategory.OTHER, "middle.pdf"))
        newest = await document_repo.create(_record(app_id, DocumentCategory.PROPERTY_DEED, "newest.pdf"))
        await _backdate(session_factory, oldest.id, 30)
        await _backdate(session_factory, middle.id, 10)

        documents = await document_repo.find_by_application(app_id)

        assert [d.id for d in documents] == [newest.id, middle.id, oldest.id]

    @pytest.mark.asyncio
    async def test_find_by_id_and_delete(self, document_repo, application_factory, host):
        app_id = await application_factory(owner=host)
        created = await document_repo.create(_record(app_id, DocumentCategory.IDENTITY))

        found = await document_repo.find_by_id(created.id)
        assert found.storage_key == created.storage_key

        await document_repo.delete(created.id)

        with pytest.raises(NotFoundError):
            await document_repo.find_by_id(created.id)

    @pytest.mark.asyncio
    async def test_delete_missing_document(self, document_repo):
        with pytest.raises(NotFoundError):
            await document_repo.delete("missing")

    @pytest.mark.asyncio
    async def test_list_paginates_and_filters(self, document_repo, session_factory, application_factory, host):
        first = await application_factory(owner=host)
        second = await application_factory(owner=host)
        a = await document_repo.create(_record(first, DocumentCategory.IDENTITY, "a.pdf"))
        b = await document_repo.create(_record(second, DocumentCategory.IDENTITY, "b.pdf"))
        c = await document_repo.create(_record(second, DocumentCategory.OTHER, "c.pdf"))
        await _backdate(session_factory, a.id, 30)
        await _backdate(session_factory, b.id, 20)
        await _backdate(session_factory, c.id, 10)

        page, total = await document_repo.list(offset=0, limit=2)
        assert total == 3
        assert [d.original_name for d in page] == ["c.pdf", "b.pdf"]

        page, total = await document_repo.list(offset=2, limit=2)
        assert [d.original_name for d in page] == ["a.pdf"]

        page, total = await document_repo.list(order="asc", filters={"application_id": second})
        assert total == 2
        assert [d.original_name for d in page] == ["b.pdf", "c.pdf"]

        page, total = await document_repo.list(filters={"category": DocumentCategory.OTHER, "application_id": None})
        assert [d.id for d in page] == [c.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("category", [DocumentCategory.IDENTITY, DocumentCategory.OTHER])
    async def test_insert_for_missing_application_is_not_found(self, document_repo, category):
        with pytest.raises(NotFoundError) as exc_info:
            await document_repo.create(_record("missing-application", category))
        assert exc_info.value.details == {"entity": "application", "id": "missing-application"}

    @pytest.mark.asyncio
    async def test_deleting_application_removes_its_documents(
        self, document_repo, session_factory, application_factory, host
    ):
        doomed = await application_factory(owner=host)
        kept = await application_factory(owner=host)
        await document_repo.create(_record(doomed, DocumentCategory.IDENTITY))
        await document_repo.create(_record(doomed, DocumentCategory.OTHER))
        survivor = await document_repo.create(_record(kept, DocumentCategory.IDENTITY))

        async with session_factory() as session:
            await session.execute(delete(Application).where(Application.id == doomed))
            await session.commit()

        assert await document_repo.find_by_application(doomed) == []
        async with session_factory() as session:
            remaining = (await session.execute(select(func.count()).select_from(Document))).scalar_one()
        assert remaining == 1
        assert (await document_repo.find_by_id(survivor.id)).application_id == kept
