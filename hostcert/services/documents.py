"""Document workflow service — uploads, downloads, deletes and completeness.

Every operation follows the same path:
  1. Load the owning application's snapshot (NotFoundError if absent)
  2. Ask the permission evaluator (AccessDenied / InvalidStateError)
  3. Apply the category's validation policy (PolicyViolation)
  4. Call storage and the document repository
  5. Emit an audit event on success (mutations and downloads only)

Rule: No SQLAlchemy / no FastAPI here. Collaborators come in through the ports
in :mod:`hostcert.services.ports`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from hostcert.core.exceptions import (
    AccessDenied,
    AppException,
    ConfigurationError,
    DuplicateDocumentError,
    StorageUnavailable,
)
from hostcert.domain.document import Document
from hostcert.domain.enums import AccessIntent, AuditAction, DocumentCategory
from hostcert.services.permissions import Actor, ApplicationSnapshot, check_access
from hostcert.services.policy import (
    UploadedFile,
    ValidationPolicy,
    policy_for,
    policy_table,
    validate_file,
)
from hostcert.services.ports import (
    ApplicationRepository,
    AuditSink,
    DocumentRepository,
    NewDocument,
    StorageBackend,
    StoredObject,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SkippedFile:
    name: str
    reason: str


@dataclass
class BatchUploadResult:
    """Outcome of a batch upload. Both lists follow the input order."""

    created: list[Document] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)


@dataclass(frozen=True)
class DownloadResult:
    stream: AsyncIterator[bytes]
    mime_type: str
    file_name: str


@dataclass(frozen=True)
class Requirement:
    category: DocumentCategory
    description: str
    uploaded: bool
    document_id: str | None = None


@dataclass(frozen=True)
class RequirementSet:
    required: list[Requirement]
    optional: list[Requirement]


@dataclass(frozen=True)
class Completion:
    is_complete: bool
    missing: list[DocumentCategory]
    message: str


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class DocumentWorkflowService:
    def __init__(
        self,
        applications: ApplicationRepository,
        documents: DocumentRepository,
        storage: StorageBackend | None,
        audit: AuditSink,
        *,
        privileged_writes: bool = False,
        key_prefix: str = "applications",
    ):
        self._applications = applications
        self._documents = documents
        self._storage = storage
        self._audit_sink = audit
        self._privileged_writes = privileged_writes
        self._key_prefix = key_prefix

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def upload_document(
        self,
        application_id: str,
        category: DocumentCategory,
        file: UploadedFile,
        actor: Actor,
    ) -> Document:
        snapshot = await self._applications.get(application_id)
        self._check(actor, snapshot, AccessIntent.WRITE_CREATE)
        return await self._upload_one(snapshot, category, file, actor)

    async def upload_batch(
        self,
        application_id: str,
        category: DocumentCategory,
        files: Sequence[UploadedFile],
        actor: Actor,
    ) -> BatchUploadResult:
        """Upload *files* one by one; a failing file is reported, never fatal.

        Application lookup and permission are checked once for the whole
        batch and do raise. Callers must inspect ``skipped``.
        """
        snapshot = await self._applications.get(application_id)
        self._check(actor, snapshot, AccessIntent.WRITE_CREATE)
        policy_for(category)

        result = BatchUploadResult()
        for file in files:
            try:
                document = await self._upload_one(snapshot, category, file, actor)
            except ConfigurationError:
                raise
            except AppException as exc:
                logger.warning(
                    "Skipped %s in batch upload for application %s: %s",
                    file.filename, application_id, exc.message,
                )
                result.skipped.append(SkippedFile(name=file.filename, reason=exc.message))
            else:
                result.created.append(document)

        logger.info(
            "Batch upload for application %s: %d created, %d skipped",
            application_id, len(result.created), len(result.skipped),
        )
        return result

    async def _upload_one(
        self,
        snapshot: ApplicationSnapshot,
        category: DocumentCategory,
        file: UploadedFile,
        actor: Actor,
    ) -> Document:
        if not category.allows_multiple:
            existing = await self._documents.find_by_application(snapshot.id)
            if any(doc.category == category for doc in existing):
                raise DuplicateDocumentError(category.value, snapshot.id)

        validate_file(category, file)

        document_id = str(uuid.uuid4())
        key = self.storage_key(snapshot.id, document_id, file.extension)
        stored = await self._put(key, file, actor)

        try:
            document = await self._documents.create(
                NewDocument(
                    id=document_id,
                    application_id=snapshot.id,
                    category=category,
                    storage_key=stored.key,
                    original_name=file.filename,
                    mime_type=file.content_type,
                    size_bytes=file.size,
                )
            )
        except Exception:
            await self._discard(stored.key, actor)
            raise

        await self._audit(
            AuditAction.DOCUMENT_UPLOAD,
            document.id,
            actor,
            {
                "applicationId": snapshot.id,
                "documentType": category.value,
                "fileSize": file.size,
                "originalName": file.filename,
            },
        )
        logger.info(
            "Document uploaded: %s (application=%s, category=%s, size=%d, user=%s)",
            document.id, snapshot.id, category.value, file.size, actor.id,
        )
        return document

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_documents(self, application_id: str, actor: Actor) -> list[Document]:
        snapshot = await self._applications.get(application_id)
        self._check(actor, snapshot, AccessIntent.READ)
        return await self._documents.find_by_application(application_id)

    async def download_document(self, document_id: str, actor: Actor) -> DownloadResult:
        document = await self._documents.find_by_id(document_id)
        snapshot = await self._applications.get(document.application_id)
        self._check(actor, snapshot, AccessIntent.READ)

        try:
            stream = await self._require_storage().get(document.storage_key, actor)
        except AppException:
            raise
        except Exception as exc:
            raise StorageUnavailable(
                f"Failed to read document {document_id} from storage",
                details={"documentId": document_id},
            ) from exc

        await self._audit(
            AuditAction.DOCUMENT_DOWNLOAD,
            document.id,
            actor,
            {
                "applicationId": document.application_id,
                "documentType": document.category.value,
                "originalName": document.original_name,
            },
        )
        return DownloadResult(
            stream=stream,
            mime_type=document.mime_type,
            file_name=document.original_name,
        )

    async def list_all_documents(
        self,
        actor: Actor,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "uploaded_at",
        order: str = "desc",
        application_id: str | None = None,
        category: DocumentCategory | None = None,
    ) -> tuple[list[Document], int]:
        """Cross-application listing for reviewers and administrators."""
        if not actor.role.is_privileged:
            raise AccessDenied("Only reviewers can list documents across applications")
        return await self._documents.list(
            offset=offset,
            limit=limit,
            order_by=order_by,
            order=order,
            filters={"application_id": application_id, "category": category},
        )

    def get_validation_rules(self, category: DocumentCategory) -> ValidationPolicy:
        return policy_for(category)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_document(self, document_id: str, actor: Actor) -> None:
        document = await self._documents.find_by_id(document_id)
        snapshot = await self._applications.get(document.application_id)
        self._check(actor, snapshot, AccessIntent.WRITE_DELETE)

        # Storage before metadata; the record's absence is what the workflow trusts.
        try:
            await self._require_storage().delete(document.storage_key, actor)
        except AppException:
            raise
        except Exception as exc:
            raise StorageUnavailable(
                f"Failed to delete document {document_id} from storage",
                details={"documentId": document_id},
            ) from exc

        await self._documents.delete(document.id)

        await self._audit(
            AuditAction.DOCUMENT_DELETE,
            document.id,
            actor,
            {
                "applicationId": document.application_id,
                "documentType": document.category.value,
                "originalName": document.original_name,
            },
        )
        logger.info(
            "Document deleted: %s (application=%s, category=%s, user=%s)",
            document.id, document.application_id, document.category.value, actor.id,
        )

    # ------------------------------------------------------------------
    # Requirements / completion
    # ------------------------------------------------------------------

    async def requirements_for(self, application_id: str, actor: Actor) -> RequirementSet:
        """compute_requirements for a caller who must be able to read the application."""
        snapshot = await self._applications.get(application_id)
        self._check(actor, snapshot, AccessIntent.READ)
        return await self._requirements(snapshot.id)

    async def completion_for(self, application_id: str, actor: Actor) -> Completion:
        snapshot = await self._applications.get(application_id)
        self._check(actor, snapshot, AccessIntent.READ)
        return self._completion(await self._requirements(snapshot.id))

    async def compute_requirements(self, application_id: str) -> RequirementSet:
        await self._applications.get(application_id)
        return await self._requirements(application_id)

    async def compute_completion(self, application_id: str) -> Completion:
        return self._completion(await self.compute_requirements(application_id))

    async def _requirements(self, application_id: str) -> RequirementSet:
        documents = await self._documents.find_by_application(application_id)

        # Newest first, so the first hit per category is the latest upload
        latest: dict[DocumentCategory, str] = {}
        for doc in documents:
            latest.setdefault(doc.category, doc.id)

        required: list[Requirement] = []
        optional: list[Requirement] = []
        for category, policy in policy_table():
            item = Requirement(
                category=category,
                description=policy.description,
                uploaded=category in latest,
                document_id=latest.get(category),
            )
            (required if policy.required else optional).append(item)

        return RequirementSet(required=required, optional=optional)

    @staticmethod
    def _completion(requirements: RequirementSet) -> Completion:
        missing = [req.category for req in requirements.required if not req.uploaded]

        if not missing:
            message = "All required documents have been uploaded successfully."
        else:
            message = "Missing required documents: " + ", ".join(c.label for c in missing)

        return Completion(is_complete=not missing, missing=missing, message=message)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def storage_key(self, application_id: str, document_id: str, extension: str) -> str:
        return f"{self._key_prefix}/{application_id}/documents/{document_id}{extension}"

    def _require_storage(self) -> StorageBackend:
        if self._storage is None:
            raise StorageUnavailable("No storage backend is configured")
        return self._storage

    def _check(self, actor: Actor, snapshot: ApplicationSnapshot, intent: AccessIntent) -> None:
        check_access(
            actor.role,
            actor.id,
            snapshot,
            intent,
            privileged_writes=self._privileged_writes,
        )

    async def _put(self, key: str, file: UploadedFile, actor: Actor) -> StoredObject:
        try:
            return await self._require_storage().put(key, file.data, file.content_type, actor)
        except AppException:
            raise
        except Exception as exc:
            raise StorageUnavailable(
                f"Failed to store {file.filename}",
                details={"storageKey": key},
            ) from exc

    async def _discard(self, key: str, actor: Actor) -> None:
        """Best-effort removal of bytes whose metadata record was never created."""
        try:
            await self._require_storage().delete(key, actor)
        except Exception:
            logger.exception("Failed to remove orphaned storage object %s", key)

    async def _audit(
        self,
        action: AuditAction,
        subject_id: str,
        actor: Actor,
        metadata: dict[str, Any],
    ) -> None:
        try:
            await self._audit_sink.record(action.value, subject_id, actor, metadata)
        except Exception:
            logger.exception(
                "Audit %s for document %s by user %s could not be recorded",
                action.value, subject_id, actor.id,
            )
