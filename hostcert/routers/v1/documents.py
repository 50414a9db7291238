"""Document workflow router — thin HTTP layer over DocumentWorkflowService.

Pattern:
  1. Resolve the caller (X-Actor-* headers), session factory and object store via Depends
  2. Convert multipart uploads into UploadedFile values
  3. Call the service and wrap the result in a response envelope

Errors raised by the service are AppException subclasses and are mapped to
status codes by the global handlers.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hostcert.core.config import settings
from hostcert.core.dependencies import get_current_actor, get_storage
from hostcert.core.pagination import PaginationParams
from hostcert.core.response import DataResponse, ListResponse, attachment_header, paginated
from hostcert.db.base import get_session_factory
from hostcert.domain.enums import DocumentCategory
from hostcert.repositories.application import SqlApplicationRepository
from hostcert.repositories.document import SqlDocumentRepository
from hostcert.schemas.document import (
    BatchUploadOut,
    CompletionOut,
    DocumentOut,
    RequirementOut,
    RequirementsOut,
    SkippedFileOut,
    ValidationPolicyOut,
)
from hostcert.services.audit import SqlAuditSink
from hostcert.services.documents import DocumentWorkflowService
from hostcert.services.permissions import Actor
from hostcert.services.policy import UploadedFile
from hostcert.services.ports import StorageBackend

router = APIRouter(prefix="/documents", tags=["Documents"])


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _svc(
    session_factory: async_sessionmaker[AsyncSession],
    storage: Optional[StorageBackend],
) -> DocumentWorkflowService:
    return DocumentWorkflowService(
        SqlApplicationRepository(session_factory),
        SqlDocumentRepository(session_factory),
        storage,
        SqlAuditSink(session_factory),
        privileged_writes=settings.privileged_document_writes,
        key_prefix=settings.storage_key_prefix,
    )


async def _read_upload(file: UploadFile) -> UploadedFile:
    return UploadedFile(
        filename=file.filename or "",
        content_type=file.content_type or "application/octet-stream",
        data=await file.read(),
    )


# ------------------------------------------------------------------
# Uploads
# ------------------------------------------------------------------

@router.post(
    "/upload/{application_id}",
    response_model=DataResponse[BatchUploadOut],
    status_code=status.HTTP_201_CREATED,
)
async def upload_documents(
    application_id: str,
    files: list[UploadFile] = File(...),
    document_type: DocumentCategory = Form(default=DocumentCategory.OTHER),
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    """Upload one or more files of a single document type.

    Files that fail validation are reported under ``skipped``; the request
    itself still succeeds.
    """
    uploads = [await _read_upload(f) for f in files]
    result = await _svc(session_factory, storage).upload_batch(
        application_id, document_type, uploads, actor
    )
    return {
        "data": BatchUploadOut(
            message=f"{len(result.created)} document(s) uploaded successfully",
            count=len(result.created),
            uploaded=[DocumentOut.model_validate(d) for d in result.created],
            skipped=[SkippedFileOut(name=s.name, reason=s.reason) for s in result.skipped],
        )
    }


@router.post(
    "/applications/{application_id}",
    response_model=DataResponse[DocumentOut],
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    application_id: str,
    file: UploadFile = File(...),
    document_type: DocumentCategory = Form(...),
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    document = await _svc(session_factory, storage).upload_document(
        application_id, document_type, await _read_upload(file), actor
    )
    return {"data": DocumentOut.model_validate(document)}


# ------------------------------------------------------------------
# Reads
# ------------------------------------------------------------------

@router.get("/application/{application_id}", response_model=DataResponse[list[DocumentOut]])
async def list_documents(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    """Documents of one application, most recent upload first."""
    documents = await _svc(session_factory, storage).list_documents(application_id, actor)
    return {"data": [DocumentOut.model_validate(d) for d in documents]}


@router.get("/requirements/{application_id}", response_model=DataResponse[RequirementsOut])
async def get_requirements(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    requirements = await _svc(session_factory, storage).requirements_for(application_id, actor)
    return {
        "data": RequirementsOut(
            required=[RequirementOut.model_validate(r) for r in requirements.required],
            optional=[RequirementOut.model_validate(r) for r in requirements.optional],
        )
    }


@router.get("/validate-step/{application_id}", response_model=DataResponse[CompletionOut])
async def validate_document_step(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    """Whether every required document type has been uploaded."""
    completion = await _svc(session_factory, storage).completion_for(application_id, actor)
    return {"data": CompletionOut.model_validate(completion)}


@router.get("/download/{document_id}")
async def download_document(
    document_id: str,
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    result = await _svc(session_factory, storage).download_document(document_id, actor)
    return StreamingResponse(
        result.stream,
        media_type=result.mime_type,
        headers={"Content-Disposition": attachment_header(result.file_name)},
    )


@router.get(
    "/types/{document_type}/validation",
    response_model=DataResponse[ValidationPolicyOut],
    dependencies=[Depends(get_current_actor)],
)
async def get_validation_rules(
    document_type: DocumentCategory,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    policy = _svc(session_factory, storage).get_validation_rules(document_type)
    return {
        "data": ValidationPolicyOut(
            category=document_type,
            max_size_bytes=policy.max_size_bytes,
            accepted_media_types=sorted(policy.accepted_media_types),
            accepted_extensions=sorted(policy.accepted_extensions),
            required=policy.required,
            description=policy.description,
        )
    }


@router.get("/admin/all", response_model=ListResponse[DocumentOut])
async def list_all_documents(
    application_id: Optional[str] = Query(default=None, alias="applicationId"),
    document_type: Optional[DocumentCategory] = Query(default=None, alias="documentType"),
    pagination: PaginationParams = Depends(),
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    """Reviewer listing across applications (paginated)."""
    items, total = await _svc(session_factory, storage).list_all_documents(
        actor,
        offset=pagination.offset,
        limit=pagination.limit,
        order_by=pagination.sort,
        order=pagination.order,
        application_id=application_id,
        category=document_type,
    )
    return paginated(
        [DocumentOut.model_validate(d) for d in items],
        total, pagination.page, pagination.limit,
    )


# ------------------------------------------------------------------
# Delete
# ------------------------------------------------------------------

@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    actor: Actor = Depends(get_current_actor),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    storage: Optional[StorageBackend] = Depends(get_storage),
):
    await _svc(session_factory, storage).delete_document(document_id, actor)
