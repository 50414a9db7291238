"""Document Pydantic schemas (response models for the document workflow)."""


from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from hostcert.domain.enums import DocumentCategory

class CamelModel(BaseModel):
    """camelCase on the wire; built from ORM rows and workflow dataclasses alike."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        from_attributes=True,
    )

class DocumentOut(CamelModel):
    id: str
    application_id: str
    category: DocumentCategory
    original_name: str
    mime_type: str
    size_bytes: int
    uploaded_at: datetime

class SkippedFileOut(CamelModel):
    name: str
    reason: str

class BatchUploadOut(CamelModel):
    message: str
    count: int
    uploaded: list[DocumentOut]
    skipped: list[SkippedFileOut]

class RequirementOut(CamelModel):
    category: DocumentCategory
    description: str
    uploaded: bool
    document_id: str | None = None

class RequirementsOut(CamelModel):
    required: list[RequirementOut]
    optional: list[RequirementOut]

class CompletionOut(CamelModel):
    is_complete: bool
    missing: list[DocumentCategory]
    message: str

class ValidationPolicyOut(CamelModel):
    category: DocumentCategory
    max_size_bytes: int
    accepted_media_types: list[str]
    accepted_extensions: list[str]
    required: bool
    description: str
