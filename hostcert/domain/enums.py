"""Closed value sets shared by the ORM models and the document workflow."""

import enum


class DocumentCategory(str, enum.Enum):
    IDENTITY = "identity"
    SAFETY_PERMIT = "safety_permit"
    INSURANCE_CERTIFICATE = "insurance_certificate"
    PROPERTY_DEED = "property_deed"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. ``safety permit``."""
        return self.value.replace("_", " ")

    @property
    def allows_multiple(self) -> bool:
        return self is DocumentCategory.OTHER


class ApplicationStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    MORE_INFO_REQUESTED = "more_info_requested"

    @property
    def is_mutable(self) -> bool:
        return self in MUTABLE_STATUSES


# Statuses in which documents may still be added
MUTABLE_STATUSES = frozenset({ApplicationStatus.DRAFT, ApplicationStatus.UNDER_REVIEW})


class UserRole(str, enum.Enum):
    HOST = "host"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def is_privileged(self) -> bool:
        return self in (UserRole.ADMIN, UserRole.SUPER_ADMIN)


class AccessIntent(str, enum.Enum):
    READ = "read"
    WRITE_CREATE = "write_create"
    WRITE_DELETE = "write_delete"


class AuditAction(str, enum.Enum):
    DOCUMENT_UPLOAD = "DOCUMENT_UPLOAD"
    DOCUMENT_DOWNLOAD = "DOCUMENT_DOWNLOAD"
    DOCUMENT_DELETE = "DOCUMENT_DELETE"
