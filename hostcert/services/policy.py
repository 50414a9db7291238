"""Per-category document validation policies.

One immutable :class:`ValidationPolicy` per :class:`DocumentCategory`. The table
is evaluated once, at upload time; documents already stored are never
re-validated against a changed policy.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from hostcert.core.exceptions import ConfigurationError, PolicyViolation
from hostcert.domain.enums import DocumentCategory

MB = 1024 * 1024

_IMAGE_AND_PDF_TYPES = frozenset({"image/jpeg", "image/png", "application/pdf"})
_IMAGE_AND_PDF_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".pdf"})

_WORD_TYPES = frozenset({
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})
_WORD_EXTENSIONS = frozenset({".doc", ".docx"})


@dataclass(frozen=True)
class ValidationPolicy:
    max_size_bytes: int
    accepted_media_types: frozenset[str]
    accepted_extensions: frozenset[str]
    required: bool
    description: str


@dataclass(frozen=True)
class UploadedFile:
    """An incoming file as handed over by the transport layer."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return file_extension(self.filename)


_POLICIES: Mapping[DocumentCategory, ValidationPolicy] = MappingProxyType({
    DocumentCategory.IDENTITY: ValidationPolicy(
        max_size_bytes=5 * MB,
        accepted_media_types=_IMAGE_AND_PDF_TYPES,
        accepted_extensions=_IMAGE_AND_PDF_EXTENSIONS,
        required=True,
        description="Government-issued photo ID (passport, driver's license, etc.)",
    ),
    DocumentCategory.SAFETY_PERMIT: ValidationPolicy(
        max_size_bytes=10 * MB,
        accepted_media_types=_IMAGE_AND_PDF_TYPES,
        accepted_extensions=_IMAGE_AND_PDF_EXTENSIONS,
        required=True,
        description="Safety inspection certificate or permit",
    ),
    DocumentCategory.INSURANCE_CERTIFICATE: ValidationPolicy(
        max_size_bytes=10 * MB,
        accepted_media_types=_IMAGE_AND_PDF_TYPES,
        accepted_extensions=_IMAGE_AND_PDF_EXTENSIONS,
        required=True,
        description="Property insurance certificate",
    ),
    DocumentCategory.PROPERTY_DEED: ValidationPolicy(
        max_size_bytes=10 * MB,
        accepted_media_types=_IMAGE_AND_PDF_TYPES,
        accepted_extensions=_IMAGE_AND_PDF_EXTENSIONS,
        required=True,
        description="Property ownership deed or lease agreement",
    ),
    DocumentCategory.OTHER: ValidationPolicy(
        max_size_bytes=10 * MB,
        accepted_media_types=_IMAGE_AND_PDF_TYPES | _WORD_TYPES,
        accepted_extensions=_IMAGE_AND_PDF_EXTENSIONS | _WORD_EXTENSIONS,
        required=False,
        description="Additional supporting documents",
    ),
})


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or ``""`` when there is none."""
    return os.path.splitext(filename or "")[1].lower()


def policy_for(category: DocumentCategory) -> ValidationPolicy:
    try:
        return _POLICIES[category]
    except KeyError:
        name = getattr(category, "value", category)
        raise ConfigurationError(
            f"No validation policy configured for document category '{name}'"
        ) from None


def policy_table() -> list[tuple[DocumentCategory, ValidationPolicy]]:
    """All (category, policy) pairs in category declaration order."""
    return [(category, policy_for(category)) for category in DocumentCategory]


def validate_file(category: DocumentCategory, file: UploadedFile) -> ValidationPolicy:
    """Raise :class:`PolicyViolation` naming the first rule *file* breaks.

    Rules are checked in order: size, media type, extension, emptiness.
    Returns the policy that was applied.
    """
    policy = policy_for(category)

    if file.size > policy.max_size_bytes:
        raise PolicyViolation(
            "max_size",
            f"File size {file.size} bytes exceeds maximum allowed size "
            f"{policy.max_size_bytes} bytes for {category.label} documents",
            category.value,
        )

    if file.content_type not in policy.accepted_media_types:
        raise PolicyViolation(
            "media_type",
            f"File type {file.content_type} is not allowed for {category.label} documents. "
            f"Allowed types: {', '.join(sorted(policy.accepted_media_types))}",
            category.value,
        )

    if file.extension not in policy.accepted_extensions:
        raise PolicyViolation(
            "extension",
            f"File extension {file.extension or '(none)'} is not allowed for "
            f"{category.label} documents. "
            f"Allowed extensions: {', '.join(sorted(policy.accepted_extensions))}",
            category.value,
        )

    if file.size == 0:
        raise PolicyViolation("empty_file", "File cannot be empty", category.value)

    return policy
