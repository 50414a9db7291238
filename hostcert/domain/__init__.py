"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  application.py  — Certification applications (owner + lifecycle status)
  document.py     — Uploaded documents, one per category except "other"
  audit.py        — Immutable audit trail (never updated or deleted)
  enums.py        — Closed value sets (categories, statuses, roles)
  mixins.py       — Shared TimestampMixin and enum column helper
"""

from hostcert.domain.application import Application
from hostcert.domain.audit import AuditTrail
from hostcert.domain.document import Document

__all__ = [
    "Application",
    "AuditTrail",
    "Document",
]
