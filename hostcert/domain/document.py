"""SQLAlchemy ORM model for uploaded application documents.

Rows are never updated: a correction is a delete followed by a new upload.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from hostcert.db.base import Base
from hostcert.domain.enums import DocumentCategory
from hostcert.domain.mixins import _now, enum_type

# Every category except "other" holds at most one live document per application.
_SINGLE_CATEGORY_CLAUSE = text("category != 'other'")
CATEGORY_UNIQUE_INDEX = "uq_documents_application_category"


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        Index(
            CATEGORY_UNIQUE_INDEX,
            "application_id",
            "category",
            unique=True,
            sqlite_where=_SINGLE_CATEGORY_CLAUSE,
            postgresql_where=_SINGLE_CATEGORY_CLAUSE,
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category: Mapped[DocumentCategory] = mapped_column(
        enum_type(DocumentCategory), nullable=False
    )

    # Object storage reference
    storage_key: Mapped[str] = mapped_column(String(500), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
