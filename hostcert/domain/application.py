"""SQLAlchemy ORM model for certification applications.

Only the columns the document workflow reads are mapped here; the rest of the
application record (property details, checklist answers, review notes) belongs
to the application lifecycle.
"""

from __future__ import annotations

import uuid
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from hostcert.db.base import Base
from hostcert.domain.enums import ApplicationStatus
from hostcert.domain.mixins import TimestampMixin, enum_type


class Application(Base, TimestampMixin):
    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    host_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    status: Mapped[ApplicationStatus] = mapped_column(
        enum_type(ApplicationStatus),
        default=ApplicationStatus.DRAFT,
        nullable=False,
        index=True,
    )
