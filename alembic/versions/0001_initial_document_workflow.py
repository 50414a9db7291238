"""Initial schema: applications, documents, audit_trail.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_APPLICATION_STATUSES = (
    "draft", "submitted", "under_review", "approved", "rejected", "more_info_requested",
)
_DOCUMENT_CATEGORIES = (
    "identity", "safety_permit", "insurance_certificate", "property_deed", "other",
)


def upgrade() -> None:
    op.create_table(
        "applications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("host_id", sa.String(36), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*_APPLICATION_STATUSES, name="applicationstatus", native_enum=False, length=50),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_applications_host_id", "applications", ["host_id"])
    op.create_index("ix_applications_status", "applications", ["status"])

    op.create_table(
        "documents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "application_id",
            sa.String(36),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "category",
            sa.Enum(*_DOCUMENT_CATEGORIES, name="documentcategory", native_enum=False, length=50),
            nullable=False,
        ),
        sa.Column("storage_key", sa.String(500), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(255), nullable=False),
        sa.Column("size_bytes", sa.Integer, nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_documents_application_id", "documents", ["application_id"])
    op.create_index("ix_documents_uploaded_at", "documents", ["uploaded_at"])
    op.create_index(
        "uq_documents_application_category",
        "documents",
        ["application_id", "category"],
        unique=True,
        sqlite_where=sa.text("category != 'other'"),
        postgresql_where=sa.text("category != 'other'"),
    )

    op.create_table(
        "audit_trail",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("user_role", sa.String(50), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(100), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=True),
        sa.Column("severity", sa.String(20), nullable=False),
        sa.Column("new_value", sa.JSON, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_trail_user_id", "audit_trail", ["user_id"])
    op.create_index("ix_audit_trail_action", "audit_trail", ["action"])
    op.create_index("ix_audit_trail_entity_type", "audit_trail", ["entity_type"])
    op.create_index("ix_audit_trail_entity_id", "audit_trail", ["entity_id"])
    op.create_index("ix_audit_trail_created_at", "audit_trail", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_trail")
    op.drop_index("uq_documents_application_category", table_name="documents")
    op.drop_table("documents")
    op.drop_table("applications")
