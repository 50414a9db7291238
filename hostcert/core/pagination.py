"""Pagination helpers for the reviewer document listing."""


from fastapi import Query
from pydantic import BaseModel

from hostcert.core.exceptions import AppException

DOCUMENT_SORT_FIELDS = ("uploaded_at", "original_name", "size_bytes", "category")


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=uploaded_at&order=desc`.

    Only the columns in ``DOCUMENT_SORT_FIELDS`` can be sorted on.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=200, description="Items per page"),
        sort: str = Query(default="uploaded_at", description="Sort field"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        if sort not in DOCUMENT_SORT_FIELDS:
            raise AppException(
                f"Cannot sort documents by '{sort}'",
                status_code=422,
                code="VALIDATION_ERROR",
                details={"allowed": list(DOCUMENT_SORT_FIELDS)},
            )
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
