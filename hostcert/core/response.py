"""Response envelopes shared by the document endpoints.

Single items and plain lists go out as ``{data: ...}``; the reviewer listing
adds a ``meta`` block with page counters.
"""


import math
from typing import Generic, TypeVar
from urllib.parse import quote

from pydantic import BaseModel

from hostcert.core.pagination import PageMeta

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    """Build the body of a ListResponse for one page of *items*."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 1,
        },
    }


def attachment_header(file_name: str) -> str:
    """Content-Disposition value for downloading *file_name*.

    Headers are latin-1 on the wire, so names outside printable ASCII get an
    underscore-substituted ``filename`` plus an RFC 5987 ``filename*``.
    """
    fallback = "".join(
        ch if 32 <= ord(ch) < 127 and ch not in '"\\' else "_" for ch in file_name
    )
    encoded = quote(file_name)
    if encoded == file_name:
        return f'attachment; filename="{file_name}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"
