"""Application-level exceptions and FastAPI exception handlers.

The document workflow raises these directly; the transport layer only maps
them onto HTTP responses.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        details = {"entity": entity.lower(), "id": entity_id} if entity_id else {"entity": entity.lower()}
        super().__init__(msg, status_code=404, code="NOT_FOUND", details=details)

class AccessDenied(AppException):
    def __init__(self, message: str = "Access denied", details: dict[str, Any] | None = None):
        super().__init__(message, status_code=403, code="FORBIDDEN", details=details)

class UnauthorizedError(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401, code="UNAUTHORIZED")

class InvalidStateError(AppException):
    """The application's lifecycle status forbids the requested mutation."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, status_code=409, code="INVALID_STATE", details=details)

class PolicyViolation(AppException):
    """An uploaded file breaks one rule of its category's validation policy."""

    def __init__(self, rule: str, message: str, category: str):
        self.rule = rule
        super().__init__(
            message,
            status_code=422,
            code="POLICY_VIOLATION",
            details={"rule": rule, "category": category},
        )

class DuplicateDocumentError(AppException):
    def __init__(self, category: str, application_id: str):
        label = category.replace("_", " ")
        super().__init__(
            f"A {label} document already exists for this application",
            status_code=409,
            code="DUPLICATE_DOCUMENT",
            details={"category": category, "applicationId": application_id},
        )

class StorageUnavailable(AppException):
    """The object storage collaborator failed; safe for the caller to retry."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, status_code=503, code="STORAGE_UNAVAILABLE", details=details)

class PersistenceUnavailable(AppException):
    """The database failed; safe for the caller to retry."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, status_code=503, code="PERSISTENCE_UNAVAILABLE", details=details)

class ConfigurationError(AppException):
    """Deployment defect, e.g. a document category without a validation policy."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="CONFIGURATION_ERROR")

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details or {}}}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
