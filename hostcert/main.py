"""HostCert API — FastAPI application factory."""


import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from hostcert.core.config import settings
from hostcert.core.exceptions import register_exception_handlers
from hostcert.schemas.health import HealthResponse
from hostcert.services.ports import StorageBackend

# v1 routers
from hostcert.routers.v1.documents import router as documents_v1_router


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


def create_app(storage: StorageBackend | None = None) -> FastAPI:
    """Build the API.

    *storage* is the deployment's object store; it can also be attached
    later through ``app.state.storage``.
    """
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.storage = storage

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(documents_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health(request: Request):
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            storage_configured=getattr(request.app.state, "storage", None) is not None,
        )

    return app


app = create_app()
