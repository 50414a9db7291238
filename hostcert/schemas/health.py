"""Health-check response returned by /health."""

from hostcert.schemas.document import CamelModel


class HealthResponse(CamelModel):
    status: str = "ok"
    app: str
    env: str
    # False until an object store is attached to app.state
    storage_configured: bool
