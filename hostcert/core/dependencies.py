"""FastAPI dependencies for the caller identity and the object store.

Authentication happens upstream; the gateway forwards the verified identity
as X-Actor-* headers.
"""


from fastapi import Header, Request

from hostcert.core.exceptions import UnauthorizedError
from hostcert.domain.enums import UserRole
from hostcert.services.permissions import Actor
from hostcert.services.ports import StorageBackend


def get_current_actor(
    actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
    actor_email: str | None = Header(default=None, alias="X-Actor-Email"),
    actor_role: str | None = Header(default=None, alias="X-Actor-Role"),
) -> Actor:
    if not actor_id or not actor_role:
        raise UnauthorizedError()
    try:
        role = UserRole(actor_role.strip().lower())
    except ValueError:
        raise UnauthorizedError(f"Unknown role '{actor_role}'") from None
    return Actor(id=actor_id, email=actor_email or "", role=role)


def get_storage(request: Request) -> StorageBackend | None:
    """Return the object store the application was created with, if any."""
    return getattr(request.app.state, "storage", None)
