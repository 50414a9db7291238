"""Single decision path for who may read or change an application's documents.

Pure functions over an :class:`Actor` and an :class:`ApplicationSnapshot`;
nothing here touches the database.

Rules (first match wins):
  1. Privileged roles may always read. They may write only when elevated.
  2. Anyone else must own the application.
  3. Creating documents needs a mutable status (draft / under review).
  4. Deleting documents needs status draft.
"""

from __future__ import annotations

from dataclasses import dataclass

from hostcert.core.exceptions import AccessDenied, InvalidStateError
from hostcert.domain.enums import AccessIntent, ApplicationStatus, UserRole


@dataclass(frozen=True)
class Actor:
    """Already-authenticated caller identity."""

    id: str
    email: str
    role: UserRole


@dataclass(frozen=True)
class ApplicationSnapshot:
    """Read-only, point-in-time view of an application's owner and status."""

    id: str
    owner_id: str
    status: ApplicationStatus


_OWNER_ONLY_MESSAGES = {
    AccessIntent.READ: "You can only access documents from your own applications",
    AccessIntent.WRITE_CREATE: "You can only upload documents to your own applications",
    AccessIntent.WRITE_DELETE: "You can only delete documents from your own applications",
}


def check_access(
    actor_role: UserRole,
    actor_id: str,
    snapshot: ApplicationSnapshot,
    intent: AccessIntent,
    *,
    privileged_writes: bool = False,
) -> None:
    """Raise :class:`AccessDenied` or :class:`InvalidStateError` unless allowed."""
    details = {"applicationId": snapshot.id, "intent": intent.value}

    if actor_role.is_privileged:
        if intent is AccessIntent.READ:
            return
        if not privileged_writes:
            raise AccessDenied(
                "Reviewers cannot modify host documents through this workflow",
                details=details,
            )
    elif actor_id != snapshot.owner_id:
        raise AccessDenied(_OWNER_ONLY_MESSAGES[intent], details=details)

    if intent is AccessIntent.WRITE_CREATE and not snapshot.status.is_mutable:
        raise InvalidStateError(
            "Cannot upload documents to submitted applications",
            details={**details, "status": snapshot.status.value},
        )

    if intent is AccessIntent.WRITE_DELETE and snapshot.status is not ApplicationStatus.DRAFT:
        raise InvalidStateError(
            "Cannot delete documents from submitted applications",
            details={**details, "status": snapshot.status.value},
        )


def can_access(
    actor_role: UserRole,
    actor_id: str,
    snapshot: ApplicationSnapshot,
    intent: AccessIntent,
    *,
    privileged_writes: bool = False,
) -> bool:
    try:
        check_access(
            actor_role, actor_id, snapshot, intent, privileged_writes=privileged_writes
        )
    except (AccessDenied, InvalidStateError):
        return False
    return True
