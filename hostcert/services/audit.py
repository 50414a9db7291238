"""SQL-backed audit sink writing to the immutable audit_trail table."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hostcert.domain.audit import AuditTrail
from hostcert.services.permissions import Actor
from hostcert.services.ports import AuditSink

logger = logging.getLogger(__name__)


def severity_for(event_type: str) -> str:
    return "HIGH" if "DELETE" in event_type else "LOW"


class SqlAuditSink(AuditSink):
    """Persists one audit row per event in its own session.

    Errors propagate to the caller; the workflow decides that audit failures
    must not fail the primary operation.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], entity_type: str = "document"):
        self._session_factory = session_factory
        self._entity_type = entity_type

    async def record(
        self,
        event_type: str,
        subject_id: str,
        actor: Actor,
        metadata: dict[str, Any],
    ) -> None:
        async with self._session_factory() as session:
            session.add(
                AuditTrail(
                    user_id=actor.id,
                    user_email=actor.email,
                    user_role=actor.role.value,
                    action=event_type,
                    entity_type=self._entity_type,
                    entity_id=subject_id,
                    severity=severity_for(event_type),
                    new_value=metadata,
                    description=f"{event_type} {self._entity_type} {subject_id} by {actor.email}",
                )
            )
            await session.commit()
        logger.debug("Audit %s recorded for %s %s", event_type, self._entity_type, subject_id)
