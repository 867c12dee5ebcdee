"""
Audit recording for mutating membership actions.

Every write made by the membership workflow is followed by exactly one
``record`` call describing it. Entries are append-only.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional, Protocol

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.core.database import get_session
from app.models.audit_log import AuditLog

log = structlog.get_logger()

# Actor id recorded for calls made through the admin API (no user session)
API_ACTOR = "API"


def snapshot(obj: Any) -> Optional[dict]:
    """JSON-safe dict of a model instance (or passthrough for dicts/None)."""
    if obj is None or isinstance(obj, dict):
        return obj
    if isinstance(obj, SQLModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Cannot snapshot {type(obj).__name__} for the audit log")


class AuditRecorder(Protocol):
    async def record(
        self,
        *,
        resource_type: str,
        resource_id: str,
        action: str,
        org_id: uuid.UUID,
        org_role: Optional[str],
        actor_id: str,
        after: Any = None,
        before: Any = None,
    ) -> None: ...


class DatabaseAuditRecorder:
    """Writes audit entries into ``audit_logs`` inside the caller's transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(
        self,
        *,
        resource_type: str,
        resource_id: str,
        action: str,
        org_id: uuid.UUID,
        org_role: Optional[str],
        actor_id: str,
        after: Any = None,
        before: Any = None,
    ) -> None:
        entry = AuditLog(
            org_id=org_id,
            actor_id=actor_id,
            actor_type="api" if actor_id == API_ACTOR else "user",
            org_role=org_role,
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            before=snapshot(before),
            after=snapshot(after),
        )
        self._session.add(entry)
        await self._session.flush()

        log.info(
            "audit.recorded",
            org_id=str(org_id),
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
        )


async def get_audit_recorder(
    session: AsyncSession = Depends(get_session),
) -> AuditRecorder:
    return DatabaseAuditRecorder(session)
