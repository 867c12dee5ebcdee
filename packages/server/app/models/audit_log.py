"""Audit log model (append-only, never updated or deleted)."""

from datetime import datetime, timezone
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import JSONType, UUIDMixin


class AuditLog(UUIDMixin, SQLModel, table=True):
    __tablename__ = "audit_logs"

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    actor_id: str = Field(nullable=False)  # user id, or "API" for admin API calls
    actor_type: str = Field(nullable=False)  # user | api
    org_role: Optional[str] = None
    resource_type: str = Field(nullable=False, index=True)  # orgMembership | projectMembership | membershipInvitation
    resource_id: str = Field(nullable=False)
    action: str = Field(nullable=False)  # create | update | delete
    before: Optional[dict] = Field(default=None, sa_type=JSONType)
    after: Optional[dict] = Field(default=None, sa_type=JSONType)
