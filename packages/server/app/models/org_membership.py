"""User-Organization membership. One row per (org_id, user_id)."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class OrganizationMembership(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organization_memberships"
    __table_args__ = (
        sa.UniqueConstraint("org_id", "user_id", name="uq_organization_memberships_org_user"),
    )

    org_id: uuid.UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True, ondelete="CASCADE"
    )
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, index=True, ondelete="CASCADE"
    )
    role: str = Field(nullable=False)  # OWNER | ADMIN | MEMBER | VIEWER | NONE
