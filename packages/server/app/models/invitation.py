"""Pending membership invitation for an email without an account."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class MembershipInvitation(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "membership_invitations"
    __table_args__ = (
        sa.UniqueConstraint("org_id", "email", name="uq_membership_invitations_org_email"),
    )

    org_id: uuid.UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True, ondelete="CASCADE"
    )
    email: str = Field(nullable=False, index=True)  # stored lower-cased
    org_role: str = Field(nullable=False)
    project_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="projects.id", ondelete="SET NULL"
    )
    project_role: Optional[str] = None
    invited_by_user_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL"
    )  # null when created through the admin API
