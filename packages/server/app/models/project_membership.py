"""User-Project membership, authorized by an organization membership."""

import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin


class ProjectMembership(TimestampMixin, SQLModel, table=True):
    __tablename__ = "project_memberships"

    project_id: uuid.UUID = Field(foreign_key="projects.id", primary_key=True, ondelete="CASCADE")
    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    org_membership_id: uuid.UUID = Field(
        foreign_key="organization_memberships.id",
        nullable=False,
        index=True,
        ondelete="CASCADE",
    )
    role: str = Field(nullable=False)
