"""
Membership-related Pydantic schemas shared between server and API clients.

Covers: membership create (invite), upsert, delete request bodies and the
corresponding responses. Field names are snake_case in Python and camelCase
on the wire (``userId``, ``projectRole``, ``invitationId``).
"""

from __future__ import annotations

from typing import List, Optional, Union
from uuid import UUID

from pydantic import EmailStr, Field

from .common import CamelModel, InvitationStatus, Role


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class MembershipCreateRequest(CamelModel):
    """Invite an email address to the org, optionally with a project role."""
    email: EmailStr
    role: Role
    project_id: Optional[UUID] = None
    project_role: Optional[Role] = None

    @property
    def wants_project_role(self) -> bool:
        """A project role of NONE means no project membership is requested."""
        return self.project_role is not None and self.project_role != Role.NONE


class MembershipUpsertRequest(CamelModel):
    """Create or overwrite a user's org role."""
    user_id: UUID
    role: Role


class MembershipDeleteRequest(CamelModel):
    user_id: UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class MembershipResponse(CamelModel):
    """An org member as returned by list, create (existing user) and upsert."""
    user_id: UUID
    role: Role
    email: Optional[str] = None
    name: Optional[str] = None


class InvitationResponse(CamelModel):
    """Returned when the invited email has no account yet."""
    invitation_id: UUID
    email: str
    role: Role
    status: InvitationStatus = InvitationStatus.PENDING


class MembershipListResponse(CamelModel):
    memberships: List[MembershipResponse] = Field(default_factory=list)


class MembershipDeleteResponse(CamelModel):
    message: str = "Membership deleted successfully"
    user_id: UUID


MembershipCreateResponse = Union[MembershipResponse, InvitationResponse]
