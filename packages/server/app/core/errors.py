"""
Typed errors raised by the membership services.

Domain errors are ``HTTPException`` subclasses so FastAPI renders them
directly; ``code`` and ``resource`` let non-HTTP callers branch on the kind
of failure without parsing messages.
"""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException

from orgadmin_shared.schemas.common import APIError


class MembershipError(HTTPException):
    """Base class for membership workflow failures."""

    status: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, resource: Optional[str] = None):
        self.message = message
        self.resource = resource
        super().__init__(
            status_code=self.status,
            detail={"code": self.code, "message": message, "resource": resource},
        )

    def to_api_error(self) -> APIError:
        return APIError(
            code=self.code,
            message=self.message,
            resource=self.resource,
            status=self.status_code,
        )

    def to_dict(self) -> dict:
        return self.to_api_error().model_dump()


class NotFoundError(MembershipError):
    """An organization, project or user referenced by the request does not exist."""

    status = 404
    code = "not_found"

    def __init__(self, resource: str, message: Optional[str] = None):
        super().__init__(message or f"{resource.capitalize()} not found", resource=resource)


class ConflictError(MembershipError):
    status = 409
    code = "conflict"


class AlreadyMemberError(ConflictError):
    code = "already_member"

    def __init__(self, message: str = "User is already a member of this organization"):
        super().__init__(message, resource="membership")


class InvitationExistsError(ConflictError):
    code = "invitation_exists"

    def __init__(self, message: str = "Invitation already exists for this email"):
        super().__init__(message, resource="invitation")


class DuplicateRecordError(Exception):
    """Raised by the store when a write violates a uniqueness constraint.

    Kept separate from other write failures so callers can treat a lost
    check-then-insert race exactly like the pre-check conflict.
    """

    def __init__(self, table: str, key: dict):
        self.table = table
        self.key = key
        super().__init__(f"Duplicate {table} row for {key}")
