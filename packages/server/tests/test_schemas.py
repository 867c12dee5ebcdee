"""
Unit tests for the shared membership schemas and the role ordering.
"""

from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from app.core.errors import AlreadyMemberError, InvitationExistsError, NotFoundError
from orgadmin_shared.schemas.common import ROLE_ORDER, APIError, Role, has_at_least, role_rank
from orgadmin_shared.schemas.memberships import (
    InvitationResponse,
    MembershipCreateRequest,
    MembershipDeleteResponse,
    MembershipResponse,
)


class TestRoleOrdering:

    def test_owner_is_highest(self):
        assert ROLE_ORDER[-1] == Role.OWNER
        assert ROLE_ORDER[0] == Role.NONE

    def test_rank_is_strictly_increasing(self):
        ranks = [role_rank(r) for r in (Role.NONE, Role.VIEWER, Role.MEMBER, Role.ADMIN, Role.OWNER)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == len(ranks)

    def test_has_at_least(self):
        assert has_at_least(Role.OWNER, Role.ADMIN)
        assert has_at_least(Role.MEMBER, Role.MEMBER)
        assert not has_at_least(Role.VIEWER, Role.MEMBER)
        assert not has_at_least(Role.NONE, Role.VIEWER)

    def test_accepts_plain_strings(self):
        assert has_at_least("ADMIN", "MEMBER")


class TestMembershipCreateRequest:

    def test_camel_case_input(self):
        project_id = uuid.uuid4()
        req = MembershipCreateRequest.model_validate(
            {"email": "a@x.com", "role": "ADMIN", "projectId": str(project_id), "projectRole": "VIEWER"}
        )
        assert req.project_id == project_id
        assert req.project_role == Role.VIEWER
        assert req.wants_project_role

    def test_none_project_role_is_not_a_request(self):
        req = MembershipCreateRequest(email="a@x.com", role=Role.MEMBER, project_role=Role.NONE)
        assert not req.wants_project_role

    def test_missing_project_role(self):
        req = MembershipCreateRequest(email="a@x.com", role=Role.MEMBER, project_id=uuid.uuid4())
        assert not req.wants_project_role

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "nope", "role": "MEMBER"},
            {"email": "a@x.com", "role": "ROOT"},
            {"email": "a@x.com"},
            {"role": "MEMBER"},
        ],
    )
    def test_rejects_invalid(self, body):
        with pytest.raises(ValidationError):
            MembershipCreateRequest.model_validate(body)


class TestResponses:

    def test_membership_dumps_camel_case(self):
        user_id = uuid.uuid4()
        data = MembershipResponse(user_id=user_id, role=Role.ADMIN, email="a@x.com", name=None).model_dump(
            by_alias=True, mode="json"
        )
        assert data == {"userId": str(user_id), "role": "ADMIN", "email": "a@x.com", "name": None}

    def test_invitation_defaults_to_pending(self):
        resp = InvitationResponse(invitation_id=uuid.uuid4(), email="a@x.com", role=Role.MEMBER)
        data = resp.model_dump(by_alias=True, mode="json")
        assert data["status"] == "PENDING"
        assert "invitationId" in data

    def test_delete_response_message(self):
        user_id = uuid.uuid4()
        data = MembershipDeleteResponse(user_id=user_id).model_dump(by_alias=True, mode="json")
        assert data == {"message": "Membership deleted successfully", "userId": str(user_id)}


class TestErrorEnvelope:

    def test_not_found_renders_api_error(self):
        err = NotFoundError("project", "Project not found in this organization")
        assert err.to_api_error() == APIError(
            code="not_found",
            message="Project not found in this organization",
            resource="project",
            status=404,
        )
        assert err.to_dict() == err.to_api_error().model_dump()

    def test_conflicts_share_status(self):
        for err in (AlreadyMemberError(), InvitationExistsError()):
            assert err.to_api_error().status == 409
        assert AlreadyMemberError().to_api_error().resource == "membership"
        assert InvitationExistsError().to_api_error().resource == "invitation"
