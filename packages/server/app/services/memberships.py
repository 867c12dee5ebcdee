"""
Membership service: business logic for listing, inviting, updating and
removing organization members.

``create_membership`` is the only operation with real branching: the invited
email either belongs to an existing user (who is added directly, optionally
with a project role) or to nobody yet (who gets a pending invitation).
Conflict checks run before any write, each write is followed by its audit
entry, and the notification goes out last.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog

from app.core.audit import API_ACTOR, AuditRecorder
from app.core.config import Settings, get_settings
from app.core.errors import (
    AlreadyMemberError,
    DuplicateRecordError,
    InvitationExistsError,
    NotFoundError,
)
from app.core.notifications import NotificationGateway, build_invitation_email
from app.models.organization import Organization
from app.models.project import Project
from app.models.user import User
from app.repositories.memberships import MembershipStore
from orgadmin_shared.schemas.common import Role
from orgadmin_shared.schemas.memberships import (
    InvitationResponse,
    MembershipCreateRequest,
    MembershipCreateResponse,
    MembershipDeleteRequest,
    MembershipDeleteResponse,
    MembershipListResponse,
    MembershipResponse,
    MembershipUpsertRequest,
)

log = structlog.get_logger()


async def list_memberships(
    org_id: uuid.UUID, *, store: MembershipStore
) -> MembershipListResponse:
    """List every member of an org with their user details."""
    rows = await store.list_org_memberships(org_id)
    return MembershipListResponse(
        memberships=[
            MembershipResponse(
                user_id=membership.user_id,
                role=membership.role,
                email=user.email,
                name=user.name,
            )
            for membership, user in rows
        ]
    )


async def create_membership(
    org_id: uuid.UUID,
    req: MembershipCreateRequest,
    *,
    store: MembershipStore,
    audit: AuditRecorder,
    notifier: NotificationGateway,
    settings: Optional[Settings] = None,
) -> MembershipCreateResponse:
    """Add an existing user to the org, or invite an email without an account."""
    settings = settings or get_settings()

    org = await store.find_organization(org_id)
    if not org:
        raise NotFoundError("organization", "Organization not found")

    project: Optional[Project] = None
    if req.project_id is not None:
        project = await store.find_project(req.project_id, org_id, exclude_deleted=True)
        if not project:
            raise NotFoundError("project", "Project not found in this organization")

    # Project access is only granted for a live project and a concrete role
    project_role = req.project_role if project and req.wants_project_role else None

    user = await store.find_user_by_email(req.email)
    if user:
        result: MembershipCreateResponse = await _add_existing_user(
            org, user, req.role, project, project_role, store=store, audit=audit
        )
    else:
        result = await _invite_new_user(
            org, req.email, req.role, project, project_role, store=store, audit=audit
        )

    await notifier.send_membership_invitation(
        build_invitation_email(
            to=req.email,
            org_name=org.name,
            org_id=org_id,
            user_exists=user is not None,
            settings=settings,
        )
    )
    return result


async def _add_existing_user(
    org: Organization,
    user: User,
    role: Role,
    project: Optional[Project],
    project_role: Optional[Role],
    *,
    store: MembershipStore,
    audit: AuditRecorder,
) -> MembershipResponse:
    org_id, user_id = org.id, user.id

    if await store.find_org_membership(org_id, user_id):
        log.info("membership.conflict", org_id=str(org_id), user_id=str(user_id))
        raise AlreadyMemberError()

    try:
        membership = await store.create_org_membership(org_id, user_id, role)
    except DuplicateRecordError:
        log.info("membership.conflict", org_id=str(org_id), user_id=str(user_id), race=True)
        raise AlreadyMemberError() from None

    await audit.record(
        resource_type="orgMembership",
        resource_id=str(membership.id),
        action="create",
        org_id=org_id,
        org_role=role.value,
        actor_id=API_ACTOR,
        after=membership,
    )

    if project is not None and project_role is not None:
        try:
            project_membership = await store.create_project_membership(
                project.id, user_id, project_role, membership.id
            )
        except DuplicateRecordError:
            log.info(
                "membership.conflict", project_id=str(project.id), user_id=str(user_id), race=True
            )
            raise AlreadyMemberError("User is already a member of this project") from None
        await audit.record(
            resource_type="projectMembership",
            resource_id=f"{project.id}--{user_id}",
            action="create",
            org_id=org_id,
            org_role=role.value,
            actor_id=API_ACTOR,
            after=project_membership,
        )

    log.info(
        "membership.created",
        org_id=str(org_id),
        user_id=str(user_id),
        role=role.value,
        project_id=str(project.id) if project_role else None,
        project_role=project_role.value if project_role else None,
    )
    return MembershipResponse(
        user_id=user_id,
        role=role,
        email=user.email,
        name=user.name,
    )


async def _invite_new_user(
    org: Organization,
    email: str,
    role: Role,
    project: Optional[Project],
    project_role: Optional[Role],
    *,
    store: MembershipStore,
    audit: AuditRecorder,
) -> InvitationResponse:
    org_id = org.id

    if await store.find_invitation(org_id, email):
        log.info("invitation.conflict", org_id=str(org_id), email=email.lower())
        raise InvitationExistsError()

    try:
        invitation = await store.create_invitation(
            org_id,
            email,
            role,
            project_id=project.id if project is not None and project_role else None,
            project_role=project_role,
            invited_by_user_id=None,
        )
    except DuplicateRecordError:
        log.info("invitation.conflict", org_id=str(org_id), email=email.lower(), race=True)
        raise InvitationExistsError() from None

    await audit.record(
        resource_type="membershipInvitation",
        resource_id=str(invitation.id),
        action="create",
        org_id=org_id,
        org_role=role.value,
        actor_id=API_ACTOR,
        after=invitation,
    )

    log.info(
        "invitation.created",
        org_id=str(org_id),
        invitation_id=str(invitation.id),
        role=role.value,
    )
    return InvitationResponse(
        invitation_id=invitation.id,
        email=email,
        role=role,
    )


async def upsert_membership(
    org_id: uuid.UUID,
    req: MembershipUpsertRequest,
    *,
    store: MembershipStore,
) -> MembershipResponse:
    """Set a user's org role, creating the membership if needed.

    Deliberately writes no audit entry and sends no notification.
    """
    if not await store.find_organization(org_id):
        raise NotFoundError("organization", "Organization not found")

    user = await store.find_user(req.user_id)
    if not user:
        raise NotFoundError("user", "User not found")

    membership = await store.upsert_org_membership(org_id, user.id, req.role)

    log.info("membership.upserted", org_id=str(org_id), user_id=str(user.id), role=membership.role)
    return MembershipResponse(
        user_id=membership.user_id,
        role=membership.role,
        email=user.email,
        name=user.name,
    )


async def remove_membership(
    org_id: uuid.UUID,
    req: MembershipDeleteRequest,
    *,
    store: MembershipStore,
) -> MembershipDeleteResponse:
    """Remove a user from the org. Succeeds whether or not they were a member."""
    removed = await store.delete_org_memberships(org_id, req.user_id)
    log.info("membership.removed", org_id=str(org_id), user_id=str(req.user_id), removed=removed)
    return MembershipDeleteResponse(user_id=req.user_id)
