"""
Organization membership admin endpoints.

GET    /api/v1/orgs/{orgId}/memberships  List org members
POST   /api/v1/orgs/{orgId}/memberships  Add an existing user or invite an email
PUT    /api/v1/orgs/{orgId}/memberships  Create or update a member's role
DELETE /api/v1/orgs/{orgId}/memberships  Remove a member (idempotent)

All routes require the admin API key (see ``app.core.auth``).
"""

from __future__ import annotations

import uuid
from typing import Union

from fastapi import APIRouter, Depends

from app.core.audit import AuditRecorder, get_audit_recorder
from app.core.config import Settings, get_settings
from app.core.notifications import NotificationGateway, get_notification_gateway
from app.repositories.memberships import MembershipStore, get_membership_store
from app.services import memberships as membership_service
from orgadmin_shared.schemas.memberships import (
    InvitationResponse,
    MembershipCreateRequest,
    MembershipDeleteRequest,
    MembershipDeleteResponse,
    MembershipListResponse,
    MembershipResponse,
    MembershipUpsertRequest,
)

router = APIRouter()


@router.get("", response_model=MembershipListResponse, tags=["Memberships"])
async def list_memberships(
    orgId: uuid.UUID,
    store: MembershipStore = Depends(get_membership_store),
):
    """List all memberships of the org with user id, email and name."""
    return await membership_service.list_memberships(orgId, store=store)


@router.post(
    "",
    response_model=Union[MembershipResponse, InvitationResponse],
    tags=["Memberships"],
)
async def create_membership(
    orgId: uuid.UUID,
    body: MembershipCreateRequest,
    store: MembershipStore = Depends(get_membership_store),
    audit: AuditRecorder = Depends(get_audit_recorder),
    notifier: NotificationGateway = Depends(get_notification_gateway),
    settings: Settings = Depends(get_settings),
):
    """Add a user to the org. Emails without an account get a pending invitation."""
    return await membership_service.create_membership(
        orgId,
        body,
        store=store,
        audit=audit,
        notifier=notifier,
        settings=settings,
    )


@router.put("", response_model=MembershipResponse, tags=["Memberships"])
async def upsert_membership(
    orgId: uuid.UUID,
    body: MembershipUpsertRequest,
    store: MembershipStore = Depends(get_membership_store),
):
    """Set a user's org role, creating the membership if it does not exist."""
    return await membership_service.upsert_membership(orgId, body, store=store)


@router.delete("", response_model=MembershipDeleteResponse, tags=["Memberships"])
async def remove_membership(
    orgId: uuid.UUID,
    body: MembershipDeleteRequest,
    store: MembershipStore = Depends(get_membership_store),
):
    """Remove a user from the org. Succeeds even if they were not a member."""
    return await membership_service.remove_membership(orgId, body, store=store)
