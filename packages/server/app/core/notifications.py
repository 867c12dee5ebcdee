"""
Membership invitation notifications.

The workflow hands a ``MembershipInvitationEmail`` to a gateway and awaits
it; delivery itself (templating, SMTP, retries) belongs to whatever sits
behind the gateway. Send failures are not caught here.
"""

from __future__ import annotations

import uuid
from typing import Optional, Protocol

import httpx
import structlog
from fastapi import Depends
from pydantic import BaseModel

from app.core.config import Settings, get_settings

log = structlog.get_logger()

DEFAULT_INVITER_EMAIL = "noreply@orgadmin.local"


class MembershipInvitationEmail(BaseModel):
    inviter_email: str
    inviter_name: str
    to: str
    org_name: str
    org_id: uuid.UUID
    user_exists: bool
    environment: str


class NotificationGateway(Protocol):
    async def send_membership_invitation(self, email: MembershipInvitationEmail) -> None: ...


class LogNotificationGateway:
    """Logs invitations instead of delivering them (local development)."""

    async def send_membership_invitation(self, email: MembershipInvitationEmail) -> None:
        log.info(
            "notification.sent",
            transport="log",
            to=email.to,
            org_id=str(email.org_id),
            user_exists=email.user_exists,
        )


class WebhookNotificationGateway:
    """POSTs the invitation payload to an email-delivery webhook."""

    def __init__(
        self,
        url: str,
        timeout: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def send_membership_invitation(self, email: MembershipInvitationEmail) -> None:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        ) as client:
            resp = await client.post(
                self._url,
                json={"type": "membership_invitation", **email.model_dump(mode="json")},
            )
            resp.raise_for_status()

        log.info(
            "notification.sent",
            transport="webhook",
            to=email.to,
            org_id=str(email.org_id),
            user_exists=email.user_exists,
            status=resp.status_code,
        )


def build_invitation_email(
    *,
    to: str,
    org_name: str,
    org_id: uuid.UUID,
    user_exists: bool,
    settings: Settings,
) -> MembershipInvitationEmail:
    return MembershipInvitationEmail(
        inviter_email=settings.email_from_address or DEFAULT_INVITER_EMAIL,
        inviter_name=settings.inviter_name,
        to=to,
        org_name=org_name,
        org_id=org_id,
        user_exists=user_exists,
        environment=settings.environment,
    )


def get_notification_gateway(
    settings: Settings = Depends(get_settings),
) -> NotificationGateway:
    if settings.notification_webhook_url:
        return WebhookNotificationGateway(
            settings.notification_webhook_url,
            timeout=settings.notification_timeout_seconds,
        )
    return LogNotificationGateway()
