"""
Admin API authentication for Org Admin.

The membership endpoints are an administrative surface: callers present the
instance-wide admin API key as ``Authorization: Bearer <key>``. Per-user
sessions and role checks live outside this service.
"""

from __future__ import annotations

import secrets
from typing import Optional

import structlog
from fastapi import Depends, HTTPException
from fastapi.security import APIKeyHeader

from app.core.config import Settings, get_settings

log = structlog.get_logger()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a ``Bearer <token>`` header value, else None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    return token or None


def verify_admin_api_key(key: str, expected: str) -> bool:
    """Constant-time comparison of a presented key against the configured one."""
    return secrets.compare_digest(key.encode(), expected.encode())


async def require_admin_api_key(
    authorization: Optional[str] = Depends(api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """Dependency guarding the admin API."""
    if not settings.admin_api_key:
        raise HTTPException(status_code=403, detail="Admin API is not configured")

    token = parse_bearer(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Authentication required")

    if not verify_admin_api_key(token, settings.admin_api_key):
        log.warning("auth.admin_key_rejected")
        raise HTTPException(status_code=401, detail="Invalid admin API key")
