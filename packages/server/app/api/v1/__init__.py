"""
API v1 Router

All org-scoped endpoints are prefixed with /orgs/{orgId}.
"""

from fastapi import APIRouter, Depends

from app.core.auth import require_admin_api_key
from . import memberships

router = APIRouter()

router.include_router(
    memberships.router,
    prefix="/orgs/{orgId}/memberships",
    tags=["Memberships"],
    dependencies=[Depends(require_admin_api_key)],
)


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/orgs/{orgId}/memberships",
        ],
    }
