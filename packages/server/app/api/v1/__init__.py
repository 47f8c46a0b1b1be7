"""
API v1 Router

All org-scoped endpoints are prefixed with /orgs/{orgSlug}.
"""

from fastapi import APIRouter
from . import jobs, subscriptions

router = APIRouter()

router.include_router(
    subscriptions.router, prefix="/orgs/{orgSlug}/subscriptions", tags=["Subscriptions"]
)
router.include_router(jobs.router, prefix="/orgs/{orgSlug}/jobs", tags=["Jobs"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/orgs/{orgSlug}/subscriptions",
            "/orgs/{orgSlug}/subscriptions/{subscriptionId}/regenerate",
            "/orgs/{orgSlug}/jobs",
            "/orgs/{orgSlug}/jobs/{jobId}/transition",
        ],
    }
