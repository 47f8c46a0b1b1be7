"""
Organization-related Pydantic schemas.

Covers: org lifecycle states and the OrgSettings document stored on each
organization (scheduling defaults used by job generation).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class OrgStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class SchedulingSettings(BaseModel):
    default_horizon_days: int = Field(
        default=14,
        ge=1,
        le=90,
        description="Days of jobs generated when a subscription is created or changed",
    )
    nightly_horizon_days: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Days of jobs the nightly top-up keeps generated ahead",
    )
    default_price_per_visit_cents: int = Field(
        default=3500,
        ge=0,
        description="Per-visit price used when a subscription has no override",
    )


class OrgSettings(BaseModel):
    """Complete org-level settings schema. All fields optional with defaults."""

    scheduling: SchedulingSettings = Field(default_factory=SchedulingSettings)
    timezone: str = Field(default="America/Los_Angeles", description="Org-local timezone")
