"""Job-related Pydantic schemas for shared use across server and clients."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import UUID4, Field, model_validator

from .common import CamelModel, JobStatus


# ---------------------------------------------------------------------------
# Job CRUD
# ---------------------------------------------------------------------------

class JobCreate(CamelModel):
    """A manual one-off visit, not tied to a subscription."""
    client_id: UUID4
    location_id: UUID4
    scheduled_date: date
    price_cents: int = Field(ge=0)
    assigned_to: Optional[UUID4] = None
    notes: Optional[str] = None


class JobRead(CamelModel):
    id: UUID4
    org_id: UUID4
    client_id: UUID4
    location_id: UUID4
    subscription_id: Optional[UUID4] = None
    assigned_to: Optional[UUID4] = None
    scheduled_date: date
    status: JobStatus
    price_cents: int
    skip_reason: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    skipped_at: Optional[datetime] = None
    notes: Optional[str] = None
    generated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------

class JobTransition(CamelModel):
    """Request body for POST /jobs/{jobId}/transition."""
    to_status: JobStatus
    skip_reason: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _require_skip_reason(self) -> "JobTransition":
        if self.to_status == JobStatus.SKIPPED and not self.skip_reason:
            raise ValueError("skipReason is required when skipping a job")
        return self
