"""Subscription request/response schemas (camelCase on the wire)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import UUID4, Field, model_validator

from .common import CamelModel, DayOfWeek, SubscriptionStatus


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SubscriptionCreate(CamelModel):
    """Body for POST /subscriptions.

    ``frequency`` takes a cadence code or an onboarding label ("every three
    weeks"); when omitted the billing interval or the plan's frequency is used.
    """

    client_id: UUID4
    start_date: date
    location_id: Optional[UUID4] = None
    plan_id: Optional[UUID4] = None
    frequency: Optional[str] = None
    billing_interval: Optional[str] = None
    preferred_day: Optional[DayOfWeek] = None
    end_date: Optional[date] = None
    price_override_cents: Optional[int] = Field(default=None, ge=0)
    initial_cleanup_required: bool = False
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_cadence_source(self) -> "SubscriptionCreate":
        if not (self.frequency or self.billing_interval or self.plan_id):
            raise ValueError("One of frequency, billingInterval or planId is required")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class SubscriptionUpdate(CamelModel):
    status: Optional[SubscriptionStatus] = None
    frequency: Optional[str] = None
    preferred_day: Optional[DayOfWeek] = None
    price_per_visit_cents: Optional[int] = Field(default=None, ge=0)
    end_date: Optional[date] = None
    pause_start_date: Optional[date] = None
    pause_end_date: Optional[date] = None
    cancel_reason: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_pause_window(self) -> "SubscriptionUpdate":
        if (
            self.pause_start_date is not None
            and self.pause_end_date is not None
            and self.pause_end_date < self.pause_start_date
        ):
            raise ValueError("pauseEndDate must not be before pauseStartDate")
        return self


class RegenerateRequest(CamelModel):
    """Body for POST /subscriptions/{id}/regenerate."""
    horizon_days: Optional[int] = Field(default=None, ge=1, le=90)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class SubscriptionRead(CamelModel):
    id: UUID4
    org_id: UUID4
    client_id: UUID4
    location_id: UUID4
    plan_id: Optional[UUID4] = None
    status: SubscriptionStatus
    frequency: str
    preferred_day: Optional[DayOfWeek] = None
    price_per_visit_cents: int
    start_date: date
    end_date: Optional[date] = None
    next_service_date: Optional[date] = None
    pause_start_date: Optional[date] = None
    pause_end_date: Optional[date] = None
    canceled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    notes: Optional[str] = None
    initial_cleanup_required: bool = False
    initial_cleanup_completed: bool = False
    created_at: datetime
    updated_at: datetime


class SubscriptionCreated(SubscriptionRead):
    jobs_generated: int = 0


class SubscriptionChangeResult(CamelModel):
    subscription: SubscriptionRead
    jobs_voided: int = 0
    jobs_generated: int = 0


class RegenerateResult(CamelModel):
    subscription_id: UUID4
    horizon_days: int
    jobs_generated: int
    next_service_date: Optional[date] = None
