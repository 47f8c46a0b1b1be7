"""
Subscription service layer: create, update and regenerate jobs.

Handles:
- Subscription creation with location/plan/price resolution
- Change planning: which updates void future jobs and which regenerate them
- Administrative voiding of future scheduled jobs
- Keeping next_service_date equal to the earliest pending job
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

import structlog
from fastapi import HTTPException
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.base import utcnow
from app.models.client import Client, Location
from app.models.job import Job
from app.models.organization import Organization
from app.models.service_plan import ServicePlan
from app.models.subscription import Subscription
from app.scheduling import (
    ALL_STATUSES,
    OCCUPYING_STATUSES,
    FrequencyResolver,
    JobSynchronizer,
    PersistenceError,
    SqlJobStore,
    SubscriptionSnapshot,
    default_resolver,
)
from app.services.activity import record_activity
from app.services.organizations import get_org_settings, org_today
from scoopops_shared.schemas.common import (
    Frequency,
    JobStatus,
    PENDING_JOB_STATUSES,
    SubscriptionStatus,
)
from scoopops_shared.schemas.subscriptions import SubscriptionCreate, SubscriptionUpdate

log = structlog.get_logger()

# Fields that may be changed but never cleared through an update
NON_NULLABLE_FIELDS = {"status", "frequency", "price_per_visit_cents"}

# Fields whose change invalidates already generated dates
SCHEDULE_FIELDS = {"frequency", "preferred_day", "end_date", "pause_start_date", "pause_end_date"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_subscription_or_404(
    session: AsyncSession,
    subscription_id: uuid.UUID,
    org_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Subscription:
    stmt = select(Subscription).where(
        Subscription.id == subscription_id,
        Subscription.org_id == org_id,
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    subscription = result.scalar_one_or_none()
    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return subscription


async def list_subscriptions(
    session: AsyncSession,
    org_id: uuid.UUID,
    *,
    client_id: Optional[uuid.UUID] = None,
    status: Optional[SubscriptionStatus] = None,
    frequency: Optional[Frequency] = None,
    page: int = 1,
    per_page: int = 25,
) -> list[Subscription]:
    stmt = select(Subscription).where(Subscription.org_id == org_id)
    if client_id:
        stmt = stmt.where(Subscription.client_id == client_id)
    if status:
        stmt = stmt.where(Subscription.status == status.value)
    if frequency:
        stmt = stmt.where(Subscription.frequency == frequency.value)
    stmt = (
        stmt.order_by(Subscription.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


def synchronizer_for(
    session: AsyncSession,
    generated_by: str = "subscription_change",
    occupying_statuses: Iterable[JobStatus] = OCCUPYING_STATUSES,
) -> JobSynchronizer:
    return JobSynchronizer(
        SqlJobStore(session),
        generated_by=generated_by,
        occupying_statuses=occupying_statuses,
    )


async def refresh_next_service_date(
    session: AsyncSession, subscription: Subscription
) -> Optional[date]:
    """Set next_service_date to the earliest pending job's date (or None)."""
    stmt = select(func.min(Job.scheduled_date)).where(
        Job.subscription_id == subscription.id,
        Job.status.in_([s.value for s in PENDING_JOB_STATUSES]),
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        log.error(
            "subscription.next_service_date_failed",
            subscription_id=str(subscription.id),
            error=str(exc),
        )
        raise PersistenceError("Failed to read next service date") from exc
    next_date = result.scalar_one_or_none()
    if subscription.next_service_date != next_date:
        subscription.next_service_date = next_date
        session.add(subscription)
    return next_date


async def void_future_jobs(
    session: AsyncSession,
    subscription: Subscription,
    reason: str,
    today: date,
) -> int:
    """Cancel the subscription's SCHEDULED jobs dated today or later.

    Jobs already started or finished are left alone. Returns the number of
    jobs canceled.
    """
    stmt = (
        update(Job)
        .where(
            Job.org_id == subscription.org_id,
            Job.subscription_id == subscription.id,
            Job.scheduled_date >= today,
            Job.status == JobStatus.SCHEDULED.value,
        )
        .values(
            status=JobStatus.CANCELED.value,
            skip_reason=reason,
            updated_at=utcnow(),
        )
        .returning(Job.id)
        .execution_options(synchronize_session=False)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        log.error("jobs.void_failed", subscription_id=str(subscription.id), error=str(exc))
        raise PersistenceError("Failed to void jobs") from exc
    voided = len(result.all())
    if voided:
        log.info(
            "jobs.voided",
            subscription_id=str(subscription.id),
            count=voided,
            reason=reason,
        )
    return voided


def resolve_frequency(
    body: SubscriptionCreate,
    plan: Optional[ServicePlan],
    resolver: FrequencyResolver = default_resolver,
) -> Frequency:
    """Cadence for a new subscription: explicit label, then billing interval,
    then the plan's frequency."""
    if body.frequency:
        return resolver.normalize(body.frequency)
    if body.billing_interval:
        return resolver.normalize(body.billing_interval)
    if plan is not None:
        return resolver.normalize(plan.frequency)
    raise HTTPException(status_code=422, detail="Subscription frequency is required")


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def _get_client_or_404(session: AsyncSession, client_id: uuid.UUID, org_id: uuid.UUID) -> Client:
    client = await session.get(Client, client_id)
    if not client or client.org_id != org_id:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


async def _resolve_location(
    session: AsyncSession, client: Client, location_id: Optional[uuid.UUID]
) -> Location:
    if location_id:
        location = await session.get(Location, location_id)
        if not location or location.client_id != client.id or location.org_id != client.org_id:
            raise HTTPException(status_code=404, detail="Location not found")
        return location

    result = await session.execute(
        select(Location)
        .where(
            Location.client_id == client.id,
            Location.is_primary == True,  # noqa: E712
            Location.is_active == True,  # noqa: E712
        )
        .limit(1)
    )
    location = result.scalar_one_or_none()
    if not location:
        raise HTTPException(status_code=422, detail="Client has no primary service location")
    return location


async def create_subscription(
    session: AsyncSession,
    org: Organization,
    body: SubscriptionCreate,
    actor_id: Optional[uuid.UUID] = None,
    *,
    today: Optional[date] = None,
) -> tuple[Subscription, int]:
    """Create a subscription and generate its first jobs.

    Returns (subscription, jobs_generated).
    """
    client = await _get_client_or_404(session, body.client_id, org.id)
    location = await _resolve_location(session, client, body.location_id)

    plan = None
    if body.plan_id:
        plan = await session.get(ServicePlan, body.plan_id)
        if not plan or plan.org_id != org.id or not plan.is_active:
            raise HTTPException(status_code=404, detail="Service plan not found")

    frequency = resolve_frequency(body, plan)
    scheduling = get_org_settings(org).scheduling
    price = (
        body.price_override_cents
        if body.price_override_cents is not None
        else scheduling.default_price_per_visit_cents
    )

    subscription = Subscription(
        org_id=org.id,
        client_id=client.id,
        location_id=location.id,
        plan_id=plan.id if plan else None,
        status=SubscriptionStatus.ACTIVE.value,
        frequency=frequency.value,
        preferred_day=body.preferred_day.value if body.preferred_day else None,
        price_per_visit_cents=price,
        start_date=body.start_date,
        end_date=body.end_date,
        notes=body.notes,
        initial_cleanup_required=body.initial_cleanup_required,
    )
    session.add(subscription)
    await session.flush()

    jobs_generated = await synchronizer_for(session).regenerate(
        SubscriptionSnapshot.from_model(subscription),
        org.id,
        scheduling.default_horizon_days,
        today=today or org_today(org),
    )
    await refresh_next_service_date(session, subscription)

    await record_activity(
        session,
        org.id,
        "SUBSCRIPTION_CREATED",
        "SUBSCRIPTION",
        subscription.id,
        details={
            "frequency": subscription.frequency,
            "pricePerVisitCents": price,
            "jobsGenerated": jobs_generated,
        },
        actor_id=actor_id,
    )
    log.info(
        "subscription.created",
        org_id=str(org.id),
        subscription_id=str(subscription.id),
        frequency=subscription.frequency,
        jobs_generated=jobs_generated,
    )
    return subscription, jobs_generated


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


@dataclass
class SubscriptionChangePlan:
    """What an update does: field changes plus the job side effects."""

    changes: dict[str, Any] = field(default_factory=dict)
    void_reason: Optional[str] = None
    regenerate: bool = False

    @property
    def voids_jobs(self) -> bool:
        return self.void_reason is not None


def plan_subscription_changes(
    existing: Subscription,
    body: SubscriptionUpdate,
    *,
    now: Optional[datetime] = None,
    resolver: FrequencyResolver = default_resolver,
) -> SubscriptionChangePlan:
    """Decide the effect of ``body`` on ``existing`` without touching anything.

    Pausing, canceling or any change to the schedule voids future scheduled
    jobs. Reactivating, or a schedule change that leaves the subscription
    active, regenerates them.
    """
    plan = SubscriptionChangePlan()
    for name, value in body.model_dump(exclude_unset=True).items():
        if value is None and name in NON_NULLABLE_FIELDS:
            continue
        if isinstance(value, Enum):
            value = value.value
        if name == "frequency":
            value = resolver.normalize(value).value
        if getattr(existing, name) != value:
            plan.changes[name] = value

    old_status = existing.status
    new_status = plan.changes.get("status", old_status)

    if "status" in plan.changes:
        if new_status == SubscriptionStatus.CANCELED.value:
            plan.changes["canceled_at"] = now or utcnow()
            plan.void_reason = "Subscription canceled"
        elif new_status == SubscriptionStatus.PAUSED.value:
            plan.void_reason = "Subscription paused"
        elif old_status == SubscriptionStatus.CANCELED.value:
            plan.changes["canceled_at"] = None
            plan.changes.setdefault("cancel_reason", None)
        if new_status == SubscriptionStatus.ACTIVE.value:
            plan.regenerate = True

    if SCHEDULE_FIELDS & plan.changes.keys():
        plan.void_reason = plan.void_reason or "Subscription schedule changed"
        if new_status == SubscriptionStatus.ACTIVE.value:
            plan.regenerate = True

    pause_start = plan.changes.get("pause_start_date", existing.pause_start_date)
    pause_end = plan.changes.get("pause_end_date", existing.pause_end_date)
    if pause_start and pause_end and pause_end < pause_start:
        raise HTTPException(status_code=422, detail="Pause end date is before pause start date")
    end_date = plan.changes.get("end_date", existing.end_date)
    if end_date and end_date < existing.start_date:
        raise HTTPException(status_code=422, detail="End date is before start date")

    return plan


async def update_subscription(
    session: AsyncSession,
    org: Organization,
    subscription: Subscription,
    body: SubscriptionUpdate,
    actor_id: Optional[uuid.UUID] = None,
    *,
    today: Optional[date] = None,
) -> tuple[Subscription, int, int]:
    """Apply an update. Returns (subscription, jobs_voided, jobs_generated)."""
    plan = plan_subscription_changes(subscription, body)
    if not plan.changes:
        return subscription, 0, 0

    today = today or org_today(org)
    jobs_voided = 0
    if plan.voids_jobs:
        jobs_voided = await void_future_jobs(session, subscription, plan.void_reason, today)

    for name, value in plan.changes.items():
        setattr(subscription, name, value)
    session.add(subscription)
    await session.flush()

    jobs_generated = 0
    if plan.regenerate:
        scheduling = get_org_settings(org).scheduling
        jobs_generated = await synchronizer_for(session).regenerate(
            SubscriptionSnapshot.from_model(subscription),
            org.id,
            scheduling.default_horizon_days,
            today=today,
        )
    await refresh_next_service_date(session, subscription)

    await record_activity(
        session,
        org.id,
        "SUBSCRIPTION_UPDATED",
        "SUBSCRIPTION",
        subscription.id,
        details={
            "changes": sorted(plan.changes),
            "jobsVoided": jobs_voided,
            "jobsGenerated": jobs_generated,
        },
        actor_id=actor_id,
    )
    log.info(
        "subscription.updated",
        subscription_id=str(subscription.id),
        changes=sorted(plan.changes),
        jobs_voided=jobs_voided,
        jobs_generated=jobs_generated,
    )
    return subscription, jobs_voided, jobs_generated


# ---------------------------------------------------------------------------
# Regenerate (admin)
# ---------------------------------------------------------------------------


async def regenerate_subscription_jobs(
    session: AsyncSession,
    org: Organization,
    subscription_id: uuid.UUID,
    horizon_days: Optional[int] = None,
    actor_id: Optional[uuid.UUID] = None,
    *,
    today: Optional[date] = None,
) -> tuple[Subscription, int, int]:
    """Top up a subscription's jobs on demand.

    The subscription row stays locked until the request's transaction ends,
    so two admins regenerating at once run one after the other.
    Returns (subscription, horizon_days, jobs_generated).
    """
    subscription = await get_subscription_or_404(
        session, subscription_id, org.id, for_update=True
    )
    horizon = horizon_days or get_org_settings(org).scheduling.default_horizon_days

    jobs_generated = await synchronizer_for(
        session, generated_by="admin_regenerate", occupying_statuses=ALL_STATUSES
    ).regenerate(
        SubscriptionSnapshot.from_model(subscription),
        org.id,
        horizon,
        today=today or org_today(org),
    )
    await refresh_next_service_date(session, subscription)

    await record_activity(
        session,
        org.id,
        "JOBS_REGENERATED",
        "SUBSCRIPTION",
        subscription.id,
        details={"horizonDays": horizon, "jobsGenerated": jobs_generated},
        actor_id=actor_id,
    )
    return subscription, horizon, jobs_generated
