"""
Job service layer: listing, manual jobs and field status transitions.

Status flow:
    SCHEDULED -> IN_PROGRESS -> COMPLETED
    SCHEDULED -> SKIPPED | CANCELED
COMPLETED, SKIPPED and CANCELED are final.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.base import utcnow
from app.models.client import Client, Location
from app.models.job import Job
from app.models.subscription import Subscription
from app.services.activity import record_activity
from app.services.subscriptions import refresh_next_service_date
from scoopops_shared.schemas.common import JOB_TRANSITIONS, TERMINAL_JOB_STATUSES, JobStatus
from scoopops_shared.schemas.jobs import JobCreate, JobTransition

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_job_or_404(
    session: AsyncSession, job_id: uuid.UUID, org_id: uuid.UUID
) -> Job:
    job = await session.get(Job, job_id)
    if not job or job.org_id != org_id:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


async def list_jobs(
    session: AsyncSession,
    org_id: uuid.UUID,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[JobStatus] = None,
    subscription_id: Optional[uuid.UUID] = None,
    client_id: Optional[uuid.UUID] = None,
    assigned_to: Optional[uuid.UUID] = None,
    page: int = 1,
    per_page: int = 50,
) -> list[Job]:
    stmt = select(Job).where(Job.org_id == org_id)
    if date_from:
        stmt = stmt.where(Job.scheduled_date >= date_from)
    if date_to:
        stmt = stmt.where(Job.scheduled_date <= date_to)
    if status:
        stmt = stmt.where(Job.status == status.value)
    if subscription_id:
        stmt = stmt.where(Job.subscription_id == subscription_id)
    if client_id:
        stmt = stmt.where(Job.client_id == client_id)
    if assigned_to:
        stmt = stmt.where(Job.assigned_to == assigned_to)
    stmt = (
        stmt.order_by(Job.scheduled_date, Job.created_at)
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_manual_job(
    session: AsyncSession,
    org_id: uuid.UUID,
    body: JobCreate,
    actor_id: Optional[uuid.UUID] = None,
) -> Job:
    """Create a one-off visit that belongs to no subscription."""
    client = await session.get(Client, body.client_id)
    if not client or client.org_id != org_id:
        raise HTTPException(status_code=404, detail="Client not found")
    location = await session.get(Location, body.location_id)
    if not location or location.client_id != client.id:
        raise HTTPException(status_code=404, detail="Location not found")

    job = Job(
        org_id=org_id,
        client_id=client.id,
        location_id=location.id,
        scheduled_date=body.scheduled_date,
        status=JobStatus.SCHEDULED.value,
        price_cents=body.price_cents,
        assigned_to=body.assigned_to,
        notes=body.notes,
        generated_by="manual",
    )
    session.add(job)
    await session.flush()

    await record_activity(
        session, org_id, "JOB_CREATED", "JOB", job.id,
        details={"scheduledDate": job.scheduled_date.isoformat()},
        actor_id=actor_id,
    )
    log.info("job.created", job_id=str(job.id), scheduled_date=str(job.scheduled_date))
    return job


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def validate_transition(current: JobStatus, to_status: JobStatus) -> None:
    """Raise HTTPException unless ``current -> to_status`` is allowed.

    Final states answer 409; other illegal moves answer 422.
    """
    if current in TERMINAL_JOB_STATUSES:
        raise HTTPException(
            status_code=409,
            detail=f"Job is already {current.value} and cannot change status",
        )
    allowed = JOB_TRANSITIONS.get(current, [])
    if to_status not in allowed:
        raise HTTPException(
            status_code=422,
            detail=f"Cannot transition from '{current.value}' to '{to_status.value}'. "
            f"Allowed: {[s.value for s in allowed]}",
        )


def apply_transition(
    job: Job, body: JobTransition, now: Optional[datetime] = None
) -> JobStatus:
    """Move ``job`` to ``body.to_status`` in memory; returns the old status."""
    current = JobStatus(job.status)
    validate_transition(current, body.to_status)

    now = now or utcnow()
    job.status = body.to_status.value
    if body.to_status == JobStatus.IN_PROGRESS:
        job.started_at = now
    elif body.to_status == JobStatus.COMPLETED:
        job.completed_at = now
    elif body.to_status == JobStatus.SKIPPED:
        job.skipped_at = now
        job.skip_reason = body.skip_reason
    elif body.to_status == JobStatus.CANCELED:
        job.skip_reason = body.skip_reason or job.skip_reason
    if body.notes is not None:
        job.notes = body.notes
    return current


async def transition_job(
    session: AsyncSession,
    job: Job,
    body: JobTransition,
    actor_id: Optional[uuid.UUID] = None,
) -> Job:
    old_status = apply_transition(job, body)
    session.add(job)

    if job.subscription_id:
        subscription = await session.get(Subscription, job.subscription_id)
        if subscription is not None:
            await refresh_next_service_date(session, subscription)

    await record_activity(
        session,
        job.org_id,
        f"JOB_{job.status}",
        "JOB",
        job.id,
        details={"from": old_status.value, "to": job.status},
        actor_id=actor_id,
    )
    log.info(
        "job.transitioned",
        job_id=str(job.id),
        from_status=old_status.value,
        to_status=job.status,
    )
    return job
