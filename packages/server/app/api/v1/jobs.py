"""
Job endpoints: list, manual create, detail, status transitions.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_permission
from app.core.database import get_session
from app.core.permissions import JOBS_COMPLETE, JOBS_READ, JOBS_WRITE
from app.services.jobs import create_manual_job, get_job_or_404, list_jobs, transition_job
from scoopops_shared.schemas.common import JobStatus
from scoopops_shared.schemas.jobs import JobCreate, JobRead, JobTransition

router = APIRouter()


@router.get("/", response_model=List[JobRead])
async def list_jobs_endpoint(
    orgSlug: str,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    status: Optional[JobStatus] = None,
    subscription_id: Optional[uuid.UUID] = Query(None, alias="subscriptionId"),
    client_id: Optional[uuid.UUID] = Query(None, alias="clientId"),
    assigned_to: Optional[uuid.UUID] = Query(None, alias="assignedTo"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200, alias="perPage"),
    auth: AuthenticatedUser = Depends(require_permission(JOBS_READ)),
    session: AsyncSession = Depends(get_session),
):
    """List jobs ordered by scheduled date."""
    jobs = await list_jobs(
        session,
        auth.org_id,
        date_from=date_from,
        date_to=date_to,
        status=status,
        subscription_id=subscription_id,
        client_id=client_id,
        assigned_to=assigned_to,
        page=page,
        per_page=per_page,
    )
    return [JobRead.model_validate(j) for j in jobs]


@router.post("/", response_model=JobRead, status_code=201)
async def create_job_endpoint(
    orgSlug: str,
    body: JobCreate,
    auth: AuthenticatedUser = Depends(require_permission(JOBS_WRITE)),
    session: AsyncSession = Depends(get_session),
):
    """Create a one-off job outside any subscription."""
    job = await create_manual_job(session, auth.org_id, body, auth.user_id)
    await session.commit()
    await session.refresh(job)
    return JobRead.model_validate(job)


@router.get("/{job_id}", response_model=JobRead)
async def get_job_endpoint(
    orgSlug: str,
    job_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_permission(JOBS_READ)),
    session: AsyncSession = Depends(get_session),
):
    job = await get_job_or_404(session, job_id, auth.org_id)
    return JobRead.model_validate(job)


@router.post("/{job_id}/transition", response_model=JobRead)
async def transition_job_endpoint(
    orgSlug: str,
    job_id: uuid.UUID,
    body: JobTransition,
    auth: AuthenticatedUser = Depends(require_permission(JOBS_COMPLETE)),
    session: AsyncSession = Depends(get_session),
):
    """Start, complete, skip or cancel a job."""
    job = await get_job_or_404(session, job_id, auth.org_id)
    job = await transition_job(session, job, body, auth.user_id)
    await session.commit()
    await session.refresh(job)
    return JobRead.model_validate(job)
