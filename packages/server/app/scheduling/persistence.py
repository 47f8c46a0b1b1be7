"""
Job storage used by the synchronizer.

``JobStore`` is the contract; ``SqlJobStore`` implements it on the request's
AsyncSession. It never commits: the caller's transaction decides.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Protocol, Sequence

import structlog
from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.job import Job
from scoopops_shared.schemas.common import JobStatus

from .errors import PersistenceError

log = structlog.get_logger()


@dataclass(frozen=True)
class DateRange:
    """Inclusive on both ends."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


class JobStore(Protocol):
    async def find_jobs(
        self,
        org_id: uuid.UUID,
        subscription_id: uuid.UUID,
        date_range: DateRange,
        statuses: Iterable[JobStatus],
    ) -> Sequence[Job]:
        """Jobs of one subscription in the range with one of the statuses.

        An empty result means "none found"; a failed read raises
        PersistenceError.
        """
        ...

    async def insert_jobs(self, jobs: Sequence[Job]) -> int:
        """Insert new jobs, returning how many rows were actually written."""
        ...


class SqlJobStore:
    """PostgreSQL-backed JobStore."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_jobs(
        self,
        org_id: uuid.UUID,
        subscription_id: uuid.UUID,
        date_range: DateRange,
        statuses: Iterable[JobStatus],
    ) -> Sequence[Job]:
        stmt = (
            select(Job)
            .where(
                Job.org_id == org_id,
                Job.subscription_id == subscription_id,
                Job.scheduled_date >= date_range.start,
                Job.scheduled_date <= date_range.end,
                Job.status.in_([JobStatus(s).value for s in statuses]),
            )
            .order_by(Job.scheduled_date)
        )
        try:
            result = await self.session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            log.error("jobs.read_failed", subscription_id=str(subscription_id), error=str(exc))
            raise PersistenceError("Failed to read jobs") from exc
        return list(result.scalars().all())

    async def insert_jobs(self, jobs: Sequence[Job]) -> int:
        if not jobs:
            return 0
        rows = [
            {
                "id": job.id,
                "org_id": job.org_id,
                "client_id": job.client_id,
                "location_id": job.location_id,
                "subscription_id": job.subscription_id,
                "scheduled_date": job.scheduled_date,
                "status": job.status,
                "price_cents": job.price_cents,
                "generated_by": job.generated_by,
            }
            for job in jobs
        ]
        # A concurrent regeneration may have inserted the same date already;
        # the partial unique index turns that into a no-op.
        stmt = (
            pg_insert(Job.__table__)
            .values(rows)
            .on_conflict_do_nothing(
                index_elements=["subscription_id", "scheduled_date"],
                index_where=text("status <> 'CANCELED'"),
            )
            .returning(Job.__table__.c.id)
        )
        try:
            result = await self.session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            log.error("jobs.write_failed", count=len(rows), error=str(exc))
            raise PersistenceError("Failed to insert jobs") from exc
        return len(result.all())
