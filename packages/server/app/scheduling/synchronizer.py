"""
Job synchronization: reconcile a subscription's schedule with stored jobs.

Only ever inserts. Jobs that already exist are left as they are, whatever
their status, and scheduled jobs that the new schedule no longer implies
stay in place until someone voids them explicitly.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

import structlog

from app.models.job import Job
from scoopops_shared.schemas.common import (
    DayOfWeek,
    Frequency,
    JobStatus,
    SubscriptionStatus,
)

from .generator import Horizon, ScheduleGenerator, default_generator
from .persistence import DateRange, JobStore

log = structlog.get_logger()

DEFAULT_HORIZON_DAYS = 14

# Any job in these states occupies its date; only CANCELED frees it.
OCCUPYING_STATUSES = frozenset(JobStatus) - {JobStatus.CANCELED}

# Top-ups (nightly, admin): every job occupies its date, canceled ones included.
ALL_STATUSES = frozenset(JobStatus)


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """The fields of a subscription that job generation depends on."""

    id: uuid.UUID
    client_id: uuid.UUID
    location_id: uuid.UUID
    status: SubscriptionStatus
    frequency: Frequency
    price_per_visit_cents: int
    start_date: date
    preferred_day: Optional[int] = None  # 0 = Sunday
    end_date: Optional[date] = None
    pause_start_date: Optional[date] = None
    pause_end_date: Optional[date] = None

    @classmethod
    def from_model(cls, subscription) -> "SubscriptionSnapshot":
        preferred = subscription.preferred_day
        return cls(
            id=subscription.id,
            client_id=subscription.client_id,
            location_id=subscription.location_id,
            status=SubscriptionStatus(subscription.status),
            frequency=Frequency(subscription.frequency),
            price_per_visit_cents=subscription.price_per_visit_cents,
            start_date=subscription.start_date,
            preferred_day=DayOfWeek(preferred).index if preferred else None,
            end_date=subscription.end_date,
            pause_start_date=subscription.pause_start_date,
            pause_end_date=subscription.pause_end_date,
        )

    def is_paused_on(self, day: date) -> bool:
        if self.pause_start_date is None:
            return False
        if day < self.pause_start_date:
            return False
        return self.pause_end_date is None or day <= self.pause_end_date


class JobSynchronizer:
    def __init__(
        self,
        store: JobStore,
        generator: Optional[ScheduleGenerator] = None,
        generated_by: str = "subscription_change",
        occupying_statuses: Iterable[JobStatus] = OCCUPYING_STATUSES,
    ):
        self.store = store
        self.generator = generator or default_generator
        self.generated_by = generated_by
        self.occupying_statuses = frozenset(occupying_statuses)

    def planned_dates(
        self,
        subscription: SubscriptionSnapshot,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        *,
        today: Optional[date] = None,
    ) -> list[date]:
        """Dates the subscription should have jobs on, from today onward."""
        today = today or date.today()
        schedule = self.generator.generate(
            subscription.start_date,
            subscription.frequency,
            subscription.preferred_day,
            Horizon.of_days(horizon_days),
            from_date=max(today, subscription.start_date),
            end_date=subscription.end_date,
        )
        return [
            day
            for day in schedule
            if day >= today and not subscription.is_paused_on(day)
        ]

    async def regenerate(
        self,
        subscription: SubscriptionSnapshot,
        org_id: uuid.UUID,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        *,
        today: Optional[date] = None,
    ) -> int:
        """Create the missing jobs for the next ``horizon_days``.

        Returns the number of jobs created. Safe to call repeatedly: a second
        call with no state change in between creates nothing.
        Raises PersistenceError when the store fails; nothing is retried here.
        """
        if subscription.status != SubscriptionStatus.ACTIVE:
            log.debug(
                "jobs.regenerate_skipped",
                subscription_id=str(subscription.id),
                status=subscription.status.value,
            )
            return 0

        planned = self.planned_dates(subscription, horizon_days, today=today)
        if not planned:
            return 0

        existing = await self.store.find_jobs(
            org_id,
            subscription.id,
            DateRange(planned[0], planned[-1]),
            self.occupying_statuses,
        )
        taken = {job.scheduled_date for job in existing}

        new_jobs = [
            Job(
                org_id=org_id,
                client_id=subscription.client_id,
                location_id=subscription.location_id,
                subscription_id=subscription.id,
                scheduled_date=day,
                status=JobStatus.SCHEDULED.value,
                price_cents=subscription.price_per_visit_cents,
                generated_by=self.generated_by,
            )
            for day in planned
            if day not in taken
        ]
        created = await self.store.insert_jobs(new_jobs)

        log.info(
            "jobs.regenerated",
            org_id=str(org_id),
            subscription_id=str(subscription.id),
            frequency=subscription.frequency.value,
            horizon_days=horizon_days,
            planned=len(planned),
            created=created,
        )
        return created
