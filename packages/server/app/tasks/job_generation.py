"""
ARQ background task: nightly top-up of upcoming jobs.

Every ACTIVE subscription whose client is active and whose location is still
serviced gets its missing jobs for the org's nightly horizon. One failing
subscription does not stop the batch.

Run with: arq app.tasks.job_generation.WorkerSettings
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

import structlog
from arq import cron
from arq.connections import RedisSettings
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session_context
from app.core.logging import configure_logging
from app.models.client import Client, Location
from app.models.organization import Organization
from app.models.subscription import Subscription
from app.scheduling import (
    ALL_STATUSES,
    JobSynchronizer,
    PersistenceError,
    SqlJobStore,
    SubscriptionSnapshot,
)
from app.services.organizations import get_org_settings, org_today
from app.services.subscriptions import refresh_next_service_date
from scoopops_shared.schemas.common import SubscriptionStatus

log = structlog.get_logger()
settings = get_settings()


async def _eligible_subscriptions(
    session: AsyncSession, org_id: Optional[uuid.UUID] = None
) -> list[tuple[Subscription, Organization, str, bool]]:
    """ACTIVE subscriptions with their org, client status and location state."""
    stmt = (
        select(Subscription, Organization, Client.status, Location.is_active)
        .join(Organization, Organization.id == Subscription.org_id)
        .join(Client, Client.id == Subscription.client_id)
        .join(Location, Location.id == Subscription.location_id)
        .where(
            Subscription.status == SubscriptionStatus.ACTIVE.value,
            Organization.status == "active",
        )
        .order_by(Subscription.org_id, Subscription.created_at)
    )
    if org_id:
        stmt = stmt.where(Subscription.org_id == org_id)
    result = await session.execute(stmt)
    return list(result.all())


async def generate_upcoming_jobs(
    ctx: dict,
    org_id: Optional[uuid.UUID] = None,
    *,
    today: Optional[date] = None,
) -> dict[str, int]:
    """Top up jobs for every eligible subscription.

    Returns {"generated": ..., "skipped": ..., "errors": ...}.
    """
    generated = skipped = errors = 0

    async with get_session_context() as session:
        synchronizer = JobSynchronizer(
            SqlJobStore(session), generated_by="nightly", occupying_statuses=ALL_STATUSES
        )
        rows = await _eligible_subscriptions(session, org_id)

        for subscription, org, client_status, location_active in rows:
            if client_status != "ACTIVE" or not location_active:
                skipped += 1
                continue

            subscription_id = subscription.id
            horizon = get_org_settings(org).scheduling.nightly_horizon_days
            try:
                async with session.begin_nested():
                    created = await synchronizer.regenerate(
                        SubscriptionSnapshot.from_model(subscription),
                        org.id,
                        horizon,
                        today=today or org_today(org),
                    )
                    await refresh_next_service_date(session, subscription)
            except PersistenceError as exc:
                errors += 1
                log.error(
                    "jobs.nightly_subscription_failed",
                    subscription_id=str(subscription_id),
                    error=str(exc),
                )
                continue
            generated += created

    summary = {"generated": generated, "skipped": skipped, "errors": errors}
    log.info("jobs.nightly_complete", **summary)
    return summary


async def startup(ctx: dict) -> None:
    configure_logging(settings.log_level, settings.log_format)


# ARQ worker settings
class WorkerSettings:
    """ARQ worker configuration."""

    functions = [generate_upcoming_jobs]
    cron_jobs = [
        # Nightly, after the day's visits have been closed out
        cron(generate_upcoming_jobs, hour={2}, minute={0}, run_at_startup=False),
    ]
    on_startup = startup
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
