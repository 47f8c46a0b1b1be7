"""
Subscription endpoints: list, create, update, regenerate jobs.

Creating a subscription generates its first jobs. Pausing, canceling or
changing the cadence voids future scheduled jobs; reactivating or a cadence
change while active generates new ones.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_permission
from app.core.database import get_session
from app.core.permissions import JOBS_WRITE, SUBSCRIPTIONS_READ, SUBSCRIPTIONS_WRITE
from app.services.subscriptions import (
    create_subscription,
    get_subscription_or_404,
    list_subscriptions,
    regenerate_subscription_jobs,
    update_subscription,
)
from scoopops_shared.schemas.common import Frequency, SubscriptionStatus
from scoopops_shared.schemas.subscriptions import (
    RegenerateRequest,
    RegenerateResult,
    SubscriptionChangeResult,
    SubscriptionCreate,
    SubscriptionCreated,
    SubscriptionRead,
    SubscriptionUpdate,
)

router = APIRouter()


@router.get("/", response_model=List[SubscriptionRead])
async def list_subscriptions_endpoint(
    orgSlug: str,
    client_id: Optional[uuid.UUID] = Query(None, alias="clientId"),
    status: Optional[SubscriptionStatus] = None,
    frequency: Optional[Frequency] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(25, ge=1, le=100, alias="perPage"),
    auth: AuthenticatedUser = Depends(require_permission(SUBSCRIPTIONS_READ)),
    session: AsyncSession = Depends(get_session),
):
    """List subscriptions, newest first."""
    subscriptions = await list_subscriptions(
        session,
        auth.org_id,
        client_id=client_id,
        status=status,
        frequency=frequency,
        page=page,
        per_page=per_page,
    )
    return [SubscriptionRead.model_validate(s) for s in subscriptions]


@router.post("/", response_model=SubscriptionCreated, status_code=201)
async def create_subscription_endpoint(
    orgSlug: str,
    body: SubscriptionCreate,
    auth: AuthenticatedUser = Depends(require_permission(SUBSCRIPTIONS_WRITE)),
    session: AsyncSession = Depends(get_session),
):
    """Create a subscription and generate its first two weeks of jobs."""
    subscription, jobs_generated = await create_subscription(
        session, auth.org, body, auth.user_id
    )
    await session.commit()
    await session.refresh(subscription)

    return SubscriptionCreated(
        **SubscriptionRead.model_validate(subscription).model_dump(),
        jobs_generated=jobs_generated,
    )


@router.get("/{subscription_id}", response_model=SubscriptionRead)
async def get_subscription_endpoint(
    orgSlug: str,
    subscription_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_permission(SUBSCRIPTIONS_READ)),
    session: AsyncSession = Depends(get_session),
):
    subscription = await get_subscription_or_404(session, subscription_id, auth.org_id)
    return SubscriptionRead.model_validate(subscription)


@router.patch("/{subscription_id}", response_model=SubscriptionChangeResult)
async def update_subscription_endpoint(
    orgSlug: str,
    subscription_id: uuid.UUID,
    body: SubscriptionUpdate,
    auth: AuthenticatedUser = Depends(require_permission(SUBSCRIPTIONS_WRITE)),
    session: AsyncSession = Depends(get_session),
):
    """Update a subscription, voiding and regenerating jobs as needed."""
    subscription = await get_subscription_or_404(session, subscription_id, auth.org_id)
    subscription, jobs_voided, jobs_generated = await update_subscription(
        session, auth.org, subscription, body, auth.user_id
    )
    await session.commit()
    await session.refresh(subscription)

    return SubscriptionChangeResult(
        subscription=SubscriptionRead.model_validate(subscription),
        jobs_voided=jobs_voided,
        jobs_generated=jobs_generated,
    )


@router.post("/{subscription_id}/regenerate", response_model=RegenerateResult)
async def regenerate_jobs_endpoint(
    orgSlug: str,
    subscription_id: uuid.UUID,
    body: Optional[RegenerateRequest] = None,
    auth: AuthenticatedUser = Depends(require_permission(JOBS_WRITE)),
    session: AsyncSession = Depends(get_session),
):
    """Generate any missing jobs for the subscription now."""
    horizon_days = body.horizon_days if body else None
    subscription, horizon, jobs_generated = await regenerate_subscription_jobs(
        session, auth.org, subscription_id, horizon_days, auth.user_id
    )
    await session.commit()

    return RegenerateResult(
        subscription_id=subscription.id,
        horizon_days=horizon,
        jobs_generated=jobs_generated,
        next_service_date=subscription.next_service_date,
    )
