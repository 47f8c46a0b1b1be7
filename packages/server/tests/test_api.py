"""
Endpoint wiring tests for subscriptions and jobs.

Auth and the database session are replaced through dependency overrides;
service functions are patched where the routers import them.
"""

from __future__ import annotations

import uuid
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from httpx import ASGITransport, AsyncClient

from app.core.auth import AuthenticatedUser, get_authenticated_user
from app.core.database import get_session
from app.main import app
from app.models.job import Job
from app.models.organization import Organization
from app.models.subscription import Subscription
from app.scheduling.errors import PersistenceError, UnsupportedFrequency

ORG = Organization(name="Sunny Scoops", slug="sunny-scoops")
BASE = "/api/v1/orgs/sunny-scoops"


def make_auth(role: str) -> AuthenticatedUser:
    user = MagicMock()
    user.id = uuid.uuid4()
    return AuthenticatedUser(user=user, org=ORG, user_org=MagicMock(role=role))


def make_subscription(**overrides) -> Subscription:
    fields = dict(
        org_id=ORG.id,
        client_id=uuid.uuid4(),
        location_id=uuid.uuid4(),
        status="ACTIVE",
        frequency="WEEKLY",
        preferred_day="TUESDAY",
        price_per_visit_cents=3500,
        start_date=date(2025, 1, 6),
    )
    fields.update(overrides)
    return Subscription(**fields)


def make_job(**overrides) -> Job:
    fields = dict(
        org_id=ORG.id,
        client_id=uuid.uuid4(),
        location_id=uuid.uuid4(),
        subscription_id=uuid.uuid4(),
        scheduled_date=date(2025, 1, 7),
        status="SCHEDULED",
        price_cents=3500,
    )
    fields.update(overrides)
    return Job(**fields)


@pytest.fixture
def session():
    session = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    return session


@pytest.fixture
def as_role(session):
    def _override(role: str = "OFFICE"):
        app.dependency_overrides[get_authenticated_user] = lambda: make_auth(role)
        app.dependency_overrides[get_session] = lambda: session

    _override()
    yield _override
    app.dependency_overrides.clear()


@pytest.fixture
async def client(as_role):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


CREATE_BODY = {
    "clientId": str(uuid.uuid4()),
    "startDate": "2025-01-06",
    "frequency": "weekly",
    "preferredDay": "TUESDAY",
}


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


class TestCreateSubscription:
    @pytest.mark.asyncio
    async def test_created_with_jobs(self, client, session):
        subscription = make_subscription()
        with patch(
            "app.api.v1.subscriptions.create_subscription",
            AsyncMock(return_value=(subscription, 2)),
        ) as create:
            resp = await client.post(f"{BASE}/subscriptions/", json=CREATE_BODY)

        assert resp.status_code == 201
        data = resp.json()
        assert data["jobsGenerated"] == 2
        assert data["id"] == str(subscription.id)
        assert data["preferredDay"] == "TUESDAY"
        assert data["pricePerVisitCents"] == 3500
        session.commit.assert_awaited_once()
        body = create.await_args.args[2]
        assert body.frequency == "weekly"

    @pytest.mark.asyncio
    async def test_field_tech_forbidden(self, client, as_role):
        as_role("FIELD_TECH")
        with patch("app.api.v1.subscriptions.create_subscription", AsyncMock()) as create:
            resp = await client.post(f"{BASE}/subscriptions/", json=CREATE_BODY)
        assert resp.status_code == 403
        create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_frequency(self, client, session):
        with patch(
            "app.api.v1.subscriptions.create_subscription",
            AsyncMock(side_effect=UnsupportedFrequency("every other day")),
        ):
            resp = await client.post(
                f"{BASE}/subscriptions/",
                json={**CREATE_BODY, "frequency": "every other day"},
            )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "UNSUPPORTED_FREQUENCY"
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_unavailable(self, client):
        with patch(
            "app.api.v1.subscriptions.create_subscription",
            AsyncMock(side_effect=PersistenceError("Failed to insert jobs")),
        ):
            resp = await client.post(f"{BASE}/subscriptions/", json=CREATE_BODY)
        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "PERSISTENCE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_missing_cadence_is_rejected(self, client):
        body = {"clientId": CREATE_BODY["clientId"], "startDate": "2025-01-06"}
        with patch("app.api.v1.subscriptions.create_subscription", AsyncMock()) as create:
            resp = await client.post(f"{BASE}/subscriptions/", json=body)
        assert resp.status_code == 422
        create.assert_not_awaited()


class TestUpdateSubscription:
    @pytest.mark.asyncio
    async def test_pause_reports_voided_jobs(self, client):
        subscription = make_subscription(status="PAUSED")
        with patch(
            "app.api.v1.subscriptions.get_subscription_or_404",
            AsyncMock(return_value=subscription),
        ), patch(
            "app.api.v1.subscriptions.update_subscription",
            AsyncMock(return_value=(subscription, 2, 0)),
        ) as update:
            resp = await client.patch(
                f"{BASE}/subscriptions/{subscription.id}", json={"status": "PAUSED"}
            )

        assert resp.status_code == 200
        data = resp.json()
        assert data["jobsVoided"] == 2
        assert data["jobsGenerated"] == 0
        assert data["subscription"]["status"] == "PAUSED"
        assert update.await_args.args[3].status.value == "PAUSED"


class TestRegenerate:
    @pytest.mark.asyncio
    async def test_with_horizon(self, client):
        subscription = make_subscription(next_service_date=date(2025, 1, 7))
        with patch(
            "app.api.v1.subscriptions.regenerate_subscription_jobs",
            AsyncMock(return_value=(subscription, 30, 3)),
        ) as regenerate:
            resp = await client.post(
                f"{BASE}/subscriptions/{subscription.id}/regenerate",
                json={"horizonDays": 30},
            )

        assert resp.status_code == 200
        assert resp.json() == {
            "subscriptionId": str(subscription.id),
            "horizonDays": 30,
            "jobsGenerated": 3,
            "nextServiceDate": "2025-01-07",
        }
        assert regenerate.await_args.args[2] == subscription.id
        assert regenerate.await_args.args[3] == 30

    @pytest.mark.asyncio
    async def test_without_body_uses_org_default(self, client):
        subscription = make_subscription()
        with patch(
            "app.api.v1.subscriptions.regenerate_subscription_jobs",
            AsyncMock(return_value=(subscription, 14, 0)),
        ) as regenerate:
            resp = await client.post(f"{BASE}/subscriptions/{subscription.id}/regenerate")

        assert resp.status_code == 200
        assert regenerate.await_args.args[3] is None

    @pytest.mark.asyncio
    async def test_zero_horizon_rejected(self, client):
        with patch(
            "app.api.v1.subscriptions.regenerate_subscription_jobs", AsyncMock()
        ) as regenerate:
            resp = await client.post(
                f"{BASE}/subscriptions/{uuid.uuid4()}/regenerate", json={"horizonDays": 0}
            )
        assert resp.status_code == 422
        regenerate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_accountant_forbidden(self, client, as_role):
        as_role("ACCOUNTANT")
        resp = await client.post(f"{BASE}/subscriptions/{uuid.uuid4()}/regenerate")
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class TestJobs:
    @pytest.mark.asyncio
    async def test_list_by_date_range(self, client):
        job = make_job()
        with patch("app.api.v1.jobs.list_jobs", AsyncMock(return_value=[job])) as list_:
            resp = await client.get(f"{BASE}/jobs/", params={"from": "2025-01-06", "to": "2025-01-12"})

        assert resp.status_code == 200
        assert [j["id"] for j in resp.json()] == [str(job.id)]
        kwargs = list_.await_args.kwargs
        assert kwargs["date_from"] == date(2025, 1, 6)
        assert kwargs["date_to"] == date(2025, 1, 12)

    @pytest.mark.asyncio
    async def test_transition(self, client, as_role):
        as_role("FIELD_TECH")
        job = make_job(status="IN_PROGRESS")
        completed = make_job(status="COMPLETED")
        with patch("app.api.v1.jobs.get_job_or_404", AsyncMock(return_value=job)), \
             patch("app.api.v1.jobs.transition_job", AsyncMock(return_value=completed)):
            resp = await client.post(
                f"{BASE}/jobs/{job.id}/transition", json={"toStatus": "COMPLETED"}
            )
        assert resp.status_code == 200
        assert resp.json()["status"] == "COMPLETED"

    @pytest.mark.asyncio
    async def test_transition_conflict(self, client):
        job = make_job(status="COMPLETED")
        with patch("app.api.v1.jobs.get_job_or_404", AsyncMock(return_value=job)), \
             patch(
                 "app.api.v1.jobs.transition_job",
                 AsyncMock(side_effect=HTTPException(status_code=409, detail="Job is already COMPLETED")),
             ):
            resp = await client.post(
                f"{BASE}/jobs/{job.id}/transition", json={"toStatus": "CANCELED"}
            )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_skip_without_reason_rejected(self, client):
        resp = await client.post(
            f"{BASE}/jobs/{uuid.uuid4()}/transition", json={"toStatus": "SKIPPED"}
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_field_tech_cannot_create_jobs(self, client, as_role):
        as_role("FIELD_TECH")
        resp = await client.post(
            f"{BASE}/jobs/",
            json={
                "clientId": str(uuid.uuid4()),
                "locationId": str(uuid.uuid4()),
                "scheduledDate": "2025-01-07",
                "priceCents": 3500,
            },
        )
        assert resp.status_code == 403
