"""
Job status transition tests.

Tests cover:
- The transition table and its final states
- 409 for final states, 422 for other illegal moves
- Timestamps and skip reasons set by each transition
- transition_job side effects (mocked session)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from app.models.job import Job
from app.services.jobs import apply_transition, transition_job, validate_transition
from scoopops_shared.schemas.common import JOB_TRANSITIONS, TERMINAL_JOB_STATUSES, JobStatus
from scoopops_shared.schemas.jobs import JobCreate, JobTransition

NOW = datetime(2025, 1, 6, 15, 30, tzinfo=timezone.utc)


def make_job(status: JobStatus = JobStatus.SCHEDULED, **overrides) -> Job:
    fields = dict(
        org_id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        location_id=uuid.uuid4(),
        subscription_id=uuid.uuid4(),
        scheduled_date=date(2025, 1, 6),
        status=status.value,
        price_cents=3500,
    )
    fields.update(overrides)
    return Job(**fields)


class TestTransitionTable:
    def test_final_states(self):
        assert TERMINAL_JOB_STATUSES == {
            JobStatus.COMPLETED, JobStatus.SKIPPED, JobStatus.CANCELED,
        }

    def test_all_valid_transitions(self):
        for current, targets in JOB_TRANSITIONS.items():
            for target in targets:
                validate_transition(current, target)

    def test_cannot_complete_without_starting(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_transition(JobStatus.SCHEDULED, JobStatus.COMPLETED)
        assert exc_info.value.status_code == 422

    def test_same_status_not_allowed(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_transition(JobStatus.IN_PROGRESS, JobStatus.IN_PROGRESS)
        assert exc_info.value.status_code == 422

    @pytest.mark.parametrize("final", sorted(TERMINAL_JOB_STATUSES))
    def test_final_states_conflict(self, final):
        with pytest.raises(HTTPException) as exc_info:
            validate_transition(final, JobStatus.SCHEDULED)
        assert exc_info.value.status_code == 409


class TestApplyTransition:
    def test_start(self):
        job = make_job()
        old = apply_transition(job, JobTransition(to_status=JobStatus.IN_PROGRESS), NOW)
        assert old == JobStatus.SCHEDULED
        assert job.status == "IN_PROGRESS"
        assert job.started_at == NOW

    def test_complete_with_notes(self):
        job = make_job(JobStatus.IN_PROGRESS)
        apply_transition(
            job, JobTransition(to_status=JobStatus.COMPLETED, notes="Gate was open"), NOW
        )
        assert job.status == "COMPLETED"
        assert job.completed_at == NOW
        assert job.notes == "Gate was open"

    def test_skip_records_reason(self):
        job = make_job()
        apply_transition(
            job, JobTransition(to_status=JobStatus.SKIPPED, skip_reason="Dog in yard"), NOW
        )
        assert job.status == "SKIPPED"
        assert job.skipped_at == NOW
        assert job.skip_reason == "Dog in yard"

    def test_cancel_keeps_existing_reason(self):
        job = make_job(skip_reason="Rain")
        apply_transition(job, JobTransition(to_status=JobStatus.CANCELED), NOW)
        assert job.status == "CANCELED"
        assert job.skip_reason == "Rain"

    def test_illegal_move_leaves_job_untouched(self):
        job = make_job(JobStatus.COMPLETED)
        with pytest.raises(HTTPException):
            apply_transition(job, JobTransition(to_status=JobStatus.IN_PROGRESS), NOW)
        assert job.status == "COMPLETED"
        assert job.started_at is None


class TestSchemas:
    def test_skip_requires_reason(self):
        with pytest.raises(ValidationError):
            JobTransition(to_status=JobStatus.SKIPPED)

    def test_transition_camel_case(self):
        body = JobTransition.model_validate({"toStatus": "SKIPPED", "skipReason": "Locked gate"})
        assert body.to_status == JobStatus.SKIPPED
        assert body.skip_reason == "Locked gate"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            JobTransition.model_validate({"toStatus": "DONE"})

    def test_manual_job_price_non_negative(self):
        with pytest.raises(ValidationError):
            JobCreate(
                client_id=uuid.uuid4(),
                location_id=uuid.uuid4(),
                scheduled_date=date(2025, 1, 6),
                price_cents=-100,
            )


class TestTransitionJob:
    @pytest.mark.asyncio
    async def test_refreshes_subscription_and_records_activity(self):
        job = make_job(JobStatus.IN_PROGRESS)
        subscription = MagicMock()
        session = MagicMock()
        session.get = AsyncMock(return_value=subscription)
        actor_id = uuid.uuid4()

        with patch("app.services.jobs.refresh_next_service_date", AsyncMock()) as refresh, \
             patch("app.services.jobs.record_activity", AsyncMock()) as record:
            result = await transition_job(
                session, job, JobTransition(to_status=JobStatus.COMPLETED), actor_id
            )

        assert result is job
        assert job.status == "COMPLETED"
        session.add.assert_called_once_with(job)
        refresh.assert_awaited_once_with(session, subscription)
        args, kwargs = record.await_args
        assert args[2] == "JOB_COMPLETED"
        assert kwargs["details"] == {"from": "IN_PROGRESS", "to": "COMPLETED"}
        assert kwargs["actor_id"] == actor_id

    @pytest.mark.asyncio
    async def test_manual_job_has_no_subscription_to_refresh(self):
        job = make_job(subscription_id=None)
        session = MagicMock()
        session.get = AsyncMock()

        with patch("app.services.jobs.refresh_next_service_date", AsyncMock()) as refresh, \
             patch("app.services.jobs.record_activity", AsyncMock()):
            await transition_job(session, job, JobTransition(to_status=JobStatus.CANCELED))

        session.get.assert_not_awaited()
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_conflict_does_not_touch_session(self):
        job = make_job(JobStatus.SKIPPED)
        session = MagicMock()

        with pytest.raises(HTTPException) as exc_info:
            await transition_job(session, job, JobTransition(to_status=JobStatus.CANCELED))

        assert exc_info.value.status_code == 409
        session.add.assert_not_called()
