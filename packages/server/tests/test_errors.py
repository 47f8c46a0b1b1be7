"""
HTTP mapping of scheduling errors.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import register_exception_handlers, status_for
from app.scheduling.errors import (
    InvalidScheduleParameters,
    PersistenceError,
    SchedulingError,
    UnsupportedFrequency,
)


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/unsupported")
    async def unsupported():
        raise UnsupportedFrequency("SEVEN_TIMES_A_WEEK")

    @app.get("/invalid")
    async def invalid():
        raise InvalidScheduleParameters("horizon must be positive")

    @app.get("/storage")
    async def storage():
        raise PersistenceError("connection refused to 10.0.0.5")

    @app.get("/other")
    async def other():
        raise SchedulingError("generator blew up")

    return TestClient(app)


class TestStatusFor:
    @pytest.mark.parametrize(
        "exc, status",
        [
            (UnsupportedFrequency("X"), 422),
            (InvalidScheduleParameters("x"), 422),
            (PersistenceError("x"), 503),
            (SchedulingError("x"), 500),
        ],
    )
    def test_mapping(self, exc, status):
        assert status_for(exc) == status


class TestHandlers:
    def test_unsupported_frequency(self, client):
        resp = client.get("/unsupported")
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "UNSUPPORTED_FREQUENCY"
        assert error["status"] == 422
        assert "SEVEN_TIMES_A_WEEK" in error["message"]

    def test_invalid_parameters(self, client):
        resp = client.get("/invalid")
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_SCHEDULE_PARAMETERS"

    def test_storage_failure_is_retryable(self, client):
        resp = client.get("/storage")
        assert resp.status_code == 503
        error = resp.json()["error"]
        assert error["code"] == "PERSISTENCE_UNAVAILABLE"
        assert "10.0.0.5" not in error["message"]

    def test_other_scheduling_error(self, client):
        resp = client.get("/other")
        assert resp.status_code == 500
        assert resp.json()["error"] == {
            "code": "SCHEDULING_ERROR",
            "message": "Scheduling failed.",
            "status": 500,
        }
