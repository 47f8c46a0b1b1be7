"""
structlog configuration tests.
"""

import json

import pytest
import structlog

from app.core.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_format(capsys):
    configure_logging("info", "json")
    structlog.get_logger().info("jobs.regenerated", created=2)

    record = json.loads(capsys.readouterr().out.strip())
    assert record["event"] == "jobs.regenerated"
    assert record["created"] == 2
    assert record["level"] == "info"
    assert "timestamp" in record


def test_console_format(capsys):
    configure_logging("info", "console")
    structlog.get_logger().info("subscription.created", subscription_id="abc")

    out = capsys.readouterr().out
    assert "subscription.created" in out
    assert "abc" in out


def test_level_filters_lower_events(capsys):
    configure_logging("WARNING", "json")
    log = structlog.get_logger()
    log.info("jobs.regenerate_skipped")
    log.warning("jobs.nightly_subscription_failed")

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["event"] == "jobs.nightly_subscription_failed"


def test_bound_contextvars_are_merged(capsys):
    configure_logging("debug", "json")
    structlog.contextvars.bind_contextvars(request_id="req-7")
    try:
        structlog.get_logger().debug("jobs.listed")
    finally:
        structlog.contextvars.clear_contextvars()

    record = json.loads(capsys.readouterr().out.strip())
    assert record["request_id"] == "req-7"
