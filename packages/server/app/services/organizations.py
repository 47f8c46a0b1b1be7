"""
Organization service: per-org settings used by scheduling.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from app.core.config import get_settings
from app.models.organization import Organization
from scoopops_shared.schemas.organizations import OrgSettings

log = structlog.get_logger()


def _deep_merge(base: dict, patch: dict) -> dict:
    """JSON Merge Patch style deep merge."""
    result = base.copy()
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _server_defaults() -> dict:
    settings = get_settings()
    return {
        "scheduling": {
            "default_horizon_days": settings.default_horizon_days,
            "nightly_horizon_days": settings.nightly_horizon_days,
            "default_price_per_visit_cents": settings.default_price_per_visit_cents,
        }
    }


def get_org_settings(org: Organization) -> OrgSettings:
    """The org's stored settings over the server-wide defaults."""
    merged = _deep_merge(_server_defaults(), org.settings or {})
    return OrgSettings.model_validate(merged)


def org_today(org: Organization, now: datetime | None = None) -> date:
    """Today's date in the org's timezone."""
    tz_name = get_org_settings(org).timezone
    try:
        tz = ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        log.warning("org.bad_timezone", org_id=str(org.id), timezone=tz_name)
        return (now or datetime.now()).date()
    if now is None:
        return datetime.now(tz).date()
    return now.astimezone(tz).date()
