"""
Activity log: append-only audit rows for subscription and job changes.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog

log = structlog.get_logger()


async def record_activity(
    session: AsyncSession,
    org_id: uuid.UUID,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID,
    details: Optional[dict[str, Any]] = None,
    actor_id: Optional[uuid.UUID] = None,
) -> ActivityLog:
    """Add an activity row to the current transaction.

    The row is flushed with the caller's other changes; nothing is
    committed here.
    """
    entry = ActivityLog(
        org_id=org_id,
        user_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details or {},
    )
    session.add(entry)
    log.info(
        "activity.recorded",
        org_id=str(org_id),
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
    )
    return entry
