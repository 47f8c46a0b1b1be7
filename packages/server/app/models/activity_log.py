"""Activity log model (append-only audit trail)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class ActivityLog(UUIDMixin, SQLModel, table=True):
    __tablename__ = "activity_logs"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    action: str = Field(nullable=False)  # e.g. SUBSCRIPTION_CREATED, JOB_COMPLETED
    entity_type: str = Field(nullable=False)  # SUBSCRIPTION | JOB
    entity_id: uuid.UUID = Field(nullable=False, index=True)
    details: dict = Field(default_factory=dict, sa_type=JSONB, nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.text("now()")},
        sa_type=sa.DateTime(timezone=True),
    )
