"""Job model: one scheduled service visit."""

from datetime import date, datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Job(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "jobs"
    __table_args__ = (
        # One live job per subscription and date; canceled rows don't count.
        sa.Index(
            "uq_jobs_subscription_date_live",
            "subscription_id",
            "scheduled_date",
            unique=True,
            postgresql_where=sa.text("status <> 'CANCELED'"),
        ),
        sa.Index("ix_jobs_org_date_status", "org_id", "scheduled_date", "status"),
    )

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    client_id: uuid.UUID = Field(foreign_key="clients.id", nullable=False, index=True)
    location_id: uuid.UUID = Field(foreign_key="locations.id", nullable=False, index=True)
    subscription_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="subscriptions.id", index=True
    )
    assigned_to: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    scheduled_date: date = Field(nullable=False)
    status: str = Field(nullable=False, default="SCHEDULED")
    price_cents: int = Field(nullable=False)  # snapshot at creation
    skip_reason: Optional[str] = None
    started_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    skipped_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    notes: Optional[str] = None
    generated_by: Optional[str] = None  # subscription_change | nightly | manual
