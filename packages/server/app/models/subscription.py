"""Subscription model: a client's recurring-service agreement."""

from datetime import date, datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Subscription(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "subscriptions"
    __table_args__ = (
        sa.Index("ix_subscriptions_org_status", "org_id", "status"),
    )

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    client_id: uuid.UUID = Field(foreign_key="clients.id", nullable=False, index=True)
    location_id: uuid.UUID = Field(foreign_key="locations.id", nullable=False, index=True)
    plan_id: Optional[uuid.UUID] = Field(default=None, foreign_key="service_plans.id")
    status: str = Field(nullable=False, default="ACTIVE")  # ACTIVE | PAUSED | CANCELED | PAST_DUE
    frequency: str = Field(nullable=False)  # Frequency code
    preferred_day: Optional[str] = None  # MONDAY ... SUNDAY
    price_per_visit_cents: int = Field(nullable=False)
    start_date: date = Field(nullable=False)
    end_date: Optional[date] = None
    # Earliest pending job date; kept in sync by refresh_next_service_date
    next_service_date: Optional[date] = None
    pause_start_date: Optional[date] = None
    pause_end_date: Optional[date] = None
    canceled_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    cancel_reason: Optional[str] = None
    notes: Optional[str] = None
    initial_cleanup_required: bool = Field(default=False, nullable=False)
    initial_cleanup_completed: bool = Field(default=False, nullable=False)
