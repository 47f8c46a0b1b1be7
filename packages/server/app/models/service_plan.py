"""Service plan model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class ServicePlan(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "service_plans"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    description: Optional[str] = None
    frequency: str = Field(nullable=False)  # Frequency code
    is_active: bool = Field(default=True, nullable=False)
