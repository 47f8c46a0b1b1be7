"""Client and service location models."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Client(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "clients"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    status: str = Field(default="ACTIVE", nullable=False)  # ACTIVE | INACTIVE


class Location(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "locations"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    client_id: uuid.UUID = Field(foreign_key="clients.id", nullable=False, index=True)
    address_line1: str = Field(nullable=False)
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    gate_code: Optional[str] = None
    is_primary: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
