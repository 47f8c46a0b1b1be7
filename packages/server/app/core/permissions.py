"""
Role → permission table for org members.

Only the scheduling-related permissions are listed; a role missing from the
table (or an unknown role string) has no permissions at all.
"""

from __future__ import annotations

from typing import Iterable

from scoopops_shared.schemas.common import Role

SUBSCRIPTIONS_READ = "subscriptions:read"
SUBSCRIPTIONS_WRITE = "subscriptions:write"
SUBSCRIPTIONS_CANCEL = "subscriptions:cancel"
JOBS_READ = "jobs:read"
JOBS_WRITE = "jobs:write"
JOBS_ASSIGN = "jobs:assign"
JOBS_COMPLETE = "jobs:complete"
CLIENTS_READ = "clients:read"
LOCATIONS_READ = "locations:read"
SETTINGS_READ = "settings:read"
SETTINGS_WRITE = "settings:write"

ROLE_PERMISSIONS: dict[Role, frozenset[str]] = {
    Role.OWNER: frozenset({
        SUBSCRIPTIONS_READ, SUBSCRIPTIONS_WRITE, SUBSCRIPTIONS_CANCEL,
        JOBS_READ, JOBS_WRITE, JOBS_ASSIGN, JOBS_COMPLETE,
        CLIENTS_READ, LOCATIONS_READ,
        SETTINGS_READ, SETTINGS_WRITE,
    }),
    Role.MANAGER: frozenset({
        SUBSCRIPTIONS_READ, SUBSCRIPTIONS_WRITE, SUBSCRIPTIONS_CANCEL,
        JOBS_READ, JOBS_WRITE, JOBS_ASSIGN, JOBS_COMPLETE,
        CLIENTS_READ, LOCATIONS_READ,
        SETTINGS_READ,
    }),
    Role.OFFICE: frozenset({
        SUBSCRIPTIONS_READ, SUBSCRIPTIONS_WRITE,
        JOBS_READ, JOBS_WRITE, JOBS_ASSIGN,
        CLIENTS_READ, LOCATIONS_READ,
    }),
    Role.CREW_LEAD: frozenset({
        SUBSCRIPTIONS_READ,
        JOBS_READ, JOBS_WRITE, JOBS_COMPLETE,
        CLIENTS_READ, LOCATIONS_READ,
    }),
    Role.FIELD_TECH: frozenset({
        JOBS_READ, JOBS_COMPLETE,
        CLIENTS_READ, LOCATIONS_READ,
    }),
    Role.ACCOUNTANT: frozenset({
        SUBSCRIPTIONS_READ,
        CLIENTS_READ,
    }),
    # Client portal; row filtering to the client's own data happens elsewhere
    Role.CLIENT: frozenset({
        SUBSCRIPTIONS_READ,
        JOBS_READ,
        CLIENTS_READ, LOCATIONS_READ,
    }),
}


def permissions_for(role: str) -> frozenset[str]:
    try:
        return ROLE_PERMISSIONS.get(Role(role), frozenset())
    except ValueError:
        return frozenset()


def has_permission(role: str, permission: str) -> bool:
    return permission in permissions_for(role)


def has_any_permission(role: str, permissions: Iterable[str]) -> bool:
    granted = permissions_for(role)
    return any(p in granted for p in permissions)


def is_staff_role(role: str) -> bool:
    return role != Role.CLIENT.value
