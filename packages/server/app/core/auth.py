"""
Authentication and Authorization for Scoop Ops.

Supports:
- Email/Password login for staff
- JWT sessions (cookie or Bearer header) with a Redis revocation list
- Org membership lookup and permission-based dependencies
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session
from app.core.permissions import has_permission
from app.core.redis import get_redis
from app.models.organization import Organization
from app.models.user import User
from app.models.user_org import UserOrg

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "scoop_session"
CSRF_COOKIE = "scoop_csrf"

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    org_ids: list[str],
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "org_ids": org_ids,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def remaining_ttl(payload: dict) -> int:
    """Seconds until the token in ``payload`` expires (at least 1)."""
    exp = payload.get("exp")
    if exp is None:
        return settings.jwt_expire_minutes * 60
    return max(1, int(exp - datetime.now(timezone.utc).timestamp()))


# ---------------------------------------------------------------------------
# JWT Revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_jwt(jti: str, ttl_seconds: int = 3600) -> None:
    """Add a JWT ID to the revocation list in Redis."""
    redis = await get_redis()
    await redis.setex(f"jwt:revoked:{jti}", ttl_seconds, "1")


async def is_jwt_revoked(jti: str) -> bool:
    """Check if a JWT ID has been revoked."""
    redis = await get_redis()
    return await redis.exists(f"jwt:revoked:{jti}") > 0


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class AuthenticatedUser:
    """Container for an authenticated user + their org context."""

    def __init__(self, user: User, org: Organization, user_org: UserOrg):
        self.user = user
        self.org = org
        self.user_org = user_org
        self.user_id = user.id
        self.org_id = org.id
        self.role = user_org.role

    def can(self, permission: str) -> bool:
        return has_permission(self.role, permission)


async def resolve_org(org_slug: str, session: AsyncSession) -> Organization:
    """Resolve an active org by slug, raise 404 if not found."""
    result = await session.execute(
        select(Organization).where(Organization.slug == org_slug)
    )
    org = result.scalar_one_or_none()
    if not org or org.status == "deleted":
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


async def _authenticate_jwt(
    token: str, org: Organization, session: AsyncSession
) -> AuthenticatedUser:
    try:
        payload = decode_jwt(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_jwt_revoked(jti):
        raise HTTPException(status_code=401, detail="Session has been revoked")

    # Non-members get 404 so org slugs can't be probed
    result = await session.execute(
        select(UserOrg).where(UserOrg.user_id == user_id, UserOrg.org_id == org.id)
    )
    user_org = result.scalar_one_or_none()
    if not user_org:
        log.info("auth.not_a_member", user_id=str(user_id), org_id=str(org.id))
        raise HTTPException(status_code=404, detail="Organization not found")

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found")

    return AuthenticatedUser(user=user, org=org, user_org=user_org)


async def get_authenticated_user(
    request: Request,
    orgSlug: str,
    authorization: Optional[str] = Depends(authorization_header),
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedUser:
    """Main authentication dependency: Bearer token first, then session cookie."""
    org = await resolve_org(orgSlug, session)

    token = _extract_token(request, authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    auth_user = await _authenticate_jwt(token, org, session)
    request.state.auth = auth_user
    structlog.contextvars.bind_contextvars(
        org_id=str(auth_user.org_id), user_id=str(auth_user.user_id)
    )
    return auth_user


# ---------------------------------------------------------------------------
# Authorization dependencies (permission checks)
# ---------------------------------------------------------------------------

def require_permission(permission: str):
    """Dependency factory: the caller's role must grant ``permission``."""

    async def _check(
        auth: AuthenticatedUser = Depends(get_authenticated_user),
    ) -> AuthenticatedUser:
        if not auth.can(permission):
            log.info(
                "auth.permission_denied",
                user_id=str(auth.user_id),
                role=auth.role,
                permission=permission,
            )
            raise HTTPException(status_code=403, detail=f"Missing permission: {permission}")
        return auth

    return _check
