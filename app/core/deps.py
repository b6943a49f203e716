"""
FastAPI dependencies for authentication and authorization.

The identity provider issues the tokens; these dependencies decode them into a
Principal and enforce role requirements. No user table is consulted.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import JWTError, Role, decode_token

# HTTP Bearer token scheme (Authorization: Bearer <token>); missing header is handled below
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as described by the identity provider token."""
    subject: str
    role: Optional[str]

    @property
    def is_elevated(self) -> bool:
        return self.role in settings.ELEVATED_ROLES


def _principal_from_token(token: str) -> Principal:
    try:
        payload = decode_token(token)
    except JWTError:
        raise UnauthorizedError("Could not validate credentials")

    subject = payload.get("sub")
    if subject is None:
        raise UnauthorizedError("Could not validate credentials")

    return Principal(subject=str(subject), role=payload.get("role"))


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Principal]:
    """
    Decode the bearer token if one was sent.

    Returns None for unauthenticated requests; an invalid token is still rejected.
    """
    if not credentials:
        return None
    return _principal_from_token(credentials.credentials)


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    """
    Require an authenticated caller.

    Raises:
        UnauthorizedError: If no token was sent or it is invalid
    """
    if principal is None:
        raise UnauthorizedError("Not authenticated")
    return principal


async def get_elevated_principal(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """
    Require a caller whose role is in ELEVATED_ROLES.

    Used for create/update/delete of catalog resources (skills).
    """
    if not principal.is_elevated:
        raise ForbiddenError("Insufficient privileges for this operation")
    return principal


def require_role(role: Role):
    """Build a dependency that only admits callers with the given role."""

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != role.value:
            raise ForbiddenError(f"This operation requires the '{role.value}' role")
        return principal

    return dependency


get_employer = require_role(Role.EMPLOYER)
get_job_seeker = require_role(Role.JOB_SEEKER)
