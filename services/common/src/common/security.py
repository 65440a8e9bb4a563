"""Role-based authorization helpers and access-token role claims."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Set

from jose import JWTError, jwt

from .config import settings

READ_ONLY_ROLES = frozenset(
    {"StaffReadOnly", "DistrictReadOnlyAdmin", "StateReadOnlyAdmin", "Volunteer"}
)

Authorizer = Callable[[Set[str]], bool]


def authorize_for(allowed: Iterable[str]) -> Authorizer:
    """Build a capability oracle granting access when any role is allowed."""

    allowed_set = frozenset(allowed)

    def _check(roles: Set[str]) -> bool:
        return bool(allowed_set.intersection(roles))

    return _check


def non_read_only_users(roles: Set[str]) -> bool:
    """Grant access to anyone holding at least one role that can write."""

    return any(role not in READ_ONLY_ROLES for role in roles)


def create_access_token(
    subject: str, expires_minutes: int = 30, roles: Optional[List[str]] = None
) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {"sub": subject, "exp": expire}
    if roles:
        payload["roles"] = roles
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def roles_from_token(token: str) -> Set[str]:
    """Return the role claims of a signed token; invalid tokens carry none."""

    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return set()
    roles = payload.get("roles") or []
    if isinstance(roles, str):
        return {roles}
    return {str(role) for role in roles}


__all__ = [
    "Authorizer",
    "READ_ONLY_ROLES",
    "authorize_for",
    "non_read_only_users",
    "create_access_token",
    "roles_from_token",
]
