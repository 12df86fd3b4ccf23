from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable
from uuid import UUID
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.errors import PermissionDenied, Unauthenticated
from app.security import ACCESS, decode_token

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Verified caller: user id plus the roles found in the token claims."""
    uid: UUID
    roles: frozenset[str] = field(default_factory=frozenset)

    def has_any_role(self, required: Iterable[str]) -> bool:
        return not self.roles.isdisjoint(required)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v) for v in value if v]
    return [str(value)] if value else []


def normalize_roles(claims: dict[str, Any]) -> frozenset[str]:
    """Merge the ``role`` and ``roles`` claims; either may be a string or a list."""
    return frozenset(_as_list(claims.get("role")) + _as_list(claims.get("roles")))


def identity_from_claims(claims: dict[str, Any]) -> Identity:
    if claims.get("type") != ACCESS:
        raise Unauthenticated("Wrong token type")
    try:
        uid = UUID(str(claims.get("sub")))
    except ValueError:
        raise Unauthenticated("Invalid token subject")
    return Identity(uid=uid, roles=normalize_roles(claims))


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    if credentials is None:
        raise Unauthenticated("Authentication required")
    try:
        claims = decode_token(credentials.credentials)
    except Exception:
        raise Unauthenticated("Invalid token")
    return identity_from_claims(claims)


def require_roles(*required: str):
    """Dependency factory: caller must hold at least one of ``required``."""
    wanted = tuple(required) or tuple(settings.reviewer_roles)

    async def _guard(identity: Identity = Depends(get_identity)) -> Identity:
        if not identity.has_any_role(wanted):
            raise PermissionDenied(
                f"Access denied. Required roles: {', '.join(wanted)}. "
                f"User roles: {', '.join(sorted(identity.roles))}"
            )
        return identity

    return _guard


require_reviewer = require_roles(*settings.reviewer_roles)
require_admin = require_roles("admin")
