from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable
import jwt
from passlib.context import CryptContext
from app.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_ALG = "HS256"
ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def _encode(sub: str, token_type: str, ttl_min: int, **claims: Any) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_min)).timestamp()),
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG)


def make_access_token(sub: str, roles: Iterable[str] = ()) -> str:
    """Short-lived bearer token; ``roles`` is what route guards check."""
    return _encode(sub, ACCESS, settings.access_ttl_min, roles=sorted(set(roles)))


def make_refresh_token(sub: str) -> str:
    # no roles: they are re-read from the user row on refresh
    return _encode(sub, REFRESH, settings.refresh_ttl_min)


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry. Raises ``jwt.PyJWTError`` on any failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALG], options={"require": ["sub", "exp"]})
