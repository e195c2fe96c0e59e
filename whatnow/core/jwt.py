# whatnow/core/jwt.py
"""
Access tokens shared with the auth service.

Only ``typ == "access"`` tokens carrying a non-empty string ``sub`` are
accepted; ``sub`` is the owner id every task query is scoped to.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from whatnow.core.clock import utcnow
from whatnow.core.config import settings

TOKEN_TYPE = "access"


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Mint a token the way the auth service does (used by tooling and tests)."""
    issued = utcnow()
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "iat": issued,
        "exp": issued + lifetime,
        "typ": TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Dict[str, Any]:
    """Decoded claims; JWTError for a bad signature, expiry, wrong type or missing sub."""
    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if claims.get("typ") != TOKEN_TYPE:
        raise JWTError("Invalid token type")
    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub.strip():
        raise JWTError("Token has no subject")
    return claims


def owner_from_token(token: str) -> Optional[str]:
    """The token's owner id, or None when it does not verify."""
    try:
        return verify_access_token(token)["sub"]
    except JWTError:
        return None
