"""
Opsboard: Access token inspection

Tokens are verified by the server; the client only reads claims to decide
whether a stored session is still usable.
"""
import time
from typing import Any

from jose import jwt, JWTError


def token_claims(token: str | None) -> dict[str, Any] | None:
    """Return the unverified claims of a JWT, or None for opaque tokens."""
    if not token:
        return None
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def token_expired(token: str | None, now: float | None = None) -> bool:
    claims = token_claims(token)
    if not claims or "exp" not in claims:
        return False
    try:
        exp = float(claims["exp"])
    except (TypeError, ValueError):
        return False
    return exp <= (time.time() if now is None else now)
