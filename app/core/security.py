# app/core/security.py
"""
Credential and token primitives.

No FastAPI or database access here; everything is a pure function so it can
be exercised directly from tests and services.

  - password hashing:  "<salt>$<sha256(salt + password)>"
  - access tokens:     HS256 JWT carrying userId / email / role / exp
  - session tokens:    opaque 64-char hex identifiers for carts
  - order numbers:     "PC" + last 8 digits of the millisecond clock
"""
import hashlib
import hmac
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from pydantic import BaseModel, ValidationError

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

SALT_BYTES = 16


class TokenPayload(BaseModel):
    """Identity embedded in an access token."""

    userId: int
    email: str
    role: str
    exp: int


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


def _digest(salt: str, password: str) -> str:
    return hashlib.sha256(f"{salt}{password}".encode("utf-8")).hexdigest()


def hash_password(password: str, salt: str | None = None) -> str:
    """
    Hash a password with a per-password random salt.

    Returns:
        "<hex salt>$<hex digest>"
    """
    if salt is None:
        salt = secrets.token_hex(SALT_BYTES)
    return f"{salt}${_digest(salt, password)}"


def verify_password(password: str, password_hash: str) -> bool:
    """
    Recompute the salted digest and compare it with the stored one.

    OAuth-only accounts store an empty hash and never match.
    """
    if not password_hash or "$" not in password_hash:
        return False
    salt, expected = password_hash.split("$", 1)
    return hmac.compare_digest(_digest(salt, password), expected)


# ---------------------------------------------------------------------------
# Access tokens (JWT)
# ---------------------------------------------------------------------------


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    secret: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Issue a signed access token for (user_id, email, role).

    Args:
        expires_delta: lifetime of the token; defaults to
            ACCESS_TOKEN_TTL_HOURS (24h). A negative delta yields an
            already-expired token.
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.ACCESS_TOKEN_TTL_HOURS)
    expire = datetime.now(timezone.utc) + expires_delta

    claims = {
        "userId": user_id,
        "email": email,
        "role": role,
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(
        claims,
        secret or settings.JWT_SECRET,
        algorithm=settings.JWT_ALG,
    )


def verify_access_token(token: str, secret: str | None = None) -> TokenPayload | None:
    """
    Verify signature and expiry of an access token.

    Returns:
        TokenPayload if the token is valid, None for a tampered signature,
        malformed structure, missing claims or expired `exp`.
    """
    try:
        claims = jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
        )
        return TokenPayload.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        logger.debug("Rejected access token: %s", exc)
        return None


# ---------------------------------------------------------------------------
# Opaque identifiers
# ---------------------------------------------------------------------------


def generate_session_token() -> str:
    """32 random bytes as 64 hex characters."""
    return secrets.token_hex(32)


def generate_order_number() -> str:
    """
    Timestamp-derived order number, e.g. "PC48213377".

    Two checkouts within the same millisecond (or 10^8 ms apart) collide.
    """
    millis = str(int(time.time() * 1000))
    return f"PC{millis[-8:]}"
