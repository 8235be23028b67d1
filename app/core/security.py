"""Bearer token handling.

Tokens are issued by the identity provider and signed with the shared
``JWT_SECRET_KEY``; ``sub`` is the id of the caller's ``profiles`` row.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from jose import JWTError, jwt

from app.config import settings

logger = structlog.get_logger()


def create_access_token(
    subject: UUID,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Issue a token shaped like the identity provider's.

    Used by scripts and tests; the service itself never signs users in.
    """
    now = datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": str(subject),
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes)),
    }
    if email:
        claims["email"] = email
    if settings.jwt_audience:
        claims["aud"] = settings.jwt_audience

    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Verify signature, expiry and (when configured) audience.

    Returns:
        The claims, or None if the token is not acceptable
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"verify_aud": settings.jwt_audience is not None},
        )
    except JWTError as e:
        logger.info("access_token_rejected", error=str(e))
        return None


def token_subject(token: str) -> UUID | None:
    """Profile id carried by a valid token."""
    claims = decode_access_token(token)
    if claims is None:
        return None

    try:
        return UUID(str(claims.get("sub")))
    except ValueError:
        return None
