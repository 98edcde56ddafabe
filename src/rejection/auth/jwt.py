"""
JWT verification for tokens issued by the external auth provider.

The provider signs access tokens with a shared HS256 secret. ``sub`` is the
user's UUID and ``aud`` is ``authenticated``. Token issuance belongs to the
provider; ``create_access_token`` mirrors its format for local tooling and tests.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from rejection.config import get_settings


def create_access_token(user_id: uuid.UUID, *, expires_in: timedelta | None = None) -> str:
    """
    Create an access token in the provider's format.

    Args:
        user_id: The user's UUID (becomes the ``sub`` claim).
        expires_in: Token lifetime; defaults to the configured access token lifetime.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + lifetime,
    }
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> uuid.UUID:
    """
    Verify a provider token and return the user id it was issued for.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or has a malformed subject.
    """
    settings = get_settings()
    options: dict[str, Any] = {"require": ["exp", "sub"]}
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    try:
        return uuid.UUID(str(payload["sub"]))
    except ValueError:
        msg = "Token subject is not a valid user id"
        raise jwt.InvalidTokenError(msg) from None
