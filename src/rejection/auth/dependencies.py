"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rejection.auth.jwt import verify_token
from rejection.auth.principal import Principal
from rejection.dependencies import get_store
from rejection.errors import Unauthorized
from rejection.store.base import Store

_bearer = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    store: Store = Depends(get_store),
) -> Principal:
    """
    Verify the provider's bearer token and resolve the caller's admin flag.

    Raises Unauthorized when the token is missing or invalid.
    """
    if credentials is None:
        raise Unauthorized("Authentication required")
    try:
        user_id = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise Unauthorized(str(e)) from e

    return Principal(user_id=user_id, is_admin=await store.profiles.is_admin(user_id))


async def get_admin_principal(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Same as get_current_principal but rejects non-admins with Forbidden."""
    principal.require_admin()
    return principal
