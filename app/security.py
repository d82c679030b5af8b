"""
Travel Planner Backend — Access Token Verification
====================================================

What:  Issues and verifies HS256 JSON Web Tokens and exposes a FastAPI
       dependency that gates maintenance endpoints.
Why:   Cache invalidation is an operator action; anonymous clients must not
       be able to flush the shared cache.
How:   PyJWT signs and verifies tokens with settings.jwt_secret. The `exp`
       and `sub` claims are required.
Who:   `require_access_token` is attached to protected routes with Depends().

Failure mapping:
    no Authorization header      ┐
    not a Bearer scheme          │
    bad signature / malformed    ├──▶ AuthenticationError → 401
    expired                      │
    server has no JWT secret     ┘
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header should produce our 401 envelope,
# not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Issue a signed access token for `subject`.

    Lifetime defaults to settings.access_token_expire_minutes.
    """
    if not settings.jwt_secret:
        raise AuthenticationError("Token signing is not configured")
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = dict(extra_claims or {})
    payload.update(
        sub=subject,
        iat=now,
        exp=now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes)),
    )
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify `token` and return its claims.

    Raises:
        AuthenticationError: for every verification failure; the reason is
        logged, not returned.
    """
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured; rejecting token")
        raise AuthenticationError()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        raise AuthenticationError("Access token has expired")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected invalid access token: %s", e)
        raise AuthenticationError()


async def require_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """FastAPI dependency: the verified claims of the caller's bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()
    return decode_access_token(credentials.credentials)
