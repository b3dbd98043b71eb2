"""
Bearer-token authentication for FastAPI routes.

A single configured credential pair logs in and receives the configured
token; every operation endpoint requires that token in the Authorization
header.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, Header

from ..api.dependencies import get_settings
from ..config import Settings
from ..errors import AuthError, ConfigurationError

logger = logging.getLogger(__name__)


def _same(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def check_credentials(settings: Settings, username: str | None, password: str | None) -> str:
    """
    Verify a username/password pair and return the session token.

    Raises:
        AuthError: credentials do not match (INVALID_CREDENTIALS)
        ConfigurationError: login is not configured on this server
    """
    if not settings.auth_username or not settings.auth_password or not settings.auth_token:
        raise ConfigurationError(
            "Login is not configured. Set FLOWOPS_USERNAME, FLOWOPS_PASSWORD and FLOWOPS_AUTH_TOKEN."
        )
    user_ok = _same(username, settings.auth_username)
    pass_ok = _same(password, settings.auth_password)
    if not (user_ok and pass_ok):
        logger.info("Rejected login for user %r", username)
        raise AuthError("Invalid credentials", code="INVALID_CREDENTIALS")
    return settings.auth_token


def token_from_header(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    return token or None


def is_authenticated(settings: Settings, authorization: str | None) -> bool:
    return _same(token_from_header(authorization), settings.auth_token)


async def require_token(
    authorization: str | None = Header(None, description="Bearer token"),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    FastAPI dependency guarding protected routes.

    Usage:
        @router.post("/operations/{name}", dependencies=[Depends(require_token)])

    Raises:
        AuthError: 401 if the header is missing, malformed or carries the wrong token
    """
    if not is_authenticated(settings, authorization):
        raise AuthError("Not authenticated")
