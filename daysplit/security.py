"""HTTP basic auth for the management routes."""

from __future__ import annotations

import secrets

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from daysplit.config import settings

logger = structlog.get_logger(__name__)

_basic = HTTPBasic(auto_error=False)


def require_admin(credentials: HTTPBasicCredentials | None = Depends(_basic)) -> None:
    """Reject the request unless it carries the configured basic auth credentials."""
    if not settings.basic_auth_enabled:
        return

    if credentials is not None:
        user_ok = secrets.compare_digest(
            credentials.username.encode("utf-8"), settings.basic_auth_username.encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            credentials.password.encode("utf-8"), settings.basic_auth_password.encode("utf-8")
        )
        if user_ok and password_ok:
            return
        logger.warning("basic_auth_rejected", username=credentials.username)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Basic"},
    )
