"""Bearer token authentication for submission retrieval endpoints.

Tokens are validated against a comma-separated list from environment variables.
Submitting a form needs no token (the anti-abuse verifier covers that path);
reading stored submissions does.

Design principles:
- Single Responsibility: Only handles token validation
- Dependency Injection: Used via FastAPI Depends() for loose coupling
- Configuration-driven: Tokens managed via env vars, not hardcoded
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Header, HTTPException, Request, status

from app.core.config import AppSettings
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Args:
        keys_string: Comma-separated string of API keys, or None.

    Returns:
        Set of trimmed, non-empty API keys.

    Examples:
        >>> parse_api_keys("key1,key2,key3")
        {'key1', 'key2', 'key3'}
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header, if any."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def validate_api_key(provided_key: str, app_settings: AppSettings) -> None:
    """Validate that provided token matches configured keys.

    Pure validation logic without FastAPI dependencies for easy testing.

    Args:
        provided_key: Token to validate.
        app_settings: Application settings holding the allowed keys.

    Raises:
        AuthenticationAppError: If the token is invalid or no keys are configured.
    """
    if not app_settings.api_key_required:
        return

    valid_keys = parse_api_keys(app_settings.api_keys)

    if not valid_keys:
        logger.error(
            "api_key_validation_failed",
            extra={
                "reason": "api_keys_not_configured",
                "auth_required": app_settings.api_key_required,
            },
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="Bearer authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    if provided_key not in valid_keys:
        logger.warning(
            "api_key_validation_failed",
            extra={
                "reason": "invalid_api_key",
                "api_key_hash": hash_identifier(provided_key),
            },
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid bearer token",
        )


async def verify_bearer_token(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """FastAPI dependency for bearer authentication.

    Usage:
        @router.get("/protected", dependencies=[Depends(verify_bearer_token)])

    Raises:
        HTTPException: 401 when the header is missing/malformed, 403 when the
            token is rejected.
    """
    app_settings: AppSettings = request.app.state.settings.app

    if not app_settings.api_key_required:
        logger.debug("auth.skipped", extra={"reason": "auth_required_false"})
        return

    token = extract_bearer_token(authorization)
    if token is None:
        logger.warning("auth.missing_token", extra={"header_present": bool(authorization)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        validate_api_key(token, app_settings)
    except AuthenticationAppError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=exc.message,
        ) from exc

    logger.info("auth.success", extra={"api_key_hash": hash_identifier(token)})
