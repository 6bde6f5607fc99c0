"""
Admin Authorization Module

Provides the FastAPI dependency guarding the admin endpoints.

The admin gate is a single shared token sent in the `x-admin-token`
header and compared against the configured ADMIN_TOKEN.

SECURITY NOTE:
- If ADMIN_TOKEN is not configured every admin request fails closed with
  HTTP 500 (server misconfiguration), never with silent access
- Comparison is constant-time (secrets.compare_digest)
- Tokens are never logged
"""

import logging
import secrets

from fastapi import Header, HTTPException, status

from recruit.core.config import settings

logger = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "x-admin-token"


def check_admin_token(provided: str | None, expected: str | None) -> None:
    """
    Validate a caller-supplied admin token.

    Args:
        provided: Token sent by the caller (may be None)
        expected: Configured token (None or blank means not configured)

    Raises:
        HTTPException 500: If no admin token is configured
        HTTPException 401: If the token is missing or does not match
    """
    if not expected or not expected.strip():
        logger.error("ADMIN_TOKEN is not configured - refusing admin request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "ADMIN_TOKEN not configured",
                "details": "ADMIN_TOKEN_NOT_CONFIGURED",
            },
        )

    if not provided or not secrets.compare_digest(
        provided.strip().encode("utf-8"), expected.strip().encode("utf-8")
    ):
        logger.warning("Admin request rejected: missing or invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized"},
        )


async def require_admin_token(
    x_admin_token: str | None = Header(default=None, alias=ADMIN_TOKEN_HEADER),
) -> None:
    """
    FastAPI dependency for admin endpoints.

    Usage:
        @router.get("", dependencies=[Depends(require_admin_token)])
        async def list_applications(): ...
    """
    check_admin_token(x_admin_token, settings.admin_token)


__all__ = [
    "ADMIN_TOKEN_HEADER",
    "check_admin_token",
    "require_admin_token",
]
