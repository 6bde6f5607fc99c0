"""
Applications Router

Public endpoints for recruitment applications.
No authentication: applicants are anonymous.

Endpoints:
- POST /applications - Submit a new application
- PUT /applications/{id} - Always refused, applications are read-only

Security:
- Per-address rate limiting (fixed window)
- Bot-prevention challenge verified server-side
- Server-side validation with the rules the client also applies
- Form data encrypted at rest
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from recruit.core.rate_limit import RateLimiter, get_client_ip, get_rate_limiter
from recruit.core.store import KeyValueStore, get_store
from recruit.modules.applications import service
from recruit.modules.applications.schemas import (
    ApplicationSubmitRequest,
    ApplicationSubmitResponse,
    ErrorResponse,
)
from recruit.modules.applications.service import ApplicationServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApplicationSubmitResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit Application",
    description="""
Submit a recruitment application for the `baby` or `staff` track.

The request passes, in order: rate limiting, challenge verification,
validation, storage. A notification email is sent to the organizers
afterwards; its outcome never affects the response.

**Response:**
Returns the generated application id. Applications cannot be edited
after submission.
""",
    responses={
        400: {
            "description": "Validation or challenge failure",
            "model": ErrorResponse,
            "content": {
                "application/json": {
                    "example": {
                        "error": "Invalid email format",
                        "details": {"email": "Invalid email format"},
                    }
                }
            },
        },
        429: {
            "description": "Too many submissions from this address",
            "model": ErrorResponse,
        },
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
)
async def submit_application(
    data: ApplicationSubmitRequest,
    request: Request,
    store: KeyValueStore = Depends(get_store),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> ApplicationSubmitResponse:
    """
    Submit a new application.

    Args:
        data: Track, form data and challenge token
        request: Incoming request (client address)
        store: Key-value store (injected)
        rate_limiter: Submission limiter (injected)

    Raises:
        HTTPException 400: Validation or challenge failure
        HTTPException 429: Rate limit exceeded
        HTTPException 500: Storage failure
    """
    client_ip = get_client_ip(request)

    try:
        return await service.accept_application(store, rate_limiter, data, client_ip)

    except ApplicationServiceError as e:
        if e.status_code >= 500:
            logger.error(f"Application service error: {e.message}")
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.message, "details": e.details},
        ) from e
    except HTTPException:
        # Re-raise HTTPExceptions (rate limit) without wrapping
        raise
    except Exception as e:
        logger.exception(f"Unexpected error submitting application: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to submit application", "details": "INTERNAL_ERROR"},
        ) from e


@router.put(
    "/{application_id}",
    status_code=status.HTTP_403_FORBIDDEN,
    summary="Update Application (refused)",
    responses={403: {"description": "Applications are read-only", "model": ErrorResponse}},
)
async def update_application(
    application_id: str,
    changes: dict[str, Any] | None = Body(default=None),
    store: KeyValueStore = Depends(get_store),
) -> None:
    """
    Applications cannot be modified once submitted.

    Refused for every caller, with or without an admin token.
    """
    try:
        await service.update_application(store, application_id, changes or {})
    except ApplicationServiceError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.message, "details": e.details},
        ) from e
