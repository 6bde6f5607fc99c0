"""
Applications Admin Router

API endpoints for organizers reviewing submitted applications.
All endpoints require the shared admin token (`x-admin-token` header).
Updates are refused for every caller by the public router.

Endpoints:
- GET /applications - List applications (optional `track` filter)
- GET /applications/export - Download every application as CSV
- GET /applications/{id} - Get one application
- DELETE /applications/{id} - Delete an application

Security:
- Token compared in constant time; unset token fails closed (500)
- Form data decrypted only for authorized readers
- The submitter address is never included in responses or the CSV export
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from recruit.core.auth import require_admin_token
from recruit.core.store import KeyValueStore, get_store
from recruit.modules.applications import service
from recruit.modules.applications.export import rows_to_csv, to_export_rows
from recruit.modules.applications.models import Track
from recruit.modules.applications.schemas import (
    ApplicationDetailResponse,
    ApplicationListResponse,
    DeleteApplicationResponse,
    ErrorResponse,
)
from recruit.modules.applications.service import ApplicationServiceError

logger = logging.getLogger(__name__)

router = APIRouter(
    dependencies=[Depends(require_admin_token)],
    responses={
        401: {"description": "Missing or invalid admin token", "model": ErrorResponse},
        500: {"description": "Admin token not configured", "model": ErrorResponse},
    },
)


# ============================================
# Helper Functions
# ============================================


def _handle_service_error(e: ApplicationServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={"error": e.message, "details": e.details},
    ) from e


# ============================================
# Endpoints
# ============================================


@router.get(
    "",
    response_model=ApplicationListResponse,
    summary="List Applications",
    description="""
List stored applications, newest first, with decrypted form data.

**Filtering:**
- `track`: only applications whose id carries that track prefix
""",
)
async def list_applications(
    track: Track | None = Query(default=None, description="Filter by track"),
    store: KeyValueStore = Depends(get_store),
) -> ApplicationListResponse:
    try:
        applications = await service.list_applications(store, track)
    except ApplicationServiceError as e:
        _handle_service_error(e)

    logger.info(f"Admin listed {len(applications)} applications (track={track})")
    return ApplicationListResponse(applications=applications, count=len(applications))


@router.get(
    "/export",
    summary="Export Applications as CSV",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_applications(
    track: Track | None = Query(default=None, description="Filter by track"),
    store: KeyValueStore = Depends(get_store),
) -> StreamingResponse:
    """
    Download applications as a CSV file.

    One row per application; columns of the other track are blank.
    """
    try:
        applications = await service.list_applications(store, track)
    except ApplicationServiceError as e:
        _handle_service_error(e)

    content = rows_to_csv(to_export_rows(applications))
    filename = f"applications-{datetime.now(UTC):%Y%m%d}.csv"

    logger.info(f"Admin exported {len(applications)} applications")
    return StreamingResponse(
        iter([content.encode("utf-8-sig")]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/{application_id}",
    response_model=ApplicationDetailResponse,
    summary="Get Application",
    responses={404: {"description": "Application not found", "model": ErrorResponse}},
)
async def get_application(
    application_id: str,
    store: KeyValueStore = Depends(get_store),
) -> ApplicationDetailResponse:
    try:
        application = await service.get_application(store, application_id)
    except ApplicationServiceError as e:
        _handle_service_error(e)

    return ApplicationDetailResponse(application=application)


@router.delete(
    "/{application_id}",
    response_model=DeleteApplicationResponse,
    summary="Delete Application",
    responses={404: {"description": "Application not found", "model": ErrorResponse}},
)
async def delete_application(
    application_id: str,
    store: KeyValueStore = Depends(get_store),
) -> DeleteApplicationResponse:
    """
    Delete an application permanently.

    Deleting an unknown id returns 404 and leaves the store unchanged.
    """
    try:
        await service.delete_application(store, application_id)
    except ApplicationServiceError as e:
        _handle_service_error(e)

    return DeleteApplicationResponse()
