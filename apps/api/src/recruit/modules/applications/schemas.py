"""
Applications Schemas

Pydantic schemas for request parsing and response serialization.
Field names follow the camelCase wire format used by the web client.

The form record itself is kept as a plain dict: it is checked by
`validation.validate`, which the client shares, so field-level errors
look the same on both sides.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from recruit.modules.applications.models import Application


class ApplicationSubmitRequest(BaseModel):
    """Request body for POST /applications."""

    model_config = ConfigDict(populate_by_name=True)

    # Checked by the service so a bad track yields the same 400 shape as
    # every other validation failure
    track: str | None = None
    form_data: dict[str, Any] | None = Field(default=None, alias="formData")
    captcha_token: str | None = Field(default=None, alias="captchaToken")


class ApplicationSubmitResponse(BaseModel):
    """Response after an accepted submission."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    application_id: str = Field(alias="applicationId")
    message: str = "Application submitted successfully"


class ApplicationListResponse(BaseModel):
    """Admin listing of every stored application."""

    applications: list[Application]
    count: int = Field(..., ge=0)


class ApplicationDetailResponse(BaseModel):
    success: bool = True
    application: Application


class DeleteApplicationResponse(BaseModel):
    success: bool = True
    message: str = "Application deleted successfully"


class ErrorResponse(BaseModel):
    """Error body returned by every endpoint."""

    error: str
    details: Any | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    path: str
    timestamp: datetime
