"""
Applications Models

Domain types for recruitment applications.

An application is stored once and never modified: the only lifecycle
transitions are creation and deletion.
"""

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Track(str, enum.Enum):
    """Applicant categories."""

    BABY = "baby"
    STAFF = "staff"


class InterestField(str, enum.Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    DESIGN = "design"
    UNSURE = "unsure"


class CodingExperience(str, enum.Enum):
    NONE = "none"
    CLASS = "class"
    PROJECT = "project"


class Position(str, enum.Enum):
    PLANNING = "planning"
    FRONTEND = "frontend"
    BACKEND = "backend"
    DESIGN = "design"


# Interview slots offered on the form
INTERVIEW_DATES: tuple[str, ...] = ("2월 22일(토)", "2월 23일(일)")

COMMON_FIELDS: tuple[str, ...] = (
    "name",
    "studentId",
    "major",
    "doubleMajor",
    "phone",
    "email",
    "currentYear",
    "schedule1",
    "schedule2",
    "schedule3",
    "interviewDates",
    "activities",
)

TRACK_FIELDS: dict[Track, tuple[str, ...]] = {
    Track.BABY: ("interestField", "codingExperience", "essay1", "essay2", "essay3"),
    Track.STAFF: ("position", "techStack", "portfolio", "essay1", "essay2", "essay3"),
}


def fields_for_track(track: Track) -> tuple[str, ...]:
    """All form fields that belong to a track, in form order."""
    return COMMON_FIELDS + TRACK_FIELDS[track]


def blank_form(track: Track) -> dict[str, Any]:
    """The empty form a new applicant starts from."""
    form: dict[str, Any] = {}
    for field in fields_for_track(track):
        if field == "interviewDates":
            form[field] = []
        elif field == "activities":
            form[field] = [""]
        else:
            form[field] = ""
    return form


def track_from_id(application_id: str) -> Track | None:
    """Decode the track from an `{track}-{millis}-{suffix}` identifier."""
    prefix, _, _ = application_id.partition("-")
    try:
        return Track(prefix)
    except ValueError:
        return None


class Application(BaseModel):
    """
    An application as served to admin readers.

    `form_data` is always plaintext here; the encrypted envelope only
    exists in the store. `ip_address` is stored metadata and is left out
    of every serialized response.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    track: Track
    form_data: dict[str, Any] = Field(alias="formData")
    submitted_at: datetime = Field(alias="submittedAt")
    ip_address: str | None = Field(default=None, alias="ipAddress", exclude=True)
