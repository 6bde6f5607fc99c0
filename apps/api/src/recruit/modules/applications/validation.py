"""
Application Form Validation

Pure validation shared by the submission client and the server.
The server re-runs it on every submission and is authoritative.

`validate(track, form_data)` returns a mapping of field name to error
message; an empty mapping means the form is acceptable.
"""

import re
from typing import Any

from recruit.modules.applications.models import (
    INTERVIEW_DATES,
    CodingExperience,
    InterestField,
    Position,
    Track,
    fields_for_track,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\d{3}-?\d{3,4}-?\d{4}$")
URL_PATTERN = re.compile(r"^https?://.+")

REQUIRED_TEXT_FIELDS: tuple[str, ...] = (
    "name",
    "studentId",
    "email",
    "phone",
    "major",
    "currentYear",
    "schedule1",
    "schedule2",
    "schedule3",
)

TRACK_REQUIRED_TEXT_FIELDS: dict[Track, tuple[str, ...]] = {
    Track.BABY: ("interestField", "essay1", "essay2", "essay3"),
    Track.STAFF: ("position", "techStack", "essay1", "essay2", "essay3"),
}

OPTIONAL_TEXT_FIELDS: dict[Track, tuple[str, ...]] = {
    Track.BABY: ("doubleMajor", "codingExperience"),
    Track.STAFF: ("doubleMajor", "portfolio"),
}

ENUM_FIELDS: dict[Track, dict[str, frozenset[str]]] = {
    Track.BABY: {
        "interestField": frozenset(item.value for item in InterestField),
        "codingExperience": frozenset(item.value for item in CodingExperience),
    },
    Track.STAFF: {
        "position": frozenset(item.value for item in Position),
    },
}

ENUM_ERROR_MESSAGES = {
    "interestField": "Invalid interest field",
    "codingExperience": "Invalid coding experience",
    "position": "Invalid position",
}

PHONE_SEPARATORS = re.compile(r"[\s\-.]")


def parse_track(track: Any) -> Track | None:
    if isinstance(track, Track):
        return track
    try:
        return Track(track)
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value.strip()))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", value)))


def is_valid_url(value: str) -> bool:
    return bool(URL_PATTERN.match(value.strip()))


def _validate_interview_dates(value: Any) -> str | None:
    if not isinstance(value, list) or not value:
        return "At least one interview date must be selected"
    for date in value:
        if date not in INTERVIEW_DATES:
            return f"Invalid interview date: {date}"
    return None


def _validate_activities(value: Any) -> str | None:
    if not isinstance(value, list):
        return "Missing required field: activities"
    if any(not isinstance(item, str) for item in value):
        return "activities must be a list of text entries"
    return None


def validate(track: Any, form_data: Any) -> dict[str, str]:
    """
    Validate an application form.

    Args:
        track: "baby" or "staff" (or a Track)
        form_data: The submitted form record

    Returns:
        Field name -> error message. Empty when the form is valid.
    """
    resolved = parse_track(track)
    if resolved is None:
        return {"track": "Invalid track"}
    if not isinstance(form_data, dict):
        return {"formData": "Missing required fields"}

    errors: dict[str, str] = {}

    for field in REQUIRED_TEXT_FIELDS + TRACK_REQUIRED_TEXT_FIELDS[resolved]:
        if _is_blank(form_data.get(field)):
            errors[field] = f"Missing required field: {field}"

    for field in OPTIONAL_TEXT_FIELDS[resolved]:
        value = form_data.get(field)
        if value is not None and not isinstance(value, str):
            errors[field] = f"Invalid value for field: {field}"

    if "email" not in errors and not is_valid_email(form_data["email"]):
        errors["email"] = "Invalid email format"

    if "phone" not in errors and not is_valid_phone(form_data["phone"]):
        errors["phone"] = "Invalid phone format"

    interview_error = _validate_interview_dates(form_data.get("interviewDates"))
    if interview_error:
        errors["interviewDates"] = interview_error

    activities_error = _validate_activities(form_data.get("activities"))
    if activities_error:
        errors["activities"] = activities_error

    for field, allowed in ENUM_FIELDS[resolved].items():
        if field in errors:
            continue
        value = form_data.get(field)
        if _is_blank(value):
            # Blank optional enums are fine; blank required ones were caught above
            continue
        if value not in allowed:
            errors[field] = ENUM_ERROR_MESSAGES[field]

    if resolved is Track.STAFF and "portfolio" not in errors:
        portfolio = form_data.get("portfolio")
        if not _is_blank(portfolio) and not is_valid_url(portfolio):
            errors["portfolio"] = "Invalid portfolio URL format"

    return errors


def first_error(track: Any, errors: dict[str, str]) -> str | None:
    """Return the first error in form order, for single-message responses."""
    if not errors:
        return None
    resolved = parse_track(track)
    if resolved is not None:
        for field in fields_for_track(resolved):
            if field in errors:
                return errors[field]
    return next(iter(errors.values()))


def normalize_form_data(track: Track, form_data: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only the fields that belong to the track.

    Strips the other track's fields and anything unknown so the two
    shapes never mix in storage.
    """
    normalized: dict[str, Any] = {}
    for field in fields_for_track(track):
        if field in form_data:
            normalized[field] = form_data[field]
        elif field == "activities":
            normalized[field] = []
        elif field != "interviewDates":
            normalized[field] = ""
    return normalized
