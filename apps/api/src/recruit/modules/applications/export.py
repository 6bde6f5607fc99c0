"""
Applications Export

Flattens applications into one row per applicant for spreadsheet review.
Both tracks share a single column set; columns that belong to the other
track are left blank. The submitter address is never exported.
"""

import csv
import io
from collections.abc import Iterable
from typing import Any

from recruit.modules.applications.models import Application, Track

COMMON_COLUMNS: tuple[str, ...] = (
    "id",
    "track",
    "submittedAt",
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

BABY_COLUMNS: tuple[str, ...] = ("interestField", "codingExperience")
STAFF_COLUMNS: tuple[str, ...] = ("position", "techStack", "portfolio")
ESSAY_COLUMNS: tuple[str, ...] = ("essay1", "essay2", "essay3")

EXPORT_COLUMNS: tuple[str, ...] = COMMON_COLUMNS + BABY_COLUMNS + STAFF_COLUMNS + ESSAY_COLUMNS

INTERVIEW_DATE_SEPARATOR = ", "
ACTIVITY_SEPARATOR = " / "


def _join(values: Any, separator: str) -> str:
    if not isinstance(values, list):
        return ""
    return separator.join(str(v).strip() for v in values if isinstance(v, str) and v.strip())


def to_export_row(application: Application) -> dict[str, str]:
    form = application.form_data
    row = dict.fromkeys(EXPORT_COLUMNS, "")

    row["id"] = application.id
    row["track"] = application.track.value
    row["submittedAt"] = application.submitted_at.isoformat()

    for column in COMMON_COLUMNS[3:] + ESSAY_COLUMNS:
        value = form.get(column)
        if isinstance(value, str):
            row[column] = value

    row["interviewDates"] = _join(form.get("interviewDates"), INTERVIEW_DATE_SEPARATOR)
    row["activities"] = _join(form.get("activities"), ACTIVITY_SEPARATOR)

    track_columns = BABY_COLUMNS if application.track is Track.BABY else STAFF_COLUMNS
    for column in track_columns:
        value = form.get(column)
        if isinstance(value, str):
            row[column] = value

    return row


def to_export_rows(applications: Iterable[Application]) -> list[dict[str, str]]:
    """One row per application, in the order given."""
    return [to_export_row(application) for application in applications]


def rows_to_csv(rows: Iterable[dict[str, str]]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=list(EXPORT_COLUMNS))
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return output.getvalue()
