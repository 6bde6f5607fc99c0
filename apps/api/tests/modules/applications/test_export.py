"""
Unit tests for the spreadsheet export transform.
"""

import csv
import io
from datetime import UTC, datetime

from recruit.modules.applications.export import EXPORT_COLUMNS, rows_to_csv, to_export_rows
from recruit.modules.applications.models import Application, Track

SUBMITTED = datetime(2026, 2, 5, 10, 0, tzinfo=UTC)


def _application(application_id, track, form_data, ip_address="1.2.3.4"):
    return Application(
        id=application_id,
        track=track,
        form_data=form_data,
        submitted_at=SUBMITTED,
        ip_address=ip_address,
    )


class TestToExportRows:
    def test_one_row_per_application(self, baby_form, staff_form):
        rows = to_export_rows(
            [
                _application("baby-1-a", Track.BABY, baby_form),
                _application("staff-1-a", Track.STAFF, staff_form),
            ]
        )

        assert [row["id"] for row in rows] == ["baby-1-a", "staff-1-a"]
        assert all(set(row) == set(EXPORT_COLUMNS) for row in rows)

    def test_other_track_columns_are_blank(self, baby_form, staff_form):
        baby_row, staff_row = to_export_rows(
            [
                _application("baby-1-a", Track.BABY, baby_form),
                _application("staff-1-a", Track.STAFF, staff_form),
            ]
        )

        assert baby_row["interestField"] == "frontend"
        assert baby_row["position"] == ""
        assert baby_row["portfolio"] == ""
        assert staff_row["position"] == "backend"
        assert staff_row["interestField"] == ""
        assert staff_row["codingExperience"] == ""

    def test_list_fields_are_joined(self, staff_form):
        staff_form["activities"] = ["멋사 13기", "", "  ", "해커톤 수상"]

        (row,) = to_export_rows([_application("staff-1-a", Track.STAFF, staff_form)])

        assert row["interviewDates"] == "2월 22일(토), 2월 23일(일)"
        assert row["activities"] == "멋사 13기 / 해커톤 수상"

    def test_submitter_address_not_exported(self, baby_form):
        (row,) = to_export_rows([_application("baby-1-a", Track.BABY, baby_form, "10.0.0.1")])

        assert "10.0.0.1" not in row.values()
        assert "ipAddress" not in row

    def test_empty_input(self):
        assert to_export_rows([]) == []


class TestRowsToCsv:
    def test_header_and_values(self, baby_form):
        baby_form["essay1"] = '쉼표, 그리고 "따옴표"'
        content = rows_to_csv(to_export_rows([_application("baby-1-a", Track.BABY, baby_form)]))

        reader = csv.DictReader(io.StringIO(content))
        assert reader.fieldnames == list(EXPORT_COLUMNS)
        (row,) = list(reader)
        assert row["essay1"] == '쉼표, 그리고 "따옴표"'
        assert row["name"] == "김사자"
