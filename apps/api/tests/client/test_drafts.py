"""
Tests for the form store and draft slots.
"""

import pytest

from recruit.client.drafts import DraftStorage, FormStore, draft_key
from recruit.modules.applications.models import INTERVIEW_DATES, Track


@pytest.fixture
def storage(tmp_path):
    return DraftStorage(tmp_path / "drafts")


class TestFormStore:
    def test_initial_state(self, storage):
        form = FormStore("baby", storage)

        assert form.form_data["activities"] == [""]
        assert form.form_data["interviewDates"] == []
        assert form.form_data["interestField"] == ""
        assert "position" not in form.form_data

    def test_update_field_rejects_other_track_fields(self, storage):
        form = FormStore(Track.BABY, storage)

        form.update_field("name", "김사자")
        with pytest.raises(KeyError):
            form.update_field("position", "backend")

        assert form.form_data["name"] == "김사자"

    def test_activity_editing(self, storage):
        form = FormStore("staff", storage)

        form.update_activity(0, "해커톤")
        form.add_activity()
        form.update_activity(1, "스터디")
        form.remove_activity(0)

        assert form.form_data["activities"] == ["스터디"]

    def test_toggle_interview_date_twice_restores(self, storage):
        form = FormStore("baby", storage)

        form.toggle_interview_date(INTERVIEW_DATES[1])
        assert form.form_data["interviewDates"] == [INTERVIEW_DATES[1]]

        form.toggle_interview_date(INTERVIEW_DATES[1])
        assert form.form_data["interviewDates"] == []

    def test_reset(self, storage):
        form = FormStore("baby", storage)
        form.update_field("name", "김사자")

        form.reset()

        assert form.form_data["name"] == ""


class TestDrafts:
    def test_draft_key(self):
        assert draft_key("staff") == "likelion-14th-staff-form"

    def test_save_and_load(self, storage):
        form = FormStore("baby", storage)
        form.update_field("name", "김사자")
        form.toggle_interview_date(INTERVIEW_DATES[0])
        form.save_draft()

        restored = FormStore("baby", storage)
        assert restored.has_draft() is True
        assert restored.load_draft() is True
        assert restored.form_data == form.form_data

    def test_drafts_are_per_track(self, storage):
        FormStore("baby", storage).save_draft()

        assert FormStore("staff", storage).has_draft() is False

    def test_corrupt_draft_leaves_form_unchanged(self, storage):
        storage.set(draft_key("baby"), "{not json")
        form = FormStore("baby", storage)
        form.update_field("name", "김사자")

        assert form.load_draft() is False
        assert form.form_data["name"] == "김사자"

    def test_load_without_draft(self, storage):
        assert FormStore("baby", storage).load_draft() is False

    def test_discard(self, storage):
        form = FormStore("baby", storage)
        form.save_draft()

        form.discard_draft()

        assert form.has_draft() is False
        form.discard_draft()
