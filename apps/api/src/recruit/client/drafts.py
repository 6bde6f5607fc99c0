"""
Form Drafts

In-progress form state for one track plus a local draft slot, so an
applicant can leave and resume later. Drafts live in a directory of JSON
files, one per track, keyed `likelion-14th-{track}-form`.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any

from recruit.modules.applications.models import Track, blank_form, fields_for_track

logger = logging.getLogger(__name__)

DRAFT_KEY_TEMPLATE = "likelion-14th-{track}-form"


def draft_key(track: Track | str) -> str:
    return DRAFT_KEY_TEMPLATE.format(track=Track(track).value)


class DraftStorage:
    """Persistent string slots backed by files in `directory`."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class FormStore:
    """
    Editable form record for one track.

    Only the fields that belong to the track can be set. Saving writes the
    whole record to the draft slot; loading replaces the record with the
    saved one. A corrupt draft is logged and leaves the form unchanged.
    """

    def __init__(self, track: Track | str, storage: DraftStorage) -> None:
        self.track = Track(track)
        self.storage = storage
        self.form_data: dict[str, Any] = blank_form(self.track)

    @property
    def storage_key(self) -> str:
        return draft_key(self.track)

    def update_field(self, field: str, value: Any) -> None:
        if field not in fields_for_track(self.track):
            raise KeyError(f"Unknown field for {self.track.value} track: {field}")
        self.form_data[field] = value

    def add_activity(self) -> None:
        self.form_data["activities"].append("")

    def update_activity(self, index: int, value: str) -> None:
        self.form_data["activities"][index] = value

    def remove_activity(self, index: int) -> None:
        del self.form_data["activities"][index]

    def toggle_interview_date(self, date: str) -> None:
        dates = self.form_data["interviewDates"]
        if date in dates:
            dates.remove(date)
        else:
            dates.append(date)

    def save_draft(self) -> None:
        self.storage.set(self.storage_key, json.dumps(self.form_data, ensure_ascii=False))
        logger.debug(f"Draft saved for {self.track.value}")

    def has_draft(self) -> bool:
        return self.storage.get(self.storage_key) is not None

    def load_draft(self) -> bool:
        """Replace the form with the saved draft. Returns False if none or unreadable."""
        raw = self.storage.get(self.storage_key)
        if raw is None:
            return False
        try:
            saved = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load draft for {self.track.value}: {e}")
            return False
        if not isinstance(saved, dict):
            logger.error(f"Failed to load draft for {self.track.value}: not an object")
            return False

        form = blank_form(self.track)
        form.update({key: value for key, value in saved.items() if key in form})
        self.form_data = form
        return True

    def discard_draft(self) -> None:
        self.storage.remove(self.storage_key)

    def reset(self) -> None:
        self.form_data = blank_form(self.track)

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self.form_data)
