"""
Applications Repository

Key-value store operations for recruitment applications.

Design Principles:
- Records are write-once: `create` refuses to overwrite an existing key
- Records are read-only: `update` always raises
- Form data is encrypted before it reaches the store and decrypted on read
- No business logic (validation, rate limiting) lives here
"""

import logging
from datetime import datetime
from typing import Any

from recruit.core.crypto import DecryptionError, decrypt_form_data, encrypt_form_data
from recruit.core.store import KeyValueStore
from recruit.modules.applications.models import Application, Track, track_from_id

logger = logging.getLogger(__name__)


class DuplicateKeyError(Exception):
    """Raised when a create targets an identifier that already exists."""


class ReadOnlyRecordError(Exception):
    """Raised on any attempt to modify a stored application."""


def _to_document(
    application_id: str,
    track: Track,
    form_data: dict[str, Any],
    submitted_at: datetime,
    ip_address: str | None,
) -> dict[str, Any]:
    return {
        "id": application_id,
        "track": track.value,
        "encryptedData": encrypt_form_data(form_data),
        "submittedAt": submitted_at.isoformat(),
        "ipAddress": ip_address,
        "readonly": True,
    }


def _from_document(document: dict[str, Any]) -> Application | None:
    """
    Decode a stored document.

    Records whose id prefix does not name their track, and records that
    cannot be decrypted, are skipped with a warning.
    """
    application_id = document.get("id")
    track = track_from_id(application_id) if isinstance(application_id, str) else None
    if track is None or document.get("track") != track.value:
        logger.warning(f"Skipping record {application_id} with mismatched track")
        return None

    encrypted = document.get("encryptedData")
    if encrypted:
        try:
            form_data = decrypt_form_data(encrypted)
        except DecryptionError:
            logger.warning(f"Could not decrypt form data for {application_id}")
            return None
    else:
        form_data = document.get("formData") or {}

    return Application(
        id=application_id,
        track=track,
        form_data=form_data,
        submitted_at=document["submittedAt"],
        ip_address=document.get("ipAddress"),
    )


async def create(
    store: KeyValueStore,
    application_id: str,
    track: Track,
    form_data: dict[str, Any],
    submitted_at: datetime,
    ip_address: str | None = None,
) -> Application:
    """Insert a new application. Raises DuplicateKeyError if the id exists."""
    document = _to_document(application_id, track, form_data, submitted_at, ip_address)
    created = await store.set_if_absent(application_id, document)
    if not created:
        raise DuplicateKeyError(application_id)

    return Application(
        id=application_id,
        track=track,
        form_data=form_data,
        submitted_at=submitted_at,
        ip_address=ip_address,
    )


async def get_by_id(store: KeyValueStore, application_id: str) -> Application | None:
    document = await store.get(application_id)
    if document is None:
        return None
    return _from_document(document)


async def list_all(store: KeyValueStore, track: Track | None = None) -> list[Application]:
    """
    List stored applications, newest first.

    With a track, only keys carrying that track's id prefix are read.
    """
    if track is not None:
        documents = await store.get_by_prefix(f"{track.value}-")
    else:
        documents = await store.list_all()

    applications = []
    for document in documents:
        application = _from_document(document)
        if application is not None:
            applications.append(application)

    applications.sort(key=lambda app: app.submitted_at, reverse=True)
    return applications


async def delete(store: KeyValueStore, application_id: str) -> bool:
    """Delete an application. Returns False if it did not exist."""
    return await store.delete(application_id)


async def update(store: KeyValueStore, application_id: str, changes: dict[str, Any]) -> None:
    """Stored applications are immutable; every update is refused."""
    raise ReadOnlyRecordError(application_id)
