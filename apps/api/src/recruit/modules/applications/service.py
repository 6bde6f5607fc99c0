"""
Applications Service Layer

Business logic for recruitment applications.

1. Submission (`accept_application`):
   RECEIVED -> RATE_CHECKED -> CHALLENGE_VERIFIED -> VALIDATED -> PERSISTED
   -> NOTIFIED | NOTIFY_SKIPPED
   Any failing stage short-circuits with an error. The notification stage
   never changes the outcome returned to the applicant.

2. Administration:
   - List (optionally by track), fetch, and delete stored applications
   - Updates are always refused: applications are read-only once stored

Security considerations:
- Validation is re-run server-side with the same rules the client uses
- Challenge tokens are verified with the provider before validation
- Form data is encrypted at rest (see repository)
- Submitter IP is stored but never logged alongside form content
"""

import logging
import secrets
import string
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from recruit.core.challenge import verify_challenge
from recruit.core.email import is_email_enabled, send_new_application_notification
from recruit.core.rate_limit import RateLimiter
from recruit.core.store import KeyValueStore, StoreError
from recruit.modules.applications import repository
from recruit.modules.applications.models import Application, Track
from recruit.modules.applications.repository import DuplicateKeyError, ReadOnlyRecordError
from recruit.modules.applications.schemas import (
    ApplicationSubmitRequest,
    ApplicationSubmitResponse,
)
from recruit.modules.applications.validation import (
    first_error,
    normalize_form_data,
    parse_track,
    validate,
)

logger = logging.getLogger(__name__)

# Constants
ID_SUFFIX_LENGTH = 6
ID_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
MAX_ID_ATTEMPTS = 3


class ApplicationServiceError(Exception):
    """Base exception for application service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 400,
        details: Any | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationFailedError(ApplicationServiceError):
    """Raised when a submission fails field validation."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=field_errors,
        )
        self.field_errors = field_errors or {}


class ChallengeFailedError(ApplicationServiceError):
    """Raised when the bot-prevention challenge is missing or rejected."""

    def __init__(self, reason: str | None = None):
        super().__init__(
            message="Captcha verification failed",
            error_code="CHALLENGE_FAILED",
            status_code=400,
            details=reason,
        )


class ApplicationNotFoundError(ApplicationServiceError):
    """Raised when an application is not found."""

    def __init__(self, application_id: str | None = None):
        super().__init__(
            message="Application not found",
            error_code="APPLICATION_NOT_FOUND",
            status_code=404,
            details=application_id,
        )


class ReadOnlyApplicationError(ApplicationServiceError):
    """Raised on any attempt to modify a stored application."""

    def __init__(self):
        super().__init__(
            message="Applications are read-only and cannot be modified",
            error_code="READ_ONLY",
            status_code=403,
        )


class PersistenceError(ApplicationServiceError):
    """Raised when the store cannot complete a read, write or delete."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(
            message=message,
            error_code="PERSISTENCE_ERROR",
            status_code=500,
            details=details,
        )


def generate_application_id(track: Track, now: datetime | None = None) -> str:
    """
    Build an identifier of the form `{track}-{epochMillis}-{suffix}`.

    The track prefix lets readers decode the track from the id alone.
    """
    moment = now or datetime.now(UTC)
    millis = int(moment.timestamp() * 1000)
    suffix = "".join(secrets.choice(ID_SUFFIX_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"{track.value}-{millis}-{suffix}"


async def _notify(application: Application) -> str:
    """Best-effort notification. Returns the final stage name."""
    if not is_email_enabled():
        logger.info(f"[{application.id}] NOTIFY_SKIPPED (email not configured)")
        return "NOTIFY_SKIPPED"

    try:
        sent = await send_new_application_notification(
            track=application.track.value,
            form_data=application.form_data,
            application_id=application.id,
            submitted_at=application.submitted_at,
        )
    except Exception as e:
        logger.error(f"[{application.id}] Notification failed: {e}")
        return "NOTIFY_SKIPPED"

    if not sent:
        logger.error(f"[{application.id}] Notification was not delivered")
        return "NOTIFY_SKIPPED"

    logger.info(f"[{application.id}] NOTIFIED")
    return "NOTIFIED"


async def accept_application(
    store: KeyValueStore,
    rate_limiter: RateLimiter,
    data: ApplicationSubmitRequest,
    client_ip: str,
    *,
    clock: Callable[[], datetime] = lambda: datetime.now(UTC),
) -> ApplicationSubmitResponse:
    """
    Accept a new application submission.

    Args:
        store: Key-value store for persistence
        rate_limiter: Per-address submission limiter
        data: Parsed request body
        client_ip: Submitter address (rate limit key, stored with the record)
        clock: Source of the acceptance timestamp

    Returns:
        ApplicationSubmitResponse with the generated application id

    Raises:
        RateLimitExceeded: Too many submissions from this address (429)
        ChallengeFailedError: Captcha missing or rejected (400)
        ValidationFailedError: Missing or invalid fields (400)
        PersistenceError: Store write failed (500)
    """
    started = time.perf_counter()
    logger.info("Submission RECEIVED")

    await rate_limiter.enforce(client_ip)
    logger.debug("Submission RATE_CHECKED")

    challenge = await verify_challenge(data.captcha_token, client_ip)
    if not challenge.ok:
        logger.warning(f"Challenge verification failed: {challenge.reason}")
        raise ChallengeFailedError(challenge.reason)
    logger.debug("Submission CHALLENGE_VERIFIED")

    if not data.track or data.form_data is None:
        raise ValidationFailedError("Missing required fields")

    track = parse_track(data.track)
    if track is None:
        raise ValidationFailedError("Invalid track", {"track": "Invalid track"})

    field_errors = validate(track, data.form_data)
    if field_errors:
        message = first_error(track, field_errors) or "Invalid application"
        logger.info(f"Submission rejected by validation: {sorted(field_errors)}")
        raise ValidationFailedError(message, field_errors)
    logger.debug("Submission VALIDATED")

    form_data = normalize_form_data(track, data.form_data)
    submitted_at = clock()

    application: Application | None = None
    for _ in range(MAX_ID_ATTEMPTS):
        application_id = generate_application_id(track, submitted_at)
        try:
            application = await repository.create(
                store,
                application_id=application_id,
                track=track,
                form_data=form_data,
                submitted_at=submitted_at,
                ip_address=client_ip,
            )
            break
        except DuplicateKeyError:
            logger.warning(f"Identifier collision on {application_id}, regenerating")
        except StoreError as e:
            logger.error(f"Failed to store application {application_id}: {e}")
            raise PersistenceError("Failed to submit application", str(e)) from e

    if application is None:
        raise PersistenceError("Failed to submit application", "identifier collision")

    logger.info(f"[{application.id}] PERSISTED")

    await _notify(application)

    logger.info(
        f"Application submitted: id={application.id} "
        f"({(time.perf_counter() - started) * 1000:.0f} ms)"
    )
    return ApplicationSubmitResponse(application_id=application.id)


async def list_applications(
    store: KeyValueStore,
    track: Track | None = None,
) -> list[Application]:
    """
    List stored applications with decrypted form data.

    Raises:
        PersistenceError: If the store cannot be read
    """
    try:
        return await repository.list_all(store, track)
    except StoreError as e:
        logger.error(f"Error fetching applications: {e}")
        raise PersistenceError("Failed to fetch applications", str(e)) from e


async def get_application(store: KeyValueStore, application_id: str) -> Application:
    try:
        application = await repository.get_by_id(store, application_id)
    except StoreError as e:
        logger.error(f"Error fetching application {application_id}: {e}")
        raise PersistenceError("Failed to fetch application", str(e)) from e

    if application is None:
        raise ApplicationNotFoundError(application_id)
    return application


async def delete_application(store: KeyValueStore, application_id: str) -> None:
    """
    Delete one application.

    Raises:
        ApplicationNotFoundError: If no application has this id
        PersistenceError: If the store delete fails
    """
    try:
        removed = await repository.delete(store, application_id)
    except StoreError as e:
        logger.error(f"Error deleting application {application_id}: {e}")
        raise PersistenceError("Failed to delete application", str(e)) from e

    if not removed:
        logger.info(f"Delete requested for unknown application {application_id}")
        raise ApplicationNotFoundError(application_id)

    logger.info(f"Application deleted: {application_id}")


async def update_application(
    store: KeyValueStore,
    application_id: str,
    changes: dict[str, Any],
) -> None:
    """Always refused: stored applications are read-only."""
    try:
        await repository.update(store, application_id, changes)
    except ReadOnlyRecordError as e:
        logger.warning(f"Refused update of read-only application {application_id}")
        raise ReadOnlyApplicationError() from e
