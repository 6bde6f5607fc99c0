"""
Submission Client

Validates a form locally, then posts it to the service, trying the
primary endpoint before the legacy one. The saved draft for the track is
cleared only after the service accepts the application.
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from recruit.client.challenge import ChallengeGate
from recruit.client.drafts import DraftStorage, draft_key
from recruit.client.fallback import RequestSpec, call_with_fallback
from recruit.modules.applications.models import Track
from recruit.modules.applications.validation import first_error, parse_track, validate

logger = logging.getLogger(__name__)

APPLICATIONS_PATH = "/applications"


class FormValidationError(Exception):
    """Local validation failed; nothing was sent."""

    def __init__(self, errors: dict[str, str], message: str | None = None):
        self.errors = errors
        super().__init__(message or next(iter(errors.values()), "Invalid application"))


class SubmissionInProgressError(Exception):
    """A submission from this client is already in flight."""


class SubmissionClient:
    def __init__(
        self,
        endpoints: Sequence[str],
        *,
        storage: DraftStorage | None = None,
        challenge: ChallengeGate | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.endpoints = list(endpoints)
        self.storage = storage
        self.challenge = challenge
        self._http_client = http_client
        self._timeout = timeout
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def submit(
        self,
        track: Track | str,
        form_data: dict[str, Any],
        challenge_token: str | None = None,
    ) -> str:
        """
        Submit an application.

        Args:
            track: "baby" or "staff"
            form_data: The form record
            challenge_token: Explicit token; otherwise taken from the gate

        Returns:
            The application id assigned by the service

        Raises:
            SubmissionInProgressError: Another submit() has not finished
            FormValidationError: Local validation failed (no request sent)
            ChallengeRequiredError: Gate enabled and not completed
            EndpointError: Every endpoint failed (last failure)
        """
        if self._in_flight:
            raise SubmissionInProgressError()

        errors = validate(track, form_data)
        if errors:
            raise FormValidationError(errors, first_error(track, errors))
        resolved = parse_track(track)

        if challenge_token is None and self.challenge is not None:
            self.challenge.require_token()
            challenge_token = self.challenge.consume()

        self._in_flight = True
        try:
            request = RequestSpec(
                method="POST",
                path=APPLICATIONS_PATH,
                json={
                    "track": resolved.value,
                    "formData": form_data,
                    "captchaToken": challenge_token,
                },
            )
            if self._http_client is not None:
                response = await call_with_fallback(self._http_client, self.endpoints, request)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await call_with_fallback(client, self.endpoints, request)
        finally:
            self._in_flight = False

        application_id = response.json().get("applicationId")
        logger.info(f"Application submitted: {application_id}")

        if self.storage is not None:
            self.storage.remove(draft_key(resolved))

        return application_id
