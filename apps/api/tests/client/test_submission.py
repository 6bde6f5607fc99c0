"""
Tests for the submission client.
"""

import asyncio
import json

import httpx
import pytest

from recruit.client.challenge import ChallengeGate, ChallengeRequiredError
from recruit.client.drafts import DraftStorage, FormStore
from recruit.client.fallback import EndpointError
from recruit.client.submission import (
    FormValidationError,
    SubmissionClient,
    SubmissionInProgressError,
)

PRIMARY = "https://primary.test/api/v1"
LEGACY = "https://legacy.test/server"


@pytest.fixture
def storage(tmp_path):
    return DraftStorage(tmp_path)


def _accepting_handler(received):
    def handler(request):
        received.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "success": True,
                "applicationId": "baby-1-abc",
                "message": "Application submitted successfully",
            },
        )

    return handler


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success_returns_id_and_clears_draft(self, storage, baby_form):
        form = FormStore("baby", storage)
        form.save_draft()
        received = []

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(_accepting_handler(received))
        ) as http:
            client = SubmissionClient([PRIMARY, LEGACY], storage=storage, http_client=http)
            application_id = await client.submit("baby", baby_form)

        assert application_id == "baby-1-abc"
        assert received == [{"track": "baby", "formData": baby_form, "captchaToken": None}]
        assert form.has_draft() is False

    @pytest.mark.asyncio
    async def test_invalid_form_sends_nothing(self, storage, baby_form):
        baby_form["email"] = "bad"
        received = []

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(_accepting_handler(received))
        ) as http:
            client = SubmissionClient([PRIMARY], storage=storage, http_client=http)
            with pytest.raises(FormValidationError) as exc_info:
                await client.submit("baby", baby_form)

        assert received == []
        assert exc_info.value.errors == {"email": "Invalid email format"}
        assert str(exc_info.value) == "Invalid email format"

    @pytest.mark.asyncio
    async def test_failure_keeps_draft(self, storage, staff_form):
        form = FormStore("staff", storage)
        form.save_draft()

        def handler(request):
            return httpx.Response(500, json={"error": "Failed to submit application"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = SubmissionClient([PRIMARY, LEGACY], storage=storage, http_client=http)
            with pytest.raises(EndpointError) as exc_info:
                await client.submit("staff", staff_form)

        assert exc_info.value.message == "Failed to submit application"
        assert form.has_draft() is True
        assert client.in_flight is False

    @pytest.mark.asyncio
    async def test_challenge_token_taken_from_gate(self, baby_form):
        gate = ChallengeGate("site-key")
        gate.on_success("widget-token")
        received = []

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(_accepting_handler(received))
        ) as http:
            client = SubmissionClient([PRIMARY], challenge=gate, http_client=http)
            await client.submit("baby", baby_form)

        assert received[0]["captchaToken"] == "widget-token"
        assert gate.token is None

    @pytest.mark.asyncio
    async def test_incomplete_challenge_blocks_submission(self, baby_form):
        received = []

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(_accepting_handler(received))
        ) as http:
            client = SubmissionClient(
                [PRIMARY], challenge=ChallengeGate("site-key"), http_client=http
            )
            with pytest.raises(ChallengeRequiredError):
                await client.submit("baby", baby_form)

        assert received == []

    @pytest.mark.asyncio
    async def test_second_submit_while_in_flight_rejected(self, baby_form):
        release = asyncio.Event()
        received = []

        async def handler(request):
            received.append(request)
            await release.wait()
            return httpx.Response(200, json={"success": True, "applicationId": "baby-1-abc"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = SubmissionClient([PRIMARY], http_client=http)
            first = asyncio.create_task(client.submit("baby", baby_form))
            while not received:
                await asyncio.sleep(0)

            with pytest.raises(SubmissionInProgressError):
                await client.submit("baby", baby_form)

            release.set()
            assert await first == "baby-1-abc"

        assert len(received) == 1
