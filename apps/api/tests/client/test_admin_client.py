"""
Tests for the admin gateway client.
"""

import csv

import httpx
import pytest

from recruit.client.admin import AdminGatewayClient
from recruit.client.fallback import EndpointError

PRIMARY = "https://primary.test/api/v1"


def _application(application_id, track, form_data):
    return {
        "id": application_id,
        "track": track,
        "formData": form_data,
        "submittedAt": "2026-02-05T10:00:00+00:00",
        "ipAddress": "1.2.3.4",
    }


@pytest.fixture
def listing(baby_form, staff_form):
    return [
        _application("staff-2-b", "staff", staff_form),
        _application("baby-1-a", "baby", baby_form),
    ]


def _handler(listing, failing_ids=(), seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        if request.headers.get("x-admin-token") != "token":
            return httpx.Response(401, json={"error": "Unauthorized"})
        if request.method == "GET":
            track = request.url.params.get("track")
            items = [a for a in listing if track is None or a["track"] == track]
            return httpx.Response(200, json={"applications": items, "count": len(items)})
        if request.method == "DELETE":
            application_id = request.url.path.rsplit("/", 1)[-1]
            if application_id in failing_ids:
                return httpx.Response(500, json={"error": "Failed to delete application"})
            return httpx.Response(200, json={"success": True})
        return httpx.Response(405)

    return handler


class TestListing:
    @pytest.mark.asyncio
    async def test_list_populates_view(self, listing):
        seen = []
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(_handler(listing, seen=seen))
        ) as http:
            client = AdminGatewayClient([PRIMARY], "token", http_client=http)
            applications = await client.list_applications()

        assert [app.id for app in applications] == ["staff-2-b", "baby-1-a"]
        assert client.view == applications
        assert seen[0].headers["x-admin-token"] == "token"

    @pytest.mark.asyncio
    async def test_list_by_track(self, listing):
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler(listing))) as http:
            client = AdminGatewayClient([PRIMARY], "token", http_client=http)
            applications = await client.list_applications("baby")

        assert [app.id for app in applications] == ["baby-1-a"]

    @pytest.mark.asyncio
    async def test_bad_token_raises(self, listing):
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler(listing))) as http:
            client = AdminGatewayClient([PRIMARY], "wrong", http_client=http)
            with pytest.raises(EndpointError) as exc_info:
                await client.list_applications()

        assert exc_info.value.status_code == 401


class TestDeleteAll:
    @pytest.mark.asyncio
    async def test_all_succeed(self, listing):
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler(listing))) as http:
            client = AdminGatewayClient([PRIMARY], "token", http_client=http)
            await client.list_applications()
            summary = await client.delete_all()

        assert (summary.succeeded, summary.failed) == (2, 0)
        assert client.view == []

    @pytest.mark.asyncio
    async def test_failed_deletes_stay_in_view(self, listing):
        transport = httpx.MockTransport(_handler(listing, failing_ids={"baby-1-a"}))
        async with httpx.AsyncClient(transport=transport) as http:
            client = AdminGatewayClient([PRIMARY], "token", http_client=http)
            await client.list_applications()
            summary = await client.delete_all()

        assert summary.succeeded == 1
        assert summary.failed == 1
        assert summary.failed_ids == ["baby-1-a"]
        assert [app.id for app in client.view] == ["baby-1-a"]

    @pytest.mark.asyncio
    async def test_optimistic_mode_drops_everything(self, listing):
        transport = httpx.MockTransport(_handler(listing, failing_ids={"baby-1-a"}))
        async with httpx.AsyncClient(transport=transport) as http:
            client = AdminGatewayClient(
                [PRIMARY], "token", http_client=http, optimistic_delete=True
            )
            await client.list_applications()
            summary = await client.delete_all()

        assert summary.failed == 1
        assert client.view == []


class TestExport:
    @pytest.mark.asyncio
    async def test_write_csv(self, listing, tmp_path):
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler(listing))) as http:
            client = AdminGatewayClient([PRIMARY], "token", http_client=http)
            await client.list_applications()

        path = client.write_csv(tmp_path / "export.csv")

        with path.open(encoding="utf-8-sig", newline="") as handle:
            rows = list(csv.DictReader(handle))
        assert [row["id"] for row in rows] == ["staff-2-b", "baby-1-a"]
        assert rows[0]["position"] == "backend"
        assert rows[1]["position"] == ""
        assert len(client.export_rows()) == 2
