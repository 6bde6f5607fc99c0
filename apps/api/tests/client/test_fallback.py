"""
Tests for the endpoint fallback helper.
"""

import httpx
import pytest

from recruit.client.fallback import EndpointError, RequestSpec, call_with_fallback

PRIMARY = "https://primary.test/api/v1"
LEGACY = "https://legacy.test/server"


class TestCallWithFallback:
    @pytest.mark.asyncio
    async def test_primary_success_skips_legacy(self):
        calls = []

        def handler(request):
            calls.append(str(request.url))
            return httpx.Response(200, json={"ok": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response = await call_with_fallback(
                client, [PRIMARY, LEGACY], RequestSpec("POST", "/applications", json={})
            )

        assert response.json() == {"ok": True}
        assert calls == [f"{PRIMARY}/applications"]

    @pytest.mark.asyncio
    async def test_falls_back_on_transport_error(self):
        calls = []

        def handler(request):
            calls.append(request.url.host)
            if request.url.host == "primary.test":
                raise httpx.ConnectError("refused")
            return httpx.Response(200, json={"ok": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response = await call_with_fallback(
                client, [PRIMARY, LEGACY], RequestSpec("GET", "/applications")
            )

        assert response.status_code == 200
        assert calls == ["primary.test", "legacy.test"]

    @pytest.mark.asyncio
    async def test_same_request_replayed(self):
        bodies = []

        def handler(request):
            bodies.append((request.method, request.content, request.headers.get("x-admin-token")))
            return httpx.Response(500, json={"error": "boom"})

        spec = RequestSpec("POST", "/applications", json={"a": 1}, headers={"x-admin-token": "t"})
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(EndpointError):
                await call_with_fallback(client, [PRIMARY, LEGACY], spec)

        assert len(bodies) == 2
        assert bodies[0] == bodies[1]

    @pytest.mark.asyncio
    async def test_raises_last_error_with_server_message(self):
        def handler(request):
            if request.url.host == "primary.test":
                return httpx.Response(503, text="unavailable")
            return httpx.Response(400, json={"error": "Invalid email format"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(EndpointError) as exc_info:
                await call_with_fallback(client, [PRIMARY, LEGACY], RequestSpec("POST", "/x"))

        assert exc_info.value.endpoint == LEGACY
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid email format"

    @pytest.mark.asyncio
    async def test_empty_body_uses_status_line(self):
        def handler(request):
            return httpx.Response(502)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(EndpointError) as exc_info:
                await call_with_fallback(client, [PRIMARY], RequestSpec("GET"))

        assert exc_info.value.message == "502 Bad Gateway"

    @pytest.mark.asyncio
    async def test_requires_endpoints(self):
        async with httpx.AsyncClient() as client:
            with pytest.raises(ValueError):
                await call_with_fallback(client, [], RequestSpec("GET"))
