"""
Endpoint Fallback

Sends one request to a list of equivalent base URLs in order and returns
the first successful response. Used by the submission and admin clients,
which know the service under a primary and a legacy prefix.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class RequestSpec:
    """The request replayed against every endpoint."""

    method: str
    path: str = ""
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] | None = None


class EndpointError(Exception):
    """A single endpoint failed (transport error or non-2xx response)."""

    def __init__(
        self,
        endpoint: str,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ):
        self.endpoint = endpoint
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = response.text
    else:
        body = response.text

    if isinstance(body, dict) and body.get("error"):
        return str(body["error"]), body
    if isinstance(body, str) and body:
        return body, body
    return f"{response.status_code} {response.reason_phrase}", body


async def call_with_fallback(
    client: httpx.AsyncClient,
    endpoints: Sequence[str],
    request: RequestSpec,
) -> httpx.Response:
    """
    Try each endpoint in order with the same request.

    Args:
        client: HTTP client used for every attempt
        endpoints: Base URLs, most preferred first
        request: Method, path suffix, headers and JSON body

    Returns:
        The first 2xx response

    Raises:
        EndpointError: The last failure, when every endpoint failed
        ValueError: If no endpoints are given
    """
    if not endpoints:
        raise ValueError("At least one endpoint is required")

    last_error: EndpointError | None = None

    for endpoint in endpoints:
        url = f"{endpoint.rstrip('/')}{request.path}"
        try:
            response = await client.request(
                request.method,
                url,
                json=request.json,
                headers=request.headers,
                params=request.params,
            )
        except httpx.HTTPError as e:
            last_error = EndpointError(endpoint, str(e) or type(e).__name__)
            logger.warning(f"Endpoint failed ({url}): {last_error.message}")
            continue

        if response.is_success:
            return response

        message, body = _error_message(response)
        last_error = EndpointError(endpoint, message, status_code=response.status_code, body=body)
        logger.warning(f"Endpoint failed ({url}): {response.status_code} {message}")

    raise last_error
