"""
Admin Gateway Client

Token-authenticated access to the admin endpoints, with a local view of
the fetched applications.

Deletion is sequential. With `optimistic_delete=False` (default) the view
only drops applications whose remote delete succeeded; with True it drops
every targeted application regardless of the outcome.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from recruit.client.fallback import EndpointError, RequestSpec, call_with_fallback
from recruit.core.auth import ADMIN_TOKEN_HEADER
from recruit.modules.applications.export import rows_to_csv, to_export_rows
from recruit.modules.applications.models import Application, Track

logger = logging.getLogger(__name__)

APPLICATIONS_PATH = "/applications"


@dataclass
class DeleteSummary:
    succeeded: int = 0
    failed: int = 0
    failed_ids: list[str] = field(default_factory=list)


class AdminGatewayClient:
    def __init__(
        self,
        endpoints: Sequence[str],
        admin_token: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        optimistic_delete: bool = False,
        timeout: float = 15.0,
    ) -> None:
        self.endpoints = list(endpoints)
        self.admin_token = admin_token
        self.optimistic_delete = optimistic_delete
        self.view: list[Application] = []
        self._http_client = http_client
        self._timeout = timeout

    async def _send(self, request: RequestSpec) -> httpx.Response:
        request.headers[ADMIN_TOKEN_HEADER] = self.admin_token
        if self._http_client is not None:
            return await call_with_fallback(self._http_client, self.endpoints, request)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await call_with_fallback(client, self.endpoints, request)

    async def list_applications(self, track: Track | str | None = None) -> list[Application]:
        """Fetch applications (newest first) and replace the local view."""
        params: dict[str, Any] | None = None
        if track is not None:
            params = {"track": Track(track).value}

        response = await self._send(RequestSpec(method="GET", path=APPLICATIONS_PATH, params=params))
        payload = response.json()
        self.view = [Application.model_validate(item) for item in payload.get("applications", [])]
        return self.view

    async def get_application(self, application_id: str) -> Application:
        response = await self._send(
            RequestSpec(method="GET", path=f"{APPLICATIONS_PATH}/{application_id}")
        )
        return Application.model_validate(response.json()["application"])

    def _drop_from_view(self, application_id: str) -> None:
        self.view = [app for app in self.view if app.id != application_id]

    async def delete_application(self, application_id: str) -> None:
        """
        Delete one application.

        Raises:
            EndpointError: If the delete failed on every endpoint
        """
        try:
            await self._send(
                RequestSpec(method="DELETE", path=f"{APPLICATIONS_PATH}/{application_id}")
            )
        except EndpointError:
            if self.optimistic_delete:
                self._drop_from_view(application_id)
            raise
        self._drop_from_view(application_id)

    async def delete_all(self, applications: Iterable[Application] | None = None) -> DeleteSummary:
        """Delete each application in turn; failures are counted, not raised."""
        targets = list(self.view if applications is None else applications)
        summary = DeleteSummary()

        for application in targets:
            try:
                await self.delete_application(application.id)
            except EndpointError as e:
                logger.warning(f"Failed to delete {application.id}: {e.message}")
                summary.failed += 1
                summary.failed_ids.append(application.id)
            else:
                summary.succeeded += 1

        logger.info(f"Bulk delete finished: {summary.succeeded} deleted, {summary.failed} failed")
        return summary

    def export_rows(self) -> list[dict[str, str]]:
        return to_export_rows(self.view)

    def write_csv(self, path: Path | str) -> Path:
        """Write the current view as CSV (UTF-8 with BOM for spreadsheet apps)."""
        target = Path(path)
        target.write_text(rows_to_csv(self.export_rows()), encoding="utf-8-sig")
        return target
