"""Status sources the poller can query."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import httpx

from penpard.db.models import ScanStatus
from penpard.errors import NotFound

from .models import StatusSnapshot

if TYPE_CHECKING:
    from penpard.modules.store import FindingStore


class StatusSource(Protocol):
    async def fetch(self, scan_id: str) -> StatusSnapshot: ...


class StoreStatusSource:
    """Reads scan status from the finding store; reports the phase while running."""

    def __init__(self, store: FindingStore):
        self.store = store

    async def fetch(self, scan_id: str) -> StatusSnapshot:
        scan = self.store.get_scan(scan_id)
        if scan is None:
            raise NotFound(f"Scan not found: {scan_id}")
        if scan.status == ScanStatus.RUNNING.value and scan.phase:
            return StatusSnapshot(status=scan.phase, message=f"Scan {scan.phase}")
        return StatusSnapshot(status=scan.status, message=scan.error_message)


class HttpStatusSource:
    """Queries a remote engine's ``GET {base_url}/scans/{id}`` endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch(self, scan_id: str) -> StatusSnapshot:
        response = await self.client.get(
            f"{self.base_url}/scans/{scan_id}", headers=self.headers
        )
        response.raise_for_status()
        data = response.json()
        if isinstance(data.get("scan"), dict):
            data = data["scan"]
        status = data.get("phase") or data.get("status")
        if data.get("status") in (
            ScanStatus.COMPLETED.value,
            ScanStatus.FAILED.value,
            ScanStatus.STOPPED.value,
        ):
            status = data["status"]
        if not isinstance(status, str) or not status:
            raise ValueError(f"Status response for {scan_id} has no status")
        message = data.get("error_message") or data.get("message") or data.get("error")
        return StatusSnapshot(status=status, message=message)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
