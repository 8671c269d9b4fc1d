"""
Proxy directory client — synchronous facade over the daemon's REST API.

Routes used::

    GET  /proxies                 — full snapshot
    PUT  /proxies/{group}         — {"name": member}; 200 or 204 on success
    GET  /proxies/{group}/delay   — {"url": ..., "timeout": ...} → {"delay": ms}

Calls block; the UI runs them on a worker thread and never on the event loop.
"""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog

from proxyswitch.core.exceptions import DirectoryError, DirectoryErrorKind
from proxyswitch.directory.models import Snapshot

logger = structlog.get_logger()

DEFAULT_URL = "http://127.0.0.1:9090"
DEFAULT_PROBE_URL = "http://www.gstatic.com/generate_204"
DEFAULT_PROBE_TIMEOUT_MS = 5000
DEFAULT_REQUEST_TIMEOUT = 10.0

PROXIES_PATH = "/proxies"


class DirectoryClient(Protocol):
    """Capability interface shared by the HTTP client and the in-memory fake."""

    def fetch_snapshot(self) -> Snapshot: ...

    def set_active_member(self, group: str, member: str) -> None: ...

    def measure_delay(
        self,
        group: str,
        member: str,
        probe_url: str | None = None,
        timeout_ms: int | None = None,
    ) -> int: ...

    def close(self) -> None: ...

class HttpDirectoryClient:
    """DirectoryClient backed by ``httpx.Client``."""

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        secret: str = "",
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or DEFAULT_URL).rstrip("/")
        self._secret = secret
        headers = {"Authorization": f"Bearer {secret}"} if secret else {}
        self._http = httpx.Client(
            base_url=self._base_url,
            headers=headers,
            timeout=request_timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Release the connection pool; requests still in flight fail as unreachable."""
        self._http.close()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if self._http.is_closed:
            raise DirectoryError(DirectoryErrorKind.UNREACHABLE, "client closed")
        try:
            return self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.debug("directory_unreachable", method=method, path=path, error=str(exc))
            raise DirectoryError(
                DirectoryErrorKind.UNREACHABLE,
                f"failed to reach {self._base_url}: {exc}",
            ) from exc

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise DirectoryError(
                DirectoryErrorKind.MALFORMED, f"failed to decode response: {exc}"
            ) from exc

    @staticmethod
    def _group_path(group: str) -> str:
        return f"{PROXIES_PATH}/{quote(group, safe='')}"

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def fetch_snapshot(self) -> Snapshot:
        resp = self._send("GET", PROXIES_PATH)
        if resp.status_code != httpx.codes.OK:
            raise DirectoryError.bad_status(resp.status_code, resp.text)
        snapshot = Snapshot.from_payload(self._decode(resp))
        logger.debug("snapshot_fetched", entries=len(snapshot), groups=len(snapshot.groups))
        return snapshot

    def set_active_member(self, group: str, member: str) -> None:
        resp = self._send("PUT", self._group_path(group), json={"name": member})
        if resp.status_code not in (httpx.codes.OK, httpx.codes.NO_CONTENT):
            raise DirectoryError.bad_status(resp.status_code, resp.text)
        logger.info("active_member_set", group=group, member=member)

    def measure_delay(
        self,
        group: str,
        member: str,
        probe_url: str | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """Probe the group's route; the daemon answers for its active member."""
        url = probe_url or DEFAULT_PROBE_URL
        timeout = timeout_ms or DEFAULT_PROBE_TIMEOUT_MS
        payload = {"url": url, "timeout": timeout}
        resp = self._send(
            "GET",
            f"{self._group_path(group)}/delay",
            json=payload,
            params=payload,
            timeout=timeout / 1000 + 1.0,
        )
        if resp.status_code != httpx.codes.OK:
            raise DirectoryError.bad_status(resp.status_code, resp.text)
        data = self._decode(resp)
        try:
            delay = int(data["delay"])
        except (KeyError, TypeError, ValueError) as exc:
            raise DirectoryError(
                DirectoryErrorKind.MALFORMED, "failed to decode response: no 'delay' field"
            ) from exc
        logger.debug("delay_measured", group=group, member=member, delay=delay)
        return delay
