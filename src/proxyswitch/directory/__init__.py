"""Proxy directory — remote daemon client, in-memory fake and data model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from proxyswitch.directory.client import DirectoryClient, HttpDirectoryClient
from proxyswitch.directory.mock import MockDirectoryClient
from proxyswitch.directory.models import DelayRecord, GroupKind, ProxyGroup, Snapshot

if TYPE_CHECKING:
    from proxyswitch.core.config import ProxySwitchConfig


def make_client(config: ProxySwitchConfig) -> DirectoryClient:
    """Return the fake in mock mode, otherwise the HTTP client."""
    if config.mock:
        return MockDirectoryClient()
    return HttpDirectoryClient(
        config.url,
        config.secret,
        request_timeout=config.request_timeout,
    )


__all__ = [
    "DelayRecord",
    "DirectoryClient",
    "GroupKind",
    "HttpDirectoryClient",
    "MockDirectoryClient",
    "ProxyGroup",
    "Snapshot",
    "make_client",
]
