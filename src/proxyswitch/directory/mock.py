"""
In-memory directory used in mock mode (``MOCK_CLASH=1`` or ``--mock``).

The table is built lazily on the first fetch unless one is supplied.  A
reload and a delay probe can run on different workers at the same time, so
the table sits behind a reader/writer lock: lookups share it, lazy
initialisation and selection take it exclusively.
"""

from __future__ import annotations

import threading
import zlib
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

import structlog

from proxyswitch.core.exceptions import DirectoryError, DirectoryErrorKind
from proxyswitch.directory.models import ProxyGroup, Snapshot

logger = structlog.get_logger()


def default_table() -> dict[str, ProxyGroup]:
    return {
        "Proxy Group A": ProxyGroup(
            name="Proxy Group A",
            type="Selector",
            now="Proxy-1",
            all=tuple(f"Proxy-{i}" for i in range(1, 8)),
        ),
        "Proxy Group B": ProxyGroup(
            name="Proxy Group B",
            type="URLTest",
            now="Auto-2",
            all=tuple(f"Auto-{i}" for i in range(1, 7)),
        ),
        "Proxy Group C": ProxyGroup(
            name="Proxy Group C",
            type="Selector",
            now="Direct-1",
            all=tuple(f"Direct-{i}" for i in range(1, 9)),
        ),
    }


class ReadWriteLock:
    """Many concurrent readers or one writer; writers are not starved."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MockDirectoryClient:
    """DirectoryClient that never touches the network."""

    def __init__(self, table: Mapping[str, ProxyGroup] | None = None) -> None:
        self._lock = ReadWriteLock()
        self._table: dict[str, ProxyGroup] | None = dict(table) if table is not None else None

    def _ensure_table(self) -> dict[str, ProxyGroup]:
        with self._lock.read():
            table = self._table
        if table is not None:
            return table
        with self._lock.write():
            if self._table is None:
                self._table = default_table()
                logger.debug("mock_table_initialised", groups=len(self._table))
            return self._table

    def fetch_snapshot(self) -> Snapshot:
        table = self._ensure_table()
        with self._lock.read():
            return Snapshot.from_proxies(table)

    def set_active_member(self, group: str, member: str) -> None:
        table = self._ensure_table()
        with self._lock.write():
            entry = table.get(group)
            if entry is None:
                raise DirectoryError(DirectoryErrorKind.NOT_FOUND, f"group {group} not found")
            if member not in entry.all:
                raise DirectoryError(
                    DirectoryErrorKind.NOT_FOUND,
                    f"proxy {member} not found in group {group}",
                )
            table[group] = entry.with_active(member)
        logger.info("active_member_set", group=group, member=member, mock=True)

    def measure_delay(
        self,
        group: str,
        member: str,
        probe_url: str | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        table = self._ensure_table()
        with self._lock.read():
            entry = table.get(group)
            if entry is None or member not in entry.all:
                raise DirectoryError(
                    DirectoryErrorKind.NOT_FOUND,
                    f"proxy {member} not found in group {group}",
                )
        # Stable per member so repeated probes agree.
        return 20 + zlib.crc32(member.encode()) % 280

    def close(self) -> None:
        pass
