"""Shared fixtures: snapshot builders used across unit, integration and safety tests."""

from __future__ import annotations

import pytest

from proxyswitch.directory.models import ProxyGroup, Snapshot


def group(name: str, members: list[str], now: str = "", type: str = "Selector") -> ProxyGroup:
    return ProxyGroup(name=name, type=type, now=now, all=tuple(members))


def snapshot(*groups: ProxyGroup) -> Snapshot:
    return Snapshot.from_proxies({g.name: g for g in groups})


@pytest.fixture()
def ab_snapshot() -> Snapshot:
    """A: Selector p1..p3 (now p2); B: URLTest q1..q2; plus a leaf proxy."""
    return snapshot(
        group("B", ["q1", "q2"], now="q1", type="URLTest"),
        group("A", ["p1", "p2", "p3"], now="p2"),
        group("DIRECT", [], type="Direct"),
    )
