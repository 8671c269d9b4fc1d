"""
Directory data model — groups, members and the replace-on-load snapshot.

Pure dataclasses decoded from the daemon's ``GET /proxies`` payload::

    {"proxies": {"<name>": {"name", "type", "now", "all", "history", "uptime", "extra"}}}

Every entry in the payload becomes a ``ProxyGroup`` (leaf proxies simply have
an empty member list).  Only Selector and URLTest entries are *selectable*.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from proxyswitch.core.exceptions import DirectoryError, DirectoryErrorKind


class GroupKind(Enum):
    SELECTOR = "Selector"
    URL_TEST = "URLTest"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str) -> GroupKind:
        for kind in (cls.SELECTOR, cls.URL_TEST):
            if raw == kind.value:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class DelayRecord:
    time: str
    delay: int


def _malformed(msg: str) -> DirectoryError:
    return DirectoryError(DirectoryErrorKind.MALFORMED, f"failed to decode response: {msg}")


@dataclass(frozen=True)
class ProxyGroup:
    """One named entry of the directory with its ordered candidate members."""

    name: str
    type: str = ""
    now: str = ""
    all: tuple[str, ...] = ()
    history: tuple[DelayRecord, ...] = ()
    uptime: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, payload: Any) -> ProxyGroup:
        if not isinstance(payload, dict):
            raise _malformed(f"entry {name!r} is not an object")

        members = payload.get("all") or []
        if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
            raise _malformed(f"entry {name!r} has a non-string member list")

        history: list[DelayRecord] = []
        for item in payload.get("history") or []:
            if not isinstance(item, dict):
                raise _malformed(f"entry {name!r} has a bad history record")
            try:
                history.append(DelayRecord(time=str(item.get("time", "")), delay=int(item["delay"])))
            except (KeyError, TypeError, ValueError) as exc:
                raise _malformed(f"entry {name!r} has a bad history record") from exc

        extra = payload.get("extra") or {}
        return cls(
            name=str(payload.get("name") or name),
            type=str(payload.get("type") or ""),
            now=str(payload.get("now") or ""),
            all=tuple(members),
            history=tuple(history),
            uptime=str(payload.get("uptime") or ""),
            extra=extra if isinstance(extra, dict) else {},
        )

    @property
    def kind(self) -> GroupKind:
        return GroupKind.parse(self.type)

    @property
    def is_selectable(self) -> bool:
        return self.kind is not GroupKind.OTHER

    @property
    def active_index(self) -> int | None:
        """Position of the active member, or None when it is not listed."""
        try:
            return self.all.index(self.now) if self.now else None
        except ValueError:
            return None

    @property
    def last_delay(self) -> int | None:
        return self.history[-1].delay if self.history else None

    def with_active(self, member: str) -> ProxyGroup:
        return ProxyGroup(
            name=self.name,
            type=self.type,
            now=member,
            all=self.all,
            history=self.history,
            uptime=self.uptime,
            extra=self.extra,
        )


@dataclass(frozen=True)
class Snapshot:
    """Complete view of the directory at one point in time."""

    proxies: Mapping[str, ProxyGroup] = field(default_factory=dict)
    groups: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()

    @classmethod
    def from_proxies(cls, proxies: Mapping[str, ProxyGroup]) -> Snapshot:
        groups = sorted(name for name, group in proxies.items() if group.is_selectable)
        return cls(proxies=dict(proxies), groups=tuple(groups))

    @classmethod
    def from_payload(cls, payload: Any) -> Snapshot:
        """Decode the JSON body of ``GET /proxies``."""
        if not isinstance(payload, dict) or not isinstance(payload.get("proxies"), dict):
            raise _malformed("missing 'proxies' object")
        return cls.from_proxies(
            {name: ProxyGroup.from_dict(name, entry) for name, entry in payload["proxies"].items()}
        )

    def group(self, name: str) -> ProxyGroup | None:
        return self.proxies.get(name)

    def delay_of(self, member: str) -> int | None:
        entry = self.proxies.get(member)
        return entry.last_delay if entry is not None else None

    def __len__(self) -> int:
        return len(self.proxies)
