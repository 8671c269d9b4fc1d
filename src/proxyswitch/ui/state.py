"""
UI state types and transitions — pure Python, no Textual imports.

``transition(state, event)`` is the single entry point: it takes the current
``InteractionState`` and one event and returns the next state plus, at most,
one command for the engine to run in the background.  Nothing here blocks or
performs I/O, so every transition can be exercised directly in tests.

Invariants held after every transition:

  - ``0 <= group_index < len(groups)`` when there are groups, else 0
  - ``0 <= cursor < len(members)`` when the focused group has members, else 0
  - ``viewport_top <= cursor < viewport_top + capacity``
  - ``viewport_top + capacity <= max(len(members), capacity)``
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Union

from proxyswitch.directory.models import ProxyGroup, Snapshot

DEFAULT_HEIGHT = 24

# Rows that never hold members: focused group header and the help line.
HEADER_ROWS = 1
HELP_ROWS = 1


def visible_capacity(height: int, group_count: int) -> int:
    """Number of member rows available below the focused group header."""
    summaries = max(group_count - 1, 0)
    return max(height - summaries - HELP_ROWS - HEADER_ROWS, 1)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InteractionState:
    """Everything currently shown on screen.  Replaced, never mutated."""

    snapshot: Snapshot = field(default_factory=Snapshot.empty)
    groups: tuple[str, ...] = ()
    group_index: int = 0
    cursor: int = 0
    viewport_top: int = 0
    loading: bool = True
    error: str | None = None
    height: int = DEFAULT_HEIGHT
    load_seq: int = 0
    # Newest load issued when a select or probe failed; that load keeps the error.
    error_seq: int | None = None
    delays: dict[tuple[str, str], int] = field(default_factory=dict)

    @property
    def focused_name(self) -> str | None:
        if not self.groups:
            return None
        return self.groups[self.group_index]

    @property
    def focused_group(self) -> ProxyGroup | None:
        name = self.focused_name
        return self.snapshot.group(name) if name is not None else None

    @property
    def members(self) -> tuple[str, ...]:
        group = self.focused_group
        return group.all if group is not None else ()

    @property
    def cursor_member(self) -> str | None:
        members = self.members
        return members[self.cursor] if members else None

    @property
    def capacity(self) -> int:
        return visible_capacity(self.height, len(self.groups))

    @property
    def visible_range(self) -> range:
        end = min(self.viewport_top + self.capacity, len(self.members))
        return range(self.viewport_top, end)

    @property
    def is_ready(self) -> bool:
        return not self.loading and self.error is None


# ---------------------------------------------------------------------------
# Events and commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SnapshotLoaded:
    snapshot: Snapshot
    seq: int = 0


@dataclass(frozen=True)
class LoadFailed:
    message: str
    seq: int = 0


@dataclass(frozen=True)
class SelectionApplied:
    group: str
    member: str


@dataclass(frozen=True)
class SelectionFailed:
    message: str


@dataclass(frozen=True)
class DelayMeasured:
    group: str
    member: str
    delay: int


@dataclass(frozen=True)
class DelayFailed:
    message: str


@dataclass(frozen=True)
class KeyInput:
    key: str


@dataclass(frozen=True)
class Resize:
    height: int


Event = Union[
    SnapshotLoaded,
    LoadFailed,
    SelectionApplied,
    SelectionFailed,
    DelayMeasured,
    DelayFailed,
    KeyInput,
    Resize,
]


@dataclass(frozen=True)
class LoadSnapshot:
    seq: int
    delay: float = 0.0


@dataclass(frozen=True)
class SelectMember:
    group: str
    member: str


@dataclass(frozen=True)
class MeasureDelay:
    group: str
    member: str


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[LoadSnapshot, SelectMember, MeasureDelay, Quit]


class Action(Enum):
    CURSOR_UP = auto()
    CURSOR_DOWN = auto()
    GROUP_PREV = auto()
    GROUP_NEXT = auto()
    CONFIRM = auto()
    RELOAD = auto()
    PROBE = auto()
    QUIT = auto()


KEYMAP: dict[str, Action] = {
    "up": Action.CURSOR_UP,
    "k": Action.CURSOR_UP,
    "down": Action.CURSOR_DOWN,
    "j": Action.CURSOR_DOWN,
    "left": Action.GROUP_PREV,
    "h": Action.GROUP_PREV,
    "right": Action.GROUP_NEXT,
    "l": Action.GROUP_NEXT,
    "enter": Action.CONFIRM,
    "r": Action.RELOAD,
    "t": Action.PROBE,
    "q": Action.QUIT,
    "ctrl+c": Action.QUIT,
}


# ---------------------------------------------------------------------------
# Viewport helpers
# ---------------------------------------------------------------------------


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _clamp_viewport(state: InteractionState) -> InteractionState:
    """Scroll the minimum amount needed to keep the cursor visible."""
    count = len(state.members)
    if count == 0:
        return replace(state, cursor=0, viewport_top=0)

    cap = state.capacity
    cursor = _clamp(state.cursor, 0, count - 1)
    top = _clamp(state.viewport_top, 0, max(count - cap, 0))
    if cursor < top:
        top = cursor
    elif cursor >= top + cap:
        top = cursor - cap + 1
    return replace(state, cursor=cursor, viewport_top=top)


def _focus(state: InteractionState, group_index: int) -> InteractionState:
    """Focus a group: cursor on its active member, viewport from the top."""
    focused = replace(state, group_index=group_index, viewport_top=0)
    group = focused.focused_group
    cursor = 0
    if group is not None:
        cursor = group.active_index or 0
    return _clamp_viewport(replace(focused, cursor=cursor))


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def snapshot_loaded(state: InteractionState, snapshot: Snapshot, seq: int = 0) -> InteractionState:
    """Replace the snapshot.  Probe readings are dropped; history takes over."""
    previous = state.focused_name
    groups = snapshot.groups
    if previous is not None and previous in groups:
        index = groups.index(previous)
    elif state.group_index < len(groups):
        index = state.group_index
    else:
        index = 0
    error, error_seq = None, None
    if state.error_seq is not None and state.error_seq >= seq:
        error, error_seq = state.error, state.error_seq
    loaded = replace(
        state,
        snapshot=snapshot,
        groups=groups,
        loading=False,
        error=error,
        error_seq=error_seq,
        delays={},
    )
    return _focus(loaded, index)


def load_failed(state: InteractionState, message: str) -> InteractionState:
    return replace(state, loading=False, error=message, error_seq=None)


def action_failed(state: InteractionState, message: str) -> InteractionState:
    """A select or probe failed.  An outstanding load stays outstanding."""
    return replace(state, error=message, error_seq=state.load_seq)


def move_cursor(state: InteractionState, delta: int) -> InteractionState:
    if state.loading or not state.members:
        return state
    cursor = _clamp(state.cursor + delta, 0, len(state.members) - 1)
    return _clamp_viewport(replace(state, cursor=cursor))


def move_group(state: InteractionState, delta: int) -> InteractionState:
    if state.loading or not state.groups:
        return state
    return _focus(state, _clamp(state.group_index + delta, 0, len(state.groups) - 1))


def request_reload(state: InteractionState, delay: float = 0.0) -> tuple[InteractionState, Command]:
    seq = state.load_seq + 1
    return replace(state, loading=True, load_seq=seq), LoadSnapshot(seq=seq, delay=delay)


def resize(state: InteractionState, height: int) -> InteractionState:
    return _clamp_viewport(replace(state, height=max(height, 1)))


def _on_key(state: InteractionState, key: str) -> tuple[InteractionState, Command | None]:
    action = KEYMAP.get(key)
    if action is None:
        return state, None
    if action is Action.QUIT:
        return state, Quit()
    if action is Action.RELOAD:
        return request_reload(state)
    if action is Action.CURSOR_UP:
        return move_cursor(state, -1), None
    if action is Action.CURSOR_DOWN:
        return move_cursor(state, 1), None
    if action is Action.GROUP_PREV:
        return move_group(state, -1), None
    if action is Action.GROUP_NEXT:
        return move_group(state, 1), None

    # CONFIRM and PROBE need a visible list and something under the cursor.
    group = state.focused_group
    member = state.cursor_member
    if not state.is_ready or group is None or member is None:
        return state, None
    if action is Action.CONFIRM:
        return state, SelectMember(group=group.name, member=member)
    if action is Action.PROBE:
        if not group.now:
            return state, None
        return state, MeasureDelay(group=group.name, member=group.now)
    raise AssertionError(f"unhandled action {action}")


def transition(
    state: InteractionState, event: Event, *, reload_delay: float = 0.0
) -> tuple[InteractionState, Command | None]:
    """Apply one event; return the new state and an optional background command."""
    if isinstance(event, SnapshotLoaded):
        if event.seq < state.load_seq:
            return state, None
        return snapshot_loaded(state, event.snapshot, event.seq), None
    if isinstance(event, LoadFailed):
        if event.seq < state.load_seq:
            return state, None
        return load_failed(state, event.message), None
    if isinstance(event, SelectionApplied):
        return request_reload(state, delay=reload_delay)
    if isinstance(event, (SelectionFailed, DelayFailed)):
        return action_failed(state, event.message), None
    if isinstance(event, DelayMeasured):
        key = (event.group, event.member)
        return replace(state, delays={**state.delays, key: event.delay}), None
    if isinstance(event, KeyInput):
        return _on_key(state, event.key)
    if isinstance(event, Resize):
        return resize(state, event.height), None
    raise TypeError(f"unknown event: {event!r}")


__all__ = [
    "Action",
    "action_failed",
    "Command",
    "DEFAULT_HEIGHT",
    "DelayFailed",
    "DelayMeasured",
    "Event",
    "InteractionState",
    "KEYMAP",
    "KeyInput",
    "LoadFailed",
    "LoadSnapshot",
    "MeasureDelay",
    "Quit",
    "Resize",
    "SelectMember",
    "SelectionApplied",
    "SelectionFailed",
    "SnapshotLoaded",
    "load_failed",
    "move_cursor",
    "move_group",
    "request_reload",
    "resize",
    "snapshot_loaded",
    "transition",
    "visible_capacity",
]
