"""
Interaction engine — turns events into transitions, commands into jobs.

The engine owns the single ``InteractionState``.  Every event goes through
``dispatch``, one at a time, on the UI loop.  Commands produced by a
transition become *jobs*: blocking callables handed to ``submit`` which run
elsewhere (a Textual worker thread in the app, a queue in tests) and return
exactly one completion event.  The caller feeds that event back into
``dispatch``; the engine itself never waits on a job.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog
from rich.text import Text

from proxyswitch.core.exceptions import DirectoryError
from proxyswitch.directory.client import DirectoryClient
from proxyswitch.ui.render import DEFAULT_THEME, Theme, render_frame
from proxyswitch.ui.state import (
    DEFAULT_HEIGHT,
    Command,
    DelayFailed,
    DelayMeasured,
    Event,
    InteractionState,
    LoadFailed,
    LoadSnapshot,
    MeasureDelay,
    Quit,
    SelectionApplied,
    SelectionFailed,
    SelectMember,
    SnapshotLoaded,
    request_reload,
    transition,
)

logger = structlog.get_logger()

Job = Callable[[], Event]


class InteractionEngine:
    """Single-writer driver for the interaction state."""

    def __init__(
        self,
        client: DirectoryClient,
        *,
        submit: Callable[[Job], None],
        on_frame: Callable[[Text], None],
        on_quit: Callable[[], None],
        theme: Theme = DEFAULT_THEME,
        height: int = DEFAULT_HEIGHT,
        reload_delay: float = 0.2,
        probe_url: str | None = None,
        probe_timeout_ms: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._submit = submit
        self._on_frame = on_frame
        self._on_quit = on_quit
        self._theme = theme
        self._reload_delay = reload_delay
        self._probe_url = probe_url
        self._probe_timeout_ms = probe_timeout_ms
        self._sleep = sleep
        self.state = InteractionState(height=height)

    # ------------------------------------------------------------------
    # Event loop side
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Issue the initial load and draw the loading banner."""
        self.state, command = request_reload(self.state)
        self._execute(command)
        self.render()

    def dispatch(self, event: Event) -> None:
        self.state, command = transition(self.state, event, reload_delay=self._reload_delay)
        if command is not None:
            self._execute(command)
        self.render()

    def render(self) -> None:
        self._on_frame(render_frame(self.state, self._theme))

    def _execute(self, command: Command) -> None:
        if isinstance(command, LoadSnapshot):
            self._submit(lambda: self._load(command))
        elif isinstance(command, SelectMember):
            self._submit(lambda: self._select(command))
        elif isinstance(command, MeasureDelay):
            self._submit(lambda: self._probe(command))
        elif isinstance(command, Quit):
            logger.info("quit_requested")
            # Unblocks a worker still waiting on the daemon so exit is not held up.
            self._client.close()
            self._on_quit()
        else:
            raise TypeError(f"unknown command: {command!r}")

    # ------------------------------------------------------------------
    # Jobs: run off the event loop, each returns one completion event
    # ------------------------------------------------------------------

    def _load(self, command: LoadSnapshot) -> Event:
        if command.delay > 0:
            self._sleep(command.delay)
        try:
            snapshot = self._client.fetch_snapshot()
        except DirectoryError as exc:
            logger.warning("load_failed", seq=command.seq, kind=exc.kind.value, error=str(exc))
            return LoadFailed(message=str(exc), seq=command.seq)
        logger.debug("load_completed", seq=command.seq, groups=len(snapshot.groups))
        return SnapshotLoaded(snapshot=snapshot, seq=command.seq)

    def _select(self, command: SelectMember) -> Event:
        try:
            self._client.set_active_member(command.group, command.member)
        except DirectoryError as exc:
            logger.warning(
                "select_failed",
                group=command.group,
                member=command.member,
                kind=exc.kind.value,
                error=str(exc),
            )
            return SelectionFailed(message=str(exc))
        return SelectionApplied(group=command.group, member=command.member)

    def _probe(self, command: MeasureDelay) -> Event:
        try:
            delay = self._client.measure_delay(
                command.group,
                command.member,
                self._probe_url,
                self._probe_timeout_ms,
            )
        except DirectoryError as exc:
            logger.warning("probe_failed", group=command.group, error=str(exc))
            return DelayFailed(message=str(exc))
        return DelayMeasured(group=command.group, member=command.member, delay=delay)
