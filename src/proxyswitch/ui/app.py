"""
proxyswitch UI — Textual application shell.

Widget tree::

    #frame  (Static — the whole rendered frame, replaced on every transition)

The app is only a driver: keys and resizes become engine events, engine jobs
run in a thread worker and their completion events re-enter the loop through
``call_from_thread``.  All state and layout logic lives in ``state`` and
``render``.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static
from textual.worker import get_current_worker

from proxyswitch import __version__
from proxyswitch.core.config import ProxySwitchConfig
from proxyswitch.directory import DirectoryClient, make_client
from proxyswitch.ui.engine import InteractionEngine, Job
from proxyswitch.ui.render import DEFAULT_THEME, Theme
from proxyswitch.ui.state import KeyInput, Resize

logger = structlog.get_logger()


class ProxySwitchApp(App):  # type: ignore[type-arg]
    """Browse proxy groups and switch their active member."""

    TITLE = f"proxyswitch {__version__}"
    CSS_PATH = str(Path(__file__).parent / "css" / "proxyswitch.tcss")

    BINDINGS = [
        Binding("ctrl+c", "input_key('ctrl+c')", "Quit", show=False, priority=True),
        Binding("q", "input_key('q')", "Quit", show=False),
        Binding("up,k", "input_key('up')", "Up", show=False),
        Binding("down,j", "input_key('down')", "Down", show=False),
        Binding("left,h", "input_key('left')", "Prev group", show=False),
        Binding("right,l", "input_key('right')", "Next group", show=False),
        Binding("enter", "input_key('enter')", "Select", show=False),
        Binding("r", "input_key('r')", "Reload", show=False),
        Binding("t", "input_key('t')", "Test", show=False),
    ]

    def __init__(
        self,
        config: ProxySwitchConfig,
        client: DirectoryClient | None = None,
        theme: Theme = DEFAULT_THEME,
    ) -> None:
        super().__init__()
        self._config = config
        self._frame_widget = Static(id="frame")
        self.engine = InteractionEngine(
            client if client is not None else make_client(config),
            submit=self._run_job,
            on_frame=self._show_frame,
            on_quit=self.exit,
            theme=theme,
            reload_delay=config.reload_delay,
            probe_url=config.probe_url,
            probe_timeout_ms=config.probe_timeout_ms,
        )

    def compose(self) -> ComposeResult:
        yield self._frame_widget

    def on_mount(self) -> None:
        logger.info("ui_started", url=self._config.url, mock=self._config.mock)
        self.engine.dispatch(Resize(self.size.height))
        self.engine.start()

    def on_resize(self, event: events.Resize) -> None:
        self.engine.dispatch(Resize(event.size.height))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_input_key(self, key: str) -> None:
        self.engine.dispatch(KeyInput(key))

    # ------------------------------------------------------------------
    # Engine callbacks
    # ------------------------------------------------------------------

    def _show_frame(self, frame: Text) -> None:
        self._frame_widget.update(frame)

    @work(thread=True, group="directory")
    def _run_job(self, job: Job) -> None:
        event = job()
        if get_current_worker().is_cancelled:
            return
        self.call_from_thread(self.engine.dispatch, event)


def run(config: ProxySwitchConfig) -> int:
    """Run the UI until the user quits; return the process exit code."""
    app = ProxySwitchApp(config)
    app.run()
    return app.return_code or 0
