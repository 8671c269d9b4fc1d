"""
Frame rendering — a pure projection of ``InteractionState`` into rich Text.

Layout for the ready state::

       Focused Group                      <- header, padded to widest label
    >  Proxy-1                            <- cursor
     > Proxy-2  83ms                      <- active member (+ known delay)
    >> Proxy-3 (3/40)                     <- cursor on active; position if scrolled
                                          <- padding
       Other Group      [Auto-2]          <- one summary per unselected group
     h/l:grp  j/k:prox  ...               <- help

Loading, error and empty states replace the whole frame with a short banner.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.cells import cell_len
from rich.text import Text

from proxyswitch.ui.state import InteractionState

SHORT_HELP_BELOW = 15


@dataclass(frozen=True)
class Theme:
    """Styles and markers for one rendering; pass a different one per test or user."""

    header: str = "bold color(147)"
    selected_group: str = "bold color(231) on color(45)"
    normal_group: str = "color(245) on color(45)"
    normal: str = "color(245)"
    active_proxy: str = "bold color(86)"
    active_mark: str = "bold color(208)"
    cursor: str = "bold color(51)"
    help: str = "color(244)"
    separator: str = "color(240)"
    separator_text: str = "═" * 39
    cursor_marker: str = ">"
    active_marker: str = ">"
    short_help: str = " h/l:grp  j/k:prox  Ent:sel  t:test  r:reload  q:quit"
    long_help: str = (
        " [←h]Prev [→l]Next  [↑k]↑ [↓j]↓  [Ent]Select  [t]Test  [r]Reload  [q]Quit"
    )


DEFAULT_THEME = Theme()


def _banner(theme: Theme, title: str, *lines: tuple[str, str]) -> Text:
    text = Text(theme.separator_text, style=theme.separator)
    text.append("\n")
    text.append(f"  {title}", style=theme.header)
    for body, style in lines:
        text.append("\n")
        text.append(body, style=style)
    return text


def _pad_label(name: str, width: int) -> str:
    return "   " + name + " " * (width - cell_len(name)) + "   "


def _member_line(state: InteractionState, index: int, member: str, theme: Theme) -> Text:
    group = state.focused_group
    active = group is not None and member == group.now
    at_cursor = index == state.cursor

    line = Text()
    if at_cursor and active:
        line.append(f"{theme.cursor_marker}{theme.active_marker} ", style=theme.cursor)
        line.append(member, style=theme.active_proxy)
    elif at_cursor:
        line.append(f"{theme.cursor_marker}  ", style=theme.cursor)
        line.append(member)
    elif active:
        line.append(" ")
        line.append(theme.active_marker, style=theme.active_mark)
        line.append(" ")
        line.append(member, style=theme.active_proxy)
    else:
        line.append("   ")
        line.append(member, style=theme.normal)

    delay = state.delays.get((group.name, member)) if group is not None else None
    if delay is None:
        delay = state.snapshot.delay_of(member)
    if delay:
        line.append(f"  {delay}ms", style=theme.help)

    if at_cursor and len(state.members) > state.capacity:
        line.append(f" ({state.cursor + 1}/{len(state.members)})", style=theme.help)
    return line


def help_line(height: int, theme: Theme = DEFAULT_THEME) -> Text:
    return Text(theme.short_help if height < SHORT_HELP_BELOW else theme.long_help, style=theme.help)


def render_frame(state: InteractionState, theme: Theme = DEFAULT_THEME) -> Text:
    """Render one full frame.  Never mutates ``state``."""
    if state.loading:
        return _banner(theme, "Loading proxies...")
    if state.error is not None:
        return _banner(
            theme,
            "Error",
            (f"  {state.error}", ""),
            ("  Press [r] retry, [q] quit", theme.help),
        )
    if not state.groups:
        return _banner(
            theme,
            "No proxy groups found",
            ("  Press [r] refresh, [q] quit", theme.help),
        )

    width = max(cell_len(name) for name in state.groups)
    lines: list[Text] = []

    group = state.focused_group
    if group is not None:
        lines.append(Text(_pad_label(group.name, width), style=theme.selected_group))
        members = state.members
        for index in state.visible_range:
            lines.append(_member_line(state, index, members[index], theme))

    summaries: list[Text] = []
    for index, name in enumerate(state.groups):
        if index == state.group_index:
            continue
        other = state.snapshot.group(name)
        if other is None:
            continue
        summary = Text(_pad_label(name, width), style=theme.normal_group)
        summary.append(" ")
        summary.append(f"[{other.now}]", style=theme.help)
        summaries.append(summary)

    padding = state.height - len(lines) - len(summaries) - 1
    if lines and padding > 0:
        lines.extend(Text() for _ in range(padding))

    lines.extend(summaries)
    lines.append(help_line(state.height, theme))
    return Text("\n").join(lines)


__all__ = ["DEFAULT_THEME", "Theme", "help_line", "render_frame"]
