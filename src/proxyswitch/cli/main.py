"""
proxyswitch — switch Clash/Mihomo proxy groups from the terminal.

Usage::

    proxyswitch [--url URL] [--secret SECRET] [--mock] [--config PATH] [--log-level LEVEL]

Exit codes: 0 on a normal quit, 1 on a configuration error or when the
terminal UI fails.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
import structlog
from rich.console import Console

from proxyswitch import __version__
from proxyswitch.core.config import LOG_LEVELS, load_config
from proxyswitch.core.exceptions import ConfigError
from proxyswitch.core.logging import configure_logging

logger = structlog.get_logger()


@click.command("proxyswitch")
@click.option(
    "--url",
    default=None,
    help="Daemon REST API base URL  [default: http://127.0.0.1:9090]",
)
@click.option(
    "--secret",
    default=None,
    envvar="MIHOMO_SECRET",
    show_envvar=True,
    help="Daemon API secret (sent as a bearer token).",
)
@click.option(
    "--mock",
    is_flag=True,
    default=False,
    help="Use built-in mock data instead of a daemon (also MOCK_CLASH=1).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to a TOML config file.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level for the log file.",
)
@click.version_option(__version__, prog_name="proxyswitch")
def cli(
    url: str | None,
    secret: str | None,
    mock: bool,
    config_path: Path | None,
    log_level: str | None,
) -> None:
    """Browse proxy groups and switch their active member."""
    console = Console(stderr=True)

    try:
        config = load_config(
            config_path,
            url=url,
            secret=secret,
            mock=mock or None,
            log_level=log_level,
        )
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    configure_logging(config.log_level, config.resolved_log_file)
    logger.info("starting", version=__version__, url=config.url, mock=config.mock)

    from proxyswitch.ui.app import run

    code = run(config)
    if code != 0:
        console.print(
            f"[red]Error:[/red] terminal UI exited with code {code}; "
            f"see {config.resolved_log_file}"
        )
    logger.info("stopped", exit_code=code)
    sys.exit(code)


def main() -> None:
    cli()
