"""Helpers shared by the CLI commands."""

import sys
from pathlib import Path

from ..config.settings import LoaderSettings
from ..config.settings import load_settings
from ..console import err_console
from ..errors import LoaderError


def settings_for(cwd: str | None) -> LoaderSettings:
    """Discover settings, exiting with a readable message on bad configuration."""
    try:
        return load_settings(Path(cwd) if cwd else None)
    except LoaderError as e:
        report_error(e)
        sys.exit(1)


def report_error(error: LoaderError) -> None:
    err_console.print(f"[red]Error:[/red] {error.message}")
    for key, value in error.details.items():
        if value is not None:
            err_console.print(f"  [dim]{key}: {value}[/dim]")
