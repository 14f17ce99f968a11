"""Resolve a specifier the way a host loader would see it resolved."""

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.table import Table

from ..console import console
from ..errors import LoaderError
from ..host import FilesystemHost
from ..models import ResolutionContext
from ..resolution.engine import ResolutionEngine
from ._common import report_error
from ._common import settings_for


@click.command(name="resolve")
@click.argument("specifier")
@click.option("--from", "importer", type=click.Path(dir_okay=False), help="Importing file (default: entry point)")
@click.option(
    "--kind",
    type=click.Choice(["commonjs", "module"]),
    default=None,
    help="Importer module semantics (default: module with --async, else commonjs)",
)
@click.option("--async", "use_async", is_flag=True, help="Use the asynchronous contract (detects format)")
@click.option("--condition", "conditions", multiple=True, help="Extra export-map condition (repeatable)")
@click.option("--cwd", type=click.Path(file_okay=False, exists=True), help="Directory to discover settings from")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def resolve_cmd(
    specifier: str,
    importer: str | None,
    kind: str | None,
    use_async: bool,
    conditions: tuple[str, ...],
    cwd: str | None,
    as_json: bool,
):
    """Resolve SPECIFIER and print the module path and format."""
    settings = settings_for(cwd)
    host = FilesystemHost(Path(cwd).resolve() if cwd else None)
    context = ResolutionContext(
        importer=str(Path(importer).resolve()) if importer else None,
        importer_kind=kind or ("module" if use_async else "commonjs"),
        conditions=conditions,
    )

    try:
        engine = ResolutionEngine.from_settings(settings)
        if use_async:
            resolved = asyncio.run(engine.resolve_async(specifier, context, host.aresolve))
        else:
            resolved = engine.resolve_sync(specifier, context, host.resolve)
    except LoaderError as e:
        if as_json:
            click.echo(json.dumps(e.to_dict(), indent=2))
        else:
            report_error(e)
        sys.exit(1)

    if as_json:
        click.echo(resolved.model_dump_json(indent=2))
        return

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("specifier", specifier)
    table.add_row("path", f"[cyan]{resolved.path}[/cyan]")
    table.add_row("format", resolved.format or "[dim](host decides)[/dim]")
    table.add_row("short-circuit", "yes" if resolved.short_circuit else "no")
    console.print(table)
