"""Load a file through the transform pipeline and print the result."""

import asyncio
import sys
from pathlib import Path

import click

from ..console import err_console
from ..errors import LoaderError
from ..hooks import LoaderHooks
from ..host import FilesystemHost
from ..models import LoadContext
from ..models import is_virtual_path
from ..transform.esbuild import EsbuildTransformer
from ._common import report_error
from ._common import settings_for


@click.command(name="load")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--async", "use_async", is_flag=True, help="Use the module-loader pipeline")
@click.option("--format", "fmt", default=None, help="Format the host already decided for the file")
@click.option("--esbuild", "executable", default="esbuild", show_default=True, help="esbuild executable")
@click.option("--cwd", type=click.Path(file_okay=False, exists=True), help="Directory to discover settings from")
def load_cmd(path: str, use_async: bool, fmt: str | None, executable: str, cwd: str | None):
    """Print the source PATH would execute as, after transforms."""
    settings = settings_for(cwd)
    host = FilesystemHost(Path(cwd).resolve() if cwd else None)
    target = path if is_virtual_path(path) else str(Path(path).resolve())
    context = LoadContext(format=fmt)

    try:
        hooks = LoaderHooks.create(settings, EsbuildTransformer(executable))
        if use_async:
            result = asyncio.run(hooks.load_async(target, context, host.aload))
        else:
            result = hooks.load_sync(target, context, host.load)
    except LoaderError as e:
        report_error(e)
        sys.exit(1)

    err_console.print(f"[dim]format: {result.format}[/dim]")
    source = result.text()
    if source is not None:
        click.echo(source, nl=not source.endswith("\n"))
