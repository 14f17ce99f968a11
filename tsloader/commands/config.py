"""Show the configuration the loader discovers for a directory."""

import sys

import click
from rich.table import Table

from ..config.tsconfig import PathsMappingIndex
from ..config.tsconfig import load_tsconfig
from ..console import console
from ..errors import LoaderError
from ..workspace import WorkspaceAliasTable
from ._common import report_error
from ._common import settings_for


@click.command(name="config")
@click.option("--cwd", type=click.Path(file_okay=False, exists=True), help="Directory to discover settings from")
def config_cmd(cwd: str | None):
    """Show discovered settings, paths mapping and workspace packages."""
    settings = settings_for(cwd)

    table = Table(title="Loader Settings", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("repository root", str(settings.repository_root))
    table.add_row("tsconfig", str(settings.tsconfig_path) if settings.tsconfig_path else "[dim]none[/dim]")
    table.add_row("workspace descriptor", settings.workspace_descriptor)
    table.add_row("workspace namespace", settings.workspace_namespace)
    table.add_row("conditions", ", ".join(settings.conditions) or "[dim]none[/dim]")
    console.print(table)

    try:
        tsconfig = load_tsconfig(settings.tsconfig_path) if settings.tsconfig_path else None
        workspace = WorkspaceAliasTable.discover(settings.repository_root, settings.workspace_descriptor)
    except LoaderError as e:
        report_error(e)
        sys.exit(1)

    index = PathsMappingIndex.from_tsconfig(tsconfig) if tsconfig else None
    if index is not None and index.patterns:
        paths_table = Table(title="Paths Mapping")
        paths_table.add_column("Pattern", style="cyan")
        paths_table.add_column("Substitutions")
        for pattern, substitutions in index.items():
            paths_table.add_row(pattern, ", ".join(substitutions))
        console.print(paths_table)

    if workspace is None:
        console.print("[dim]No workspace descriptor found.[/dim]")
        return
    if not workspace:
        console.print("[dim]Workspace has no packages.[/dim]")
        return

    packages = Table(title="Workspace Packages")
    packages.add_column("Specifier", style="cyan")
    packages.add_column("Category", style="green")
    packages.add_column("Directory", style="dim")
    for slug in sorted(workspace):
        packages.add_row(f"{settings.workspace_namespace}/{slug}", workspace[slug], str(workspace.package_dir(slug, slug)))
    console.print(packages)
