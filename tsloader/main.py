"""tsloader CLI - inspect specifier resolution and load-time transforms."""

import logging
import os

import click

from .commands.config import config_cmd
from .commands.load import load_cmd
from .commands.resolve import resolve_cmd
from .logging_setup import init_json_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="tsloader")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write JSONL logs to this file")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default: TSLOADER_LOG_LEVEL or INFO)",
)
def cli(log_file: str | None, log_level: str | None):
    """tsloader - resolve and load typed-source modules."""
    # Logging is opt-in so inspecting a project never writes into it
    if log_file or os.environ.get("TSLOADER_LOG_PATH"):
        init_json_logging(log_file, log_level)
        logger.debug("JSONL logging initialised")


cli.add_command(resolve_cmd)
cli.add_command(load_cmd)
cli.add_command(config_cmd)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
