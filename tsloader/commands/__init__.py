"""CLI commands for tsloader."""

__all__ = [
    "config",
    "load",
    "resolve",
]
