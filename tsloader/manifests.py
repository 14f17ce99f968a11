"""Process-wide memoised manifest and module-type lookups.

Both caches are populate-once-per-key: nothing is invalidated during the
lifetime of the owning engine. ``None`` entries record a confirmed-absent
manifest so repeat lookups never touch the filesystem again.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path

from .errors import ManifestParseError

logger = logging.getLogger(__name__)

ManifestReader = Callable[[Path], "str | None"]


def read_text_if_exists(path: Path) -> str | None:
    """Read a UTF-8 file, returning None when it does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
        return None


class ManifestCache:
    """Memoised ``package.json`` reader.

    Synchronous and asynchronous lookups share one table. Concurrent
    asynchronous lookups of a key that is not cached yet coalesce onto a single
    in-flight read.
    """

    def __init__(self, reader: ManifestReader | None = None):
        """Initialize cache.

        Args:
            reader: Returns file text or None when absent (injectable for tests)
        """
        self._reader = reader or read_text_if_exists
        self._entries: dict[str, dict | None] = {}
        self._pending: dict[str, asyncio.Task] = {}

    def __contains__(self, path: object) -> bool:
        return str(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str | Path) -> dict | None:
        """Return the parsed manifest at ``path`` (None when absent)."""
        key = str(path)
        if key in self._entries:
            return self._entries[key]
        return self._store(key, self._reader(Path(key)))

    async def aget(self, path: str | Path) -> dict | None:
        """Asynchronous ``get``; concurrent callers share one read."""
        key = str(path)
        if key in self._entries:
            return self._entries[key]

        task = self._pending.get(key)
        if task is None:
            task = asyncio.create_task(self._load(key))
            self._pending[key] = task
        return await task

    async def _load(self, key: str) -> dict | None:
        try:
            text = await asyncio.to_thread(self._reader, Path(key))
            return self._store(key, text)
        finally:
            self._pending.pop(key, None)

    def _store(self, key: str, text: str | None) -> dict | None:
        if key in self._entries:
            return self._entries[key]

        if text is None:
            self._entries[key] = None
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestParseError(key, str(e)) from e
        if not isinstance(data, dict):
            raise ManifestParseError(key, "manifest must be a JSON object")

        logger.debug(f"[manifest] cached {key}")
        self._entries[key] = data
        return data


class ModuleTypeCache:
    """Directory -> declared module type (``commonjs`` or ``module``)."""

    def __init__(self):
        self._types: dict[str, str] = {}

    def __contains__(self, directory: object) -> bool:
        return str(directory) in self._types

    def get(self, directory: str) -> str | None:
        return self._types.get(directory)

    def record(self, directory: str, module_type: str) -> str:
        """Record a type for ``directory``; the first recorded value wins."""
        return self._types.setdefault(directory, module_type)
