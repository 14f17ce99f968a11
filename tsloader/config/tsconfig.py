"""tsconfig.json parsing: paths mapping and per-directory compiler options.

tsconfig files are JSONC. Comments and trailing commas are stripped before
parsing. Local ``extends`` chains (``./base.json``) are merged with the child
winning; package-based extends are not followed.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import Field

from ..errors import ConfigurationError
from ..errors import ManifestParseError

logger = logging.getLogger(__name__)

CONFIG_NAME = "tsconfig.json"
MAX_EXTENDS_DEPTH = 8
DEFAULT_EXCLUDE = ["node_modules", "bower_components", "jspm_packages"]

_JSONC_TOKENS = re.compile(
    r'("(?:\\.|[^"\\])*")'  # strings are kept
    r"|//[^\n]*|/\*.*?\*/"  # comments are dropped
    r"|,(?=(?:\s|//[^\n]*|/\*.*?\*/)*[}\]])",  # trailing commas are dropped
    re.DOTALL,
)
_RELATIVE_PATH = re.compile(r"^\.{0,2}/")
_DOT_SEGMENT = re.compile(r"^\.{1,2}(/.*)?$")
_GLOB_CHARS = re.compile(r"[*?\[]")


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas from JSONC text."""
    return _JSONC_TOKENS.sub(lambda m: m.group(1) or "", text)


def _read_jsonc(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}", str(path)) from e

    try:
        data = json.loads(strip_jsonc(raw) or "{}")
    except json.JSONDecodeError as e:
        raise ManifestParseError(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ManifestParseError(str(path), "config must be a JSON object")
    return data


def _extends_path(current: Path, value: str) -> Path | None:
    if not _RELATIVE_PATH.match(value):
        logger.debug(f"[tsconfig] not following package extends '{value}' from {current}")
        return None
    target = Path(value) if value.startswith("/") else current.parent / value
    if not target.suffix:
        target = target.with_name(target.name + ".json")
    return target


class TsconfigFile(BaseModel):
    """A parsed tsconfig with its extends chain merged."""

    path: Path
    compiler_options: dict[str, Any] = Field(default_factory=dict)
    files: list[str] | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    base_url: str | None = Field(None, description="Absolute baseUrl, if declared")
    paths: dict[str, list[str]] = Field(default_factory=dict)
    paths_base: str | None = Field(None, description="Directory paths substitutions are relative to")

    @property
    def directory(self) -> Path:
        return self.path.parent

    def includes(self, file_path: str) -> bool:
        """Check whether ``file_path`` is covered by files/include/exclude."""
        rel = os.path.relpath(file_path, self.directory).replace(os.sep, "/")
        if rel.startswith("../"):
            return False

        if self.files and any(os.path.normpath(f).replace(os.sep, "/") == rel for f in self.files):
            return True

        exclude = self.exclude if self.exclude is not None else DEFAULT_EXCLUDE
        if any(_glob_matches(rel, pattern) for pattern in exclude):
            return False

        if self.include is None:
            return not self.files
        return any(_glob_matches(rel, pattern) for pattern in self.include)

    def tsconfig_raw(self) -> dict[str, Any]:
        return {"compilerOptions": dict(self.compiler_options)}


def _glob_matches(rel: str, pattern: str) -> bool:
    pattern = pattern.replace(os.sep, "/").removeprefix("./")
    if not _GLOB_CHARS.search(pattern):
        base = pattern.rstrip("/")
        return rel == base or rel.startswith(base + "/")

    candidates = {pattern, pattern.replace("/**/", "/")}
    if pattern.startswith("**/"):
        candidates.add(pattern[3:])
    return any(fnmatch.fnmatchcase(rel, candidate) for candidate in candidates)


def load_tsconfig(path: Path) -> TsconfigFile:
    """Load a tsconfig and merge its local extends chain.

    Raises:
        ConfigurationError: The file does not exist
        ManifestParseError: A file in the chain is not valid JSON
    """
    path = path.resolve()
    chain: list[tuple[Path, dict[str, Any]]] = []
    seen: set[Path] = set()
    current: Path | None = path
    while current is not None and current not in seen and len(chain) < MAX_EXTENDS_DEPTH:
        seen.add(current)
        data = _read_jsonc(current)
        chain.append((current, data))
        extends = data.get("extends")
        current = _extends_path(current, extends) if isinstance(extends, str) and extends else None

    merged = TsconfigFile(path=path)
    for config_path, data in reversed(chain):
        options = data.get("compilerOptions") or {}
        if isinstance(options, dict):
            merged.compiler_options.update(options)
            base_url = options.get("baseUrl")
            if isinstance(base_url, str):
                merged.base_url = os.path.normpath(os.path.join(config_path.parent, base_url))
            paths = options.get("paths")
            if isinstance(paths, dict):
                merged.paths = {
                    key: [t for t in targets if isinstance(t, str)]
                    for key, targets in paths.items()
                    if isinstance(targets, list)
                }
                merged.paths_base = str(config_path.parent)
        for field_name in ("files", "include", "exclude"):
            value = data.get(field_name)
            if isinstance(value, list):
                setattr(merged, field_name, [str(v) for v in value])

    # Compiler options are handed to the transformer as-is; path resolution already happened here.
    merged.compiler_options.pop("paths", None)
    merged.compiler_options.pop("baseUrl", None)
    return merged


def find_up(start: Path, name: str, stop: Path | None = None) -> Path | None:
    """Find ``name`` in ``start`` or its ancestors (not above ``stop``)."""
    current = start.resolve()
    while True:
        candidate = current / name
        if candidate.is_file():
            return candidate
        if stop is not None and current == stop:
            return None
        if current.parent == current:
            return None
        current = current.parent


class PathsMappingIndex:
    """Ordered alias pattern -> substitution templates, from compilerOptions.paths."""

    def __init__(self, paths: dict[str, list[str]], base_dir: str, has_base_url: bool = False):
        self._paths = tuple((pattern, tuple(targets)) for pattern, targets in paths.items())
        self.base_dir = base_dir
        self.has_base_url = has_base_url

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(pattern for pattern, _ in self._paths)

    def items(self) -> tuple[tuple[str, tuple[str, ...]], ...]:
        return self._paths

    @classmethod
    def from_tsconfig(cls, config: TsconfigFile) -> PathsMappingIndex | None:
        """Build an index; None when the config declares neither paths nor baseUrl."""
        if not config.paths and config.base_url is None:
            return None
        base_dir = config.base_url or config.paths_base or str(config.directory)
        return cls(config.paths, base_dir, has_base_url=config.base_url is not None)

    def candidates(self, specifier: str) -> list[str]:
        """Absolute candidate paths for a bare specifier, in priority order.

        An exact key beats any wildcard; among wildcards the longest prefix
        wins. With no match, ``<baseUrl>/<specifier>`` is the only candidate
        when a baseUrl is configured.
        """
        if _RELATIVE_PATH.match(specifier) or _DOT_SEGMENT.match(specifier):
            return []

        targets: tuple[str, ...] | None = None
        captured = ""
        for pattern, substitutions in self._paths:
            if "*" not in pattern and pattern == specifier:
                targets = substitutions
                break

        if targets is None:
            best_prefix = -1
            for pattern, substitutions in self._paths:
                if pattern.count("*") != 1:
                    continue
                prefix, suffix = pattern.split("*")
                if len(specifier) < len(prefix) + len(suffix):
                    continue
                if specifier.startswith(prefix) and specifier.endswith(suffix) and len(prefix) > best_prefix:
                    best_prefix = len(prefix)
                    targets = substitutions
                    captured = specifier[len(prefix) : len(specifier) - len(suffix)]

        if targets is None:
            return [os.path.normpath(os.path.join(self.base_dir, specifier))] if self.has_base_url else []

        return [os.path.normpath(os.path.join(self.base_dir, t.replace("*", captured))) for t in targets]


class CompilerOptionsResolver:
    """Directory-scoped compiler options from the nearest enclosing tsconfig.

    Lookups are memoised per directory. When no tsconfig encloses a file, the
    primary (configured) tsconfig applies if it includes the file.
    """

    def __init__(self, root: Path | None = None, primary: TsconfigFile | None = None):
        self.root = root.resolve() if root else None
        self.primary = primary
        self._by_dir: dict[str, TsconfigFile | None] = {}
        self._loaded: dict[Path, TsconfigFile] = {}
        if primary is not None:
            self._loaded[primary.path] = primary

    def nearest(self, directory: str) -> TsconfigFile | None:
        if directory in self._by_dir:
            return self._by_dir[directory]

        found = find_up(Path(directory), CONFIG_NAME, stop=self.root)
        config = None
        if found is not None:
            config = self._loaded.get(found)
            if config is None:
                config = self._loaded[found] = load_tsconfig(found)
        self._by_dir[directory] = config
        return config

    def tsconfig_raw(self, file_path: str) -> dict[str, Any] | None:
        """Compiler-option overrides for ``file_path``, or None."""
        config = self.nearest(os.path.dirname(file_path)) or self.primary
        if config is None or not config.includes(file_path):
            return None
        return config.tsconfig_raw()
