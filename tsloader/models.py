"""Core data types shared by the resolver, the format detector and the pipeline.

Defines:
- SpecifierKind / Specifier: classified import specifiers
- ResolutionContext: who is importing, and under which module semantics
- ResolvedModule: the outcome of a resolve call
- LoadContext / LoadResult: the load contract
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from enum import Enum
from typing import Literal

from pydantic import BaseModel
from pydantic import Field

ModuleKind = Literal["commonjs", "module"]

DEPENDENCY_DIR = "node_modules"
DEPENDENCY_SEGMENT = f"/{DEPENDENCY_DIR}/"

TYPED_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts")
VIRTUAL_PREFIX = "__virtual__:"


def in_dependency_boundary(path: str | None) -> bool:
    """Return True when ``path`` lies inside an installed-dependency tree."""
    if not path:
        return False
    return DEPENDENCY_SEGMENT in path.replace(os.sep, "/")


def is_virtual_path(path: str) -> bool:
    """Return True for synthetic glob identities."""
    return os.path.basename(path).startswith(VIRTUAL_PREFIX)


class SpecifierKind(str, Enum):
    """Kind of an import specifier, in classification priority order."""

    URL = "url"
    TILDE_ALIAS = "tilde-alias"
    GLOB = "glob"
    WORKSPACE_ALIAS = "workspace-alias"
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    BARE = "bare"


@dataclass(frozen=True)
class Specifier:
    """A raw specifier string with its derived kind."""

    raw: str
    kind: SpecifierKind

    @property
    def is_path(self) -> bool:
        return self.kind in (SpecifierKind.RELATIVE, SpecifierKind.ABSOLUTE)


@dataclass(frozen=True)
class ResolutionContext:
    """Context of a single resolve call.

    Attributes:
        importer: Absolute path of the importing file (None for entry points)
        importer_kind: Module semantics of the importer
        conditions: Extra export-map conditions requested by the host
        recursive: Set on nested resolutions so fallbacks never fall back again
    """

    importer: str | None = None
    importer_kind: ModuleKind = "commonjs"
    conditions: tuple[str, ...] = field(default_factory=tuple)
    recursive: bool = False

    @property
    def importer_dir(self) -> str | None:
        return os.path.dirname(self.importer) if self.importer else None

    @property
    def in_dependency_boundary(self) -> bool:
        return in_dependency_boundary(self.importer)

    @property
    def importer_is_typed(self) -> bool:
        return bool(self.importer) and self.importer.endswith(TYPED_EXTENSIONS)

    def export_conditions(self) -> tuple[str, ...]:
        """Conditions accepted when walking a package export map."""
        base = ("node", "require" if self.importer_kind == "commonjs" else "import")
        return base + tuple(c for c in self.conditions if c not in base)

    def as_recursive(self) -> ResolutionContext:
        return replace(self, recursive=True)


class ResolvedModule(BaseModel):
    """Result of resolving a specifier."""

    path: str = Field(..., description="Absolute file path, or a URL for non-file modules")
    format: str | None = Field(None, description="commonjs, module, json, builtin ...")
    short_circuit: bool = Field(False, description="Host must not apply further resolution passes")

    @property
    def virtual(self) -> bool:
        return is_virtual_path(self.path)


class LoadContext(BaseModel):
    """Context passed to a load call."""

    format: str | None = None
    import_attributes: dict[str, str] = Field(default_factory=dict)
    conditions: list[str] = Field(default_factory=list)


class LoadResult(BaseModel):
    """Result of loading a resolved module."""

    format: str
    source: str | bytes | None = None
    short_circuit: bool = False

    def text(self) -> str | None:
        if self.source is None:
            return None
        if isinstance(self.source, bytes):
            return self.source.decode("utf-8")
        return self.source
