"""Module format detection for resolved files.

Unambiguous extensions map straight to a format. For the package-scoped
family (``.js .ts .tsx .jsx``) the nearest ancestor manifest declaring a
``"type"`` decides, never looking past a ``node_modules`` directory, and
defaulting to commonjs. Every directory visited is recorded in the
ModuleTypeCache so sibling files never walk again.
"""

import os

from ..manifests import ModuleTypeCache
from ..models import DEPENDENCY_DIR
from .steps import ReadManifest
from .steps import Steps

EXTENSION_FORMATS = {
    ".json": "json",
    ".mjs": "module",
    ".mts": "module",
    ".cjs": "commonjs",
    ".cts": "commonjs",
}
PACKAGE_SCOPED_EXTENSIONS = (".js", ".ts", ".tsx", ".jsx")
MODULE_TYPES = ("commonjs", "module")


def format_from_extension(path: str) -> str | None:
    return EXTENSION_FORMATS.get(os.path.splitext(path)[1])


def package_type(directory: str, type_cache: ModuleTypeCache) -> Steps[str]:
    """Walk up from ``directory`` to the first manifest declaring a module type."""
    visited: list[str] = []
    module_type = "commonjs"
    current = directory
    while True:
        cached = type_cache.get(current)
        if cached is not None:
            module_type = cached
            break
        if os.path.basename(current) == DEPENDENCY_DIR:
            break

        visited.append(current)
        manifest = yield ReadManifest(os.path.join(current, "package.json"))
        declared = manifest.get("type") if manifest else None
        if declared in MODULE_TYPES:
            module_type = declared
            break

        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent

    for directory_seen in visited:
        type_cache.record(directory_seen, module_type)
    return module_type


def detect_format(path: str, type_cache: ModuleTypeCache) -> Steps[str | None]:
    """Format of the file at ``path``; None when the host should decide."""
    fmt = format_from_extension(path)
    if fmt is not None:
        return fmt
    if not path.endswith(PACKAGE_SCOPED_EXTENSIONS):
        return None
    return (yield from package_type(os.path.dirname(path), type_cache))
