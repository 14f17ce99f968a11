"""Alias resolvers - tilde-rooted and workspace-namespaced specifiers.

- TildeAliasResolver: ``~/lib/x`` -> ``<repository root>/lib/x``
- WorkspaceAliasResolver: ``@t/<slug>/<subpath>`` -> target from the package's
  export map, under ``<root>/<category>/<slug>``
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from ..errors import AliasResolutionError
from ..errors import ExportNotDefinedError
from ..models import ResolutionContext
from ..models import ResolvedModule
from ..workspace import WorkspaceAliasTable
from .exports_map import resolve_exports
from .steps import ReadManifest
from .steps import Steps

logger = logging.getLogger(__name__)


class TildeAliasResolver:
    """Expands ``~/`` specifiers against the repository root."""

    def __init__(self, root: Path):
        self.root = root

    def expand(self, specifier: str, context: ResolutionContext) -> str:
        """Return the absolute path a tilde specifier stands for.

        Raises:
            AliasResolutionError: No importer, or the specifier is not ``~`` / ``~/...``
        """
        if context.importer is None:
            raise AliasResolutionError(specifier, "tilde imports need an importing file")
        if specifier == "~":
            return str(self.root)
        if not specifier.startswith("~/"):
            raise AliasResolutionError(specifier, "expected '~/<path>'")

        expanded = os.path.join(str(self.root), specifier[2:])
        if specifier.endswith("/") and not expanded.endswith("/"):
            expanded += "/"
        logger.debug(f"[resolve] {specifier} -> {expanded} (tilde)")
        return expanded


class WorkspaceAliasResolver:
    """Resolves ``<namespace>/<slug>[/<subpath>]`` through the package export map."""

    def __init__(self, table: WorkspaceAliasTable, namespace: str):
        self.table = table
        self.namespace = namespace
        self._pattern = re.compile(rf"^{re.escape(namespace)}/([^/]+)(/.*)?$")

    def resolve(self, specifier: str, context: ResolutionContext) -> Steps[ResolvedModule]:
        """Step generator producing the final resolved module.

        Raises:
            AliasResolutionError: Slug cannot be extracted or is not registered
            ExportNotDefinedError: No manifest, or no export entry matches
            ManifestParseError: The manifest is malformed (raised by the manifest read)
        """
        match = self._pattern.match(specifier)
        if match is None:
            raise AliasResolutionError(specifier, f"could not extract package slug after '{self.namespace}/'")

        slug, subpath = match.group(1), match.group(2) or ""
        package_dir = self.table.package_dir(slug, specifier)
        manifest_path = package_dir / "package.json"
        entry = "." + subpath.rstrip("/") if subpath.strip("/") else "."

        manifest = yield ReadManifest(str(manifest_path))
        if manifest is None:
            raise ExportNotDefinedError(entry, str(manifest_path))

        targets = resolve_exports(manifest, entry, context.export_conditions())
        if not targets:
            raise ExportNotDefinedError(entry, str(manifest_path))

        path = os.path.normpath(os.path.join(str(package_dir), targets[0]))
        logger.debug(f"[resolve] {specifier} -> {path} (workspace)")
        return ResolvedModule(path=path, short_circuit=True)
