"""Reference host: strict, filesystem-backed default resolve and load.

Behaves like a module-semantics host with no implicit guessing:
- Path specifiers must name an existing file exactly
- Directories raise UnsupportedDirectoryImportError
- Bare specifiers walk up ``node_modules`` directories and honour ``exports``,
  falling back to ``main`` and ``index.js`` for packages without an export map
- Core modules resolve to ``node:<name>`` with format ``builtin``

Extension and index probing is deliberately left to the engine's fallback
chain, so this host is what the engine is layered on in tests and the CLI.
"""

import asyncio
import json
import logging
import os
from pathlib import Path

from .errors import ExportNotDefinedError
from .errors import ManifestParseError
from .errors import ModuleNotFoundError
from .errors import UnsupportedDirectoryImportError
from .models import DEPENDENCY_DIR
from .models import LoadContext
from .models import LoadResult
from .models import ResolutionContext
from .models import ResolvedModule
from .resolution.classifier import file_url_to_path
from .resolution.exports_map import resolve_exports
from .resolution.formats import format_from_extension

logger = logging.getLogger(__name__)

CORE_MODULES: frozenset[str] = frozenset(
    {
        "assert", "buffer", "child_process", "cluster", "crypto", "dgram",
        "dns", "domain", "events", "fs", "http", "https", "net", "os",
        "path", "punycode", "querystring", "readline", "repl", "stream",
        "string_decoder", "sys", "timers", "tls", "tty", "url", "util",
        "v8", "vm", "zlib", "process", "console", "module", "worker_threads",
    }
)  # fmt: skip


def _split_package(specifier: str) -> tuple[str, str]:
    """Split ``@scope/pkg/sub`` into (``@scope/pkg``, ``/sub``)."""
    parts = specifier.split("/")
    count = 2 if specifier.startswith("@") else 1
    return "/".join(parts[:count]), "/".join([""] + parts[count:]) if len(parts) > count else ""


class FilesystemHost:
    """Default resolve/load capabilities backed by the local filesystem."""

    def __init__(self, cwd: Path | None = None):
        """Initialize host.

        Args:
            cwd: Base directory for entry-point specifiers (default: Path.cwd())
        """
        self.cwd = cwd or Path.cwd()

    def resolve(self, specifier: str, context: ResolutionContext) -> ResolvedModule:
        """Resolve ``specifier`` strictly."""
        if specifier.startswith("node:") or specifier in CORE_MODULES:
            name = specifier.removeprefix("node:")
            if name.split("/")[0] not in CORE_MODULES:
                raise ModuleNotFoundError(specifier, context.importer)
            return ResolvedModule(path=f"node:{name}", format="builtin", short_circuit=True)

        specifier = file_url_to_path(specifier)
        if specifier.startswith(("./", "../", "/")) or specifier in (".", ".."):
            base = context.importer_dir or str(self.cwd)
            return self._resolve_file(os.path.normpath(os.path.join(base, specifier)), specifier, context)

        if ":" in specifier.split("/")[0]:
            raise ModuleNotFoundError(specifier, context.importer, f"Unsupported URL scheme in '{specifier}'")

        return self._resolve_package(specifier, context)

    async def aresolve(self, specifier: str, context: ResolutionContext) -> ResolvedModule:
        return await asyncio.to_thread(self.resolve, specifier, context)

    def _resolve_file(self, path: str, specifier: str, context: ResolutionContext) -> ResolvedModule:
        if os.path.isdir(path):
            raise UnsupportedDirectoryImportError(specifier, context.importer)
        if not os.path.isfile(path):
            raise ModuleNotFoundError(specifier, context.importer)
        return ResolvedModule(path=path)

    def _resolve_package(self, specifier: str, context: ResolutionContext) -> ResolvedModule:
        name, subpath = _split_package(specifier)
        current = Path(context.importer_dir or self.cwd)

        while True:
            package_dir = current / DEPENDENCY_DIR / name
            if package_dir.is_dir():
                return self._resolve_in_package(package_dir, subpath, specifier, context)
            if current.parent == current:
                break
            current = current.parent

        raise ModuleNotFoundError(specifier, context.importer)

    def _resolve_in_package(
        self, package_dir: Path, subpath: str, specifier: str, context: ResolutionContext
    ) -> ResolvedModule:
        manifest_path = package_dir / "package.json"
        manifest: dict = {}
        if manifest_path.is_file():
            try:
                manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise ManifestParseError(str(manifest_path), str(e)) from e

        if manifest.get("exports") is not None:
            targets = resolve_exports(manifest, "." + subpath, context.export_conditions())
            if not targets:
                raise ExportNotDefinedError("." + subpath, str(manifest_path))
            return self._resolve_file(os.path.normpath(package_dir / targets[0]), specifier, context)

        if subpath:
            return self._resolve_file(os.path.normpath(str(package_dir) + subpath), specifier, context)

        main = manifest.get("main")
        candidates = [main, f"{main}.js"] if isinstance(main, str) else []
        candidates.append("index.js")
        for candidate in candidates:
            path = os.path.normpath(package_dir / candidate)
            if os.path.isfile(path):
                return ResolvedModule(path=path)
        raise ModuleNotFoundError(specifier, context.importer)

    def load(self, path: str, context: LoadContext) -> LoadResult:
        """Read the file at ``path`` as text."""
        if path.startswith("node:"):
            return LoadResult(format="builtin", source=None)

        fmt = context.format or ("json" if context.import_attributes.get("type") == "json" else None)
        fmt = fmt or format_from_extension(path) or "commonjs"
        try:
            source = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ModuleNotFoundError(path) from e
        return LoadResult(format=fmt, source=source)

    async def aload(self, path: str, context: LoadContext) -> LoadResult:
        return await asyncio.to_thread(self.load, path, context)
