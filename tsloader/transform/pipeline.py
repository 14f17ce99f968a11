"""Load-time transform pipeline.

Routes each resolved identity to one of: passthrough, virtual glob synthesis,
lenient dependency transform, dynamic-import rewrite, or a full transform with
directory-scoped compiler options. The synchronous variant serves script-style
(commonjs) loaders, the asynchronous variant serves module loaders.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
from collections.abc import Awaitable
from collections.abc import Callable
from pathlib import Path

from ..config.tsconfig import CompilerOptionsResolver
from ..errors import ManifestParseError
from ..errors import TransformError
from ..manifests import ManifestCache
from ..manifests import ModuleTypeCache
from ..models import LoadContext
from ..models import LoadResult
from ..models import in_dependency_boundary
from ..models import is_virtual_path
from ..resolution.formats import detect_format
from ..resolution.globs import VirtualGlobModule
from ..resolution.steps import run_manifest_only
from .base import OutputFormat
from .base import SourceTransformer
from .dynamic_import import rewrite_dynamic_imports
from .source_maps import SourceMapStore

logger = logging.getLogger(__name__)

DefaultLoad = Callable[[str, LoadContext], LoadResult]
AsyncDefaultLoad = Callable[[str, LoadContext], "LoadResult | Awaitable[LoadResult]"]

STYLE_EXTENSIONS = (".css",)
ASYNC_TRANSFORM_EXTENSIONS = (".ts", ".mts", ".cts", ".tsx", ".jsx")


class TransformPipeline:
    """Decides what happens to a module's source between host load and execution.

    Attributes:
        transformer: Type-stripping engine
        compiler_options: Nearest-tsconfig lookup for per-file overrides
        source_maps: Maps recorded for every transformed file
    """

    def __init__(
        self,
        transformer: SourceTransformer,
        compiler_options: CompilerOptionsResolver,
        manifests: ManifestCache,
        module_types: ModuleTypeCache,
        source_maps: SourceMapStore | None = None,
    ):
        self.transformer = transformer
        self.compiler_options = compiler_options
        self.manifests = manifests
        self.module_types = module_types
        self.source_maps = source_maps if source_maps is not None else SourceMapStore()

    def load_sync(self, path: str, context: LoadContext, default_load: DefaultLoad) -> LoadResult:
        """Load for a commonjs loader; everything first-party compiles to commonjs."""
        if path.endswith(STYLE_EXTENSIONS):
            return default_load(path, context)

        if is_virtual_path(path):
            glob_module = VirtualGlobModule.from_path(path)
            return LoadResult(format="commonjs", source=glob_module.contents("commonjs"), short_circuit=True)

        loaded = default_load(path, context)
        code = loaded.text()
        if code is None or loaded.format == "json":
            return loaded

        if in_dependency_boundary(path):
            return loaded.model_copy(update={"source": self._dependency_source(path, code)})

        if path.endswith(".cjs"):
            rewritten = rewrite_dynamic_imports(code, path)
            if rewritten is None:
                return loaded
            return loaded.model_copy(update={"source": self.source_maps.apply(rewritten, path)})

        source = self._transform(code, path, "cjs")
        logger.debug(f"[load] {path} compiled to commonjs")
        return LoadResult(format="commonjs", source=source)

    async def load_async(self, path: str, context: LoadContext, default_load: AsyncDefaultLoad) -> LoadResult:
        """Load for a module loader."""
        if is_virtual_path(path):
            glob_module = VirtualGlobModule.from_path(path)
            return LoadResult(format="module", source=glob_module.contents("module"), short_circuit=True)

        if os.path.isabs(path) and not os.path.splitext(path)[1]:
            source = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
            return LoadResult(format="commonjs", source=source, short_circuit=True)

        if path.endswith(".json"):
            attributes = {**context.import_attributes, "type": "json"}
            context = context.model_copy(update={"import_attributes": attributes})

        loaded = default_load(path, context)
        if inspect.isawaitable(loaded):
            loaded = await loaded

        code = loaded.text()
        if code is None or path.endswith(STYLE_EXTENSIONS):
            return loaded

        if in_dependency_boundary(path):
            if loaded.format != "commonjs":
                return loaded
            source = await asyncio.to_thread(self._dependency_source, path, code)
            return loaded.model_copy(update={"source": source})

        if loaded.format == "json" or path.endswith(ASYNC_TRANSFORM_EXTENSIONS):
            source = await asyncio.to_thread(self._transform, code, path, "esm")
            logger.debug(f"[load] {path} compiled to module")
            return LoadResult(format="module", source=source)

        if loaded.format == "module":
            rewritten = rewrite_dynamic_imports(code, path)
            if rewritten is not None:
                return loaded.model_copy(update={"source": self.source_maps.apply(rewritten, path)})

        return loaded

    def _transform(self, code: str, path: str, output: OutputFormat) -> str:
        tsconfig_raw = self.compiler_options.tsconfig_raw(path)
        result = self.transformer.transform(code, path, format=output, tsconfig_raw=tsconfig_raw)
        return self.source_maps.apply(result, path)

    def _dependency_source(self, path: str, code: str) -> str:
        """Best-effort commonjs build of a dependency authored as ES module.

        Unreadable package manifests and transform failures are logged and
        the raw source is kept.
        """
        try:
            authored = run_manifest_only(detect_format(path, self.module_types), self.manifests)
        except ManifestParseError as e:
            logger.debug(f"[load] keeping raw source for {path}: {e}")
            return code
        if authored != "module":
            return code
        try:
            result = self.transformer.transform(code, path, format="cjs")
        except TransformError as e:
            logger.debug(f"[load] keeping raw source for {path}: {e}")
            return code
        return self.source_maps.apply(result, path)
