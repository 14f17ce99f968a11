"""Loader hooks: the resolve/load boundary a host loader calls into.

Each hook receives the host's own default implementation as an argument, so
the engine can defer to it and be layered beneath it.
"""

from __future__ import annotations

import logging

from .config.settings import LoaderSettings
from .config.settings import load_settings
from .config.tsconfig import CompilerOptionsResolver
from .manifests import ManifestCache
from .models import LoadContext
from .models import LoadResult
from .models import ResolutionContext
from .models import ResolvedModule
from .resolution.engine import ResolutionEngine
from .resolution.steps import AsyncDefaultResolve
from .resolution.steps import DefaultResolve
from .transform.base import SourceTransformer
from .transform.esbuild import EsbuildTransformer
from .transform.pipeline import AsyncDefaultLoad
from .transform.pipeline import DefaultLoad
from .transform.pipeline import TransformPipeline

logger = logging.getLogger(__name__)


class LoaderHooks:
    """Synchronous and asynchronous resolve/load hooks sharing one set of caches."""

    def __init__(self, engine: ResolutionEngine, pipeline: TransformPipeline):
        self.engine = engine
        self.pipeline = pipeline

    @classmethod
    def create(
        cls,
        settings: LoaderSettings | None = None,
        transformer: SourceTransformer | None = None,
    ) -> LoaderHooks:
        """Wire an engine and a pipeline from discovered (or given) settings.

        Args:
            settings: Loader settings (default: load_settings())
            transformer: Source transformer (default: EsbuildTransformer())

        Returns:
            Ready-to-use hooks

        Raises:
            ConfigurationError: Settings, tsconfig or workspace descriptor are invalid
        """
        settings = settings or load_settings()
        manifests = ManifestCache()
        engine = ResolutionEngine.from_settings(settings, manifests=manifests)
        compiler_options = CompilerOptionsResolver(settings.repository_root, engine.tsconfig)
        pipeline = TransformPipeline(
            transformer or EsbuildTransformer(),
            compiler_options,
            manifests,
            engine.module_types,
        )
        workspace_size = len(engine.workspace) if engine.workspace is not None else 0
        logger.info(
            f"Loader ready (root={settings.repository_root}, tsconfig={settings.tsconfig_path}, "
            f"workspace packages={workspace_size})"
        )
        return cls(engine, pipeline)

    def resolve_sync(self, specifier: str, context: ResolutionContext, default_resolve: DefaultResolve) -> ResolvedModule:
        return self.engine.resolve_sync(specifier, context, default_resolve)

    async def resolve_async(
        self, specifier: str, context: ResolutionContext, default_resolve: AsyncDefaultResolve
    ) -> ResolvedModule:
        return await self.engine.resolve_async(specifier, context, default_resolve)

    def load_sync(self, path: str, context: LoadContext, default_load: DefaultLoad) -> LoadResult:
        return self.pipeline.load_sync(path, context, default_load)

    async def load_async(self, path: str, context: LoadContext, default_load: AsyncDefaultLoad) -> LoadResult:
        return await self.pipeline.load_async(path, context, default_load)
