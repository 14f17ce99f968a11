"""Tests for the loader hook boundary."""

import pytest
from tsloader.config.settings import LoaderSettings
from tsloader.hooks import LoaderHooks
from tsloader.models import LoadContext
from tsloader.models import ResolutionContext
from tsloader.transform.base import TransformResult


class EchoTransformer:
    def transform(self, code, path, *, format=None, tsconfig_raw=None):
        return TransformResult(code=f"// {format}\n{code}")


@pytest.fixture
def hooks(project, write):
    write(project / "tsconfig.json", {"compilerOptions": {"strict": True}})
    write(project / "src" / "index.ts", "import { x } from './x.js';")
    write(project / "src" / "x.ts", "export const x = 1;")
    settings = LoaderSettings(repository_root=project, tsconfig_path=project / "tsconfig.json")
    return LoaderHooks.create(settings, EchoTransformer())


class TestLoaderHooks:
    """Resolve then load, as a host loader would."""

    def test_sync_round(self, hooks, host, project):
        ctx = ResolutionContext(importer=str(project / "src" / "index.ts"))
        resolved = hooks.resolve_sync("./x.js", ctx, host.resolve)
        loaded = hooks.load_sync(resolved.path, LoadContext(format=resolved.format), host.load)

        assert resolved.path == str(project / "src" / "x.ts")
        assert loaded.format == "commonjs"
        assert loaded.text().startswith("// cjs\n")

    @pytest.mark.asyncio
    async def test_async_round(self, hooks, host, project):
        ctx = ResolutionContext(importer=str(project / "src" / "index.ts"), importer_kind="module")
        resolved = await hooks.resolve_async("./x.js", ctx, host.aresolve)
        loaded = await hooks.load_async(resolved.path, LoadContext(format=resolved.format), host.aload)

        assert resolved.format == "commonjs"
        assert loaded.format == "module"
        assert loaded.text().startswith("// esm\n")

    def test_engine_and_pipeline_share_caches(self, hooks):
        assert hooks.pipeline.manifests is hooks.engine.manifests
        assert hooks.pipeline.module_types is hooks.engine.module_types
