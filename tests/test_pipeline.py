"""Tests for the load-time transform pipeline."""

import json

import pytest
from tsloader.config.tsconfig import CompilerOptionsResolver
from tsloader.errors import TransformError
from tsloader.manifests import ManifestCache
from tsloader.manifests import ModuleTypeCache
from tsloader.models import LoadContext
from tsloader.models import LoadResult
from tsloader.resolution.globs import VirtualGlobModule
from tsloader.transform.base import TransformResult
from tsloader.transform.dynamic_import import UNWRAP_ES_MODULE
from tsloader.transform.pipeline import TransformPipeline


class FakeTransformer:
    """Records calls and tags output with the requested format."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[dict] = []

    def transform(self, code, path, *, format=None, tsconfig_raw=None):
        self.calls.append({"path": path, "format": format, "tsconfig_raw": tsconfig_raw})
        if self.fail:
            raise TransformError(path, "unexpected token")
        source_map = json.dumps({"version": 3, "sources": [path], "mappings": ""})
        return TransformResult(code=f"/* {format} */ {code}", map=source_map)


@pytest.fixture
def transformer():
    return FakeTransformer()


@pytest.fixture
def pipeline(project, transformer):
    return TransformPipeline(transformer, CompilerOptionsResolver(project), ManifestCache(), ModuleTypeCache())


class TestLoadSync:
    """Commonjs loader routing."""

    def test_stylesheet_passthrough(self, pipeline, transformer, host, project, write):
        write(project / "a.css", "body {}")
        result = pipeline.load_sync(str(project / "a.css"), LoadContext(), host.load)
        assert result.text() == "body {}"
        assert transformer.calls == []

    def test_virtual_glob(self, pipeline, project, write):
        write(project / "src" / "routes" / "a.ts", "")
        virtual = VirtualGlobModule("./routes/*.ts", str(project / "src"))

        def no_load(path, context):
            raise AssertionError("virtual modules have no file to load")

        result = pipeline.load_sync(virtual.path, LoadContext(), no_load)

        assert result.format == "commonjs"
        assert result.short_circuit is True
        assert "require(" in result.text()

    def test_typed_source_full_transform(self, pipeline, transformer, host, project, write):
        write(project / "tsconfig.json", {"compilerOptions": {"jsx": "react-jsx"}})
        write(project / "src" / "a.ts", "const a: number = 1;")

        result = pipeline.load_sync(str(project / "src" / "a.ts"), LoadContext(), host.load)

        assert result.format == "commonjs"
        assert result.text().startswith("/* cjs */ const a: number = 1;")
        assert "sourceMappingURL=data:application/json;base64," in result.text()
        assert transformer.calls[0]["tsconfig_raw"] == {"compilerOptions": {"jsx": "react-jsx"}}
        assert pipeline.source_maps.get(str(project / "src" / "a.ts")) is not None

    def test_cjs_dynamic_import_rewrite(self, pipeline, transformer, host, project, write):
        write(project / "a.cjs", "module.exports = () => import('./b.mjs');")
        result = pipeline.load_sync(str(project / "a.cjs"), LoadContext(), host.load)
        assert UNWRAP_ES_MODULE in result.text()
        assert transformer.calls == []

    def test_cjs_without_dynamic_import_is_unchanged(self, pipeline, host, project, write):
        write(project / "a.cjs", "module.exports = 1;")
        result = pipeline.load_sync(str(project / "a.cjs"), LoadContext(), host.load)
        assert result.text() == "module.exports = 1;"

    def test_json_passthrough(self, pipeline, transformer, host, project, write):
        write(project / "data.json", '{"a": 1}')
        result = pipeline.load_sync(str(project / "data.json"), LoadContext(), host.load)
        assert result.text() == '{"a": 1}'
        assert transformer.calls == []

    def test_commonjs_dependency_untouched(self, pipeline, transformer, host, project, write):
        write(project / "node_modules" / "dep" / "package.json", {"name": "dep"})
        write(project / "node_modules" / "dep" / "index.js", "module.exports = 1;")

        result = pipeline.load_sync(str(project / "node_modules" / "dep" / "index.js"), LoadContext(), host.load)

        assert result.text() == "module.exports = 1;"
        assert transformer.calls == []

    def test_esm_dependency_compiled_to_commonjs(self, pipeline, transformer, host, project, write):
        write(project / "node_modules" / "dep" / "package.json", {"type": "module"})
        write(project / "node_modules" / "dep" / "index.js", "export default 1;")

        result = pipeline.load_sync(str(project / "node_modules" / "dep" / "index.js"), LoadContext(), host.load)

        assert result.text().startswith("/* cjs */ export default 1;")
        assert transformer.calls[0]["tsconfig_raw"] is None

    def test_esm_dependency_transform_failure_keeps_source(self, project, host, write):
        pipeline = TransformPipeline(
            FakeTransformer(fail=True), CompilerOptionsResolver(project), ManifestCache(), ModuleTypeCache()
        )
        write(project / "node_modules" / "dep" / "index.mjs", "export default 1;")

        result = pipeline.load_sync(str(project / "node_modules" / "dep" / "index.mjs"), LoadContext(), host.load)

        assert result.text() == "export default 1;"

    def test_malformed_dependency_manifest_keeps_source(self, pipeline, transformer, host, project, write):
        write(project / "node_modules" / "dep" / "package.json", "{not json")
        write(project / "node_modules" / "dep" / "index.js", "export default 1;")

        result = pipeline.load_sync(str(project / "node_modules" / "dep" / "index.js"), LoadContext(), host.load)

        assert result.text() == "export default 1;"
        assert transformer.calls == []

    def test_first_party_transform_failure_propagates(self, project, host, write):
        pipeline = TransformPipeline(
            FakeTransformer(fail=True), CompilerOptionsResolver(project), ManifestCache(), ModuleTypeCache()
        )
        write(project / "a.ts", "const = ;")
        with pytest.raises(TransformError):
            pipeline.load_sync(str(project / "a.ts"), LoadContext(), host.load)


class TestLoadAsync:
    """Module loader routing."""

    @pytest.mark.asyncio
    async def test_extensionless_file_is_raw_commonjs(self, pipeline, transformer, project, write):
        write(project / "bin" / "cli", "#!/usr/bin/env node\nrequire('./x');")

        async def no_load(path, context):
            raise AssertionError("extensionless files are read directly")

        result = await pipeline.load_async(str(project / "bin" / "cli"), LoadContext(), no_load)

        assert result.format == "commonjs"
        assert result.short_circuit is True
        assert result.text().startswith("#!/usr/bin/env node")
        assert transformer.calls == []

    @pytest.mark.asyncio
    async def test_virtual_glob(self, pipeline, project, write):
        write(project / "src" / "routes" / "a.ts", "")
        virtual = VirtualGlobModule("./routes/*.ts", str(project / "src"))

        result = await pipeline.load_async(virtual.path, LoadContext(), None)

        assert result.format == "module"
        assert "export default {" in result.text()

    @pytest.mark.asyncio
    async def test_typed_source_compiled_to_module(self, pipeline, transformer, host, project, write):
        write(project / "a.tsx", "export const A = () => <div />;")

        result = await pipeline.load_async(str(project / "a.tsx"), LoadContext(format="commonjs"), host.aload)

        assert result.format == "module"
        assert transformer.calls[0]["format"] == "esm"

    @pytest.mark.asyncio
    async def test_json_forced_and_transformed(self, pipeline, transformer, project, write):
        write(project / "data.json", '{"a": 1}')
        seen = {}

        async def default_load(path, context):
            seen["attributes"] = context.import_attributes
            return LoadResult(format=context.import_attributes.get("type", "commonjs"), source='{"a": 1}')

        result = await pipeline.load_async(str(project / "data.json"), LoadContext(), default_load)

        assert seen["attributes"] == {"type": "json"}
        assert result.format == "module"
        assert transformer.calls[0]["path"] == str(project / "data.json")

    @pytest.mark.asyncio
    async def test_module_script_gets_dynamic_import_rewrite(self, pipeline, transformer, host, project, write):
        write(project / "a.mjs", "const b = await import('./b.cjs');")

        result = await pipeline.load_async(str(project / "a.mjs"), LoadContext(), host.aload)

        assert result.format == "module"
        assert UNWRAP_ES_MODULE in result.text()
        assert transformer.calls == []

    @pytest.mark.asyncio
    async def test_commonjs_script_untouched(self, pipeline, transformer, host, project, write):
        write(project / "a.js", "module.exports = import('./b');")
        result = await pipeline.load_async(str(project / "a.js"), LoadContext(format="commonjs"), host.aload)
        assert result.text() == "module.exports = import('./b');"
        assert transformer.calls == []

    @pytest.mark.asyncio
    async def test_sync_default_load_accepted(self, pipeline, host, project, write):
        write(project / "a.css", "body {}")
        result = await pipeline.load_async(str(project / "a.css"), LoadContext(), host.load)
        assert result.text() == "body {}"

    @pytest.mark.asyncio
    async def test_builtin_passthrough(self, pipeline, host):
        result = await pipeline.load_async("node:fs", LoadContext(), host.aload)
        assert result.format == "builtin"
