"""Tests for module format detection and typed counterparts."""

import pytest
from tsloader.manifests import ManifestCache
from tsloader.manifests import ModuleTypeCache
from tsloader.resolution.formats import detect_format
from tsloader.resolution.steps import run_manifest_only
from tsloader.resolution.type_priority import typed_counterparts


def detect(path, types, manifests=None):
    return run_manifest_only(detect_format(str(path), types), manifests or ManifestCache())


class TestDetectFormat:
    """Extension mapping and package-scope walk."""

    @pytest.mark.parametrize(
        ("name", "fmt"),
        [
            ("data.json", "json"),
            ("a.mjs", "module"),
            ("a.mts", "module"),
            ("a.cjs", "commonjs"),
            ("a.cts", "commonjs"),
        ],
    )
    def test_unambiguous_extensions(self, project, name, fmt):
        types = ModuleTypeCache()
        assert detect(project / name, types) == fmt
        assert str(project) not in types

    def test_unknown_extension_is_left_to_host(self, project):
        assert detect(project / "style.css", ModuleTypeCache()) is None

    def test_nearest_declared_type(self, project, write):
        write(project / "pkg" / "package.json", {"type": "module"})
        write(project / "pkg" / "src" / "package.json", {"name": "no-type-here"})

        types = ModuleTypeCache()
        assert detect(project / "pkg" / "src" / "a.ts", types) == "module"
        assert types.get(str(project / "pkg" / "src")) == "module"
        assert types.get(str(project / "pkg")) == "module"

    def test_defaults_to_commonjs_at_dependency_boundary(self, project, write):
        write(project / "package.json", {"type": "module"})
        write(project / "node_modules" / "dep" / "package.json", {"name": "dep"})

        assert detect(project / "node_modules" / "dep" / "index.js", ModuleTypeCache()) == "commonjs"

    def test_siblings_reuse_cached_walk(self, project, write):
        write(project / "pkg" / "package.json", {"type": "commonjs"})
        types = ModuleTypeCache()
        manifests = ManifestCache()

        detect(project / "pkg" / "a.ts", types, manifests)
        reads = len(manifests)
        assert detect(project / "pkg" / "b.tsx", types, manifests) == "commonjs"
        assert len(manifests) == reads


class TestTypedCounterparts:
    """Compiled-extension to typed-extension promotion."""

    @pytest.mark.parametrize(
        ("specifier", "expected"),
        [
            ("./util.js", ["./util.ts", "./util.tsx"]),
            ("./view.jsx", ["./view.tsx"]),
            ("./mod.mjs", ["./mod.mts"]),
            ("./mod.cjs", ["./mod.cts"]),
            ("./util", ["./util.ts", "./util.tsx"]),
            ("./util.ts", []),
            ("./data.json", []),
            ("./dir/", []),
        ],
    )
    def test_path_specifiers(self, specifier, expected):
        assert typed_counterparts(specifier, is_path=True) == expected

    def test_bare_specifiers_only_swap_known_extensions(self):
        assert typed_counterparts("lodash", is_path=False) == []
        assert typed_counterparts("pkg/file.js", is_path=False) == ["pkg/file.ts", "pkg/file.tsx"]

    def test_dotted_directory_names(self):
        assert typed_counterparts("./v1.2/util", is_path=True) == ["./v1.2/util.ts", "./v1.2/util.tsx"]
