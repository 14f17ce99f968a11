"""Tests for source map bookkeeping."""

import base64
import json

from tsloader.transform.base import TransformResult
from tsloader.transform.source_maps import SourceMapStore
from tsloader.transform.source_maps import split_inline_map

SOURCE_MAP = {"version": 3, "sources": ["a.ts"], "mappings": "AAAA"}


def inline(source_map: dict) -> str:
    encoded = base64.b64encode(json.dumps(source_map).encode()).decode()
    return f"//# sourceMappingURL=data:application/json;base64,{encoded}"


class TestSplitInlineMap:
    def test_split(self):
        result = split_inline_map("var a = 1;\n" + inline(SOURCE_MAP) + "\n")
        assert result.code == "var a = 1;\n"
        assert json.loads(result.map) == SOURCE_MAP

    def test_no_map(self):
        assert split_inline_map("var a = 1;\n") == TransformResult(code="var a = 1;\n")


class TestSourceMapStore:
    def test_apply_records_and_inlines(self):
        store = SourceMapStore()
        code = store.apply(TransformResult(code="var a = 1;", map=json.dumps(SOURCE_MAP)), "/src/a.ts")

        assert store.get("/src/a.ts")["file"] == "/src/a.ts"
        assert "/src/a.ts" in store
        recovered = split_inline_map(code)
        assert recovered.code == "var a = 1;\n"
        assert json.loads(recovered.map)["sources"] == ["a.ts"]

    def test_apply_without_map(self):
        store = SourceMapStore()
        assert store.apply(TransformResult(code="x"), "/src/a.ts") == "x"
        assert store.get("/src/a.ts") is None
