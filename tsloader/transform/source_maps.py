"""Source map bookkeeping.

Transformed files keep their maps here, keyed by original path, and carry an
inline ``sourceMappingURL`` so stack traces and debuggers report original
positions.
"""

import base64
import json
import re

from .base import TransformResult

_INLINE_MAP = re.compile(
    r"\n?//# sourceMappingURL=data:application/json;(?:charset=utf-8;)?base64,([A-Za-z0-9+/=]+)\s*$"
)


def split_inline_map(code: str) -> TransformResult:
    """Separate a trailing inline source map comment from ``code``."""
    match = _INLINE_MAP.search(code)
    if match is None:
        return TransformResult(code=code)
    source_map = base64.b64decode(match.group(1)).decode("utf-8")
    return TransformResult(code=code[: match.start()] + "\n", map=source_map)


class SourceMapStore:
    """Maps produced by the transformer, by original file path."""

    def __init__(self):
        self._maps: dict[str, dict] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._maps

    def get(self, path: str) -> dict | None:
        return self._maps.get(path)

    def apply(self, result: TransformResult, path: str) -> str:
        """Record the map for ``path`` and return code with an inline map comment."""
        if not result.map:
            return result.code

        source_map = json.loads(result.map)
        source_map.setdefault("file", path)
        self._maps[path] = source_map

        encoded = base64.b64encode(json.dumps(source_map).encode("utf-8")).decode("ascii")
        code = result.code if result.code.endswith("\n") else result.code + "\n"
        return f"{code}//# sourceMappingURL=data:application/json;base64,{encoded}\n"
