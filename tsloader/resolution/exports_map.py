"""Package ``exports`` map matching.

Follows the package-exports rules: exact subpath keys first, then the most
specific ``*`` pattern (longest prefix before the star, then longest key), then
legacy ``./dir/`` folder keys. Condition objects are walked in manifest order
and the first condition that is ``default`` or requested wins.
"""

from collections.abc import Iterable
from typing import Any


def _normalize_entry(entry: str) -> str:
    if entry in ("", "."):
        return "."
    if entry.startswith("./"):
        return entry
    return "./" + entry.lstrip("/")


def _is_subpath_map(exports: Any) -> bool:
    return isinstance(exports, dict) and any(key.startswith(".") for key in exports)


def _pattern_rank(key: str) -> tuple[int, int]:
    star = key.find("*")
    base_length = star + 1 if star != -1 else len(key)
    return (base_length, len(key))


def _targets(value: Any, conditions: frozenset[str], match: str | None, folder: bool) -> list[str]:
    """Expand a target value (string, fallback array, condition object, or null)."""
    if value is None:
        return []

    if isinstance(value, str):
        if match is None:
            return [value]
        if folder:
            return [value + match]
        return [value.replace("*", match)]

    if isinstance(value, list):
        results: list[str] = []
        for item in value:
            results.extend(_targets(item, conditions, match, folder))
        return results

    if isinstance(value, dict):
        for condition, nested in value.items():
            if condition == "default" or condition in conditions:
                found = _targets(nested, conditions, match, folder)
                if found:
                    return found
        return []

    return []


def resolve_exports(manifest: dict, entry: str, conditions: Iterable[str]) -> list[str]:
    """Resolve ``entry`` against the manifest's export map.

    Args:
        manifest: Parsed package.json
        entry: ``.`` or ``./subpath``
        conditions: Accepted conditions (``default`` is always accepted)

    Returns:
        Matching target paths relative to the package root, best first.
        Empty when the manifest has no ``exports`` or nothing matches.
    """
    exports = manifest.get("exports")
    if exports is None:
        return []

    accepted = frozenset(conditions) | {"default"}
    entry = _normalize_entry(entry)

    if not _is_subpath_map(exports):
        exports = {".": exports}

    if entry in exports:
        return _targets(exports[entry], accepted, None, False)

    best_key: str | None = None
    best_match = ""
    for key in exports:
        if "*" in key:
            prefix, suffix = key.split("*", 1)
            if not (entry.startswith(prefix) and entry.endswith(suffix)):
                continue
            if len(entry) < len(prefix) + len(suffix):
                continue
            match = entry[len(prefix) : len(entry) - len(suffix)]
        elif key.endswith("/") and entry.startswith(key):
            match = entry[len(key) :]
        else:
            continue

        if best_key is None or _pattern_rank(key) > _pattern_rank(best_key):
            best_key = key
            best_match = match

    if best_key is None:
        return []
    return _targets(exports[best_key], accepted, best_match, "*" not in best_key)
