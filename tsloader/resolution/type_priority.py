"""Typed-source counterparts of a requested specifier.

A typed importer asking for ``./util.js`` (or ``./util``) means the source
file ``./util.ts`` when one exists, not a stale compiled sibling.
"""

import posixpath

COUNTERPARTS: dict[str, tuple[str, ...]] = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

# Extensions that already name a concrete, non-compiled artifact.
_FINAL_EXTENSIONS = frozenset({".ts", ".tsx", ".mts", ".cts", ".json", ".node", ".css", ".wasm"})

_EXTENSIONLESS = (".ts", ".tsx")


def typed_counterparts(specifier: str, is_path: bool) -> list[str]:
    """Candidate typed-source specifiers for ``specifier``, in priority order.

    Args:
        specifier: Literal specifier (relative, absolute or bare)
        is_path: Whether the specifier is path-like; only path-like specifiers
            without a recognised extension get extensions appended

    Returns:
        Counterpart specifiers; empty when there is nothing to promote
    """
    if not specifier or specifier.endswith("/"):
        return []

    _, ext = posixpath.splitext(posixpath.basename(specifier))
    if ext in COUNTERPARTS:
        stem = specifier[: -len(ext)]
        return [stem + typed for typed in COUNTERPARTS[ext]]

    if ext in _FINAL_EXTENSIONS or not is_path:
        return []
    return [specifier + typed for typed in _EXTENSIONLESS]
