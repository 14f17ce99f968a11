"""Specifier classification.

Pure function, no I/O. First match wins:

1. URL scheme (``node:fs``, ``https://...``) - ``file:`` URLs count as absolute paths
2. ``~`` prefix - tilde alias
3. ``glob:<pattern>`` - glob aggregation
4. ``<namespace>/`` prefix - workspace-internal alias
5. ``./``, ``../``, ``/`` - relative / absolute path
6. anything else - bare package specifier
"""

import re
from urllib.parse import unquote
from urllib.parse import urlparse

from ..models import Specifier
from ..models import SpecifierKind

GLOB_PREFIX = "glob:"

_URL_SCHEME = re.compile(r"^(?!glob:)[a-zA-Z][a-zA-Z0-9+.\-]+:")
_PATH_PATTERN = re.compile(r"^\.{0,2}/")


def is_glob_specifier(raw: str) -> bool:
    return raw.startswith(GLOB_PREFIX) and len(raw) > len(GLOB_PREFIX)


def file_url_to_path(raw: str) -> str:
    """Convert a ``file://`` URL to a filesystem path; other strings are returned as-is."""
    if not raw.startswith("file:"):
        return raw
    return unquote(urlparse(raw).path)


def classify(raw: str, workspace_namespace: str | None = None) -> Specifier:
    """Classify a raw specifier.

    Args:
        raw: Specifier as written by the importer
        workspace_namespace: Namespace prefix of workspace packages (e.g. ``@t``)

    Returns:
        Classified Specifier
    """
    if raw.startswith("file:"):
        return Specifier(raw, SpecifierKind.ABSOLUTE)
    if _URL_SCHEME.match(raw):
        return Specifier(raw, SpecifierKind.URL)
    if raw.startswith("~"):
        return Specifier(raw, SpecifierKind.TILDE_ALIAS)
    if is_glob_specifier(raw):
        return Specifier(raw, SpecifierKind.GLOB)
    if workspace_namespace and raw.startswith(f"{workspace_namespace}/"):
        return Specifier(raw, SpecifierKind.WORKSPACE_ALIAS)
    if _PATH_PATTERN.match(raw):
        kind = SpecifierKind.ABSOLUTE if raw.startswith("/") else SpecifierKind.RELATIVE
        return Specifier(raw, kind)
    return Specifier(raw, SpecifierKind.BARE)
