"""Specifier resolution.

The engine layers alias, glob, workspace, paths-mapping and type-priority
strategies over an injected host resolver, then falls back through extension
and directory probing.
"""

from .classifier import classify
from .engine import ResolutionEngine
from .exports_map import resolve_exports
from .formats import detect_format
from .globs import VirtualGlobModule
from .steps import Found
from .steps import Missing

__all__ = [
    "Found",
    "Missing",
    "ResolutionEngine",
    "VirtualGlobModule",
    "classify",
    "detect_format",
    "resolve_exports",
]
