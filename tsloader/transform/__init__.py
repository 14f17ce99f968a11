"""Load-time source transforms."""

from .base import SourceTransformer
from .base import TransformResult
from .dynamic_import import rewrite_dynamic_imports
from .esbuild import EsbuildTransformer
from .pipeline import TransformPipeline
from .source_maps import SourceMapStore

__all__ = [
    "EsbuildTransformer",
    "SourceMapStore",
    "SourceTransformer",
    "TransformPipeline",
    "TransformResult",
    "rewrite_dynamic_imports",
]
