"""Configuration: loader settings and tsconfig handling."""

from .settings import LoaderSettings
from .settings import load_settings
from .tsconfig import CompilerOptionsResolver
from .tsconfig import PathsMappingIndex
from .tsconfig import TsconfigFile
from .tsconfig import load_tsconfig

__all__ = [
    "CompilerOptionsResolver",
    "LoaderSettings",
    "PathsMappingIndex",
    "TsconfigFile",
    "load_settings",
    "load_tsconfig",
]
