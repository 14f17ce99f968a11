"""Typed-source module loader: specifier resolution and load-time transforms."""

from .config import LoaderSettings
from .config import load_settings
from .errors import AliasResolutionError
from .errors import ConfigurationError
from .errors import ExportNotDefinedError
from .errors import LoaderError
from .errors import ManifestParseError
from .errors import ModuleNotFoundError
from .errors import NotFoundError
from .errors import TransformError
from .errors import UnsupportedDirectoryImportError
from .hooks import LoaderHooks
from .host import FilesystemHost
from .models import LoadContext
from .models import LoadResult
from .models import ResolutionContext
from .models import ResolvedModule
from .resolution import ResolutionEngine

__all__ = [
    "AliasResolutionError",
    "ConfigurationError",
    "ExportNotDefinedError",
    "FilesystemHost",
    "LoadContext",
    "LoadResult",
    "LoaderError",
    "LoaderHooks",
    "LoaderSettings",
    "ManifestParseError",
    "ModuleNotFoundError",
    "NotFoundError",
    "ResolutionContext",
    "ResolutionEngine",
    "ResolvedModule",
    "TransformError",
    "UnsupportedDirectoryImportError",
    "load_settings",
]
