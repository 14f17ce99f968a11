"""Error taxonomy for specifier resolution and loading.

Errors carry a human-readable message plus a ``details`` dict so callers
(including the CLI) can render structured diagnostics.

Only the ``NotFoundError`` family is ever swallowed to advance a fallback
chain. Everything else propagates immediately.
"""


class LoaderError(Exception):
    """Base exception for loader errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def with_message(self, message: str) -> "LoaderError":
        """Return a copy of this error with a rewritten message."""
        clone = self.__class__.__new__(self.__class__)
        LoaderError.__init__(clone, message, dict(self.details))
        clone.__cause__ = self.__cause__
        return clone

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        """Convert to a serialisable error payload."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(LoaderError):
    """A strategy produced no module. Fallback chains may continue past it."""


class ModuleNotFoundError(NotFoundError):
    """No resolver strategy produced an existing file."""

    def __init__(self, specifier: str, importer: str | None = None, message: str | None = None):
        where = f" imported from {importer}" if importer else ""
        super().__init__(
            message or f"Cannot find module '{specifier}'{where}",
            details={"specifier": specifier, "importer": importer},
        )


class UnsupportedDirectoryImportError(NotFoundError):
    """The specifier names a directory, which the host cannot import directly."""

    def __init__(self, specifier: str, importer: str | None = None):
        where = f" imported from {importer}" if importer else ""
        super().__init__(
            f"Directory import '{specifier}' is not supported{where}",
            details={"specifier": specifier, "importer": importer},
        )


class ExportNotDefinedError(NotFoundError):
    """A manifest exists but no export entry matches the requested subpath."""

    def __init__(self, subpath: str, manifest_path: str):
        super().__init__(
            f"Package subpath '{subpath}' is not defined by \"exports\" in {manifest_path}",
            details={"subpath": subpath, "manifest": manifest_path},
        )


class AliasResolutionError(LoaderError):
    """Unknown alias slug or unparseable alias grammar."""

    def __init__(self, specifier: str, reason: str):
        super().__init__(
            f"Cannot resolve alias '{specifier}': {reason}",
            details={"specifier": specifier, "reason": reason},
        )


class ManifestParseError(LoaderError):
    """A manifest or configuration file is not valid JSON."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Error parsing: {path} ({reason})",
            details={"path": path, "reason": reason},
        )


class ConfigurationError(LoaderError):
    """Invalid loader configuration."""

    def __init__(self, message: str, config_file: str | None = None):
        super().__init__(message, details={"config_file": config_file})


class TransformError(LoaderError):
    """The source transformer rejected a file."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Failed to transform {path}: {reason}",
            details={"file": path, "reason": reason},
        )
