"""Source transformer boundary.

The transformer is a black box: source text + file path + options in,
transformed text (and optionally a source map) out, or a TransformError.
"""

from dataclasses import dataclass
from typing import Any
from typing import Literal
from typing import Protocol

OutputFormat = Literal["cjs", "esm"]


@dataclass(frozen=True)
class TransformResult:
    """Transformed code with an optional JSON source map."""

    code: str
    map: str | None = None


class SourceTransformer(Protocol):
    """Type-stripping / syntax transform engine."""

    def transform(
        self,
        code: str,
        path: str,
        *,
        format: OutputFormat | None = None,
        tsconfig_raw: dict[str, Any] | None = None,
    ) -> TransformResult:
        """Transform ``code`` read from ``path``.

        Raises:
            TransformError: The source cannot be transformed
        """
        ...
