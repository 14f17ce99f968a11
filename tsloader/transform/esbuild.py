"""esbuild-backed source transformer.

Runs the ``esbuild`` executable once per file, feeding source on stdin. The
inline source map esbuild appends is split back out so the pipeline can record
it.
"""

import json
import logging
import os
import subprocess
from typing import Any

from ..errors import TransformError
from .base import OutputFormat
from .base import TransformResult
from .source_maps import split_inline_map

logger = logging.getLogger(__name__)

LOADERS = {
    ".ts": "ts",
    ".mts": "ts",
    ".cts": "ts",
    ".tsx": "tsx",
    ".jsx": "jsx",
    ".json": "json",
    ".js": "js",
    ".mjs": "js",
    ".cjs": "js",
}


class EsbuildTransformer:
    """SourceTransformer that shells out to esbuild."""

    def __init__(self, executable: str = "esbuild", target: str = "node18", timeout: float = 30.0):
        self.executable = executable
        self.target = target
        self.timeout = timeout

    def command(
        self,
        path: str,
        *,
        format: OutputFormat | None = None,
        tsconfig_raw: dict[str, Any] | None = None,
    ) -> list[str]:
        """Build the esbuild argument vector for ``path``."""
        loader = LOADERS.get(os.path.splitext(path)[1], "js")
        cmd = [
            self.executable,
            f"--loader={loader}",
            f"--sourcefile={path}",
            "--sourcemap=inline",
            f"--target={self.target}",
            "--platform=node",
        ]
        if format:
            cmd.append(f"--format={format}")
        if tsconfig_raw:
            cmd.append(f"--tsconfig-raw={json.dumps(tsconfig_raw)}")
        return cmd

    def transform(
        self,
        code: str,
        path: str,
        *,
        format: OutputFormat | None = None,
        tsconfig_raw: dict[str, Any] | None = None,
    ) -> TransformResult:
        cmd = self.command(path, format=format, tsconfig_raw=tsconfig_raw)
        logger.debug(f"[transform] esbuild {path} format={format}")
        try:
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TransformError(path, f"esbuild executable not found: {self.executable}") from e
        except subprocess.TimeoutExpired as e:
            raise TransformError(path, f"esbuild timed out after {self.timeout}s") from e

        if result.returncode != 0:
            raise TransformError(path, result.stderr.strip() or f"esbuild exited with {result.returncode}")

        return split_inline_map(result.stdout)
