"""Glob imports as virtual modules.

``import routes from 'glob:./routes/*.ts'`` resolves to a synthetic identity
``<importer-dir>/__virtual__:<quoted pattern>`` without touching the
filesystem. Only when that identity is loaded is the pattern expanded and an
aggregate module synthesised, keyed by importer-relative path.
"""

import glob
import json
import os
from dataclasses import dataclass
from urllib.parse import quote
from urllib.parse import unquote

from ..errors import AliasResolutionError
from ..models import VIRTUAL_PREFIX
from ..models import ModuleKind
from ..models import is_virtual_path
from .classifier import GLOB_PREFIX


@dataclass(frozen=True)
class VirtualGlobModule:
    """Synthetic module standing for every file matching ``pattern``."""

    pattern: str
    importer_dir: str

    @property
    def path(self) -> str:
        return os.path.join(self.importer_dir, VIRTUAL_PREFIX + quote(self.pattern, safe=""))

    @classmethod
    def from_specifier(cls, specifier: str, importer: str | None) -> "VirtualGlobModule":
        if importer is None:
            raise AliasResolutionError(specifier, "glob imports need an importing file")
        return cls(pattern=specifier[len(GLOB_PREFIX) :], importer_dir=os.path.dirname(importer))

    @classmethod
    def from_path(cls, path: str) -> "VirtualGlobModule":
        if not is_virtual_path(path):
            raise ValueError(f"Not a virtual glob path: {path}")
        name = os.path.basename(path)[len(VIRTUAL_PREFIX) :]
        return cls(pattern=unquote(name), importer_dir=os.path.dirname(path))

    def matches(self) -> list[str]:
        """Expand the pattern against the filesystem, sorted for stable output."""
        full_pattern = os.path.normpath(os.path.join(glob.escape(self.importer_dir), self.pattern))
        return sorted(p for p in glob.glob(full_pattern, recursive=True) if os.path.isfile(p))

    def contents(self, module_kind: ModuleKind) -> str:
        """Synthesise the aggregate module source."""
        files = self.matches()
        keys = ["./" + os.path.relpath(p, self.importer_dir).replace(os.sep, "/") for p in files]

        if module_kind == "commonjs":
            lines = ["module.exports = {"]
            lines += [f"\t{json.dumps(key)}: require({json.dumps(path)})," for key, path in zip(keys, files)]
            lines.append("};")
            return "\n".join(lines) + "\n"

        lines = [f"import * as __glob_{i} from {json.dumps(path)};" for i, path in enumerate(files)]
        lines.append("export default {")
        lines += [f"\t{json.dumps(key)}: __glob_{i}," for i, key in enumerate(keys)]
        lines.append("};")
        return "\n".join(lines) + "\n"
