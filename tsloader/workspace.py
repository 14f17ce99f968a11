"""Workspace package discovery for namespaced aliases.

Builds the read-only slug -> category table from the workspace descriptor
(``pnpm-workspace.yaml``). Each ``<category>/*`` entry names a directory whose
children are workspace packages; the package ``foo`` in ``packages/foo`` is
then importable as ``<namespace>/foo``.
"""

import logging
from collections.abc import Iterator
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

import yaml

from .errors import AliasResolutionError
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _category_from_pattern(pattern: str) -> str | None:
    """Map a workspace glob (``packages/*``) to its category directory."""
    if pattern.startswith("!"):
        return None
    for suffix in ("/**", "/*"):
        if pattern.endswith(suffix):
            return pattern[: -len(suffix)].strip("/") or None
    return None


class WorkspaceAliasTable(Mapping[str, str]):
    """Immutable mapping from package slug to category directory name."""

    def __init__(self, root: Path, categories: dict[str, list[str]]):
        """Initialize table.

        Args:
            root: Workspace root directory
            categories: Category directory name -> package slugs
        """
        self.root = root
        self.categories = MappingProxyType({name: tuple(slugs) for name, slugs in categories.items()})
        self._slug_to_category = MappingProxyType(
            {slug: category for category, slugs in categories.items() for slug in slugs}
        )

    def __getitem__(self, slug: str) -> str:
        return self._slug_to_category[slug]

    def __iter__(self) -> Iterator[str]:
        return iter(self._slug_to_category)

    def __len__(self) -> int:
        return len(self._slug_to_category)

    def category_for(self, slug: str, specifier: str) -> str:
        """Return the category of ``slug``; unknown slugs are a hard error."""
        category = self._slug_to_category.get(slug)
        if category is None:
            raise AliasResolutionError(specifier, f"no workspace package named '{slug}'")
        return category

    def package_dir(self, slug: str, specifier: str) -> Path:
        return self.root / self.category_for(slug, specifier) / slug

    @classmethod
    def discover(cls, root: Path, descriptor: str = "pnpm-workspace.yaml") -> "WorkspaceAliasTable | None":
        """Enumerate workspace membership from the descriptor under ``root``.

        Categories missing on disk are skipped. Member directories without a
        package.json are reported and left out of the table.

        Returns:
            Table, or None when no descriptor exists
        """
        descriptor_path = root / descriptor
        if not descriptor_path.is_file():
            logger.debug(f"[workspace] no descriptor at {descriptor_path}")
            return None

        try:
            data = yaml.safe_load(descriptor_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid workspace descriptor: {e}", str(descriptor_path)) from e

        patterns = data.get("packages", []) if isinstance(data, dict) else []
        if not isinstance(patterns, list):
            raise ConfigurationError("'packages' must be a list of globs", str(descriptor_path))

        categories: dict[str, list[str]] = {}
        for pattern in patterns:
            category = _category_from_pattern(str(pattern))
            if category is None:
                logger.debug(f"[workspace] ignoring pattern {pattern!r}")
                continue

            category_dir = root / category
            if not category_dir.is_dir():
                continue

            slugs = []
            for child in sorted(category_dir.iterdir()):
                if child.name.startswith(".") or not child.is_dir():
                    continue
                if not (child / "package.json").is_file():
                    logger.warning(f"[workspace] package at {child} has no package.json, skipping")
                    continue
                slugs.append(child.name)
            categories[category] = slugs

        table = cls(root, categories)
        logger.debug(f"[workspace] {len(table)} packages in {len(categories)} categories")
        return table
