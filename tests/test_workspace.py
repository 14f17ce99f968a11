"""Tests for workspace package discovery."""

import logging

import pytest
from tsloader.errors import AliasResolutionError
from tsloader.errors import ConfigurationError
from tsloader.workspace import WorkspaceAliasTable


@pytest.fixture
def workspace_root(project, write):
    write(project / "pnpm-workspace.yaml", "packages:\n  - 'packages/*'\n  - 'apps/**'\n  - '!packages/skip'\n")
    write(project / "packages" / "utils" / "package.json", {"name": "@t/utils"})
    write(project / "packages" / "ui" / "package.json", {"name": "@t/ui"})
    write(project / "apps" / "web" / "package.json", {"name": "@t/web"})
    return project


class TestDiscover:
    """Descriptor parsing and membership rules."""

    def test_slug_to_category(self, workspace_root):
        table = WorkspaceAliasTable.discover(workspace_root)

        assert dict(table) == {"utils": "packages", "ui": "packages", "web": "apps"}
        assert table.package_dir("ui", "@t/ui") == workspace_root / "packages" / "ui"

    def test_package_without_manifest_is_skipped(self, workspace_root, caplog):
        (workspace_root / "packages" / "ghost").mkdir()

        with caplog.at_level(logging.WARNING):
            table = WorkspaceAliasTable.discover(workspace_root)

        assert "ghost" not in table
        assert (workspace_root / "packages" / "ghost").is_dir()
        assert "ghost" in caplog.text

    def test_hidden_and_file_entries_are_ignored(self, workspace_root, write):
        write(workspace_root / "packages" / ".cache" / "package.json", {})
        write(workspace_root / "packages" / "README.md", "# packages")

        table = WorkspaceAliasTable.discover(workspace_root)

        assert set(table) == {"utils", "ui", "web"}

    def test_missing_category_directory(self, project, write):
        write(project / "pnpm-workspace.yaml", "packages:\n  - tools/*\n")
        table = WorkspaceAliasTable.discover(project)
        assert table is not None
        assert len(table) == 0

    def test_no_descriptor(self, project):
        assert WorkspaceAliasTable.discover(project) is None

    def test_invalid_descriptor(self, project, write):
        write(project / "pnpm-workspace.yaml", "packages: [unclosed\n")
        with pytest.raises(ConfigurationError):
            WorkspaceAliasTable.discover(project)

    def test_unknown_slug(self, workspace_root):
        table = WorkspaceAliasTable.discover(workspace_root)
        with pytest.raises(AliasResolutionError) as exc_info:
            table.category_for("nope", "@t/nope")
        assert "nope" in str(exc_info.value)

    def test_table_is_read_only(self, workspace_root):
        table = WorkspaceAliasTable.discover(workspace_root)
        with pytest.raises(TypeError):
            table.categories["new"] = ("x",)
