"""Pytest configuration for tsloader tests.

Fixtures build small on-disk project trees under ``tmp_path``.
"""

import json
from pathlib import Path

import pytest
from tsloader.host import FilesystemHost


def _write(path: Path, content: str | dict = "") -> Path:
    """Write ``content`` (JSON-encoded when a dict) creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(content) if isinstance(content, dict) else content
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def write():
    """File writer: ``write(path, content)``."""
    return _write


@pytest.fixture
def project(tmp_path):
    """Empty project root (resolved, so paths compare equal)."""
    return tmp_path.resolve()


@pytest.fixture
def host(project):
    """Strict filesystem host rooted at the project."""
    return FilesystemHost(project)
