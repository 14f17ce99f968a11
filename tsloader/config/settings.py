"""Loader settings discovery.

Resolution order for each setting (first wins):
1. Environment variables (TSLOADER_ROOT, TSLOADER_TSCONFIG_PATH, TSLOADER_NAMESPACE)
2. Project settings file (<root>/.tsloader.yaml)
3. Auto-discovery by walking up from the working directory
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

from ..errors import ConfigurationError
from .tsconfig import CONFIG_NAME
from .tsconfig import find_up

logger = logging.getLogger(__name__)

ENV_ROOT = "TSLOADER_ROOT"
ENV_TSCONFIG = "TSLOADER_TSCONFIG_PATH"
ENV_NAMESPACE = "TSLOADER_NAMESPACE"
SETTINGS_FILE = ".tsloader.yaml"
DEFAULT_DESCRIPTOR = "pnpm-workspace.yaml"


class LoaderSettings(BaseModel):
    """Static configuration for one resolution engine."""

    repository_root: Path = Field(..., description="Root that tilde aliases and workspace packages hang off")
    tsconfig_path: Path | None = Field(None, description="Config declaring paths mapping and compiler options")
    workspace_descriptor: str = Field(DEFAULT_DESCRIPTOR, description="Workspace membership file under the root")
    workspace_namespace: str = Field("@t", description="Specifier prefix of workspace-internal packages")
    conditions: list[str] = Field(default_factory=list, description="Extra export-map conditions")


class _SettingsFile(BaseModel):
    workspace_descriptor: str | None = None
    workspace_namespace: str | None = None
    tsconfig: str | None = None
    conditions: list[str] | None = None


def _read_settings_file(path: Path) -> _SettingsFile:
    if not path.is_file():
        return _SettingsFile()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return _SettingsFile.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(f"Invalid settings file: {e}", str(path)) from e


def load_settings(cwd: Path | None = None, environ: Mapping[str, str] | None = None) -> LoaderSettings:
    """Discover settings for the project containing ``cwd``.

    Args:
        cwd: Working directory to discover from (default: Path.cwd())
        environ: Environment mapping (default: os.environ)

    Returns:
        LoaderSettings

    Raises:
        ConfigurationError: An explicitly configured file does not exist or is invalid
    """
    env = os.environ if environ is None else environ
    cwd = (cwd or Path.cwd()).resolve()

    tsconfig_path: Path | None = None
    if env_tsconfig := env.get(ENV_TSCONFIG):
        tsconfig_path = (cwd / env_tsconfig).resolve()
        if not tsconfig_path.is_file():
            raise ConfigurationError(f"{ENV_TSCONFIG} points to a missing file: {tsconfig_path}", str(tsconfig_path))

    if env_root := env.get(ENV_ROOT):
        root = (cwd / env_root).resolve()
    elif descriptor := find_up(cwd, DEFAULT_DESCRIPTOR):
        root = descriptor.parent
    elif tsconfig_path is not None:
        root = tsconfig_path.parent
    else:
        found = find_up(cwd, CONFIG_NAME)
        root = found.parent if found else cwd

    file_settings = _read_settings_file(root / SETTINGS_FILE)

    if tsconfig_path is None and file_settings.tsconfig:
        tsconfig_path = (root / file_settings.tsconfig).resolve()
        if not tsconfig_path.is_file():
            raise ConfigurationError(f"tsconfig not found: {tsconfig_path}", str(root / SETTINGS_FILE))
    if tsconfig_path is None:
        tsconfig_path = find_up(cwd, CONFIG_NAME)

    settings = LoaderSettings(
        repository_root=root,
        tsconfig_path=tsconfig_path,
        workspace_descriptor=file_settings.workspace_descriptor or DEFAULT_DESCRIPTOR,
        workspace_namespace=env.get(ENV_NAMESPACE) or file_settings.workspace_namespace or "@t",
        conditions=file_settings.conditions or [],
    )
    logger.debug(f"[config] root={settings.repository_root} tsconfig={settings.tsconfig_path}")
    return settings
