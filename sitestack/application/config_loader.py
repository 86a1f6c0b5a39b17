"""Layered build configuration.

Precedence (highest wins): CLI overrides > project file > user file > model defaults.

Files:
  - user:    <user_home>/.sitestack/config.yml
  - project: <project_root>/.sitestack/config.yml
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sitestack.application.config_models import BuildConfig
from sitestack.domain.constants import CONFIG_DIRNAME, CONFIG_FILENAME

logger = logging.getLogger(__name__)


class ConfigLoadError(Exception):
    def __init__(self, message: str, *, path: Path | None = None, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        return self.message if self.path is None else f"{self.message}: {self.path}"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge ``overlay`` into a copy of ``base``; nested mappings merge, lists and scalars replace."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def load_yaml_mapping(path: Path, *, missing_ok: bool = True) -> dict[str, Any]:
    """Read a YAML file whose root must be a mapping; an empty file is ``{}``."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        if missing_ok:
            return {}
        raise ConfigLoadError("File not found", path=path, cause=e) from e
    except OSError as e:  # pragma: no cover
        raise ConfigLoadError("Failed to read config file", path=path, cause=e) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigLoadError("Malformed YAML", path=path, cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError("YAML root must be a mapping", path=path)

    logger.debug(f"Loaded config layer: {path}")
    return data


def config_paths(project_root: Path, user_home: Path) -> list[Path]:
    """Config files in increasing precedence."""
    return [
        user_home / CONFIG_DIRNAME / CONFIG_FILENAME,
        project_root / CONFIG_DIRNAME / CONFIG_FILENAME,
    ]


def load_config(*, project_root: Path | None = None, user_home: Path | None = None) -> dict[str, Any]:
    """Merge model defaults with the user and project config files."""
    cfg: dict[str, Any] = BuildConfig().model_dump()
    for path in config_paths(project_root or Path.cwd(), user_home or Path.home()):
        cfg = _deep_merge(cfg, load_yaml_mapping(path))
    return cfg


def load_build_config(
    *,
    project_root: Path | None = None,
    user_home: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> BuildConfig:
    """Load, merge CLI overrides (None values skipped) and validate the build config."""
    cfg = load_config(project_root=project_root, user_home=user_home)
    cfg = _deep_merge(cfg, {k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return BuildConfig.model_validate(cfg)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid config ({e.error_count()} errors)", cause=e) from e
