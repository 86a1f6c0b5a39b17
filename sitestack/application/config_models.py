"""Build configuration models.

Config structure (.sitestack/config.yml):
    source_dir: src
    output_dir: dist
    output_extension: .html
    exclude:
      - ".*"
    data:
      site_name: Example
    rename:
      - pattern: "^index$"
        replacement: "home"

Rename rules are tried in order; the first one whose pattern matches rewrites
the path. ``output_extension`` is appended afterwards to paths that have no
extension.
"""

import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitestack.domain import paths
from sitestack.domain.constants import DEFAULT_OUTPUT_DIR, DEFAULT_SOURCE_DIR


class RenameRule(BaseModel):
    """Regex rewrite applied to virtual output paths."""

    model_config = ConfigDict(extra="forbid")

    pattern: str
    replacement: str

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid rename pattern '{value}': {e}") from e
        return value

    def apply(self, path: str) -> str | None:
        """Rewritten path, or None if the pattern does not match."""
        if re.search(self.pattern, path) is None:
            return None
        return re.sub(self.pattern, self.replacement, path)


class BuildConfig(BaseModel):
    """Top-level build configuration."""

    model_config = ConfigDict(extra="forbid")

    source_dir: str = DEFAULT_SOURCE_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR
    output_extension: str | None = None
    exclude: list[str] = Field(default_factory=lambda: [".*"])
    data: dict[str, Any] = Field(default_factory=dict)
    rename: list[RenameRule] = Field(default_factory=list)

    @field_validator("output_extension")
    @classmethod
    def _dotted(cls, value: str | None) -> str | None:
        if value and not value.startswith("."):
            return f".{value}"
        return value or None


def build_rename(config: BuildConfig) -> Callable[[str], str | None] | None:
    """Compose the rename hook for a config, or None if it rewrites nothing."""
    if not config.rename and not config.output_extension:
        return None

    def rename(path: str) -> str | None:
        renamed = path
        for rule in config.rename:
            rewritten = rule.apply(path)
            if rewritten is not None:
                renamed = rewritten
                break

        if config.output_extension and not paths.extension(renamed):
            renamed = f"{renamed}{config.output_extension}"

        return renamed if renamed != path else None

    return rename
