"""
Argument and path validation for sitestack.

Provides shared validation for:
- Registration and render arguments (paths, sources, contexts)
- Output path safety before anything is written to disk

Validation failures are programming errors on the caller's side and are never
recovered from inside the library.
"""

import posixpath
from pathlib import Path
from typing import Any

from sitestack.domain.errors import ContextValidationError


class PathValidationError(ContextValidationError):
    """Raised when path validation fails."""
    pass


def validate_string(value: Any, label: str = "value") -> str:
    if not isinstance(value, str):
        raise ContextValidationError(
            f"Expected {label} to be a string, got {type(value).__name__}"
        )
    return value


def validate_truthy_string(value: Any, label: str = "value") -> str:
    validate_string(value, label)
    if not value:
        raise ContextValidationError(f"Expected {label} to be a non-empty string")
    return value


def validate_writable(value: Any, label: str = "context") -> dict:
    if not isinstance(value, dict):
        raise ContextValidationError(
            f"Expected {label} to be a dict, got {type(value).__name__}"
        )
    return value


class PathValidator:
    """Validates rendered output paths before they are written."""

    @classmethod
    def validate_output_path(cls, path: str) -> str:
        """
        Validate a virtual output path and return it normalized.

        Args:
            path: Virtual path produced by a render pass (e.g. "docs/intro.html")

        Returns:
            Normalized relative path

        Raises:
            PathValidationError: If the path is empty, absolute, or escapes
                the output root

        Examples:
            >>> PathValidator.validate_output_path("docs/./intro.html")
            'docs/intro.html'

            >>> PathValidator.validate_output_path("../etc/passwd")
            PathValidationError: Path traversal detected
        """
        if not isinstance(path, str) or not path:
            raise PathValidationError("Output path cannot be empty")

        unified = path.replace("\\", "/")
        if unified.startswith("/") or (len(unified) > 1 and unified[1] == ":"):
            raise PathValidationError(f"Invalid output path: '{path}'. Absolute paths not allowed.")

        normalized = posixpath.normpath(unified)
        if normalized == "." or normalized == ".." or normalized.startswith("../"):
            raise PathValidationError(f"Path traversal detected: '{path}'")

        return normalized

    @classmethod
    def validate_directory(cls, path: str | Path, must_exist: bool = True) -> Path:
        """Resolve ``path``; with ``must_exist`` it has to be an existing directory."""
        resolved = Path(path).resolve()
        if must_exist and not resolved.is_dir():
            raise PathValidationError(f"Path is not a directory: {resolved}")
        return resolved

    @classmethod
    def validate_within_root(cls, file_path: Path, root: Path) -> Path:
        """Resolve ``file_path`` and require it to stay under ``root`` (symlinks included)."""
        resolved = Path(file_path).resolve()
        if not resolved.is_relative_to(Path(root).resolve()):
            raise PathValidationError(f"Path traversal detected: {file_path} is not within {root}")
        return resolved
