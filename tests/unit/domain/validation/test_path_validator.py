"""Tests for argument and output path validation."""

from pathlib import Path

import pytest

from sitestack.domain.errors import ContextValidationError
from sitestack.domain.validation import (
    PathValidationError,
    PathValidator,
    validate_string,
    validate_truthy_string,
    validate_writable,
)


class TestArgumentValidation:
    def test_validate_string_accepts_empty_string(self) -> None:
        assert validate_string("") == ""

    @pytest.mark.parametrize("value", [None, 1, b"bytes", ["a"]])
    def test_validate_string_rejects_non_strings(self, value) -> None:
        with pytest.raises(ContextValidationError, match="Expected path to be a string"):
            validate_string(value, "path")

    def test_validate_truthy_string_rejects_empty(self) -> None:
        with pytest.raises(ContextValidationError, match="non-empty"):
            validate_truthy_string("", "path")

    @pytest.mark.parametrize("value", [None, [], "ctx", ()])
    def test_validate_writable_requires_dict(self, value) -> None:
        with pytest.raises(ContextValidationError):
            validate_writable(value)

    def test_validation_errors_are_value_errors(self) -> None:
        with pytest.raises(ValueError):
            validate_string(3)


class TestValidateOutputPath:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("index", "index"),
            ("docs/./intro.html", "docs/intro.html"),
            ("docs\\intro.html", "docs/intro.html"),
            ("a/b/../c", "a/c"),
        ],
    )
    def test_valid_paths_are_normalized(self, path: str, expected: str) -> None:
        assert PathValidator.validate_output_path(path) == expected

    @pytest.mark.parametrize(
        "path",
        ["", ".", "..", "../escape", "a/../../escape", "/etc/passwd", "C:/windows", "\\\\server\\share"],
    )
    def test_unsafe_paths_rejected(self, path: str) -> None:
        with pytest.raises(PathValidationError):
            PathValidator.validate_output_path(path)


class TestValidateDirectory:
    def test_existing_directory(self, tmp_path: Path) -> None:
        assert PathValidator.validate_directory(tmp_path) == tmp_path.resolve()

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(PathValidationError, match="not a directory"):
            PathValidator.validate_directory(tmp_path / "missing")

    def test_missing_directory_allowed(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing"
        assert PathValidator.validate_directory(missing, must_exist=False) == missing.resolve()


class TestValidateWithinRoot:
    def test_nested_path_accepted(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b.html"
        assert PathValidator.validate_within_root(target, tmp_path) == target.resolve()

    def test_escaping_path_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(PathValidationError, match="Path traversal detected"):
            PathValidator.validate_within_root(tmp_path / ".." / "outside", tmp_path)
