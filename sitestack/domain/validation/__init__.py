"""Domain validation utilities."""

from .path_validator import (
    PathValidator,
    PathValidationError,
    validate_string,
    validate_truthy_string,
    validate_writable,
)

__all__ = [
    "PathValidator",
    "PathValidationError",
    "validate_string",
    "validate_truthy_string",
    "validate_writable",
]
