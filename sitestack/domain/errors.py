"""Domain-level exceptions for sitestack."""

from __future__ import annotations


class SiteStackError(Exception):
    """Base class for errors raised by the rendering engine."""

    pass


class ContextValidationError(SiteStackError, ValueError):
    """Raised when an argument has the wrong shape (non-string path, empty path, non-dict context)."""

    pass


class TemplateSyntaxError(SiteStackError):
    """Raised when a template fragment cannot be compiled."""

    def __init__(self, message: str, *, fragment: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fragment = fragment

    def __str__(self) -> str:
        if self.fragment is None:
            return self.message
        return f"{self.message}: {self.fragment!r}"


class TemplateSandboxError(SiteStackError):
    """Raised when a template expression touches something the sandbox forbids."""

    pass


class TemplateCompileError(SiteStackError):
    """Raised by registration when a template source fails to compile."""

    def __init__(self, message: str, *, path: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause


class MetadataError(SiteStackError):
    """Raised when a directory metadata source cannot be parsed into Metadata."""

    def __init__(self, message: str, *, directory: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.directory = directory

    def __str__(self) -> str:
        if self.directory is None:
            return self.message
        return f"{self.message}: {self.directory}"


class DuplicateMetadataError(MetadataError):
    """Raised when a second metadata source is registered for one directory."""

    pass


class EchoError(SiteStackError):
    """Raised when a legend's echo group is missing or malformed."""

    pass
