"""Registries for compiled templates and directory metadata.

Both are filled during registration and treated as read-only while rendering.
Iteration follows registration order.
"""

from __future__ import annotations

from collections.abc import Iterator

from sitestack.domain.errors import DuplicateMetadataError
from sitestack.domain.models import Metadata
from sitestack.domain.template import CompiledTemplate


class TemplateRegistry:
    """Extension-less logical path -> compiled template."""

    def __init__(self) -> None:
        self._templates: dict[str, CompiledTemplate] = {}

    def add(self, path: str, template: CompiledTemplate) -> None:
        """Register a template; a later registration for the same path replaces it."""
        self._templates[path] = template

    def get(self, path: str) -> CompiledTemplate | None:
        return self._templates.get(path)

    def paths(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, path: object) -> bool:
        return path in self._templates

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths())

    def __len__(self) -> int:
        return len(self._templates)


class MetadataRegistry:
    """Directory path -> Metadata, at most one per directory."""

    def __init__(self) -> None:
        self._meta: dict[str, Metadata] = {}

    def add(self, directory: str, meta: Metadata) -> None:
        """
        Register metadata for a directory.

        Raises:
            DuplicateMetadataError: If the directory already has metadata
        """
        if directory in self._meta:
            raise DuplicateMetadataError("Duplicate meta for path", directory=directory)
        self._meta[directory] = meta

    def get(self, directory: str) -> Metadata | None:
        return self._meta.get(directory)

    def directories(self) -> list[str]:
        return list(self._meta)

    def __contains__(self, directory: object) -> bool:
        return directory in self._meta

    def __len__(self) -> int:
        return len(self._meta)
