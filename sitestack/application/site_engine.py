"""Public API: register template and metadata sources, then render the site."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sitestack.application.echo_expander import EchoExpander
from sitestack.application.hierarchical_renderer import HierarchicalRenderer, RenameHook
from sitestack.application.legend_resolver import LegendResolver
from sitestack.application.registries import MetadataRegistry, TemplateRegistry
from sitestack.application.render_orchestrator import RenderOrchestrator
from sitestack.application.template_helpers import TemplateHelpers
from sitestack.domain import paths
from sitestack.domain.constants import META_EXTENSIONS
from sitestack.domain.errors import MetadataError, TemplateCompileError
from sitestack.domain.events import RenderEventEmitter
from sitestack.domain.models import Legend, Metadata, RenderContext
from sitestack.domain.template import compile_template
from sitestack.domain.validation import validate_string, validate_truthy_string

logger = logging.getLogger(__name__)


class SiteEngine:
    """Hierarchical template engine.

    Templates are registered under their extension-less path; ``.yaml``,
    ``.yml`` and ``.json`` sources become the metadata of their directory.
    ``render`` then produces every output document, each leaf transcluded
    through the ``index`` templates of its ancestor directories.

    Example:
        engine = SiteEngine()
        engine.register("<main>{{ $content }}</main>", "index.html")
        engine.register("Hello {{ name }}", "docs/intro.html")
        engine.render()
        # {"index": "<main></main>", "docs/intro": "<main>Hello intro</main>"}
    """

    def __init__(
        self,
        *,
        imports: dict[str, Any] | None = None,
        rename: RenameHook | None = None,
        cwd: str | Path | None = None,
        emitter: RenderEventEmitter | None = None,
    ) -> None:
        self.cwd = cwd
        self.templates = TemplateRegistry()
        self.meta = MetadataRegistry()
        self.resolver = LegendResolver(self.meta)
        self.renderer = HierarchicalRenderer(
            self.templates, self.resolver, echo=EchoExpander(), rename=rename
        )
        self.helpers = TemplateHelpers(self.renderer)
        self.orchestrator = RenderOrchestrator(
            self.templates, self.resolver, self.renderer, emitter=emitter
        )

        # Base scope of every compiled template; caller imports win over helpers.
        self.imports: dict[str, Any] = {**self.helpers.as_imports(), **(imports or {})}

    @property
    def rename(self) -> Callable[[str], str | None] | None:
        return self.renderer.rename

    @rename.setter
    def rename(self, hook: Callable[[str], str | None] | None) -> None:
        self.renderer.rename = hook

    def register(self, source: str, path: str) -> None:
        """
        Register one source file under its path.

        Absolute paths are made relative to the engine's working directory.

        Args:
            source: File contents.
            path: File path, including its extension.

        Raises:
            ContextValidationError: If source or path have the wrong shape
            MetadataError: If a metadata source is malformed
            DuplicateMetadataError: If the directory already has metadata
            TemplateCompileError: If a template source fails to compile
        """
        validate_string(source, "source")
        validate_truthy_string(path, "path")

        path = paths.relative_to_cwd(path, self.cwd)

        if paths.extension(path) in META_EXTENSIONS:
            directory = paths.dirname(path)
            self.meta.add(directory, self._parse_meta(source, directory))
            logger.debug(f"Registered metadata for directory: {directory}")
            return

        path = paths.strip_ext(path)
        try:
            template = compile_template(source, self.imports)
        except Exception as err:
            message = f"Failed to compile template at path `{path}`"
            raise TemplateCompileError(f"{message}. Error: {err}", path=path, cause=err) from err

        self.templates.add(path, template)
        logger.debug(f"Registered template: {path}")

    def render(self, data: RenderContext | None = None) -> dict[str, str]:
        """Render every registered template; see ``RenderOrchestrator.render_all``."""
        return self.orchestrator.render_all(data)

    def render_template(self, path: str, data: RenderContext | None = None) -> dict[str, str]:
        return self.renderer.render_template(path, data)

    def meta_at_path(self, path: str) -> Metadata | None:
        return self.resolver.meta_at_path(path)

    def file_legend(self, path: str) -> Legend | None:
        return self.resolver.file_legend(path)

    @staticmethod
    def _parse_meta(source: str, directory: str) -> Metadata:
        try:
            data = yaml.safe_load(source)
        except yaml.YAMLError as e:
            raise MetadataError(f"Malformed metadata ({e})", directory=directory) from e

        if data is None:
            return Metadata()

        if not isinstance(data, dict):
            raise MetadataError("Metadata root must be a mapping", directory=directory)

        try:
            return Metadata.model_validate(data)
        except ValidationError as e:
            raise MetadataError(f"Invalid metadata ({e.error_count()} errors)", directory=directory) from e
