"""Hierarchical rendering: a leaf, then each ancestor index up to the root.

One render context is threaded through the whole chain and mutated in place:
each level's output becomes ``$content`` for the next, and legend fields,
``$title`` and anything helpers write stay visible to the ancestors.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sitestack.application.echo_expander import EchoExpander
from sitestack.application.legend_resolver import LegendResolver
from sitestack.application.registries import TemplateRegistry
from sitestack.domain import paths
from sitestack.domain.models import (
    CONTENT_KEY,
    META_KEY,
    NAME_KEY,
    PATH_KEY,
    SELF_KEY,
    TITLE_KEY,
    RenderContext,
    new_context,
)
from sitestack.domain.validation import (
    validate_string,
    validate_truthy_string,
    validate_writable,
)

logger = logging.getLogger(__name__)

RenameHook = Callable[[str], "str | None"]


def transclude(context: RenderContext) -> str:
    """Stand-in for a missing level: passes ``$content`` through unchanged."""
    return context.get(CONTENT_KEY, "")


class HierarchicalRenderer:
    """Renders registered templates through their ancestor chain."""

    def __init__(
        self,
        templates: TemplateRegistry,
        resolver: LegendResolver,
        echo: EchoExpander | None = None,
        rename: RenameHook | None = None,
    ) -> None:
        self.templates = templates
        self.resolver = resolver
        self.echo = echo or EchoExpander()
        self.rename = rename

    def ensure_defaults(self, path: str, context: RenderContext) -> None:
        """Write the contextual locals for ``path`` into ``context``.

        Legend fields are merged without being removed afterwards, so they
        bleed through to ancestor templates in the same chain. Legends that
        declare ``echo`` were already applied per branch by
        ``render_template`` and are not merged again, which would overwrite
        the branch's own ``name``.
        """
        validate_string(path, "path")
        validate_writable(context)

        if not isinstance(context.get(CONTENT_KEY), str):
            context[CONTENT_KEY] = ""
        if not isinstance(context.get(TITLE_KEY), str):
            context[TITLE_KEY] = ""

        context[SELF_KEY] = context

        meta = self.resolver.meta_at_path(path)
        if meta is not None:
            context[META_KEY] = meta

        legend = self.resolver.file_legend(path)
        if legend is not None and not legend.echo:
            context.update(legend.fields())

    def render_one(self, path: str, context: RenderContext | None = None) -> str:
        """Render the single template at ``path``; a missing template passes ``$content`` through."""
        validate_truthy_string(path, "path")
        path = paths.normalize(path)
        template = self.templates.get(paths.strip_ext(path)) or transclude

        if not isinstance(context, dict):
            context = {}

        self.ensure_defaults(path, context)

        try:
            return template(context)
        except Exception:
            logger.error(f"Error when rendering template at path: {path}")
            raise

    def render_through(self, path: str, context: RenderContext | None = None) -> str:
        """Render ``path`` and transclude the result through every ancestor index."""
        validate_truthy_string(path, "path")

        if not isinstance(context, dict):
            context = {}

        for level in paths.ancestor_chain(path):
            context[CONTENT_KEY] = self.render_one(level, context)

        return context[CONTENT_KEY]

    def render_template(self, path: str, data: RenderContext | None = None) -> dict[str, str]:
        """Render one registered template into one or more virtual output paths.

        Args:
            path: Logical template path (extension-less).
            data: Caller context; copied, never mutated.

        Returns:
            Mapping of virtual path to rendered document. More than one entry
            when the template's legend echoes a group.

        Raises:
            EchoError: If the legend's echo group is missing or malformed.
        """
        validate_truthy_string(path, "path")

        legend = self.resolver.file_legend(path)
        context = new_context(data)
        if legend is not None:
            context.update(legend.fields())
        context[NAME_KEY] = paths.basename(path)

        contexts = [context]
        if legend is not None and legend.echo:
            try:
                contexts = self.echo.branch_contexts(context, self.resolver.meta_at_path(path), legend)
            except Exception:
                logger.error(f"Error when rendering template at path: {path}")
                raise

        outputs: dict[str, str] = {}
        for branch in contexts:
            virtual_path = paths.join(paths.dirname(path), str(branch[NAME_KEY]))
            branch[PATH_KEY] = virtual_path

            result = self.render_through(path, branch)

            if self.rename is not None:
                virtual_path = self.rename(virtual_path) or virtual_path

            outputs[virtual_path] = result

        return outputs
