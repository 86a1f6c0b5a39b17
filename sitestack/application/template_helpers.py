"""Helper functions available inside every template body."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sitestack.domain import paths
from sitestack.domain.constants import ACTIVE_ATTRIBUTE, ACTIVE_CLASS, TITLE_SEPARATOR
from sitestack.domain.models import PATH_KEY, TITLE_KEY, new_context

if TYPE_CHECKING:
    from sitestack.application.hierarchical_renderer import HierarchicalRenderer


class TemplateHelpers:
    """``$include``, ``$entitle``, ``$active`` and ``$act``."""

    def __init__(self, renderer: HierarchicalRenderer) -> None:
        self.renderer = renderer

    def as_imports(self) -> dict[str, Callable[..., Any]]:
        return {
            "$include": self.include,
            "$entitle": self.entitle,
            "$active": self.active,
            "$act": self.act,
        }

    def include(self, path: str, context: dict[str, Any] | None = None) -> str:
        """Render the template at ``path`` with a clone of ``context``.

        The clone keeps the partial's writes (``$title``, legend fields) out of
        the caller's context.
        """
        return self.renderer.render_one(path, new_context(context))

    @staticmethod
    def entitle(title: Any, context: Any) -> None:
        """Prepend ``title`` to ``context["$title"]``.

        Called once per level while a chain renders leaf to root, so the leaf's
        segment ends up last: ``"Site | Docs | Intro"``.
        """
        if not isinstance(context, dict):
            return
        if not isinstance(title, str) or not title:
            return

        current = context.get(TITLE_KEY)
        if not isinstance(current, str) or not current:
            context[TITLE_KEY] = title
        else:
            context[TITLE_KEY] = f"{title}{TITLE_SEPARATOR}{current}"

    @staticmethod
    def active(prefix: Any, context: Any) -> str:
        """``"active"`` if the context's ``$path`` is ``prefix`` or nested under it."""
        if not isinstance(context, dict):
            return ""
        if not isinstance(prefix, str):
            return ""
        current = context.get(PATH_KEY)
        if not isinstance(current, str):
            return ""
        return ACTIVE_CLASS if paths.is_within(prefix, current) else ""

    @staticmethod
    def act(prefix: Any, context: Any) -> str:
        if TemplateHelpers.active(prefix, context):
            return ACTIVE_ATTRIBUTE
        return ""
