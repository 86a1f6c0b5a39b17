"""Echo: one template, one output per element of a named metadata group."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from sitestack.domain.errors import EchoError
from sitestack.domain.models import Legend, Metadata, RenderContext


class EchoExpander:
    """Multiplies a render context over the legends of an echo group."""

    def expand(self, meta: Metadata | None, legend: Legend) -> list[Legend]:
        """Validate and return the legends of the group ``legend.echo`` names.

        Args:
            meta: Metadata of the template's directory.
            legend: The template's own legend, carrying ``echo``.

        Returns:
            One Legend per group element, in group order.

        Raises:
            EchoError: If there is no metadata, the group is missing, is not
                a non-empty list, or an element has no string ``name``.
        """
        if not legend.echo:
            raise EchoError(f"Legend '{legend.name}' has no echo group")
        if meta is None:
            raise EchoError(f"Legend '{legend.name}' echoes '{legend.echo}' but its directory has no metadata")

        group = meta.group(legend.echo)
        if group is None:
            raise EchoError(f"Echo group '{legend.echo}' not found for legend '{legend.name}'")
        if not isinstance(group, list):
            raise EchoError(f"Echo group '{legend.echo}' must be a list, got {type(group).__name__}")
        if not group:
            raise EchoError(f"Echo group '{legend.echo}' is empty")

        legends: list[Legend] = []
        for index, element in enumerate(group):
            legends.append(self._as_legend(element, legend.echo, index))
        return legends

    def branch_contexts(
        self, context: RenderContext, meta: Metadata | None, legend: Legend
    ) -> list[RenderContext]:
        """One shallow clone of ``context`` per echoed legend, its fields merged on top."""
        branches = []
        for echoed in self.expand(meta, legend):
            branch = dict(context)
            branch.update(echoed.fields())
            branches.append(branch)
        return branches

    @staticmethod
    def _as_legend(element: Any, group: str, index: int) -> Legend:
        if isinstance(element, Legend):
            return element
        if not isinstance(element, Mapping):
            raise EchoError(f"Echo group '{group}' element {index} must be a mapping")
        try:
            return Legend.model_validate(dict(element))
        except ValidationError as e:
            raise EchoError(f"Echo group '{group}' element {index} is not a valid legend: {e}") from e
