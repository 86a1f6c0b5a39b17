"""Render observer protocol."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from sitestack.domain.events.event import RenderEvent


class RenderObserver(Protocol):
    """Protocol for render event observers."""

    def on_event(self, event: "RenderEvent") -> None:
        """Handle a render event. Must not throw or block."""
        ...
