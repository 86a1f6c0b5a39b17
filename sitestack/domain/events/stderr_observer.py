"""Stderr event observer for CLI integration."""

import click

from sitestack.domain.events.event import RenderEvent


class StderrEventObserver:
    """Emits events as structured lines to stderr."""

    def on_event(self, event: RenderEvent) -> None:
        """Emit event as structured line to stderr."""
        parts = [f"[EVENT] {event.event_type.value}"]
        if event.template_path:
            parts.append(f"template={event.template_path}")
        if event.output_path:
            parts.append(f"path={event.output_path}")
        error = event.metadata.get("error")
        if error:
            parts.append(f"error={error}")
        click.echo(" ".join(parts), err=True)
