"""Render event types for observer pattern notifications."""

from enum import Enum


class RenderEventType(str, Enum):
    """Typed events emitted while a site is rendered and written."""

    # Orchestration
    TEMPLATE_IGNORED = "template_ignored"
    TEMPLATE_RENDERED = "template_rendered"
    TEMPLATE_FAILED = "template_failed"

    # Output
    OUTPUT_WRITTEN = "output_written"
