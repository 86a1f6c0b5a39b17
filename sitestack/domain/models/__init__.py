"""Domain models for sitestack."""

from .legend import Legend, Metadata
from .render_context import (
    CONTENT_KEY,
    META_KEY,
    NAME_KEY,
    PATH_KEY,
    SELF_KEY,
    TITLE_KEY,
    RenderContext,
    new_context,
)


__all__ = [
    "Legend",
    "Metadata",
    "RenderContext",
    "new_context",
    "CONTENT_KEY",
    "TITLE_KEY",
    "PATH_KEY",
    "SELF_KEY",
    "META_KEY",
    "NAME_KEY",
]
