"""Reserved keys of the render context.

A render context is a plain ``dict[str, Any]`` owned by one top-level render
(or one echo branch) and mutated in place along its ancestor chain.
"""

from typing import Any

RenderContext = dict[str, Any]

CONTENT_KEY = "$content"
TITLE_KEY = "$title"
PATH_KEY = "$path"
SELF_KEY = "$"
META_KEY = "$meta"
NAME_KEY = "name"


def new_context(data: RenderContext | None = None) -> RenderContext:
    """Shallow copy of caller data, so the caller's dict is never mutated."""
    return dict(data) if isinstance(data, dict) else {}
