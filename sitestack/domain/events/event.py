"""Render event payload model."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from sitestack.domain.events.event_types import RenderEventType


class RenderEvent(BaseModel):
    """Immutable event payload for render notifications."""

    model_config = {"frozen": True}

    event_type: RenderEventType
    template_path: str | None = None
    output_path: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = Field(default_factory=dict)
