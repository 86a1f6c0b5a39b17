"""Render event system for observer pattern notifications."""

from sitestack.domain.events.event_types import RenderEventType
from sitestack.domain.events.event import RenderEvent
from sitestack.domain.events.observer import RenderObserver
from sitestack.domain.events.emitter import RenderEventEmitter
from sitestack.domain.events.stderr_observer import StderrEventObserver

__all__ = [
    "RenderEventType",
    "RenderEvent",
    "RenderObserver",
    "RenderEventEmitter",
    "StderrEventObserver",
]
