"""Render event emitter for dispatching events to observers."""

import logging
from typing import Any, Iterable

from sitestack.domain.events.event import RenderEvent
from sitestack.domain.events.event_types import RenderEventType
from sitestack.domain.events.observer import RenderObserver

logger = logging.getLogger(__name__)


class RenderEventEmitter:
    """Dispatches render events to subscribed observers.

    An observer subscribed without event types receives every event. Global
    observers are notified first, then type-specific ones, each in
    subscription order.
    """

    def __init__(self) -> None:
        # None holds the observers of every event type.
        self._subscriptions: dict[RenderEventType | None, list[RenderObserver]] = {None: []}

    def subscribe(
        self,
        observer: RenderObserver,
        event_types: Iterable[RenderEventType] | None = None,
    ) -> None:
        keys: list[RenderEventType | None] = [None] if event_types is None else list(event_types)
        for key in keys:
            self._subscriptions.setdefault(key, []).append(observer)

    def unsubscribe(self, observer: RenderObserver) -> None:
        for observers in self._subscriptions.values():
            while observer in observers:
                observers.remove(observer)

    def notify(self, event_type: RenderEventType, **fields: Any) -> None:
        """Build an event from keyword fields and dispatch it."""
        self.emit(RenderEvent(event_type=event_type, **fields))

    def emit(self, event: RenderEvent) -> None:
        for key in (None, event.event_type):
            for observer in list(self._subscriptions.get(key, ())):
                try:
                    observer.on_event(event)
                except Exception as e:
                    logger.warning(f"Observer {observer!r} failed on {event.event_type.value}: {e}")
