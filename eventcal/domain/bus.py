"""Synchronous in-process bus carrying calendar domain events to handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    """Routes each published domain event to the handlers for its exact type.

    Handlers run on the publishing thread in subscription order. A handler
    that raises stops delivery and the error reaches the publisher.
    """

    def __init__(self) -> None:
        self._routes: dict[type, list[Handler]] = {}

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        """Register *handler* for *event_type*; returns a function undoing it."""
        self._routes.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            route = self._routes.get(event_type, [])
            if handler in route:
                route.remove(handler)

        return unsubscribe

    def publish(self, event: Any) -> int:
        """Deliver *event* and return how many handlers received it."""
        route = list(self._routes.get(type(event), ()))
        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(route))
        for handler in route:
            handler(event)
        return len(route)
