"""Synchronous in-process bus for scheduling domain events."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    """Publish/subscribe bus keyed by domain-event class.

    A handler subscribed to a base class also receives its subclasses.
    Handlers run synchronously in registration order; an exception in one
    propagates to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type[BaseModel], list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type[BaseModel], handler: Handler) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event: BaseModel) -> int:
        """Deliver *event* and return how many handlers ran."""
        delivered = 0
        for event_type, handlers in list(self._subscribers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in handlers:
                handler(event)
                delivered += 1
        logger.debug("%s delivered to %d handler(s)", type(event).__name__, delivered)
        return delivered
