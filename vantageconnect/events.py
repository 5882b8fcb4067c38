"""
Publish/subscribe registry for controller events.

Subscribers register for an event class; an event is delivered to the
subscribers of its own class and of every base class, so subscribing to
StatusEvent receives all status changes and subscribing to Event receives
everything. Delivery is synchronous and in publish order.

Example:
    >>> bus = EventBus()
    >>> unsubscribe = bus.subscribe(LoadChanged, lambda e: print(e.vid, e.level))
    >>> bus.publish(LoadChanged(vid="12", level=75))
    12 75
    >>> unsubscribe()
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from vantageconnect.models.events import Event

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Event)


class EventBus:
    """Typed callback registry keyed by event class."""

    def __init__(self) -> None:
        self._subscribers: dict[type[Event], list[Callable[[Event], None]]] = {}
        self._logged_failures: set[type[BaseException]] = set()

    def subscribe(
        self,
        event_type: type[E],
        callback: Callable[[E], None],
    ) -> Callable[[], None]:
        """
        Register a callback for an event class and its subclasses.

        Args:
            event_type: Event class to receive.
            callback: Called with each matching event.

        Returns:
            Function that removes the subscription; safe to call twice.
        """
        callbacks = self._subscribers.setdefault(event_type, [])
        callbacks.append(callback)

        def unsubscribe() -> None:
            try:
                callbacks.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def publish(self, event: Event) -> int:
        """
        Deliver an event to every matching subscriber.

        A failing callback is logged (once per exception type) and does
        not stop delivery to the others.

        Returns:
            Number of callbacks invoked.
        """
        delivered = 0
        for event_type in type(event).__mro__:
            for callback in list(self._subscribers.get(event_type, ())):
                delivered += 1
                try:
                    callback(event)
                except Exception as e:  # noqa: BLE001
                    self._log_failure(event, e)
        return delivered

    def subscriber_count(self, event_type: type[Event] | None = None) -> int:
        """Count subscriptions, for one event class or in total."""
        if event_type is not None:
            return len(self._subscribers.get(event_type, ()))
        return sum(len(callbacks) for callbacks in self._subscribers.values())

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._subscribers.clear()

    def _log_failure(self, event: Event, error: Exception) -> None:
        error_type = type(error)
        if error_type in self._logged_failures:
            logger.debug("Event callback failed for %s: %s", event, error)
            return
        self._logged_failures.add(error_type)
        logger.error(
            "Event callback failed for %s: %s",
            type(event).__name__,
            error,
            exc_info=True,
        )

    def __repr__(self) -> str:
        return f"EventBus(subscribers={self.subscriber_count()})"
