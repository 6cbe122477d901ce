"""
Message Bus

Routes domain events to the handlers registered for their type. Handlers
run in-process after the transaction that produced the events commits.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Message bus for domain events

    Multiple handlers can be registered per event type (1:N).
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Registered event handler for {event_type.__name__}")

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        Errors in handlers are logged but don't stop other handlers: the
        state change behind the event is already committed.
        """
        for event in events:
            event_type = type(event)
            logger.debug(f"Publishing event {event.to_dict()}")
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug(f"No handlers registered for event {event_type.__name__}")
                continue

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler {handler.__name__} "
                        f"for event {event_type.__name__}: {e}",
                        exc_info=True
                    )


# Global message bus instance
message_bus = MessageBus()
