"""
Message Bus

Views dispatch booking and concern commands here; the unit of work hands
committed domain events back for fan-out to the notification subscribers.
Handlers are registered by the apps' AppConfig.ready().
"""

from collections import defaultdict
from typing import Any, Callable
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Any], Any]
EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Exactly one handler per command type, any number of subscribers per
    event type
    """

    def __init__(self):
        self._command_handlers: dict[type, CommandHandler] = {}
        self._subscribers: defaultdict[type, list[EventHandler]] = defaultdict(list)

    def register_command_handler(self, command_type: type, handler: CommandHandler, replace: bool = False):
        """
        Raises:
            ValueError: If the command already has a handler and ``replace`` is off
        """
        if not replace and command_type in self._command_handlers:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._command_handlers[command_type] = handler
        logger.debug(f"Command {command_type.__name__} -> {getattr(handler, '__qualname__', handler)}")

    def register_event_handler(self, event_type: type, handler: EventHandler):
        """Subscribe ``handler``; subscribing it twice is a no-op"""
        subscribers = self._subscribers[event_type]
        if handler not in subscribers:
            subscribers.append(handler)

    def handle_command(self, command: Any) -> Any:
        """
        Run the command's handler and return its result

        Domain errors raised by the handler propagate to the caller.
        """
        try:
            handler = self._command_handlers[type(command)]
        except KeyError:
            raise ValueError(f"No handler registered for command {type(command).__name__}")
        logger.info(f"Handling command: {type(command).__name__}")
        return handler(command)

    def publish_events(self, events: list[DomainEvent]):
        """
        Deliver committed events to their subscribers

        A failing subscriber is logged and skipped; the transaction that
        produced the event has already committed.
        """
        for event in events:
            name = type(event).__name__
            subscribers = self._subscribers.get(type(event), [])
            if not subscribers:
                logger.warning(f"Event {name} has no subscribers")
                continue
            for subscriber in subscribers:
                try:
                    subscriber(event)
                except Exception:
                    logger.error(f"Subscriber {subscriber.__name__} failed on {name} ({event.event_id})", exc_info=True)


message_bus = MessageBus()
