# circulation/services/events.py
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyAvailable:
    """A returned copy freed up a book that has pending reservations"""
    book_id: int
    available_copies: int
    pending_reservations: int
    occurred_at: datetime


Handler = Callable[[CopyAvailable], None]


class EventBus:
    """In-process publisher for engine events.

    Delivery (mail, push, in-app notifications) is up to the subscribers.
    Events are published after the transaction that caused them has
    committed, so a failing subscriber cannot undo the change.
    """

    def __init__(self) -> None:
        self._handlers: List[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: CopyAvailable) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler %r failed for %r", handler, event)
