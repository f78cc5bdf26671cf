"""
Ordered, append-only handler registry.

Readers take a snapshot tuple without locking; registration swaps in a new
tuple under a lock.
"""
import logging
import threading
from typing import Iterator, Optional, Tuple

from .handler import IntentHandler

logger = logging.getLogger(__name__)


class HandlerRegistry:

    def __init__(self):
        self._handlers: Tuple[IntentHandler, ...] = ()
        self._write_lock = threading.Lock()

    def register(self, handler: IntentHandler) -> None:
        """
        Append a handler. Earlier registrations win confidence ties.

        :raises: TypeError if handler does not implement IntentHandler
        """
        if not isinstance(handler, IntentHandler):
            raise TypeError(f"Expected IntentHandler, got {type(handler).__name__}")
        with self._write_lock:
            self._handlers = self._handlers + (handler,)
        logger.info(f"Intent handler registered: {handler.name} ({sorted(handler.intent_names)})")

    def snapshot(self) -> Tuple[IntentHandler, ...]:
        return self._handlers

    def find_executor(self, intent_name: str, original_message: str) -> Optional[IntentHandler]:
        """
        Locate the handler that produced a stored intent.

        The first handler claiming the original message and supporting the
        intent name wins.
        """
        for handler in self._handlers:
            if handler.supports(intent_name) and handler.can_handle(original_message):
                return handler
        return None

    def __iter__(self) -> Iterator[IntentHandler]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)
