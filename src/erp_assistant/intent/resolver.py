"""
Intent resolution across all registered handlers.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .handler import IntentHandler
from .registry import HandlerRegistry
from .types import Intent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    intent: Intent
    handler: IntentHandler


class IntentResolver:
    """
    Picks the single best intent for a message.

    Every handler that claims the message is asked to extract; the
    highest-confidence intent wins and only a strictly greater confidence
    displaces the current winner, so earlier registration wins ties.
    A handler whose extraction raises is logged and skipped.
    """

    def __init__(self, registry: HandlerRegistry):
        self._registry = registry

    def resolve(self, message: str) -> Optional[Resolution]:
        """
        :param message: Raw user message
        :return: Resolution or None when no handler produced an intent
        """
        best: Optional[Resolution] = None

        for handler in self._registry.snapshot():
            if not handler.can_handle(message):
                continue
            try:
                intent = handler.extract(message)
            except Exception as e:
                logger.warning(f"Intent extraction failed in handler '{handler.name}': {e}")
                continue
            if intent is None:
                continue
            if best is None or intent.confidence > best.intent.confidence:
                best = Resolution(intent, handler)

        if best:
            logger.info(
                f"Intent detected: {best.intent.name} "
                f"(confidence={best.intent.confidence:.2f}, handler={best.handler.name})"
            )
        return best
