"""
Intent handler protocol and the pattern-table base class.

Recognition sits behind can_handle/extract so a statistical classifier can
replace the regex tables without touching resolution or the flow machine.
"""
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Pattern, Tuple

from .types import ActionResult, ContextData, Intent

logger = logging.getLogger(__name__)


class IntentHandler(ABC):
    """
    Protocol for one business area (customers, users, products...).

    Handlers must NOT:
    - Keep per-session state
    - Touch domain state outside execute()
    """

    name: str = "handler"

    @property
    @abstractmethod
    def intent_names(self) -> FrozenSet[str]:
        """Intent names this handler can execute."""

    @abstractmethod
    def can_handle(self, message: str) -> bool:
        """
        Cheap, pure check of whether extract() could return an intent.

        :param message: Raw user message
        """

    @abstractmethod
    def extract(self, message: str) -> Optional[Intent]:
        """
        Extract at most one intent from the message.

        :param message: Raw user message
        :return: Intent or None
        """

    @abstractmethod
    def check_permission(self, ctx: ContextData, intent: Optional[Intent] = None) -> bool:
        """
        Role-based permission check. No I/O.

        :param ctx: Caller context
        :param intent: Intent about to run; None asks about the area as a whole
        """

    @abstractmethod
    def execute(self, ctx: ContextData, intent: Intent) -> ActionResult:
        """
        Run the intent against the domain.

        :raises: UnsupportedIntentError for intent names outside intent_names
        """

    def supports(self, intent_name: str) -> bool:
        return intent_name in self.intent_names


@dataclass(frozen=True)
class IntentPattern:
    """One row of a handler's pattern table."""
    intent: str
    regex: Pattern
    confidence: float = 0.8


def pattern(intent: str, regex: str, confidence: float = 0.8, flags: int = 0) -> IntentPattern:
    return IntentPattern(intent, re.compile(regex, re.IGNORECASE | flags), confidence)


class PatternIntentHandler(IntentHandler):
    """
    Handler driven by an ordered table of regular expressions.

    can_handle and extract read the same table. When several rows match,
    the most specific wins: higher confidence, then more captured named
    groups, then the longer match; remaining ties go to table order.
    """

    patterns: Tuple[IntentPattern, ...] = ()

    @property
    def intent_names(self) -> FrozenSet[str]:
        return frozenset(p.intent for p in self.patterns)

    def can_handle(self, message: str) -> bool:
        if not message or not message.strip():
            return False
        return any(p.regex.search(message) for p in self.patterns)

    def extract(self, message: str) -> Optional[Intent]:
        if not message or not message.strip():
            return None

        best = None
        best_key = None
        for row in self.patterns:
            match = row.regex.search(message)
            if match is None:
                continue
            captured = {k: v for k, v in match.groupdict().items() if v and v.strip()}
            key = (row.confidence, len(captured), match.end() - match.start())
            if best_key is None or key > best_key:
                best, best_key = (row, captured), key

        if best is None:
            return None

        row, entities = best
        entities = dict(entities)
        self.extract_additional(message, row.intent, entities)
        entities = self.normalize(row.intent, entities)

        logger.debug(f"{self.name}: matched '{row.intent}' with entities {sorted(entities)}")
        return Intent(
            name=row.intent,
            confidence=row.confidence,
            entities=entities,
            original_message=message,
        )

    def extract_additional(self, message: str, intent_name: str, entities: Dict[str, str]) -> None:
        """
        Fill entities the matching pattern did not capture.

        Existing keys are never overwritten.
        """

    def normalize(self, intent_name: str, entities: Dict[str, str]) -> Dict[str, str]:
        """Final clean-up of extracted entities (aliases, trimming)."""
        return entities


def fill_from(message: str, entities: Dict[str, str], extractors: Iterable[Tuple[str, Pattern]]) -> None:
    """
    Run field extractors over the message, keeping already captured keys.

    :param extractors: (entity key, regex with a 'v' group) pairs
    """
    for key, regex in extractors:
        if key in entities:
            continue
        match = regex.search(message)
        if match and match.group("v") and match.group("v").strip():
            entities[key] = match.group("v").strip()
