from .types import ActionResult, ContextData, FlowState, FlowStatus, Intent, session_key
from .handler import IntentHandler, IntentPattern, PatternIntentHandler
from .registry import HandlerRegistry
from .resolver import IntentResolver, Resolution
from .engine import IntentEngine

__all__ = [
    "ActionResult",
    "ContextData",
    "FlowState",
    "FlowStatus",
    "Intent",
    "session_key",
    "IntentHandler",
    "IntentPattern",
    "PatternIntentHandler",
    "HandlerRegistry",
    "IntentResolver",
    "Resolution",
    "IntentEngine",
]
