"""
ERP assistant: Portuguese intent recognition with confirmation flows
and an LLM fallback.
"""
from .intent import ActionResult, ContextData, FlowState, FlowStatus, Intent, IntentEngine
from .memory import InMemorySessionStore, SessionStore
from .config import AssistantConfig
from .config_loader import load_config_from_env
from .schemas import AssistantReply
from .app import AssistantApp

__all__ = [
    "ActionResult",
    "ContextData",
    "FlowState",
    "FlowStatus",
    "Intent",
    "IntentEngine",
    "SessionStore",
    "InMemorySessionStore",
    "AssistantConfig",
    "load_config_from_env",
    "AssistantReply",
    "AssistantApp",
]
