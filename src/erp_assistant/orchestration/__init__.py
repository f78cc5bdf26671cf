from .fallback import (
    CompletionMessage,
    CompletionRequest,
    CompletionService,
    FallbackOrchestrator,
    LangChainCompletionService,
)
from .chat_orchestrator import ChatOrchestrator

__all__ = [
    "CompletionMessage",
    "CompletionRequest",
    "CompletionService",
    "FallbackOrchestrator",
    "LangChainCompletionService",
    "ChatOrchestrator",
]
