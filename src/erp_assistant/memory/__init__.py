from .session_store import InMemorySessionStore, SessionStore
from .chat_history import ChatHistoryStore, ChatMessage, InMemoryChatHistoryStore

__all__ = [
    "SessionStore",
    "InMemorySessionStore",
    "ChatHistoryStore",
    "ChatMessage",
    "InMemoryChatHistoryStore",
]
