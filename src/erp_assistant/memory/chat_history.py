"""
Per-user chat history consulted by the LLM fallback.
"""
import threading
import uuid
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, Dict, List


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "user", "assistant" or "system"
    content: str
    user_id: str
    tenant_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ChatHistoryStore(ABC):
    """Append-only message log per (tenant, user)."""

    @abstractmethod
    def save(self, message: ChatMessage) -> None:
        pass

    @abstractmethod
    def get_history(self, tenant_id: str, user_id: str, limit: int = 50, offset: int = 0) -> List[ChatMessage]:
        """
        :return: Messages newest first
        """

    @abstractmethod
    def delete_history(self, tenant_id: str, user_id: str) -> None:
        pass

    @abstractmethod
    def count(self, tenant_id: str, user_id: str) -> int:
        pass


class InMemoryChatHistoryStore(ChatHistoryStore):
    """Bounded history; the oldest messages are dropped past max_messages."""

    def __init__(self, max_messages: int = 50):
        """
        :param max_messages: Messages kept per user
        """
        self._max = max_messages
        self._logs: Dict[str, Deque[ChatMessage]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(tenant_id: str, user_id: str) -> str:
        return f"{tenant_id}:{user_id}"

    def save(self, message: ChatMessage) -> None:
        key = self._key(message.tenant_id, message.user_id)
        with self._lock:
            log = self._logs.get(key)
            if log is None:
                log = self._logs[key] = deque(maxlen=self._max)
            log.append(message)

    def get_history(self, tenant_id, user_id, limit=50, offset=0):
        with self._lock:
            log = list(self._logs.get(self._key(tenant_id, user_id), ()))
        newest_first = log[::-1]
        return newest_first[offset:offset + limit]

    def delete_history(self, tenant_id, user_id):
        with self._lock:
            self._logs.pop(self._key(tenant_id, user_id), None)

    def count(self, tenant_id, user_id):
        with self._lock:
            return len(self._logs.get(self._key(tenant_id, user_id), ()))
