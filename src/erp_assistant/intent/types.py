"""
Value types shared by intent recognition, the flow state machine and callers.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union


@dataclass(frozen=True)
class Intent:
    """
    A recognized intent.

    Entities hold only what was actually extracted: a key is either present
    with a non-empty string or absent.
    """
    name: str
    confidence: float
    entities: Mapping[str, str] = field(default_factory=dict, hash=False)
    original_message: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Intent name must not be empty")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Intent confidence must be in [0, 1], got {self.confidence}")
        cleaned = {}
        for key, value in dict(self.entities or {}).items():
            if value is None:
                continue
            value = str(value).strip()
            if value:
                cleaned[key] = value
        object.__setattr__(self, "entities", MappingProxyType(cleaned))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.entities.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "entities": dict(self.entities),
            "original_message": self.original_message,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Intent":
        return cls(
            name=data["name"],
            confidence=float(data.get("confidence", 0.0)),
            entities=data.get("entities") or {},
            original_message=data.get("original_message", ""),
        )


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of processing one message.

    operation_id is only set on results of an actual execution.
    fallback_eligible marks soft misses the caller may hand to the LLM.
    """
    success: bool
    message: str
    data: Optional[Mapping[str, Any]] = field(default=None, hash=False)
    operation_id: Optional[str] = None
    fallback_eligible: bool = False

    @classmethod
    def ok(cls, message: str, data: Optional[Mapping[str, Any]] = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, data: Optional[Mapping[str, Any]] = None) -> "ActionResult":
        return cls(success=False, message=message, data=data)

    def with_operation_id(self, operation_id: str) -> "ActionResult":
        return replace(self, operation_id=operation_id)


@dataclass(frozen=True)
class ContextData:
    """Per-message caller context. Never persisted by the engine."""
    user_id: str
    tenant_id: str
    role: str = ""
    locale: str = "pt-BR"
    session: Mapping[str, Any] = field(default_factory=dict, hash=False)

    @property
    def session_id(self) -> str:
        return session_key(self.tenant_id, self.user_id)


def session_key(tenant_id: str, user_id: str) -> str:
    return f"{tenant_id}:{user_id}"


class FlowStatus(str, Enum):
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DATA_COLLECTION = "data_collection"
    COMPLETED = "completed"


@dataclass
class FlowState:
    """
    Pending multi-turn flow for one session.

    state may hold a raw string when a persisted session carries a status
    this version does not know; the flow state machine resets such sessions.
    """
    state: Union[FlowStatus, str]
    pending_intent: Optional[Intent] = None
    data: Optional[Dict[str, Any]] = None
    current_message: str = ""

    def __post_init__(self):
        if not isinstance(self.state, FlowStatus):
            try:
                self.state = FlowStatus(self.state)
            except ValueError:
                pass
        if self.state is FlowStatus.AWAITING_CONFIRMATION and self.pending_intent is None:
            raise ValueError("A flow awaiting confirmation needs a pending intent")

    @property
    def is_known_state(self) -> bool:
        return isinstance(self.state, FlowStatus)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value if self.is_known_state else self.state,
            "pending_intent": self.pending_intent.to_dict() if self.pending_intent else None,
            "data": dict(self.data) if self.data is not None else None,
            "current_message": self.current_message,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlowState":
        pending = data.get("pending_intent")
        return cls(
            state=data["state"],
            pending_intent=Intent.from_dict(pending) if pending else None,
            data=data.get("data"),
            current_message=data.get("current_message", ""),
        )
