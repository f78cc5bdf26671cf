from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class AssistantReply:
    answer: str
    success: bool
    source: str  # "intent", "confirmation" or "llm"
    intent: Optional[str] = None
    operation_id: Optional[str] = None
    awaiting_confirmation: bool = False
    data: Dict[str, Any] = field(default_factory=dict)
    latency_ms: Optional[int] = None
