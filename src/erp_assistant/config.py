from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class AssistantConfig:
    # LLM / fallback
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    enable_fallback: bool = True
    fallback_max_tokens: int = 4096
    fallback_timeout_seconds: float = 30.0

    # Conversation history
    history_limit: int = 10
    history_max_messages: int = 50

    # Sessions (None or 0 disables expiry)
    session_ttl_seconds: Optional[float] = 1800.0
    session_lock_stripes: int = 64

    # Intent resolution
    min_confidence: float = 0.0

    assistant_name: str = "Angie"

    # Injected at initialization
    llm: Any = None
