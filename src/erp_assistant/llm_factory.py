import logging
from typing import Any, Optional

from .config_validator import get_required_env

try:
    from langchain_groq import ChatGroq
except ImportError:
    ChatGroq = None

try:
    from langchain_openai import ChatOpenAI
except ImportError:
    ChatOpenAI = None

logger = logging.getLogger(__name__)

KNOWN_GROQ_MODELS = [
    "llama-3.1-8b-instant",
    "llama-3.3-70b-versatile",
    "mixtral-8x7b-32768",
]


def get_llm_instance(
    provider: str,
    model: str,
    max_tokens: Optional[int] = None,
    timeout: Optional[float] = None,
) -> Any:
    """
    Factory to return a ready-to-use chat model based on provider name.

    :param provider: 'groq' or 'openai'
    :param model: LLM model name
    :param max_tokens: Default completion budget
    :param timeout: Per-request timeout in seconds
    :return: LangChain chat model
    """
    provider = provider.lower()

    if provider == "groq":
        if ChatGroq is None:
            raise ImportError("langchain_groq not installed")

        api_key = get_required_env(
            "GROQ_API_KEY",
            description="Groq API key for the fallback LLM (get from https://console.groq.com/keys)"
        )

        if model not in KNOWN_GROQ_MODELS:
            # Groq adds models often
            logger.warning(f"Model '{model}' not in known Groq models: {KNOWN_GROQ_MODELS}")

        return ChatGroq(
            model=model,
            api_key=api_key,
            max_tokens=max_tokens,
            timeout=timeout,
            streaming=False,
        )

    elif provider == "openai":
        if ChatOpenAI is None:
            raise ImportError("langchain_openai not installed")

        api_key = get_required_env(
            "OPENAI_API_KEY",
            description="OpenAI API key for the fallback LLM (get from https://platform.openai.com/api-keys)"
        )
        return ChatOpenAI(
            model=model,
            api_key=api_key,
            max_tokens=max_tokens,
            timeout=timeout,
            streaming=False,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")
