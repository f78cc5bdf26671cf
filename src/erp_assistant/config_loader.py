"""
Configuration loader with validation.
"""
from dotenv import load_dotenv
from .config import AssistantConfig
from .config_validator import get_optional_env, get_bool_env, get_number_env
from .exceptions import ConfigurationError

SUPPORTED_PROVIDERS = ("groq", "openai")


def load_config_from_env() -> AssistantConfig:
    """
    Load configuration from environment variables with validation.

    Usage:
        config = load_config_from_env()
        app = AssistantApp(config)
        app.initialize()

    :return: Validated AssistantConfig instance
    :raises: ConfigurationError if a value is invalid
    """
    # Load .env file if it exists (for local development)
    load_dotenv()

    ttl = get_number_env("SESSION_TTL_SECONDS", 1800.0)

    config = AssistantConfig(
        llm_provider=get_optional_env("LLM_PROVIDER", default="openai").lower(),
        llm_model=get_optional_env("LLM_MODEL", default="gpt-4o-mini"),
        enable_fallback=get_bool_env("ENABLE_FALLBACK", True),
        fallback_max_tokens=get_number_env("FALLBACK_MAX_TOKENS", 4096, cast=int),
        fallback_timeout_seconds=get_number_env("FALLBACK_TIMEOUT_SECONDS", 30.0),
        history_limit=get_number_env("HISTORY_LIMIT", 10, cast=int),
        history_max_messages=get_number_env("HISTORY_MAX_MESSAGES", 50, cast=int),
        session_ttl_seconds=ttl if ttl and ttl > 0 else None,
        session_lock_stripes=get_number_env("SESSION_LOCK_STRIPES", 64, cast=int),
        min_confidence=get_number_env("MIN_CONFIDENCE", 0.0),
        assistant_name=get_optional_env("ASSISTANT_NAME", default="Angie"),
    )

    validate_config(config)
    return config


def validate_config(config: AssistantConfig) -> None:
    """
    Check value ranges of a config built by hand or from the environment.

    :raises: ConfigurationError on the first invalid value
    """
    if config.llm_provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"LLM_PROVIDER must be one of {SUPPORTED_PROVIDERS}, got '{config.llm_provider}'"
        )
    if config.fallback_max_tokens <= 0:
        raise ConfigurationError("FALLBACK_MAX_TOKENS must be positive")
    if config.fallback_timeout_seconds <= 0:
        raise ConfigurationError("FALLBACK_TIMEOUT_SECONDS must be positive")
    if config.history_limit < 0 or config.history_max_messages <= 0:
        raise ConfigurationError("HISTORY_LIMIT must be >= 0 and HISTORY_MAX_MESSAGES > 0")
    if config.session_lock_stripes <= 0:
        raise ConfigurationError("SESSION_LOCK_STRIPES must be positive")
    if not 0.0 <= config.min_confidence <= 1.0:
        raise ConfigurationError("MIN_CONFIDENCE must be between 0 and 1")
