class AssistantError(Exception):
    """Base exception for the ERP assistant."""


class ConfigurationError(AssistantError):
    """Raised when required configuration is missing or invalid."""


class AppNotInitializedError(AssistantError):
    """Raised when the assistant app is used before initialization."""


class UnsupportedIntentError(AssistantError):
    """Raised when a handler is asked to execute an intent it does not support."""

    def __init__(self, intent_name: str, handler_name: str = ""):
        self.intent_name = intent_name
        self.handler_name = handler_name
        where = f" by {handler_name}" if handler_name else ""
        super().__init__(f"Intent '{intent_name}' is not supported{where}")


class RepositoryError(AssistantError):
    """Raised when a domain repository operation fails."""


class EntityNotFoundError(RepositoryError):
    """Raised when an update or delete targets an entity that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class CompletionServiceError(AssistantError):
    """
    Raised when the external completion service fails.

    Carries the upstream status code and body when available so callers
    can log or surface them.
    """

    def __init__(self, message: str, status_code: int = None, body: str = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)
