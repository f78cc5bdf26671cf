"""
Public application facade for the ERP assistant.

This is the single stable entry point for the library.
All internal structure can change freely, but this API remains stable.
"""
import logging
from typing import Optional

from .config import AssistantConfig
from .config_loader import validate_config
from .exceptions import AppNotInitializedError
from .handlers import create_default_handlers
from .intent import ContextData, IntentEngine
from .llm_factory import get_llm_instance
from .memory import InMemoryChatHistoryStore, InMemorySessionStore
from .orchestration import ChatOrchestrator, CompletionService, FallbackOrchestrator, LangChainCompletionService
from .repository import (
    CustomerRepository,
    InMemoryCustomerRepository,
    InMemoryProductRepository,
    InMemoryUserRepository,
    ProductRepository,
    UserRepository,
)
from .schemas import AssistantReply

logger = logging.getLogger(__name__)


class AssistantApp:
    """
    Public application facade for the ERP assistant.

    All dependency wiring and factory usage is encapsulated here.

    Usage:
        config = load_config_from_env()
        app = AssistantApp(config)
        app.initialize()
        reply = app.chat("listar clientes", ContextData(user_id="u1", tenant_id="t1", role="admin"))
    """

    def __init__(
        self,
        config: AssistantConfig,
        customers: Optional[CustomerRepository] = None,
        users: Optional[UserRepository] = None,
        products: Optional[ProductRepository] = None,
        completion_service: Optional[CompletionService] = None,
    ):
        """
        :param config: AssistantConfig instance
        :param customers: Customer repository; in-memory by default
        :param users: User repository; in-memory by default
        :param products: Product repository; in-memory by default
        :param completion_service: Overrides the LLM built from config
        """
        self._config = config
        self._customers = customers
        self._users = users
        self._products = products
        self._completion_service = completion_service
        self._engine: Optional[IntentEngine] = None
        self._fallback: Optional[FallbackOrchestrator] = None
        self._orchestrator: Optional[ChatOrchestrator] = None

    def initialize(self) -> None:
        """
        Wire repositories, handlers, sessions and the LLM fallback.

        Call this once before using chat().

        :raises: ConfigurationError if the config is invalid or an API key is missing
        """
        if self._orchestrator:
            return

        validate_config(self._config)

        self._customers = self._customers or InMemoryCustomerRepository()
        self._users = self._users or InMemoryUserRepository()
        self._products = self._products or InMemoryProductRepository()

        sessions = InMemorySessionStore(
            ttl_seconds=self._config.session_ttl_seconds,
            lock_stripes=self._config.session_lock_stripes,
        )
        self._engine = IntentEngine(sessions=sessions)
        for handler in create_default_handlers(self._customers, self._users, self._products):
            self._engine.register_handler(handler)

        history = InMemoryChatHistoryStore(max_messages=self._config.history_max_messages)

        if self._config.enable_fallback:
            service = self._completion_service
            if service is None:
                if self._config.llm is None:
                    self._config.llm = get_llm_instance(
                        provider=self._config.llm_provider,
                        model=self._config.llm_model,
                        max_tokens=self._config.fallback_max_tokens,
                        timeout=self._config.fallback_timeout_seconds,
                    )
                service = LangChainCompletionService(self._config.llm)
            self._fallback = FallbackOrchestrator(
                service,
                history=history,
                assistant_name=self._config.assistant_name,
                history_limit=self._config.history_limit,
                max_tokens=self._config.fallback_max_tokens,
                default_timeout=self._config.fallback_timeout_seconds,
            )
        else:
            logger.info("LLM fallback disabled")

        self._orchestrator = ChatOrchestrator(
            self._engine,
            fallback=self._fallback,
            history=history,
            min_confidence=self._config.min_confidence,
        )
        logger.info(f"Assistant initialized with {len(self._engine.get_handlers())} handlers")

    @property
    def engine(self) -> IntentEngine:
        if not self._engine:
            raise AppNotInitializedError("App not initialized. Call initialize() first.")
        return self._engine

    def chat(self, message: str, ctx: ContextData, timeout: Optional[float] = None) -> AssistantReply:
        """
        Send one chat message to the assistant.

        :param message: User message
        :param ctx: Caller context (user, tenant, role)
        :param timeout: Fallback timeout in seconds
        :return: AssistantReply
        :raises: AppNotInitializedError if initialize() has not been called
        """
        if not self._orchestrator:
            raise AppNotInitializedError("App not initialized. Call initialize() first.")

        return self._orchestrator.handle(message, ctx, timeout=timeout)

    def shutdown(self) -> None:
        if self._fallback is not None:
            self._fallback.shutdown()
