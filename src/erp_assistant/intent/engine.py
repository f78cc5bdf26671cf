"""
Intent engine: the entry point that turns one chat message into an
ActionResult.

Flow per message:
    session lookup -> pending flow? -> flow state machine
                   -> otherwise resolve intent -> permission check
                   -> confirmation required? -> new flow : execute now
"""
import logging
import uuid
from typing import Optional, Tuple

from ..exceptions import UnsupportedIntentError
from ..memory.session_store import InMemorySessionStore, SessionStore
from .confirmation import requires_confirmation
from .flow import FlowStateMachine
from .handler import IntentHandler
from .registry import HandlerRegistry
from .resolver import IntentResolver, Resolution
from .types import ActionResult, ContextData, FlowState, FlowStatus, Intent

logger = logging.getLogger(__name__)

NO_INTENT_MESSAGE = "Não identifiquei nenhuma ação específica para executar. Pode ser mais específico?"
PERMISSION_DENIED_MESSAGE = (
    "Você não tem permissão para executar esta ação. "
    "Por favor, contate um administrador se precisar de acesso."
)
EXECUTION_ERROR_MESSAGE = "Ocorreu um erro ao executar esta ação: {error}"


class IntentEngine:
    """
    Multi-turn, permissioned intent processing.

    Messages for the same session are serialized through the session
    store's lock; different sessions run in parallel.

    Usage:
        engine = IntentEngine()
        for handler in create_default_handlers(customers, users, products):
            engine.register_handler(handler)
        result = engine.process_message("listar clientes", ctx)
    """

    def __init__(self, sessions: Optional[SessionStore] = None):
        """
        :param sessions: Session store; defaults to an InMemorySessionStore
        """
        self._registry = HandlerRegistry()
        self._sessions = sessions if sessions is not None else InMemorySessionStore()
        self._resolver = IntentResolver(self._registry)
        self._flow = FlowStateMachine(self._registry, self._sessions, self._execute)

    def register_handler(self, handler: IntentHandler) -> None:
        """Register a handler (startup time). Order breaks confidence ties."""
        self._registry.register(handler)

    def get_handlers(self) -> Tuple[IntentHandler, ...]:
        return self._registry.snapshot()

    def resolve(self, message: str) -> Optional[Resolution]:
        """Recognize without executing or touching sessions."""
        return self._resolver.resolve(message)

    def inject_session(self, session_id: str, state: FlowState) -> None:
        """Let an outer orchestrator restore a persisted flow."""
        logger.info(f"Injecting session {session_id} (state={state.state})")
        with self._sessions.session_lock(session_id):
            self._sessions.inject(session_id, state)

    def extract_session(self, session_id: str) -> Optional[FlowState]:
        return self._sessions.extract(session_id)

    def process_message(self, message: str, ctx: ContextData) -> ActionResult:
        """
        Process one user message.

        :param message: Raw user message
        :param ctx: Caller context (user, tenant, role)
        :return: ActionResult; soft misses have fallback_eligible=True
        :raises: UnsupportedIntentError if a handler cannot execute its own intent
        """
        session_id = ctx.session_id

        with self._sessions.session_lock(session_id):
            state = self._sessions.extract(session_id)
            if state is not None and state.state is FlowStatus.COMPLETED:
                self._sessions.remove(session_id)
                state = None

            if state is not None:
                logger.info(f"Active flow for session {session_id} (state={state.state})")
                return self._flow.advance(session_id, message, ctx, state)

            resolution = self._resolver.resolve(message)
            if resolution is None:
                logger.info(f"No intent detected for session {session_id}")
                return ActionResult(success=False, message=NO_INTENT_MESSAGE, fallback_eligible=True)

            intent, handler = resolution.intent, resolution.handler

            if not handler.check_permission(ctx, intent):
                logger.warning(f"Permission denied: intent={intent.name} role={ctx.role} user={ctx.user_id}")
                return ActionResult.fail(PERMISSION_DENIED_MESSAGE)

            if requires_confirmation(intent.name):
                return self._flow.start(session_id, intent)

            logger.info(f"Executing {intent.name} directly")
            return self._execute(handler, ctx, intent)

    def _execute(self, handler: IntentHandler, ctx: ContextData, intent: Intent) -> ActionResult:
        """
        Run a handler and stamp the result with an operation id.

        Handler failures become unsuccessful results; UnsupportedIntentError
        propagates.
        """
        operation_id = str(uuid.uuid4())
        try:
            result = handler.execute(ctx, intent)
        except UnsupportedIntentError:
            raise
        except Exception as e:
            logger.error(f"Error executing {intent.name} (operation {operation_id}): {e}")
            result = ActionResult.fail(EXECUTION_ERROR_MESSAGE.format(error=e))
        return result.with_operation_id(operation_id)
