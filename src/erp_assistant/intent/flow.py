"""
Flow state machine for multi-turn confirmation.

States: (none) -> awaiting_confirmation -> removed after confirm or cancel.
data_collection is accepted from injected sessions; it only supports
cancellation and otherwise re-prompts.
"""
import logging
import uuid
from typing import Callable

from . import confirmation
from .registry import HandlerRegistry
from .types import ActionResult, ContextData, FlowState, FlowStatus, Intent
from ..memory.session_store import SessionStore

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Operação cancelada. Posso ajudar com mais alguma coisa?"
HANDLER_MISSING_MESSAGE = "Desculpe, ocorreu um erro ao processar sua solicitação. Por favor, tente novamente."
DATA_COLLECTION_MESSAGE = "Precisamos de mais informações para continuar."
UNKNOWN_STATE_MESSAGE = "Desculpe, ocorreu um erro. Pode tentar novamente?"

Executor = Callable[..., ActionResult]


class FlowStateMachine:
    """
    Starts confirmation flows and consumes follow-up messages.

    Callers hold the session lock; the machine itself does not lock.
    """

    def __init__(self, registry: HandlerRegistry, sessions: SessionStore, executor: Executor):
        """
        :param registry: Handler registry used to find the executor of a pending intent
        :param sessions: Session store
        :param executor: callable(handler, ctx, intent) -> ActionResult with an operation id
        """
        self._registry = registry
        self._sessions = sessions
        self._execute = executor

    def start(self, session_id: str, intent: Intent) -> ActionResult:
        """Open a confirmation flow for an intent and return the prompt."""
        prompt = confirmation.build_confirmation_message(intent.name, intent.entities)
        state = FlowState(
            state=FlowStatus.AWAITING_CONFIRMATION,
            pending_intent=intent,
            current_message=prompt,
        )
        self._sessions.inject(session_id, state)
        logger.info(f"Confirmation flow created for session {session_id} (intent={intent.name})")
        return ActionResult.ok(prompt, {"awaiting_confirmation": True, "intent": intent.name})

    def advance(self, session_id: str, message: str, ctx: ContextData, state: FlowState) -> ActionResult:
        """
        Route a message that arrived while a flow is pending.

        :param state: The live flow state of session_id
        """
        if state.state is FlowStatus.AWAITING_CONFIRMATION:
            return self._awaiting_confirmation(session_id, message, ctx, state)

        if state.state is FlowStatus.DATA_COLLECTION:
            if confirmation.is_negative(message):
                self._sessions.remove(session_id)
                logger.info(f"Data collection cancelled for session {session_id}")
                return ActionResult.ok(CANCELLED_MESSAGE)
            return ActionResult.fail(DATA_COLLECTION_MESSAGE, {"data_collection": True})

        logger.warning(f"Unknown flow state '{state.state}' for session {session_id}; resetting")
        self._sessions.remove(session_id)
        return ActionResult.fail(UNKNOWN_STATE_MESSAGE)

    def _awaiting_confirmation(self, session_id, message, ctx, state: FlowState) -> ActionResult:
        intent = state.pending_intent

        if confirmation.is_affirmative(message):
            try:
                handler = self._registry.find_executor(intent.name, intent.original_message)
                if handler is None:
                    logger.error(f"No handler found for confirmed intent {intent.name}")
                    return ActionResult.fail(HANDLER_MISSING_MESSAGE).with_operation_id(str(uuid.uuid4()))
                logger.info(f"Intent {intent.name} confirmed for session {session_id}")
                return self._execute(handler, ctx, intent)
            finally:
                self._sessions.remove(session_id)

        if confirmation.is_negative(message):
            self._sessions.remove(session_id)
            logger.info(f"Intent {intent.name} cancelled for session {session_id}")
            return ActionResult.ok(CANCELLED_MESSAGE)

        return ActionResult.fail(
            state.current_message,
            {"awaiting_confirmation": True, "intent": intent.name},
        )
