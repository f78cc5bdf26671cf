"""
Chat orchestrator - intent engine first, LLM fallback second.
"""
import logging
import time
from typing import Optional

from ..intent.engine import IntentEngine
from ..intent.types import ActionResult, ContextData
from ..memory.chat_history import ChatHistoryStore, ChatMessage
from ..schemas import AssistantReply
from .fallback import FallbackOrchestrator

logger = logging.getLogger(__name__)


class ChatOrchestrator:
    """
    Routes one chat turn.

    Read path: engine -> (soft miss) fallback -> reply
    Write path: user and assistant messages appended to the history store
    """

    def __init__(
        self,
        engine: IntentEngine,
        fallback: Optional[FallbackOrchestrator] = None,
        history: Optional[ChatHistoryStore] = None,
        min_confidence: float = 0.0,
    ):
        """
        :param engine: Intent engine
        :param fallback: LLM fallback; None disables it
        :param history: Chat history store; None disables recording
        :param min_confidence: Intents below this confidence go to the fallback instead
        """
        self._engine = engine
        self._fallback = fallback
        self._history = history
        self._min_confidence = min_confidence

    def handle(self, message: str, ctx: ContextData, timeout: Optional[float] = None) -> AssistantReply:
        """
        Process one user message end to end.

        :param timeout: Fallback timeout in seconds
        :raises: CompletionServiceError if the LLM provider fails
        """
        started = time.perf_counter()

        result = None
        if not self._should_skip_engine(message, ctx):
            result = self._engine.process_message(message, ctx)

        if result is not None and not result.fallback_eligible:
            source = "confirmation" if (result.data or {}).get("awaiting_confirmation") else "intent"
            reply = self._to_reply(result, source)
        elif self._fallback is not None:
            logger.info(f"Falling back to LLM for session {ctx.session_id}")
            reply = self._to_reply(self._fallback.respond(message, ctx, timeout=timeout), "llm")
        else:
            reply = self._to_reply(result, "intent")

        reply.latency_ms = int((time.perf_counter() - started) * 1000)
        self._record(ctx, message, reply.answer)
        return reply

    def _should_skip_engine(self, message: str, ctx: ContextData) -> bool:
        """
        Low-confidence recognitions (generic intents) go straight to the LLM
        when a threshold is configured and no flow is pending.
        """
        if self._fallback is None or self._min_confidence <= 0:
            return False
        if self._engine.extract_session(ctx.session_id) is not None:
            return False
        resolution = self._engine.resolve(message)
        return resolution is not None and resolution.intent.confidence < self._min_confidence

    def _to_reply(self, result: ActionResult, source: str) -> AssistantReply:
        data = dict(result.data or {})
        return AssistantReply(
            answer=result.message,
            success=result.success,
            source=source,
            intent=data.get("intent"),
            operation_id=result.operation_id,
            awaiting_confirmation=bool(data.get("awaiting_confirmation")),
            data=data,
        )

    def _record(self, ctx: ContextData, user_text: str, assistant_text: str) -> None:
        if self._history is None:
            return
        self._history.save(ChatMessage(role="user", content=user_text, user_id=ctx.user_id, tenant_id=ctx.tenant_id))
        self._history.save(
            ChatMessage(role="assistant", content=assistant_text, user_id=ctx.user_id, tenant_id=ctx.tenant_id)
        )
