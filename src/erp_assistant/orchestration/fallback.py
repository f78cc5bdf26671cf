"""
LLM fallback for messages no intent handler recognized.

The external completion service is reached through a narrow contract
(CompletionService) so tests and alternative providers can plug in.
"""
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from ..exceptions import CompletionServiceError
from ..intent.types import ActionResult, ContextData
from ..memory.chat_history import ChatHistoryStore

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_MESSAGE = "Não foi possível gerar uma resposta. Tente novamente."
TIMEOUT_MESSAGE = "O assistente demorou muito para responder. Tente novamente em instantes."

SYSTEM_PROMPT = (
    "Você é {assistant}, a assistente virtual do Sistema ERP para supermercados.\n"
    "Você está conversando com o usuário (ID: {user_id}) do tenant: {tenant_id} com o papel: {role}.\n"
    "Forneça respostas diretas e úteis sobre funcionamento do sistema, relatórios e dados.\n"
    "Se o usuário quiser realizar ações no sistema como criar usuários, produtos ou clientes, "
    "oriente-o a usar comandos específicos (por exemplo, 'cadastrar cliente nome João CPF 123').\n"
    "Para consultas que não exigem ação direta nos dados, forneça informações úteis baseadas "
    "no contexto da conversa."
)


@dataclass(frozen=True)
class CompletionMessage:
    role: str  # "user" or "assistant"
    content: str


@dataclass(frozen=True)
class CompletionRequest:
    system: str
    messages: List[CompletionMessage] = field(default_factory=list)
    max_tokens: int = 4096
    timeout: Optional[float] = None  # seconds; the provider call is aborted after it


class CompletionService(ABC):
    """Protocol for the external text-completion call."""

    @abstractmethod
    def complete(self, request: CompletionRequest) -> str:
        """
        :return: Completion text
        :raises: CompletionServiceError on provider failure
        """


class LangChainCompletionService(CompletionService):
    """Completion service backed by a LangChain chat model (ChatOpenAI, ChatGroq...)."""

    def __init__(self, llm: Any):
        """
        :param llm: LangChain chat model from get_llm_instance()
        """
        self._llm = llm

    def complete(self, request: CompletionRequest) -> str:
        messages = to_langchain_messages(request)
        try:
            response = self._llm.invoke(messages, **_invoke_kwargs(request))
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            body = getattr(e, "body", None)
            logger.error(f"Completion service failed (status={status_code}): {e}")
            raise CompletionServiceError(
                f"Erro no serviço de IA: {e}",
                status_code=status_code,
                body=str(body) if body is not None else None,
            ) from e
        return _content_text(getattr(response, "content", response))


def _invoke_kwargs(request: CompletionRequest) -> dict:
    # Forwarded to the provider client, so the HTTP request itself honours the deadline
    kwargs = {"max_tokens": request.max_tokens}
    if request.timeout is not None:
        kwargs["timeout"] = request.timeout
    return kwargs


def to_langchain_messages(request: CompletionRequest) -> List[BaseMessage]:
    messages: List[BaseMessage] = [SystemMessage(content=request.system)]
    for message in request.messages:
        if message.role == "assistant":
            messages.append(AIMessage(content=message.content))
        else:
            messages.append(HumanMessage(content=message.content))
    return messages


def _content_text(content: Any) -> str:
    # Some providers return a list of content blocks
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return content if isinstance(content, str) else str(content or "")


class FallbackOrchestrator:
    """
    Answers free-form messages with the LLM, using recent chat history.

    The deadline travels with the request so the provider aborts the call.
    Each call also runs on its own worker thread, so a provider that ignores
    the deadline only holds that thread and never delays other sessions; a
    timeout becomes an unsuccessful ActionResult.
    """

    def __init__(
        self,
        service: CompletionService,
        history: Optional[ChatHistoryStore] = None,
        assistant_name: str = "Angie",
        history_limit: int = 10,
        max_tokens: int = 4096,
        default_timeout: Optional[float] = 30.0,
    ):
        """
        :param service: Completion service
        :param history: Chat history store (optional)
        :param history_limit: Most recent history messages sent as context
        :param max_tokens: Completion budget
        :param default_timeout: Seconds to wait when the caller passes no timeout
        """
        self._service = service
        self._history = history
        self._assistant_name = assistant_name
        self._history_limit = history_limit
        self._max_tokens = max_tokens
        self._default_timeout = default_timeout
        self._closed = False

    def build_request(self, message: str, ctx: ContextData, timeout: Optional[float] = None) -> CompletionRequest:
        system = SYSTEM_PROMPT.format(
            assistant=self._assistant_name,
            user_id=ctx.user_id,
            tenant_id=ctx.tenant_id,
            role=ctx.role or "-",
        )

        messages: List[CompletionMessage] = []
        if self._history is not None and self._history_limit > 0:
            recent = self._history.get_history(ctx.tenant_id, ctx.user_id, limit=self._history_limit)
            # Store returns newest first
            for item in reversed(recent):
                if item.role == "system":
                    continue
                messages.append(CompletionMessage(role=item.role, content=item.content))

        if message and not (messages and messages[-1].role == "user" and messages[-1].content == message):
            messages.append(CompletionMessage(role="user", content=message))

        return CompletionRequest(system=system, messages=messages, max_tokens=self._max_tokens, timeout=timeout)

    def respond(self, message: str, ctx: ContextData, timeout: Optional[float] = None) -> ActionResult:
        """
        Ask the LLM to answer a message.

        :param timeout: Seconds to wait; None uses the configured default
        :return: ActionResult with the model's answer verbatim
        :raises: CompletionServiceError if the provider fails
        :raises: RuntimeError after shutdown()
        """
        if self._closed:
            raise RuntimeError("FallbackOrchestrator has been shut down")

        wait = timeout if timeout is not None else self._default_timeout
        request = self.build_request(message, ctx, timeout=wait)

        logger.info(f"Fallback completion for {ctx.session_id} ({len(request.messages)} messages)")
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="llm-fallback")
        try:
            future = executor.submit(self._service.complete, request)
        finally:
            # The worker exits on its own once the call returns or is aborted
            executor.shutdown(wait=False)

        try:
            text = future.result(timeout=wait)
        except FutureTimeoutError:
            logger.warning(f"Fallback completion timed out after {wait}s for {ctx.session_id}")
            return ActionResult.fail(TIMEOUT_MESSAGE, {"timeout": True})

        if not text or not text.strip():
            return ActionResult.fail(EMPTY_RESPONSE_MESSAGE)
        return ActionResult.ok(text, {"source": "llm"})

    def shutdown(self) -> None:
        """Refuse further completions."""
        self._closed = True
