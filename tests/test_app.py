"""
Tests for the AssistantApp facade.
"""
from unittest.mock import Mock, patch

import pytest
from langchain_core.messages import AIMessage

from erp_assistant.app import AssistantApp
from erp_assistant.config import AssistantConfig
from erp_assistant.exceptions import AppNotInitializedError, ConfigurationError
from erp_assistant.intent import ContextData
from erp_assistant.orchestration import CompletionService


class StaticService(CompletionService):

    def complete(self, request):
        return "Olá! Sou a Angie."


@pytest.fixture
def ctx():
    return ContextData(user_id="u1", tenant_id="t1", role="admin")


class TestAssistantApp:
    """Tests for AssistantApp."""

    def test_chat_before_initialize(self, ctx):
        app = AssistantApp(AssistantConfig(enable_fallback=False))

        with pytest.raises(AppNotInitializedError):
            app.chat("listar clientes", ctx)
        with pytest.raises(AppNotInitializedError):
            app.engine

    def test_without_fallback(self, ctx):
        app = AssistantApp(AssistantConfig(enable_fallback=False))
        app.initialize()

        reply = app.chat("listar clientes", ctx)

        assert reply.success
        assert reply.source == "intent"
        assert len(app.engine.get_handlers()) == 3

    def test_full_conversation(self, ctx):
        app = AssistantApp(AssistantConfig(), completion_service=StaticService())
        app.initialize()

        prompt = app.chat("cadastrar cliente nome João CPF 123", ctx)
        done = app.chat("confirmar", ctx)
        listing = app.chat("listar clientes", ctx)
        smalltalk = app.chat("bom dia!", ctx)
        app.shutdown()

        assert prompt.awaiting_confirmation
        assert done.success and done.operation_id
        assert "João" in listing.answer
        assert smalltalk.source == "llm"
        assert smalltalk.answer == "Olá! Sou a Angie."

    def test_injected_llm_skips_factory(self, ctx):
        llm = Mock()
        llm.invoke.return_value = AIMessage(content="resposta")
        config = AssistantConfig(llm=llm)

        with patch("erp_assistant.app.get_llm_instance") as factory:
            app = AssistantApp(config)
            app.initialize()

        factory.assert_not_called()
        assert app.chat("bom dia!", ctx).answer == "resposta"
        app.shutdown()

    def test_llm_built_from_config(self):
        config = AssistantConfig(llm_provider="groq", llm_model="llama-3.1-8b-instant", fallback_max_tokens=300)

        with patch("erp_assistant.app.get_llm_instance", return_value=Mock()) as factory:
            AssistantApp(config).initialize()

        factory.assert_called_once_with(
            provider="groq", model="llama-3.1-8b-instant", max_tokens=300, timeout=30.0
        )

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            AssistantApp(AssistantConfig(llm_provider="acme")).initialize()

    def test_initialize_is_idempotent(self):
        app = AssistantApp(AssistantConfig(enable_fallback=False))
        app.initialize()
        engine = app.engine

        app.initialize()

        assert app.engine is engine
