"""
Tests for the customer intent handler.
"""
from unittest.mock import Mock

import pytest

from erp_assistant.exceptions import RepositoryError, UnsupportedIntentError
from erp_assistant.handlers import CustomerIntentHandler
from erp_assistant.intent import ContextData, Intent
from erp_assistant.models import Customer


@pytest.fixture
def handler(customers):
    return CustomerIntentHandler(customers)


@pytest.fixture
def ctx():
    return ContextData(user_id="u1", tenant_id="t1", role="admin")


class TestCustomerExtraction:
    """Tests for recognition and entity extraction."""

    def test_inline_create(self, handler):
        """Name and document are split at the next field keyword."""
        intent = handler.extract("cadastrar cliente nome João CPF 123")

        assert intent.name == "create_customer"
        assert intent.confidence >= 0.7
        assert dict(intent.entities) == {"name": "João", "document": "123"}
        assert intent.original_message == "cadastrar cliente nome João CPF 123"

    def test_form_create(self, handler):
        """Form-style input wins over the inline patterns."""
        message = (
            "cadastrar cliente:\n"
            "Nome: Maria Souza\n"
            "CPF: 123.456.789-00\n"
            "Email: maria@exemplo.com\n"
            "Telefone: (11) 99999-0000"
        )
        intent = handler.extract(message)

        assert intent.name == "create_customer"
        assert intent.confidence == 0.9
        assert intent.get("name") == "Maria Souza"
        assert intent.get("document") == "123.456.789-00"
        assert intent.get("email") == "maria@exemplo.com"
        assert intent.get("phone") == "(11) 99999-0000"

    def test_get_by_email(self, handler):
        intent = handler.extract("buscar cliente email joao@mercado.com")

        assert intent.name == "get_customer"
        assert intent.get("email") == "joao@mercado.com"

    def test_list(self, handler):
        assert handler.extract("listar clientes").name == "list_customers"
        assert handler.extract("quais são os clientes cadastrados?").name == "list_customers"

    def test_delete_by_name(self, handler):
        intent = handler.extract("excluir cliente nome João")

        assert intent.name == "delete_customer"
        assert intent.get("name") == "João"

    def test_update_keeps_lookup_and_new_value_apart(self, handler):
        intent = handler.extract("atualizar cliente nome João novo email joao.novo@mercado.com")

        assert intent.name == "update_customer"
        assert intent.get("name") == "João"
        assert intent.get("new_email") == "joao.novo@mercado.com"
        assert "email" not in intent.entities

    def test_generic_mention(self, handler):
        intent = handler.extract("quero falar sobre clientes")

        assert intent.name == "customer_generic"
        assert intent.confidence == 0.4
        assert dict(intent.entities) == {}

    def test_can_handle_matches_extract(self, handler):
        for message in ("listar clientes", "bom dia", "cadastrar cliente nome Ana", ""):
            assert handler.can_handle(message) == (handler.extract(message) is not None)

    def test_unrelated_message(self, handler):
        assert not handler.can_handle("qual a previsão do tempo?")
        assert handler.extract("qual a previsão do tempo?") is None


class TestCustomerPermissions:
    """Tests for role checks."""

    @pytest.mark.parametrize("role", ["admin", "administrador", "gerente", "vendedor", "sales"])
    def test_allowed(self, handler, role):
        assert handler.check_permission(ContextData(user_id="u", tenant_id="t", role=role))

    @pytest.mark.parametrize("role", ["financeiro", "estoque", "", "user"])
    def test_denied(self, handler, role):
        assert not handler.check_permission(ContextData(user_id="u", tenant_id="t", role=role))


class TestCustomerExecution:
    """Tests for execute() against the in-memory repository."""

    def test_create(self, handler, customers, ctx):
        result = handler.execute(ctx, Intent("create_customer", 0.8, {"name": "João", "document": "123"}))

        assert result.success
        assert "João" in result.message
        created = customers.find_by_id("t1", result.data["customer_id"])
        assert created.document == "123"
        assert created.customer_type == "PF"

    def test_create_company_from_cnpj(self, handler, customers, ctx):
        result = handler.execute(
            ctx, Intent("create_customer", 0.8, {"name": "Mercado Central", "document": "12.345.678/0001-90"})
        )

        assert customers.find_by_id("t1", result.data["customer_id"]).customer_type == "PJ"

    def test_create_requires_name(self, handler, ctx):
        result = handler.execute(ctx, Intent("create_customer", 0.8, {"document": "123"}))

        assert not result.success
        assert "nome" in result.message

    def test_create_duplicate_document(self, handler, customers, ctx):
        customers.create("t1", Customer(id="", name="Ana", tenant_id="t1", document="123.456"))

        result = handler.execute(ctx, Intent("create_customer", 0.8, {"name": "Outra", "document": "123456"}))

        assert not result.success
        assert "Ana" in result.message

    def test_create_duplicate_name(self, handler, customers, ctx):
        customers.create("t1", Customer(id="", name="João", tenant_id="t1"))

        result = handler.execute(ctx, Intent("create_customer", 0.8, {"name": "joão"}))

        assert not result.success
        assert "Já existe um cliente chamado" in result.message

    def test_get_ambiguous_name(self, handler, customers, ctx):
        customers.create("t1", Customer(id="", name="João Silva", tenant_id="t1"))
        customers.create("t1", Customer(id="", name="João Souza", tenant_id="t1"))

        result = handler.execute(ctx, Intent("get_customer", 0.8, {"name": "João"}))

        assert not result.success
        assert len(result.data["matches"]) == 2

    def test_get_is_tenant_scoped(self, handler, customers, ctx):
        customers.create("t2", Customer(id="", name="João", tenant_id="t2"))

        result = handler.execute(ctx, Intent("get_customer", 0.8, {"name": "João"}))

        assert not result.success

    def test_update(self, handler, customers, ctx):
        created = customers.create("t1", Customer(id="", name="João", tenant_id="t1", email="a@b.com"))

        result = handler.execute(ctx, Intent("update_customer", 0.8, {"name": "João", "new_email": "c@d.com"}))

        assert result.success
        assert result.data["changed"] == ["email"]
        assert customers.find_by_id("t1", created.id).email == "c@d.com"

    def test_update_without_changes(self, handler, customers, ctx):
        customers.create("t1", Customer(id="", name="João", tenant_id="t1"))

        result = handler.execute(ctx, Intent("update_customer", 0.8, {"name": "João"}))

        assert not result.success

    def test_delete(self, handler, customers, ctx):
        created = customers.create("t1", Customer(id="", name="João", tenant_id="t1"))

        result = handler.execute(ctx, Intent("delete_customer", 0.8, {"id": created.id}))

        assert result.success
        assert customers.find_by_id("t1", created.id) is None

    def test_list_pages_first_ten(self, handler, customers, ctx):
        for i in range(12):
            customers.create("t1", Customer(id="", name=f"Cliente {i:02d}", tenant_id="t1"))

        result = handler.execute(ctx, Intent("list_customers", 0.8))

        assert result.success
        assert result.data["count"] == 12
        assert "Existem mais 2 clientes" in result.message

    def test_list_empty(self, handler, ctx):
        result = handler.execute(ctx, Intent("list_customers", 0.8))

        assert result.success
        assert result.data == {"count": 0}

    def test_repository_error_becomes_failure(self, ctx):
        repo = Mock()
        repo.find_all.side_effect = RepositoryError("database down")
        result = CustomerIntentHandler(repo).execute(ctx, Intent("list_customers", 0.8))

        assert not result.success
        assert "database down" in result.message

    def test_generic_asks_for_details(self, handler, ctx):
        result = handler.execute(ctx, Intent("customer_generic", 0.4))

        assert not result.success
        assert "listar clientes" in result.message

    def test_unsupported_intent(self, handler, ctx):
        with pytest.raises(UnsupportedIntentError):
            handler.execute(ctx, Intent("create_product", 0.8))
