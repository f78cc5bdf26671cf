"""
Tests for the product intent handler.
"""
import re

import pytest
from pydantic import ValidationError

from erp_assistant.handlers import ProductIntentHandler
from erp_assistant.handlers.product import DEFAULT_CATEGORY, INVALID_VALUES_MESSAGE, generate_sku
from erp_assistant.intent import ContextData, Intent
from erp_assistant.intent.entities import ProductEntities
from erp_assistant.models import Product


@pytest.fixture
def handler(products):
    return ProductIntentHandler(products)


@pytest.fixture
def ctx():
    return ContextData(user_id="u1", tenant_id="t1", role="gerente")


def _ctx(role):
    return ContextData(user_id="u", tenant_id="t1", role=role)


class TestProductExtraction:
    """Tests for recognition and entity extraction."""

    def test_create_with_all_fields(self, handler):
        intent = handler.extract("cadastrar produto nome Arroz Tio João preço 25,90 estoque 100 categoria Grãos")

        assert intent.name == "create_product"
        assert intent.get("name") == "Arroz Tio João"
        assert intent.get("price") == "25,90"
        assert intent.get("stock") == "100"
        assert intent.get("category") == "Grãos"

    def test_update_stock_target_number(self, handler):
        intent = handler.extract("atualizar estoque do produto Arroz para 40")

        assert intent.name == "update_stock"
        assert intent.get("name") == "Arroz"
        assert intent.get("stock") == "40"

    def test_update_price_by_sku(self, handler):
        intent = handler.extract("alterar preço do produto sku ARZ12345 para 19,90")

        assert intent.name == "update_price"
        assert intent.get("sku") == "ARZ12345"
        assert intent.get("price") == "19,90"
        assert "name" not in intent.entities

    def test_name_after_noun(self, handler):
        intent = handler.extract("buscar produto Feijão")

        assert intent.name == "get_product"
        assert intent.get("name") == "Feijão"

    def test_list(self, handler):
        assert handler.extract("listar produtos").name == "list_products"

    def test_generic(self, handler):
        intent = handler.extract("qual o preço do arroz?")

        assert intent.name == "product_generic"
        assert intent.confidence == 0.4


class TestProductPermissions:
    """Tests for the role matrix."""

    def test_full_access_roles(self, handler):
        for role in ("admin", "gerente", "estoque"):
            assert handler.check_permission(_ctx(role), Intent("delete_product", 0.8))
            assert handler.check_permission(_ctx(role))

    def test_sales_reads_only(self, handler):
        assert handler.check_permission(_ctx("vendedor"), Intent("get_product", 0.8))
        assert handler.check_permission(_ctx("vendedor"), Intent("product_generic", 0.4))
        assert not handler.check_permission(_ctx("vendedor"), Intent("create_product", 0.8))
        assert not handler.check_permission(_ctx("vendedor"))

    def test_other_roles_list_and_get(self, handler):
        assert handler.check_permission(_ctx("financeiro"), Intent("list_products", 0.8))
        assert not handler.check_permission(_ctx("financeiro"), Intent("update_stock", 0.8))
        assert not handler.check_permission(_ctx("financeiro"), Intent("product_generic", 0.4))


class TestProductExecution:
    """Tests for execute() against the in-memory repository."""

    def test_create_defaults(self, handler, products, ctx):
        result = handler.execute(ctx, Intent("create_product", 0.8, {"name": "Arroz", "price": "25,90"}))

        assert result.success
        created = products.find_by_id("t1", result.data["product_id"])
        assert created.price == pytest.approx(25.9)
        assert created.stock_qty == 0
        assert created.category == DEFAULT_CATEGORY
        assert re.fullmatch(r"ARR\d{5}", created.sku)

    def test_create_duplicate_sku(self, handler, products, ctx):
        products.create("t1", Product(id="", name="Arroz", tenant_id="t1", sku="ARZ1"))

        result = handler.execute(ctx, Intent("create_product", 0.8, {"name": "Outro", "sku": "arz1"}))

        assert not result.success

    def test_update_stock(self, handler, products, ctx):
        products.create("t1", Product(id="", name="Arroz", tenant_id="t1", sku="ARZ1", stock_qty=10))

        result = handler.execute(ctx, Intent("update_stock", 0.8, {"name": "Arroz", "stock": "40"}))

        assert result.success
        assert "de 10 para 40" in result.message
        assert products.find_by_sku("t1", "ARZ1").stock_qty == 40

    def test_update_stock_requires_quantity(self, handler, ctx):
        result = handler.execute(ctx, Intent("update_stock", 0.8, {"name": "Arroz"}))

        assert not result.success

    def test_update_price_formats_brl(self, handler, products, ctx):
        products.create("t1", Product(id="", name="TV", tenant_id="t1", sku="TV1", price=999.0))

        result = handler.execute(ctx, Intent("update_price", 0.8, {"sku": "TV1", "price": "1.234,56"}))

        assert result.success
        assert "R$ 999,00" in result.message
        assert "R$ 1.234,56" in result.message
        assert products.find_by_sku("t1", "TV1").price == pytest.approx(1234.56)

    def test_update_product_fields(self, handler, products, ctx):
        products.create("t1", Product(id="", name="Arroz", tenant_id="t1", sku="ARZ1"))

        result = handler.execute(
            ctx, Intent("update_product", 0.8, {"sku": "ARZ1", "new_name": "Arroz Integral", "category": "Grãos"})
        )

        assert result.data["changed"] == ["nome", "categoria"]

    def test_list_by_category(self, handler, products, ctx):
        products.create("t1", Product(id="", name="Arroz", tenant_id="t1", sku="A1", category="Grãos"))
        products.create("t1", Product(id="", name="Sabão", tenant_id="t1", sku="S1", category="Limpeza"))

        result = handler.execute(ctx, Intent("list_products", 0.8, {"category": "grãos"}))

        assert result.data["count"] == 1
        assert "Arroz" in result.message

    def test_delete_missing(self, handler, ctx):
        result = handler.execute(ctx, Intent("delete_product", 0.8, {"name": "Inexistente"}))

        assert not result.success
        assert "Inexistente" in result.message


class TestProductHelpers:
    """Tests for SKU generation and price parsing."""

    def test_generate_sku_strips_accents(self):
        assert generate_sku("Água Mineral").startswith("AGU")
        assert generate_sku("123").startswith("123")
        assert generate_sku("!!").startswith("PRD")

    @pytest.mark.parametrize(
        "raw, expected",
        [("25,90", 25.9), ("1.234,56", 1234.56), ("12.50", 12.5), ("R$ 7", 7.0)],
    )
    def test_price_parsing(self, raw, expected):
        assert ProductEntities(price=raw).price == pytest.approx(expected)

    def test_unparseable_price_is_missing(self):
        assert ProductEntities(price="caro").price is None

    @pytest.mark.parametrize("raw", ["1.2.3", "12,5,0", "1.23,4.5"])
    def test_malformed_price_rejected(self, raw):
        with pytest.raises(ValidationError):
            ProductEntities(price=raw)

    def test_thousands_without_decimals(self):
        assert ProductEntities(price="1.234.567").price == pytest.approx(1234567)


class TestMalformedPriceConversation:
    """A bad price reaches the user as a readable message."""

    def test_execute_reports_invalid_price(self, handler, products, ctx):
        result = handler.execute(ctx, Intent("create_product", 0.8, {"name": "Arroz", "price": "1.2.3"}))

        assert not result.success
        assert result.message == INVALID_VALUES_MESSAGE.format(fields="preço")
        assert products.find_all("t1") == []

    def test_confirmed_create_with_invalid_price(self, engine, admin_ctx, products):
        prompt = engine.process_message("cadastrar produto nome Arroz preço 1.2.3", admin_ctx)
        assert prompt.data["awaiting_confirmation"] is True

        result = engine.process_message("confirmar", admin_ctx)

        assert not result.success
        assert result.message == INVALID_VALUES_MESSAGE.format(fields="preço")
        assert "validation error" not in result.message.lower()
        assert result.operation_id
        assert products.find_all("t1") == []
