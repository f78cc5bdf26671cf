"""
Tests for the in-memory repositories.
"""
import pytest

from erp_assistant.exceptions import EntityNotFoundError, RepositoryError
from erp_assistant.models import Customer, Product, User


class TestInMemoryCustomerRepository:

    def test_create_assigns_id_and_tenant(self, customers):
        created = customers.create("t1", Customer(id="", name="João", tenant_id="ignored"))

        assert created.id
        assert created.tenant_id == "t1"

    def test_returns_copies(self, customers):
        created = customers.create("t1", Customer(id="", name="João", tenant_id="t1"))
        created.name = "Alterado"

        assert customers.find_by_id("t1", created.id).name == "João"

    def test_document_lookup_ignores_formatting(self, customers):
        customers.create("t1", Customer(id="", name="João", tenant_id="t1", document="123.456.789-00"))

        assert customers.find_by_document("t1", "12345678900").name == "João"
        assert customers.find_by_document("t2", "12345678900") is None

    def test_name_search_is_partial_and_case_insensitive(self, customers):
        customers.create("t1", Customer(id="", name="João Silva", tenant_id="t1"))

        assert len(customers.find_by_name("t1", "silva")) == 1

    def test_update_missing(self, customers):
        with pytest.raises(EntityNotFoundError):
            customers.update("t1", Customer(id="nope", name="X", tenant_id="t1"))

    def test_delete_missing(self, customers):
        with pytest.raises(EntityNotFoundError):
            customers.delete("t1", "nope")

    def test_missing_tenant(self, customers):
        with pytest.raises(RepositoryError):
            customers.create("", Customer(id="", name="X", tenant_id=""))


class TestInMemoryUserRepository:

    def test_duplicate_email(self, users):
        users.create("t1", User(id="", name="Ana", email="ana@x.com", tenant_id="t1"))

        with pytest.raises(RepositoryError):
            users.create("t1", User(id="", name="Outra", email="ANA@x.com", tenant_id="t1"))

    def test_same_email_other_tenant(self, users):
        users.create("t1", User(id="", name="Ana", email="ana@x.com", tenant_id="t1"))

        assert users.create("t2", User(id="", name="Ana", email="ana@x.com", tenant_id="t2")).id


class TestInMemoryProductRepository:

    def test_update_stock(self, products):
        created = products.create("t1", Product(id="", name="Arroz", tenant_id="t1", sku="A1"))

        updated = products.update_stock("t1", created.id, 25)

        assert updated.stock_qty == 25

    def test_negative_stock(self, products):
        created = products.create("t1", Product(id="", name="Arroz", tenant_id="t1", sku="A1"))

        with pytest.raises(RepositoryError):
            products.update_stock("t1", created.id, -1)

    def test_update_stock_missing(self, products):
        with pytest.raises(EntityNotFoundError):
            products.update_stock("t1", "nope", 1)

    def test_find_all_sorted(self, products):
        products.create("t1", Product(id="", name="feijão", tenant_id="t1", sku="F1"))
        products.create("t1", Product(id="", name="Arroz", tenant_id="t1", sku="A1"))

        assert [p.name for p in products.find_all("t1")] == ["Arroz", "feijão"]
