"""
Shared fixtures: in-memory repositories, a wired engine and caller contexts.
"""
import pytest

from erp_assistant.handlers import create_default_handlers
from erp_assistant.intent import ContextData, IntentEngine
from erp_assistant.memory import InMemorySessionStore
from erp_assistant.repository import (
    InMemoryCustomerRepository,
    InMemoryProductRepository,
    InMemoryUserRepository,
)


@pytest.fixture
def customers():
    return InMemoryCustomerRepository()


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def products():
    return InMemoryProductRepository()


@pytest.fixture
def sessions():
    return InMemorySessionStore(ttl_seconds=None)


@pytest.fixture
def engine(customers, users, products, sessions):
    """Engine with the default customer/user/product handlers."""
    engine = IntentEngine(sessions=sessions)
    for handler in create_default_handlers(customers, users, products):
        engine.register_handler(handler)
    return engine


@pytest.fixture
def admin_ctx():
    return ContextData(user_id="u-admin", tenant_id="t1", role="admin")


@pytest.fixture
def sales_ctx():
    return ContextData(user_id="u-sales", tenant_id="t1", role="vendedor")
