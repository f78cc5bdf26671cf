"""
Thread-safe in-memory repositories.

Used by the demo and the tests. Records are copied on the way in and out so
callers never share mutable state with the store.
"""
import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from ..exceptions import EntityNotFoundError, RepositoryError
from ..models import Customer, Product, User
from .base import CustomerRepository, ProductRepository, UserRepository

T = TypeVar("T")


class _TenantTable(Generic[T]):
    """tenant_id -> {record id -> record}, guarded by one lock."""

    def __init__(self, entity: str):
        self._entity = entity
        self._rows: Dict[str, Dict[str, T]] = {}
        self._lock = threading.Lock()

    def insert(self, tenant_id: str, record: T) -> T:
        if not tenant_id:
            raise RepositoryError(f"{self._entity}: tenant_id is required")
        with self._lock:
            if not record.id:
                record.id = str(uuid.uuid4())
            rows = self._rows.setdefault(tenant_id, {})
            if record.id in rows:
                raise RepositoryError(f"{self._entity} '{record.id}' already exists")
            record.tenant_id = tenant_id
            rows[record.id] = copy.deepcopy(record)
            return copy.deepcopy(record)

    def replace(self, tenant_id: str, record: T) -> T:
        with self._lock:
            rows = self._rows.get(tenant_id, {})
            if record.id not in rows:
                raise EntityNotFoundError(self._entity, record.id)
            record.updated_at = datetime.now(timezone.utc)
            rows[record.id] = copy.deepcopy(record)
            return copy.deepcopy(record)

    def remove(self, tenant_id: str, record_id: str) -> None:
        with self._lock:
            rows = self._rows.get(tenant_id, {})
            if record_id not in rows:
                raise EntityNotFoundError(self._entity, record_id)
            del rows[record_id]

    def get(self, tenant_id: str, record_id: str) -> Optional[T]:
        with self._lock:
            record = self._rows.get(tenant_id, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def select(self, tenant_id: str, predicate: Callable[[T], bool] = None) -> List[T]:
        with self._lock:
            rows = list(self._rows.get(tenant_id, {}).values())
        return [copy.deepcopy(r) for r in rows if predicate is None or predicate(r)]

    def first(self, tenant_id: str, predicate: Callable[[T], bool]) -> Optional[T]:
        matches = self.select(tenant_id, predicate)
        return matches[0] if matches else None


def _same(a: str, b: str) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


def _contains(haystack: str, needle: str) -> bool:
    return (needle or "").strip().lower() in (haystack or "").lower()


class InMemoryCustomerRepository(CustomerRepository):

    def __init__(self):
        self._table: _TenantTable[Customer] = _TenantTable("Customer")

    def create(self, tenant_id, customer):
        return self._table.insert(tenant_id, customer)

    def update(self, tenant_id, customer):
        return self._table.replace(tenant_id, customer)

    def delete(self, tenant_id, customer_id):
        self._table.remove(tenant_id, customer_id)

    def find_by_id(self, tenant_id, customer_id):
        return self._table.get(tenant_id, customer_id)

    def find_by_document(self, tenant_id, document):
        digits = _digits(document)
        return self._table.first(tenant_id, lambda c: bool(c.document) and _digits(c.document) == digits)

    def find_by_email(self, tenant_id, email):
        return self._table.first(tenant_id, lambda c: _same(c.email, email))

    def find_by_name(self, tenant_id, name):
        return self._table.select(tenant_id, lambda c: _contains(c.name, name))

    def find_all(self, tenant_id):
        return sorted(self._table.select(tenant_id), key=lambda c: c.name.lower())


class InMemoryUserRepository(UserRepository):

    def __init__(self):
        self._table: _TenantTable[User] = _TenantTable("User")

    def create(self, tenant_id, user):
        if self.find_by_email(tenant_id, user.email):
            raise RepositoryError(f"User with email '{user.email}' already exists")
        return self._table.insert(tenant_id, user)

    def update(self, tenant_id, user):
        return self._table.replace(tenant_id, user)

    def delete(self, tenant_id, user_id):
        self._table.remove(tenant_id, user_id)

    def find_by_id(self, tenant_id, user_id):
        return self._table.get(tenant_id, user_id)

    def find_by_email(self, tenant_id, email):
        return self._table.first(tenant_id, lambda u: _same(u.email, email))

    def find_by_name(self, tenant_id, name):
        return self._table.select(tenant_id, lambda u: _contains(u.name, name))

    def find_all(self, tenant_id):
        return sorted(self._table.select(tenant_id), key=lambda u: u.name.lower())


class InMemoryProductRepository(ProductRepository):

    def __init__(self):
        self._table: _TenantTable[Product] = _TenantTable("Product")

    def create(self, tenant_id, product):
        if product.sku and self.find_by_sku(tenant_id, product.sku):
            raise RepositoryError(f"Product with SKU '{product.sku}' already exists")
        return self._table.insert(tenant_id, product)

    def update(self, tenant_id, product):
        return self._table.replace(tenant_id, product)

    def delete(self, tenant_id, product_id):
        self._table.remove(tenant_id, product_id)

    def find_by_id(self, tenant_id, product_id):
        return self._table.get(tenant_id, product_id)

    def find_by_sku(self, tenant_id, sku):
        return self._table.first(tenant_id, lambda p: _same(p.sku, sku))

    def find_by_name(self, tenant_id, name):
        return self._table.select(tenant_id, lambda p: _contains(p.name, name))

    def find_by_category(self, tenant_id, category):
        return self._table.select(tenant_id, lambda p: _same(p.category, category))

    def find_all(self, tenant_id):
        return sorted(self._table.select(tenant_id), key=lambda p: p.name.lower())

    def update_stock(self, tenant_id, product_id, quantity):
        if quantity < 0:
            raise RepositoryError("Stock quantity cannot be negative")
        product = self.find_by_id(tenant_id, product_id)
        if product is None:
            raise EntityNotFoundError("Product", product_id)
        product.stock_qty = quantity
        return self._table.replace(tenant_id, product)


def _digits(value: str) -> str:
    return "".join(ch for ch in (value or "") if ch.isdigit())
