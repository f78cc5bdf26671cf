"""
Repository contracts consumed by the intent handlers.

Every call is scoped by tenant. Finders return None (or an empty list) when
nothing matches; update/delete of a missing record raise EntityNotFoundError;
storage failures raise RepositoryError.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Customer, Product, User


class CustomerRepository(ABC):

    @abstractmethod
    def create(self, tenant_id: str, customer: Customer) -> Customer:
        pass

    @abstractmethod
    def update(self, tenant_id: str, customer: Customer) -> Customer:
        pass

    @abstractmethod
    def delete(self, tenant_id: str, customer_id: str) -> None:
        pass

    @abstractmethod
    def find_by_id(self, tenant_id: str, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def find_by_document(self, tenant_id: str, document: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def find_by_email(self, tenant_id: str, email: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def find_by_name(self, tenant_id: str, name: str) -> List[Customer]:
        """Case-insensitive partial match on the customer name."""

    @abstractmethod
    def find_all(self, tenant_id: str) -> List[Customer]:
        pass


class UserRepository(ABC):

    @abstractmethod
    def create(self, tenant_id: str, user: User) -> User:
        pass

    @abstractmethod
    def update(self, tenant_id: str, user: User) -> User:
        pass

    @abstractmethod
    def delete(self, tenant_id: str, user_id: str) -> None:
        pass

    @abstractmethod
    def find_by_id(self, tenant_id: str, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def find_by_email(self, tenant_id: str, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def find_by_name(self, tenant_id: str, name: str) -> List[User]:
        """Case-insensitive partial match on the user name."""

    @abstractmethod
    def find_all(self, tenant_id: str) -> List[User]:
        pass


class ProductRepository(ABC):

    @abstractmethod
    def create(self, tenant_id: str, product: Product) -> Product:
        pass

    @abstractmethod
    def update(self, tenant_id: str, product: Product) -> Product:
        pass

    @abstractmethod
    def delete(self, tenant_id: str, product_id: str) -> None:
        pass

    @abstractmethod
    def find_by_id(self, tenant_id: str, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    def find_by_sku(self, tenant_id: str, sku: str) -> Optional[Product]:
        pass

    @abstractmethod
    def find_by_name(self, tenant_id: str, name: str) -> List[Product]:
        """Case-insensitive partial match on the product name."""

    @abstractmethod
    def find_by_category(self, tenant_id: str, category: str) -> List[Product]:
        pass

    @abstractmethod
    def find_all(self, tenant_id: str) -> List[Product]:
        pass

    @abstractmethod
    def update_stock(self, tenant_id: str, product_id: str, quantity: int) -> Product:
        """Set the stock quantity of a product."""
