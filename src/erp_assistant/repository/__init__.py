from .base import CustomerRepository, ProductRepository, UserRepository
from .memory import InMemoryCustomerRepository, InMemoryProductRepository, InMemoryUserRepository

__all__ = [
    "CustomerRepository",
    "UserRepository",
    "ProductRepository",
    "InMemoryCustomerRepository",
    "InMemoryUserRepository",
    "InMemoryProductRepository",
]
