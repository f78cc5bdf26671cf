"""
Default handler wiring.
"""
from typing import List

from ..intent.handler import IntentHandler
from ..repository.base import CustomerRepository, ProductRepository, UserRepository
from .customer import CustomerIntentHandler
from .product import ProductIntentHandler
from .user import UserIntentHandler


def create_default_handlers(
    customers: CustomerRepository,
    users: UserRepository,
    products: ProductRepository,
) -> List[IntentHandler]:
    """
    Build the standard business-area handlers in registration order.

    Registration order breaks confidence ties during resolution.

    :return: [customer, user, product] handlers
    """
    return [
        CustomerIntentHandler(customers),
        UserIntentHandler(users),
        ProductIntentHandler(products),
    ]
