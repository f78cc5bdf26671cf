from .customer import CustomerIntentHandler
from .user import UserIntentHandler
from .product import ProductIntentHandler
from .handler_factory import create_default_handlers

__all__ = [
    "CustomerIntentHandler",
    "UserIntentHandler",
    "ProductIntentHandler",
    "create_default_handlers",
]
