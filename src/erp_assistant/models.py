"""
Domain records managed through the assistant.

Plain dataclasses; persistence belongs to the repositories.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Customer:
    id: str
    name: str
    tenant_id: str
    email: str = ""
    document: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    customer_type: str = "PF"
    active: bool = True
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @staticmethod
    def type_for_document(document: str) -> str:
        """CPF has 11 digits; anything longer is a CNPJ (legal entity)."""
        digits = "".join(ch for ch in document if ch.isdigit())
        return "PJ" if len(digits) > 11 else "PF"


@dataclass
class User:
    id: str
    name: str
    email: str
    tenant_id: str
    role: str = "user"
    password: str = ""
    active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class Product:
    id: str
    name: str
    tenant_id: str
    sku: str = ""
    description: str = ""
    price: float = 0.0
    stock_qty: int = 0
    category: str = "Geral"
    active: bool = True
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
