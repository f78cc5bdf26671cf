"""
Typed views over intent entities.

Intent entities travel as strings; each business area parses them into one
of these models before executing so that a missing field is an explicit None.
"""
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import Intent

_NUMBER_RE = re.compile(r"\d[\d.,]*\d|\d")
# 1234 | 1.234.567 | 1.234,56 | 12,5 | 12.50
_BRL_RE = re.compile(r"(?:\d{1,3}(?:\.\d{3})+|\d+)(?:,\d+)?|\d+\.\d+")


class _IntentEntities(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    id: Optional[str] = Field(default=None, description="Entity identifier")
    name: Optional[str] = Field(default=None, description="Name used to create or look up the entity")
    new_name: Optional[str] = Field(default=None, description="Replacement name on update")

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_intent(cls, intent: Intent):
        return cls.model_validate(dict(intent.entities))


class CustomerEntities(_IntentEntities):
    email: Optional[str] = None
    document: Optional[str] = Field(default=None, description="CPF or CNPJ")
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    new_email: Optional[str] = None
    new_document: Optional[str] = None
    active: Optional[str] = Field(default=None, description="'ativo' or 'inativo'")


class UserEntities(_IntentEntities):
    email: Optional[str] = None
    role: Optional[str] = None
    new_email: Optional[str] = None
    new_role: Optional[str] = None
    new_status: Optional[str] = None


class ProductEntities(_IntentEntities):
    sku: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0, description="Unit price in BRL")
    stock: Optional[int] = Field(default=None, ge=0, description="Quantity in stock")
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _parse_brl(cls, value):
        if not isinstance(value, str):
            return value
        match = _NUMBER_RE.search(value)
        if not match:
            return None
        number = match.group(0)
        if not _BRL_RE.fullmatch(number):
            raise ValueError(f"malformed price: {number!r}")
        # 1.234,56 -> 1234.56 ; 12,5 -> 12.5 ; 12.50 -> 12.50
        if "," in number or number.count(".") > 1:
            number = number.replace(".", "").replace(",", ".")
        return number
