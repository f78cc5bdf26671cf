"""
Product catalogue intents, including stock and price adjustments.
"""
import logging
import re
import secrets
import unicodedata
from typing import List, Optional, Tuple

from pydantic import ValidationError

from ..exceptions import RepositoryError, UnsupportedIntentError
from ..intent.entities import ProductEntities
from ..intent.handler import PatternIntentHandler, fill_from, pattern
from ..intent.types import ActionResult, ContextData, Intent
from ..models import Product
from ..repository.base import ProductRepository
from . import fields
from .roles import ADMIN_ROLES, normalize_role

logger = logging.getLogger(__name__)

_CHANGE = r"(?:atualiz\w*|modific\w*|alter\w*|mud\w*|edit\w*|ajust\w*|reajust\w*)"

# "buscar produto Arroz Tio João" -> name after the noun when no keyword is used
_NAME_AFTER_NOUN = re.compile(
    r"\bproduto\s+(?!(?:nome|chamad[oa]|sku|c[oó]digo|id|com|d[oa]|para|pre[cç]o|estoque)\b)"
    r"(?P<v>[^\d\s,;:=][^,;\n]*?)" + fields.VALUE_END,
    re.IGNORECASE,
)

DEFAULT_CATEGORY = "Geral"
INVALID_VALUES_MESSAGE = "Não entendi o valor informado para {fields}. Use, por exemplo, preço 25,90 ou estoque 40."
_FIELD_LABELS = {"price": "preço", "stock": "estoque"}


def generate_sku(name: str) -> str:
    """First three letters of the name (accents stripped) plus five random digits."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    prefix = re.sub(r"[^A-Z0-9]", "", ascii_name.upper())[:3] or "PRD"
    return f"{prefix}{10000 + secrets.randbelow(90000)}"


class ProductIntentHandler(PatternIntentHandler):
    """Manages the product catalogue, stock levels and prices."""

    name = "product"

    FULL_ACCESS_ROLES = ADMIN_ROLES | {"manager", "inventory"}
    SALES_INTENTS = frozenset({"get_product", "list_products", "product_generic"})
    READ_INTENTS = frozenset({"get_product", "list_products"})

    patterns = (
        pattern(
            "create_product",
            r"\b(?:cri\w*|cadastr\w*|adicion\w*|inserir|incluir)\s+(?:(?:um|uma|o)\s+)?(?:nov[oa]\s+)?produto\b",
        ),
        pattern(
            "get_product",
            r"\b(?:busc\w*|encontr\w*|procur\w*|mostr\w*|exib\w*|ver|consult\w*|localiz\w*)\s+(?:o\s+)?produto\b",
        ),
        pattern("update_product", r"\b" + _CHANGE + r"\s+(?:o\s+)?produto\b"),
        pattern("delete_product", r"\b(?:delet\w*|exclu\w*|remov\w*|apag\w*)\s+(?:o\s+)?produto\b"),
        pattern(
            "list_products",
            r"\b(?:list\w*|mostr\w*|exib\w*|ver|quais(?:\s+s[aã]o)?)\s+(?:tod[oa]s\s+)?(?:os\s+)?produtos\b",
        ),
        pattern("update_stock", r"\b" + _CHANGE + r"\s+(?:o\s+)?estoque\b"),
        pattern("update_price", r"\b" + _CHANGE + r"\s+(?:o\s+)?pre[cç]o\b"),
        pattern("product_generic", r"\b(?:produtos?|mercadorias?|estoque|pre[cç]os?)\b", confidence=0.4),
    )

    _EXTRACTORS = (
        ("new_name", fields.NEW_NAME),
        ("id", fields.ID),
        ("sku", fields.SKU),
        ("name", fields.NAME),
        ("price", fields.PRICE),
        ("stock", fields.STOCK),
        ("category", fields.CATEGORY),
        ("description", fields.DESCRIPTION),
    )

    def __init__(self, repository: ProductRepository):
        """
        :param repository: Product repository
        """
        self._repo = repository

    def extract_additional(self, message, intent_name, entities):
        if intent_name == "product_generic":
            return
        fill_from(message, entities, self._EXTRACTORS)
        if intent_name == "update_stock":
            fill_from(message, entities, (("stock", fields.TARGET_NUMBER),))
        elif intent_name == "update_price":
            fill_from(message, entities, (("price", fields.TARGET_NUMBER),))
        if not ({"id", "sku", "name"} & entities.keys()):
            fill_from(message, entities, (("name", _NAME_AFTER_NOUN),))

    def check_permission(self, ctx: ContextData, intent: Optional[Intent] = None) -> bool:
        role = normalize_role(ctx.role)
        if role in self.FULL_ACCESS_ROLES:
            return True
        if intent is None:
            return False
        if role == "sales":
            return intent.name in self.SALES_INTENTS
        return intent.name in self.READ_INTENTS

    def execute(self, ctx: ContextData, intent: Intent) -> ActionResult:
        logger.info(f"Executing {intent.name} for tenant {ctx.tenant_id}")
        try:
            entities = ProductEntities.from_intent(intent)
        except ValidationError as e:
            invalid = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            logger.warning(f"Invalid product values for {intent.name}: {invalid}")
            labels = ", ".join(_FIELD_LABELS.get(name, name) for name in invalid)
            return ActionResult.fail(INVALID_VALUES_MESSAGE.format(fields=labels or "o produto"))

        if intent.name == "create_product":
            return self._create(ctx, entities)
        if intent.name == "get_product":
            return self._get(ctx, entities)
        if intent.name == "update_product":
            return self._update(ctx, entities)
        if intent.name == "delete_product":
            return self._delete(ctx, entities)
        if intent.name == "list_products":
            return self._list(ctx, entities)
        if intent.name == "update_stock":
            return self._update_stock(ctx, entities)
        if intent.name == "update_price":
            return self._update_price(ctx, entities)
        if intent.name == "product_generic":
            return ActionResult.fail(
                "Entendi que você quer realizar alguma ação relacionada a produtos, mas não consegui "
                "identificar exatamente o que. Poderia ser mais específico? Por exemplo, "
                "'cadastrar produto nome Arroz preço 25,90' ou 'listar produtos'."
            )
        raise UnsupportedIntentError(intent.name, self.name)

    def _create(self, ctx: ContextData, e: ProductEntities) -> ActionResult:
        if not e.name:
            return ActionResult.fail("Para criar um produto, preciso dos seguintes dados: nome. Pode me informar?")

        product = Product(
            id="",
            name=e.name,
            tenant_id=ctx.tenant_id,
            sku=(e.sku or generate_sku(e.name)).upper(),
            description=e.description or "",
            price=e.price or 0.0,
            stock_qty=e.stock or 0,
            category=e.category or DEFAULT_CATEGORY,
        )
        try:
            created = self._repo.create(ctx.tenant_id, product)
        except RepositoryError as ex:
            logger.error(f"Failed to create product '{e.name}': {ex}")
            return ActionResult.fail(f"Não foi possível criar o produto: {ex}")

        return ActionResult.ok(
            f"Produto '{created.name}' criado com sucesso! SKU: {created.sku}",
            {"product_id": created.id, "sku": created.sku},
        )

    def _get(self, ctx: ContextData, e: ProductEntities) -> ActionResult:
        product, problem = self._locate(ctx, e, "")
        if problem:
            return problem
        return ActionResult.ok(
            "Produto encontrado:\n"
            f"- ID: {product.id}\n"
            f"- Nome: {product.name}\n"
            f"- SKU: {product.sku}\n"
            f"- Preço: {_brl(product.price)}\n"
            f"- Estoque: {product.stock_qty}\n"
            f"- Categoria: {product.category}\n"
            f"- Status: {'Ativo' if product.active else 'Inativo'}",
            {"product_id": product.id},
        )

    def _update(self, ctx: ContextData, e: ProductEntities) -> ActionResult:
        product, problem = self._locate(ctx, e, " para atualizar")
        if problem:
            return problem

        changed = []
        if e.new_name and e.new_name != product.name:
            product.name = e.new_name
            changed.append("nome")
        if e.price is not None and e.price != product.price:
            product.price = e.price
            changed.append("preço")
        if e.category and e.category != product.category:
            product.category = e.category
            changed.append("categoria")
        if e.description and e.description != product.description:
            product.description = e.description
            changed.append("descrição")

        if not changed:
            return ActionResult.fail(
                f"Qual informação do produto {product.name} você deseja atualizar? "
                "Informe o novo nome, preço, categoria ou descrição."
            )
        try:
            self._repo.update(ctx.tenant_id, product)
        except RepositoryError as ex:
            logger.error(f"Failed to update product {product.id}: {ex}")
            return ActionResult.fail(f"Não foi possível atualizar o produto: {ex}")
        return ActionResult.ok(
            f"Produto '{product.name}' atualizado com sucesso! Campos alterados: {', '.join(changed)}.",
            {"product_id": product.id, "changed": changed},
        )

    def _delete(self, ctx: ContextData, e: ProductEntities) -> ActionResult:
        product, problem = self._locate(ctx, e, " para excluir")
        if problem:
            return problem
        try:
            self._repo.delete(ctx.tenant_id, product.id)
        except RepositoryError as ex:
            logger.error(f"Failed to delete product {product.id}: {ex}")
            return ActionResult.fail(f"Não foi possível excluir o produto: {ex}")
        return ActionResult.ok(f"Produto '{product.name}' excluído com sucesso.", {"product_id": product.id})

    def _list(self, ctx: ContextData, e: ProductEntities) -> ActionResult:
        try:
            if e.category:
                products = self._repo.find_by_category(ctx.tenant_id, e.category)
            else:
                products = self._repo.find_all(ctx.tenant_id)
        except RepositoryError as ex:
            return ActionResult.fail(f"Ocorreu um erro ao listar os produtos: {ex}")
        if not products:
            return ActionResult.ok("Não há produtos cadastrados.", {"count": 0})

        lines = [f"Encontrei {len(products)} produtos:", ""]
        lines.extend(
            f"{i}. {p.name} (SKU: {p.sku}) - {_brl(p.price)} - Estoque: {p.stock_qty}"
            for i, p in enumerate(products, start=1)
        )
        return ActionResult.ok("\n".join(lines), {"count": len(products)})

    def _update_stock(self, ctx: ContextData, e: ProductEntities) -> ActionResult:
        if e.stock is None:
            return ActionResult.fail("Qual a nova quantidade em estoque? Por exemplo: 'atualizar estoque do produto sku ARZ12345 para 50'.")
        product, problem = self._locate(ctx, e, " para atualizar o estoque")
        if problem:
            return problem
        try:
            updated = self._repo.update_stock(ctx.tenant_id, product.id, e.stock)
        except RepositoryError as ex:
            logger.error(f"Failed to update stock of product {product.id}: {ex}")
            return ActionResult.fail(f"Não foi possível atualizar o estoque: {ex}")
        return ActionResult.ok(
            f"Estoque do produto '{updated.name}' atualizado de {product.stock_qty} para {updated.stock_qty}.",
            {"product_id": updated.id, "stock_qty": updated.stock_qty},
        )

    def _update_price(self, ctx: ContextData, e: ProductEntities) -> ActionResult:
        if e.price is None:
            return ActionResult.fail("Qual o novo preço? Por exemplo: 'alterar preço do produto sku ARZ12345 para 25,90'.")
        product, problem = self._locate(ctx, e, " para atualizar o preço")
        if problem:
            return problem
        old_price = product.price
        product.price = e.price
        try:
            self._repo.update(ctx.tenant_id, product)
        except RepositoryError as ex:
            logger.error(f"Failed to update price of product {product.id}: {ex}")
            return ActionResult.fail(f"Não foi possível atualizar o preço: {ex}")
        return ActionResult.ok(
            f"Preço do produto '{product.name}' alterado de {_brl(old_price)} para {_brl(product.price)}.",
            {"product_id": product.id, "price": product.price},
        )

    def _locate(self, ctx: ContextData, e: ProductEntities, purpose: str) -> Tuple[Optional[Product], Optional[ActionResult]]:
        """Find one product by id, then SKU, then name."""
        try:
            if e.id:
                product = self._repo.find_by_id(ctx.tenant_id, e.id)
            elif e.sku:
                product = self._repo.find_by_sku(ctx.tenant_id, e.sku)
            elif e.name:
                matches = self._repo.find_by_name(ctx.tenant_id, e.name)
                if not matches:
                    return None, ActionResult.fail(f"Não encontrei nenhum produto com o nome '{e.name}'{purpose}")
                if len(matches) > 1:
                    return None, ActionResult.fail(_ambiguous(e.name, matches), {"matches": [p.id for p in matches]})
                product = matches[0]
            else:
                return None, ActionResult.fail(
                    "Preciso de mais informações para encontrar o produto. Por favor, informe o ID, SKU ou nome do produto."
                )
        except RepositoryError as ex:
            logger.error(f"Product lookup failed: {ex}")
            return None, ActionResult.fail(f"Ocorreu um erro ao buscar o produto: {ex}")

        if product is None:
            return None, ActionResult.fail("Produto não encontrado.")
        return product, None


def _brl(value: float) -> str:
    return "R$ " + f"{value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def _ambiguous(name: str, products: List[Product]) -> str:
    lines = [f"Encontrei {len(products)} produtos com o nome '{name}'. Qual deles você quer?", ""]
    lines.extend(f"{i}. {p.name} (SKU: {p.sku})" for i, p in enumerate(products, start=1))
    return "\n".join(lines)
