"""
Customer intents: create, get, update, delete and list customers.
"""
import logging
import re
from typing import List, Optional, Tuple

from ..exceptions import RepositoryError, UnsupportedIntentError
from ..intent.entities import CustomerEntities
from ..intent.handler import PatternIntentHandler, fill_from, pattern
from ..intent.types import ActionResult, ContextData, Intent
from ..models import Customer
from ..repository.base import CustomerRepository
from . import fields
from .roles import normalize_role

logger = logging.getLogger(__name__)

_SUBJECT = r"(?:cliente|pessoa|contato)\b"
_ARTICLE = r"(?:(?:um|uma|o|a)\s+)?(?:(?:os\s+)?dados\s+d[oa]\s+)?"

LIST_PAGE_SIZE = 10


class CustomerIntentHandler(PatternIntentHandler):
    """
    Handles customer management in natural language (Portuguese).

    Examples:
        "cadastrar cliente nome João CPF 123"
        "buscar cliente email joao@mercado.com"
        "listar clientes"
    """

    name = "customer"

    ALLOWED_ROLES = frozenset({"admin", "administrator", "superadmin", "manager", "sales"})

    patterns = (
        pattern(
            "create_customer",
            r"\b(?:cadastr\w*|cri[ae]r?|adicion\w*|inserir|incluir|nov[oa])\s+(?:(?:um|uma)\s+)?"
            r"(?:nov[oa]\s+)?" + _SUBJECT + r"\s*:?\s*\n\s*nome\s*:\s*(?P<name>[^\r\n]+)",
            confidence=0.9,
        ),
        pattern(
            "create_customer",
            r"\b(?:cadastr\w*|cri[ae]r?|adicion\w*|inserir|incluir)\s+(?:(?:um|uma|o|a)\s+)?(?:nov[oa]\s+)?" + _SUBJECT,
        ),
        pattern("create_customer", r"\bnov[oa]\s+" + _SUBJECT),
        pattern(
            "create_customer",
            r"^\s*nome\s*:\s*(?P<name>[^\r\n]+)$(?=[\s\S]*^\s*(?:cpf|cnpj|documento)\s*:)",
            confidence=0.7,
            flags=re.MULTILINE,
        ),
        pattern(
            "get_customer",
            r"\b(?:busc\w*|encontr\w*|localiz\w*|obter|ver|mostr\w*|pesquis\w*|exib\w*|consult\w*|procur\w*)\s+"
            + _ARTICLE + _SUBJECT,
        ),
        pattern(
            "update_customer",
            r"\b(?:atualiz\w*|edit\w*|modific\w*|alter\w*|mud\w*)\s+" + _ARTICLE + _SUBJECT,
        ),
        pattern(
            "delete_customer",
            r"\b(?:exclu\w*|delet\w*|apag\w*|remov\w*)\s+" + _ARTICLE + _SUBJECT,
        ),
        pattern(
            "list_customers",
            r"\b(?:list\w*|mostr\w*|exib\w*|ver|recuper\w*|quais(?:\s+s[aã]o)?)\s+(?:tod[oa]s\s+)?"
            r"(?:(?:os|as|meus|minhas)\s+)?(?:clientes|pessoas|contatos)\b",
        ),
        pattern("list_customers", r"\bclientes\s+cadastrados\b"),
        pattern("customer_generic", r"\bclientes?\b", confidence=0.4),
    )

    _FORM_EXTRACTORS = (
        ("name", fields.FORM_NAME),
        ("document", fields.FORM_DOCUMENT),
        ("email", fields.FORM_EMAIL),
        ("phone", fields.FORM_PHONE),
        ("address", fields.FORM_ADDRESS),
        ("city", fields.FORM_CITY),
        ("state", fields.FORM_STATE),
        ("zip_code", fields.FORM_ZIP),
    )

    _INLINE_EXTRACTORS = (
        ("new_name", fields.NEW_NAME),
        ("new_email", fields.NEW_EMAIL),
        ("new_document", fields.NEW_DOCUMENT),
        ("id", fields.ID),
        ("name", fields.NAME),
        ("document", fields.DOCUMENT),
        ("email", fields.EMAIL),
        ("phone", fields.PHONE),
        ("address", fields.ADDRESS),
        ("city", fields.CITY),
        ("state", fields.STATE),
        ("zip_code", fields.ZIP_CODE),
        ("active", fields.ACTIVE),
    )

    def __init__(self, repository: CustomerRepository):
        """
        :param repository: Customer repository
        """
        self._repo = repository

    def extract_additional(self, message, intent_name, entities):
        if intent_name == "customer_generic":
            return
        fill_from(message, entities, self._FORM_EXTRACTORS)
        fill_from(message, entities, self._INLINE_EXTRACTORS)
        if "email" not in entities:
            match = fields.ANY_EMAIL.search(message)
            if match and match.group("v") != entities.get("new_email"):
                entities["email"] = match.group("v")

    def check_permission(self, ctx: ContextData, intent: Optional[Intent] = None) -> bool:
        return normalize_role(ctx.role) in self.ALLOWED_ROLES

    def execute(self, ctx: ContextData, intent: Intent) -> ActionResult:
        logger.info(f"Executing {intent.name} for tenant {ctx.tenant_id}")
        entities = CustomerEntities.from_intent(intent)

        if intent.name == "create_customer":
            return self._create(ctx, entities)
        if intent.name == "get_customer":
            return self._get(ctx, entities)
        if intent.name == "update_customer":
            return self._update(ctx, entities)
        if intent.name == "delete_customer":
            return self._delete(ctx, entities)
        if intent.name == "list_customers":
            return self._list(ctx)
        if intent.name == "customer_generic":
            return ActionResult.fail(
                "Entendi que você quer realizar alguma ação relacionada a clientes, mas não consegui "
                "identificar exatamente o que. Poderia ser mais específico? Por exemplo, "
                "'cadastrar cliente nome João Silva CPF 12345678900' ou 'listar clientes'."
            )
        raise UnsupportedIntentError(intent.name, self.name)

    def _create(self, ctx: ContextData, e: CustomerEntities) -> ActionResult:
        if not e.name:
            return ActionResult.fail(
                "Para cadastrar um cliente, preciso pelo menos do nome. Por favor, informe o nome completo."
            )

        if e.document:
            existing = self._repo.find_by_document(ctx.tenant_id, e.document)
            if existing:
                return ActionResult.fail(
                    f"Já existe um cliente com o documento '{e.document}': {existing.name}."
                )
        if e.email:
            existing = self._repo.find_by_email(ctx.tenant_id, e.email)
            if existing:
                return ActionResult.fail(f"Já existe um cliente com o email '{e.email}': {existing.name}.")

        try:
            same_name = self._repo.find_by_name(ctx.tenant_id, e.name)
        except RepositoryError as ex:
            logger.error(f"Duplicate name check failed for '{e.name}': {ex}")
            same_name = []
        if any(c.name.lower() == e.name.lower() for c in same_name):
            return ActionResult.fail(
                f"Já existe um cliente chamado '{e.name}'. Deseja atualizá-lo ou criar um novo cliente com outro nome?"
            )

        customer = Customer(
            id="",
            name=e.name,
            tenant_id=ctx.tenant_id,
            email=e.email or "",
            document=e.document or "",
            phone=e.phone or "",
            address=e.address or "",
            city=e.city or "",
            state=(e.state or "").upper(),
            zip_code=e.zip_code or "",
            customer_type=Customer.type_for_document(e.document or ""),
        )
        try:
            created = self._repo.create(ctx.tenant_id, customer)
        except RepositoryError as ex:
            logger.error(f"Failed to create customer '{e.name}': {ex}")
            return ActionResult.fail(f"Não foi possível criar o cliente: {ex}", {"error": str(ex)})

        logger.info(f"Customer {created.id} created for tenant {ctx.tenant_id}")
        return ActionResult.ok(
            f"✅ Cliente '{created.name}' cadastrado com sucesso! O ID do novo cliente é #{created.id}.",
            {"customer_id": created.id},
        )

    def _get(self, ctx: ContextData, e: CustomerEntities) -> ActionResult:
        customer, problem = self._locate(ctx, e, "")
        if problem:
            return problem
        return ActionResult.ok(_describe(customer), {"customer_id": customer.id})

    def _update(self, ctx: ContextData, e: CustomerEntities) -> ActionResult:
        customer, problem = self._locate(ctx, e, " para atualizar")
        if problem:
            return problem

        changes = {
            "name": e.new_name,
            "email": e.new_email,
            "document": e.new_document,
            "phone": e.phone,
            "address": e.address,
            "city": e.city,
            "state": e.state.upper() if e.state else None,
            "zip_code": e.zip_code,
        }
        changed = [field for field, value in changes.items() if value and getattr(customer, field) != value]
        for field in changed:
            setattr(customer, field, changes[field])
        if "document" in changed:
            customer.customer_type = Customer.type_for_document(customer.document)
        if e.active:
            active = e.active.lower().startswith("ativ")
            if active != customer.active:
                customer.active = active
                changed.append("active")

        if not changed:
            return ActionResult.fail(
                "Nenhuma informação nova foi fornecida para atualizar o cliente. "
                "Por favor, informe quais dados deseja atualizar."
            )

        try:
            self._repo.update(ctx.tenant_id, customer)
        except RepositoryError as ex:
            logger.error(f"Failed to update customer {customer.id}: {ex}")
            return ActionResult.fail(f"Não foi possível atualizar o cliente: {ex}")

        return ActionResult.ok(
            f"Cliente '{customer.name}' atualizado com sucesso!",
            {"customer_id": customer.id, "changed": changed},
        )

    def _delete(self, ctx: ContextData, e: CustomerEntities) -> ActionResult:
        customer, problem = self._locate(ctx, e, " para excluir")
        if problem:
            return problem
        try:
            self._repo.delete(ctx.tenant_id, customer.id)
        except RepositoryError as ex:
            logger.error(f"Failed to delete customer {customer.id}: {ex}")
            return ActionResult.fail(f"Não foi possível excluir o cliente: {ex}")
        return ActionResult.ok(f"Cliente '{customer.name}' excluído com sucesso!", {"customer_id": customer.id})

    def _list(self, ctx: ContextData) -> ActionResult:
        try:
            customers = self._repo.find_all(ctx.tenant_id)
        except RepositoryError as ex:
            return ActionResult.fail(f"Ocorreu um erro ao listar os clientes: {ex}")
        if not customers:
            return ActionResult.ok("Não há clientes cadastrados.", {"count": 0})

        lines = [f"Encontrei {len(customers)} clientes cadastrados. Aqui estão os primeiros {LIST_PAGE_SIZE}:", ""]
        lines.extend(_numbered(customers[:LIST_PAGE_SIZE]))
        if len(customers) > LIST_PAGE_SIZE:
            lines.append(
                f"\nExistem mais {len(customers) - LIST_PAGE_SIZE} clientes. Para ver mais detalhes, "
                "especifique um cliente pelo nome, documento ou ID."
            )
        return ActionResult.ok("\n".join(lines), {"count": len(customers)})

    def _locate(
        self, ctx: ContextData, e: CustomerEntities, purpose: str
    ) -> Tuple[Optional[Customer], Optional[ActionResult]]:
        """
        Find one customer by id, then document, then email, then name.

        :param purpose: Suffix for "not found" messages (e.g. " para excluir")
        :return: (customer, None) or (None, result to return to the user)
        """
        try:
            if e.id:
                customer = self._repo.find_by_id(ctx.tenant_id, e.id)
            elif e.document:
                customer = self._repo.find_by_document(ctx.tenant_id, e.document)
            elif e.email:
                customer = self._repo.find_by_email(ctx.tenant_id, e.email)
            elif e.name:
                matches = self._repo.find_by_name(ctx.tenant_id, e.name)
                if not matches:
                    return None, ActionResult.fail(
                        f"Não encontrei nenhum cliente com o nome '{e.name}'{purpose}"
                    )
                if len(matches) > 1:
                    lines = [f"Encontrei {len(matches)} clientes com o nome '{e.name}'. Qual deles você quer?", ""]
                    lines.extend(_numbered(matches))
                    return None, ActionResult.fail("\n".join(lines), {"matches": [c.id for c in matches]})
                customer = matches[0]
            else:
                return None, ActionResult.fail(
                    "Preciso de mais informações para encontrar o cliente. "
                    "Por favor, informe o ID, documento, e-mail ou nome."
                )
        except RepositoryError as ex:
            logger.error(f"Customer lookup failed: {ex}")
            return None, ActionResult.fail(f"Ocorreu um erro ao buscar o cliente: {ex}")

        if customer is None:
            return None, ActionResult.fail("Cliente não encontrado.")
        return customer, None


def _numbered(customers: List[Customer]) -> List[str]:
    lines = []
    for i, c in enumerate(customers, start=1):
        line = f"{i}. {c.name}"
        if c.document:
            line += f" (Documento: {c.document})"
        elif c.email:
            line += f" (Email: {c.email})"
        lines.append(line)
    return lines


def _describe(c: Customer) -> str:
    return (
        "Cliente encontrado:\n"
        f"- ID: {c.id}\n"
        f"- Nome: {c.name}\n"
        f"- Documento: {c.document or '-'} ({c.customer_type})\n"
        f"- Email: {c.email or '-'}\n"
        f"- Telefone: {c.phone or '-'}\n"
        f"- Endereço: {c.address or '-'}\n"
        f"- Cidade/UF: {c.city or '-'}/{c.state or '-'}\n"
        f"- Status: {'Ativo' if c.active else 'Inativo'}"
    )
