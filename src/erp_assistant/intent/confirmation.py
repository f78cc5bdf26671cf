"""
Confirmation policy: which intents need a yes/no turn, the prompt shown,
and how replies are classified.
"""
from typing import Callable, Dict, Mapping

MISSING = "<não informado>"
CONFIRM_HINT = "Digite 'confirmar' para prosseguir ou 'cancelar' para desistir."

CONFIRMATION_REQUIRED = frozenset({
    "create_user",
    "update_user",
    "delete_user",
    "create_product",
    "update_product",
    "delete_product",
    "update_price",
    "create_customer",
    "update_customer",
    "delete_customer",
})

AFFIRMATIVE_EXACT = frozenset({
    "confirmar", "sim", "yes", "ok", "confirmado", "confirme",
    "s", "y", "pode confirmar", "pode cadastrar", "confirmação",
})
AFFIRMATIVE_CONTAINS = ("confirm", "certo", "correto")

NEGATIVE_EXACT = frozenset({"cancelar", "não", "no", "cancel", "n"})
NEGATIVE_CONTAINS = ("desist", "canc")


def requires_confirmation(intent_name: str) -> bool:
    return intent_name in CONFIRMATION_REQUIRED


def normalize_reply(text: str) -> str:
    return (text or "").strip().casefold()


def is_affirmative(text: str) -> bool:
    reply = normalize_reply(text)
    return reply in AFFIRMATIVE_EXACT or any(token in reply for token in AFFIRMATIVE_CONTAINS)


def is_negative(text: str) -> bool:
    reply = normalize_reply(text)
    return reply in NEGATIVE_EXACT or any(token in reply for token in NEGATIVE_CONTAINS)


def _field(entities: Mapping[str, str], key: str) -> str:
    return entities.get(key) or MISSING


def _create_user(e):
    return (
        "Você quer criar um novo usuário com estes dados?\n"
        f"- Nome: {_field(e, 'name')}\n"
        f"- Email: {_field(e, 'email')}\n"
        f"- Perfil: {_field(e, 'role')}\n\n"
    )


def _update_user(e):
    target = e.get("name") or e.get("email") or e.get("id") or MISSING
    return (
        f"Você quer atualizar o usuário {target} com estes dados?\n"
        f"- Novo nome: {_field(e, 'new_name')}\n"
        f"- Novo email: {_field(e, 'new_email')}\n"
        f"- Novo perfil: {_field(e, 'new_role')}\n"
        f"- Novo status: {_field(e, 'new_status')}\n\n"
    )


def _delete(entity_label: str):
    def render(e):
        return (
            f"ATENÇÃO: Você está prestes a EXCLUIR o {entity_label} {_field(e, 'name')} (ID: {_field(e, 'id')}).\n"
            "Esta ação não pode ser desfeita.\n\n"
        )
    return render


def _create_customer(e):
    return (
        "Confirma a criação do cliente com os seguintes dados?\n"
        f"- Nome: {_field(e, 'name')}\n"
        f"- Documento: {_field(e, 'document')}\n"
        f"- Email: {_field(e, 'email')}\n"
        f"- Telefone: {_field(e, 'phone')}\n"
        f"- Endereço: {_field(e, 'address')}\n\n"
    )


def _update_customer(e):
    target = e.get("name") or e.get("document") or e.get("email") or e.get("id") or MISSING
    changes = [
        f"- {label}: {e[key]}"
        for key, label in (
            ("new_name", "Novo nome"), ("new_email", "Novo email"), ("new_document", "Novo documento"),
            ("phone", "Telefone"), ("address", "Endereço"), ("city", "Cidade"),
            ("state", "Estado"), ("zip_code", "CEP"), ("active", "Status"),
        )
        if key in e
    ] or [f"- Alterações: {MISSING}"]
    return f"Confirma a atualização do cliente {target}?\n" + "\n".join(changes) + "\n\n"


def _create_product(e):
    return (
        "Confirma o cadastro do produto com os seguintes dados?\n"
        f"- Nome: {_field(e, 'name')}\n"
        f"- SKU: {_field(e, 'sku')}\n"
        f"- Preço: {_field(e, 'price')}\n"
        f"- Estoque: {_field(e, 'stock')}\n"
        f"- Categoria: {_field(e, 'category')}\n\n"
    )


def _update_product(e):
    target = e.get("name") or e.get("sku") or e.get("id") or MISSING
    return (
        f"Confirma a atualização do produto {target}?\n"
        f"- Novo nome: {_field(e, 'new_name')}\n"
        f"- Preço: {_field(e, 'price')}\n"
        f"- Categoria: {_field(e, 'category')}\n"
        f"- Descrição: {_field(e, 'description')}\n\n"
    )


def _update_price(e):
    target = e.get("name") or e.get("sku") or e.get("id") or MISSING
    return f"Confirma a alteração do preço do produto {target} para {_field(e, 'price')}?\n\n"


_TEMPLATES: Dict[str, Callable[[Mapping[str, str]], str]] = {
    "create_user": _create_user,
    "update_user": _update_user,
    "delete_user": _delete("usuário"),
    "create_customer": _create_customer,
    "update_customer": _update_customer,
    "delete_customer": _delete("cliente"),
    "create_product": _create_product,
    "update_product": _update_product,
    "delete_product": _delete("produto"),
    "update_price": _update_price,
}


def build_confirmation_message(intent_name: str, entities: Mapping[str, str]) -> str:
    """
    Render the confirmation prompt for an intent.

    Pure function of its inputs; missing entities render as MISSING.
    """
    template = _TEMPLATES.get(intent_name)
    if template is None:
        return f"Deseja confirmar esta operação? {CONFIRM_HINT}"
    return template(entities) + CONFIRM_HINT
