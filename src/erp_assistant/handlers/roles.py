"""
Role vocabulary shared by permission checks and user management.
"""

ADMIN_ROLES = frozenset({"admin", "administrator", "superadmin"})

_ROLE_ALIASES = {
    "admin": "admin",
    "adm": "admin",
    "administrador": "admin",
    "administradora": "admin",
    "administrator": "admin",
    "superadmin": "superadmin",
    "gerente": "manager",
    "manager": "manager",
    "vendedor": "sales",
    "vendedora": "sales",
    "atendente": "sales",
    "sales": "sales",
    "financeiro": "finance",
    "finance": "finance",
    "estoque": "inventory",
    "estoquista": "inventory",
    "almoxarife": "inventory",
    "inventory": "inventory",
    "stock": "inventory",
    "rh": "hr",
    "hr": "hr",
    "usuario": "user",
    "usuário": "user",
    "user": "user",
}


def normalize_role(role: str) -> str:
    """
    Map Portuguese and English role names to the canonical role.

    Unknown roles are returned lower-cased.
    """
    key = (role or "").strip().lower()
    return _ROLE_ALIASES.get(key, key)
