"""
User (system account) intents.
"""
import logging
import secrets
from typing import List, Optional, Tuple

from ..exceptions import RepositoryError, UnsupportedIntentError
from ..intent.entities import UserEntities
from ..intent.handler import PatternIntentHandler, fill_from, pattern
from ..intent.types import ActionResult, ContextData, Intent
from ..models import User
from ..repository.base import UserRepository
from . import fields
from .roles import ADMIN_ROLES, normalize_role

logger = logging.getLogger(__name__)

_SUBJECT = r"(?:(?:o|a|um|uma)\s+)?(?:nov[oa]\s+)?u[sz]u[aá]rio\b"

_STATUS_ACTIVE = {"ativo", "ativa", "ativar", "active", "habilitado", "habilitar"}
_STATUS_INACTIVE = {"inativo", "inativa", "desativar", "desativado", "inactive", "bloqueado", "bloquear"}


def generate_temp_password() -> str:
    return f"Temp{100000 + secrets.randbelow(900000)}!"


class UserIntentHandler(PatternIntentHandler):
    """
    Manages system users.

    Administrators can do everything; managers and HR everything except
    deleting users.
    """

    name = "user"

    MANAGER_ROLES = frozenset({"manager", "hr"})

    patterns = (
        pattern("create_user", r"\b(?:cri\w*|cadastr\w*|adicion\w*|inserir|incluir)\s+" + _SUBJECT),
        pattern(
            "get_user",
            r"\b(?:busc\w*|encontr\w*|procur\w*|mostr\w*|exib\w*|ver|consult\w*|localiz\w*)\s+" + _SUBJECT,
        ),
        pattern("update_user", r"\b(?:atualiz\w*|modific\w*|alter\w*|mud\w*|edit\w*)\s+" + _SUBJECT),
        pattern("delete_user", r"\b(?:delet\w*|exclu\w*|remov\w*|apag\w*)\s+" + _SUBJECT),
        pattern(
            "list_users",
            r"\b(?:list\w*|mostr\w*|exib\w*|ver|quais(?:\s+s[aã]o)?)\s+(?:tod[oa]s\s+)?(?:os\s+)?u[sz]u[aá]rios\b",
        ),
        pattern("user_generic", r"\bu[sz]u[aá]rios?\b", confidence=0.4),
    )

    _EXTRACTORS = (
        ("new_name", fields.NEW_NAME),
        ("new_email", fields.NEW_EMAIL),
        ("new_role", fields.NEW_ROLE),
        ("new_status", fields.NEW_STATUS),
        ("id", fields.ID),
        ("name", fields.NAME),
        ("email", fields.EMAIL),
        ("role", fields.ROLE),
        ("password", fields.PASSWORD),
    )

    def __init__(self, repository: UserRepository):
        """
        :param repository: User repository
        """
        self._repo = repository

    def extract_additional(self, message, intent_name, entities):
        if intent_name == "user_generic":
            return
        fill_from(message, entities, self._EXTRACTORS)
        if "email" not in entities:
            match = fields.ANY_EMAIL.search(message)
            if match and match.group("v") != entities.get("new_email"):
                entities["email"] = match.group("v")

    def normalize(self, intent_name, entities):
        for key in ("role", "new_role"):
            if key in entities:
                entities[key] = normalize_role(entities[key])
        return entities

    def check_permission(self, ctx: ContextData, intent: Optional[Intent] = None) -> bool:
        role = normalize_role(ctx.role)
        if role in ADMIN_ROLES:
            return True
        if role in self.MANAGER_ROLES:
            return intent is None or intent.name != "delete_user"
        return False

    def execute(self, ctx: ContextData, intent: Intent) -> ActionResult:
        logger.info(f"Executing {intent.name} for tenant {ctx.tenant_id}")
        entities = UserEntities.from_intent(intent)

        if intent.name == "create_user":
            return self._create(ctx, entities, intent.get("password"))
        if intent.name == "get_user":
            return self._get(ctx, entities)
        if intent.name == "update_user":
            return self._update(ctx, entities)
        if intent.name == "delete_user":
            return self._delete(ctx, entities)
        if intent.name == "list_users":
            return self._list(ctx)
        if intent.name == "user_generic":
            return ActionResult.fail(
                "Entendi que você quer realizar alguma ação relacionada a usuários, mas não consegui "
                "identificar exatamente o que. Poderia ser mais específico? Por exemplo, "
                "'criar usuário nome João email joao@mercado.com' ou 'listar usuários'."
            )
        raise UnsupportedIntentError(intent.name, self.name)

    def _create(self, ctx: ContextData, e: UserEntities, password: Optional[str]) -> ActionResult:
        missing = []
        if not e.name:
            missing.append("nome")
        if not e.email:
            missing.append("e-mail")
        if missing:
            return ActionResult.fail(
                f"Para criar um usuário, preciso dos seguintes dados: {', '.join(missing)}. Pode me informar?"
            )

        user = User(
            id="",
            name=e.name,
            email=e.email,
            tenant_id=ctx.tenant_id,
            role=e.role or "user",
            password=password or generate_temp_password(),
        )
        try:
            created = self._repo.create(ctx.tenant_id, user)
        except RepositoryError as ex:
            logger.error(f"Failed to create user {e.email}: {ex}")
            return ActionResult.fail(f"Não foi possível criar o usuário: {ex}")

        return ActionResult.ok(
            f"Usuário {created.name} ({created.email}) criado com sucesso! "
            f"Uma senha temporária foi gerada: {user.password}",
            {"user_id": created.id, "email": created.email},
        )

    def _get(self, ctx: ContextData, e: UserEntities) -> ActionResult:
        user, problem = self._locate(ctx, e, "")
        if problem:
            return problem
        last_login = user.last_login.strftime("%d/%m/%Y %H:%M") if user.last_login else "nunca"
        return ActionResult.ok(
            "Usuário encontrado:\n"
            f"- ID: {user.id}\n"
            f"- Nome: {user.name}\n"
            f"- Email: {user.email}\n"
            f"- Perfil: {user.role}\n"
            f"- Status: {'Ativo' if user.active else 'Inativo'}\n"
            f"- Último acesso: {last_login}",
            {"user_id": user.id},
        )

    def _update(self, ctx: ContextData, e: UserEntities) -> ActionResult:
        user, problem = self._locate(ctx, e, " para atualizar")
        if problem:
            return problem

        changed = []
        if e.new_name and e.new_name != user.name:
            user.name = e.new_name
            changed.append("nome")
        if e.new_email and e.new_email != user.email:
            user.email = e.new_email
            changed.append("e-mail")
        if e.new_role and e.new_role != user.role:
            user.role = e.new_role
            changed.append("perfil")
        if e.new_status:
            status = e.new_status.lower()
            if status in _STATUS_ACTIVE and not user.active:
                user.active = True
                changed.append("status")
            elif status in _STATUS_INACTIVE and user.active:
                user.active = False
                changed.append("status")

        if not changed:
            return ActionResult.fail(
                f"Qual informação do usuário {user.name} você deseja atualizar? "
                "Por favor, informe o novo nome, e-mail, perfil ou status."
            )

        try:
            self._repo.update(ctx.tenant_id, user)
        except RepositoryError as ex:
            logger.error(f"Failed to update user {user.id}: {ex}")
            return ActionResult.fail(f"Ocorreu um erro ao atualizar o usuário: {ex}")

        return ActionResult.ok(
            f"Usuário {user.name} foi atualizado com sucesso! Campos alterados: {', '.join(changed)}.",
            {"user_id": user.id, "changed": changed},
        )

    def _delete(self, ctx: ContextData, e: UserEntities) -> ActionResult:
        user, problem = self._locate(ctx, e, " para excluir")
        if problem:
            return problem
        if user.id == ctx.user_id:
            return ActionResult.fail("Você não pode excluir sua própria conta de usuário.")
        try:
            self._repo.delete(ctx.tenant_id, user.id)
        except RepositoryError as ex:
            logger.error(f"Failed to delete user {user.id}: {ex}")
            return ActionResult.fail(f"Ocorreu um erro ao excluir o usuário: {ex}")
        return ActionResult.ok(
            f"Usuário {user.name} ({user.email}) foi excluído com sucesso.", {"user_id": user.id}
        )

    def _list(self, ctx: ContextData) -> ActionResult:
        try:
            users = self._repo.find_all(ctx.tenant_id)
        except RepositoryError as ex:
            return ActionResult.fail(f"Ocorreu um erro ao listar os usuários: {ex}")
        if not users:
            return ActionResult.ok("Não há usuários cadastrados no sistema.", {"count": 0})

        lines = [f"Encontrei {len(users)} usuários:", ""]
        for i, u in enumerate(users, start=1):
            status = "Ativo" if u.active else "Inativo"
            lines.append(f"{i}. {u.name} ({u.email}) - Perfil: {u.role} - Status: {status}")
        return ActionResult.ok("\n".join(lines), {"count": len(users)})

    def _locate(self, ctx: ContextData, e: UserEntities, purpose: str) -> Tuple[Optional[User], Optional[ActionResult]]:
        """Find one user by id, then email, then name."""
        try:
            if e.id:
                user = self._repo.find_by_id(ctx.tenant_id, e.id)
            elif e.email:
                user = self._repo.find_by_email(ctx.tenant_id, e.email)
            elif e.name:
                matches = self._repo.find_by_name(ctx.tenant_id, e.name)
                if not matches:
                    return None, ActionResult.fail(f"Não encontrei nenhum usuário com o nome '{e.name}'{purpose}")
                if len(matches) > 1:
                    return None, ActionResult.fail(_ambiguous(e.name, matches), {"matches": [u.id for u in matches]})
                user = matches[0]
            else:
                return None, ActionResult.fail(
                    "Preciso de mais informações para encontrar o usuário. "
                    "Por favor, informe o ID, e-mail ou nome completo."
                )
        except RepositoryError as ex:
            logger.error(f"User lookup failed: {ex}")
            return None, ActionResult.fail(f"Ocorreu um erro ao buscar o usuário: {ex}")

        if user is None:
            return None, ActionResult.fail("Usuário não encontrado.")
        return user, None


def _ambiguous(name: str, users: List[User]) -> str:
    lines = [f"Encontrei {len(users)} usuários com o nome '{name}'. Qual deles você quer?", ""]
    lines.extend(f"{i}. {u.name} ({u.email})" for i, u in enumerate(users, start=1))
    return "\n".join(lines)
