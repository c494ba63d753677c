"""
Authentication use cases for the admin users.
"""

from __future__ import annotations

from dataclasses import dataclass

from educa_especial.core.logger import get_logger
from educa_especial.core.security import hash_password, is_hashed, verify_password
from educa_especial.domain.entities import USERS
from educa_especial.repositories import Repository, get_repository

logger = get_logger(__name__)

ADMIN_LEVEL = "admin"


class AuthError(Exception):
    """Base class for authentication-related exceptions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserNotFoundError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class InactiveUserError(AuthError):
    pass


class NotAdminError(AuthError):
    pass


@dataclass
class LoginSuccess:
    id: str
    username: str
    level: str


def _is_active(value) -> bool:
    # dados antigos guardam "on"/"off"
    if isinstance(value, str):
        return value.strip().lower() in {"on", "true", "1", "yes", "sim", "ativo"}
    return bool(value)


class AuthService:
    """Checks username/password pairs against the users collection."""

    def __init__(self, repository: Repository | None = None) -> None:
        self.repository = repository or get_repository(USERS)

    def _upgrade_legacy_password(self, user: dict, password: str) -> None:
        new_hash = hash_password(password)

        def mutate(current: dict) -> dict:
            current["password"] = new_hash
            return current

        self.repository.modify(user["id"], mutate)
        logger.info("Senha legada convertida para argon2: %s", user.get("username"))

    def login(self, username: str, password: str) -> LoginSuccess:
        raw_user = (username or "").strip()
        user = self.repository.find_by("username", raw_user) if raw_user else None
        if not user:
            logger.info("Login recusado, usuario inexistente: %s", raw_user)
            raise UserNotFoundError("Usuario nao encontrado.")
        if not verify_password(password, user.get("password")):
            logger.info("Login recusado, senha incorreta: %s", raw_user)
            raise InvalidCredentialsError("Senha incorreta.")
        if not is_hashed(user.get("password")):
            self._upgrade_legacy_password(user, password)
        if not _is_active(user.get("status")):
            logger.info("Usuario inativo: %s", raw_user)
            raise InactiveUserError("Usuario inativo. Contate o administrador.")
        if (user.get("level") or "").lower() != ADMIN_LEVEL:
            logger.info("Acesso negado para nivel: %s", user.get("level"))
            raise NotAdminError("Acesso negado. Apenas administradores podem acessar.")
        logger.info("Login realizado com sucesso: %s", raw_user)
        return LoginSuccess(id=user["id"], username=user["username"], level=user["level"])
