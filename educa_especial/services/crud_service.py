"""
Generic record use cases shared by every entity.

Routers (API and admin) call these services instead of touching the
repositories directly. Problems are reported through the CrudError
hierarchy and mapped to HTTP statuses at the app edge.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ValidationError

from educa_especial.core.logger import get_logger
from educa_especial.core.security import hash_password
from educa_especial.domain.date_range import day_bounds
from educa_especial.domain.entities import USERS, EntityDef
from educa_especial.domain.ids import is_valid_id, new_id
from educa_especial.repositories import DuplicateKeyError, Repository, get_repository

logger = get_logger(__name__)


class CrudError(Exception):
    """Base class for record-related exceptions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidIdError(CrudError):
    pass


class RecordNotFoundError(CrudError):
    pass


class DuplicateRecordError(CrudError):
    pass


class RecordValidationError(CrudError):
    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []


def field_errors(exc) -> list[dict]:
    """Flatten pydantic (or FastAPI request) errors into ``[{"field", "message"}]``."""
    out = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body",)]
        out.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return out


class CrudService:
    """List, search, create, read, update and delete records of one entity."""

    def __init__(self, entity: EntityDef, repository: Repository | None = None) -> None:
        self.entity = entity
        self.repository = repository or get_repository(entity)

    # -------------------------------------- helpers --------------------------------------
    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _check_id(self, record_id: str) -> str:
        value = (record_id or "").strip().lower()
        if not is_valid_id(value):
            raise InvalidIdError("ID invalido!")
        return value

    def _validate(self, data: Mapping[str, Any] | BaseModel | None) -> dict:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        try:
            model = self.entity.schema.model_validate(dict(data or {}))
        except ValidationError as exc:
            raise RecordValidationError(
                "Todos os campos obrigatorios devem ser preenchidos corretamente!",
                errors=field_errors(exc),
            ) from exc
        return model.model_dump()

    def _prepare(self, values: dict, current: dict | None, supplied: Iterable[str]) -> dict:
        """Hook for entity specific rules before a record is written."""
        return values

    def _out(self, record: dict) -> dict:
        return self.entity.public(record)

    def _duplicate(self, field: str) -> DuplicateRecordError:
        info = self.entity.schema.model_fields.get(field)
        title = (info.title if info else None) or field
        return DuplicateRecordError(f"{title} ja cadastrado para outro {self.entity.label.lower()}!")

    # -------------------------------------- queries --------------------------------------
    def list(self, filters: Mapping[str, str] | None = None) -> list[dict]:
        wanted = {
            key: str(value).strip()
            for key, value in (filters or {}).items()
            if key in self.entity.text_filters and str(value or "").strip()
        }
        return [self._out(r) for r in self.repository.list(wanted)]

    def get(self, record_id: str) -> dict:
        record = self.repository.get(self._check_id(record_id))
        if not record:
            raise RecordNotFoundError(self.entity.not_found_message)
        return self._out(record)

    def search_by_date(self, start_date: str | None, end_date: str | None) -> list[dict]:
        start, end = day_bounds(start_date, end_date)
        if start > end:
            return []
        records = self.repository.between(self.entity.date_field, start, end)
        return [self._out(r) for r in records]

    def search_by_name(self, term: str) -> list[dict]:
        term = (term or "").strip()
        found = self.repository.list({self.entity.name_field: term}) if term else []
        if not found:
            raise RecordNotFoundError(f"Nenhum {self.entity.label.lower()} encontrado com esse nome!")
        return [self._out(r) for r in found]

    def count(self) -> int:
        return self.repository.count()

    # -------------------------------------- mutations --------------------------------------
    def create(self, data: Mapping[str, Any] | BaseModel) -> dict:
        values = self._validate(data)
        values = self._prepare(values, None, values.keys())
        record = {"id": new_id(), "created_at": self._now(), **values}
        try:
            saved = self.repository.insert(record, unique=self.entity.unique_fields)
        except DuplicateKeyError as exc:
            raise self._duplicate(exc.field) from exc
        logger.info("%s criado: %s", self.entity.name, saved["id"])
        return self._out(saved)

    def replace(self, record_id: str, data: Mapping[str, Any] | BaseModel) -> dict:
        record_id = self._check_id(record_id)
        values = self._validate(data)

        def mutate(current: dict) -> dict:
            prepared = self._prepare(dict(values), current, values.keys())
            return {"id": current["id"], "created_at": current.get("created_at") or self._now(), **prepared}

        try:
            saved = self.repository.modify(record_id, mutate, unique=self.entity.unique_fields)
        except DuplicateKeyError as exc:
            raise self._duplicate(exc.field) from exc
        if not saved:
            raise RecordNotFoundError(self.entity.not_found_message)
        logger.info("%s atualizado: %s", self.entity.name, record_id)
        return self._out(saved)

    def patch(self, record_id: str, data: Mapping[str, Any]) -> dict:
        record_id = self._check_id(record_id)
        changes = {k: v for k, v in dict(data or {}).items() if k in self.entity.fields}

        def mutate(current: dict) -> dict:
            merged = {name: current.get(name) for name in self.entity.fields}
            merged.update(changes)
            values = self._prepare(self._validate(merged), current, changes.keys())
            return {"id": current["id"], "created_at": current.get("created_at") or self._now(), **values}

        try:
            saved = self.repository.modify(record_id, mutate, unique=self.entity.unique_fields)
        except DuplicateKeyError as exc:
            raise self._duplicate(exc.field) from exc
        if not saved:
            raise RecordNotFoundError(self.entity.not_found_message)
        logger.info("%s alterado (%s): %s", self.entity.name, ", ".join(sorted(changes)) or "-", record_id)
        return self._out(saved)

    def delete(self, record_id: str) -> dict:
        removed = self.repository.delete(self._check_id(record_id))
        if not removed:
            raise RecordNotFoundError(self.entity.not_found_message)
        logger.info("%s removido: %s", self.entity.name, removed["id"])
        return self._out(removed)


class UserService(CrudService):
    """Users keep a hashed password and a unique username."""

    def __init__(self, repository: Repository | None = None) -> None:
        super().__init__(USERS, repository)

    def _duplicate(self, field: str) -> DuplicateRecordError:
        return DuplicateRecordError("Nome de usuario ja esta em uso!")

    def _prepare(self, values: dict, current: dict | None, supplied: Iterable[str]) -> dict:
        username = values.get("username")
        other = self.repository.find_by("username", username)
        if other and (current is None or other["id"] != current["id"]):
            raise self._duplicate("username")
        if current is not None and "password" not in supplied:
            values["password"] = current.get("password")
        else:
            values["password"] = hash_password(values.get("password") or "")
        return values


def get_service(entity: EntityDef) -> CrudService:
    if entity.name == USERS.name:
        return UserService()
    return CrudService(entity)
