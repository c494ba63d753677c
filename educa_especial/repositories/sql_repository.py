"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from educa_especial.db.models import MODELS
from educa_especial.db.session import get_session
from educa_especial.domain.date_range import as_utc
from educa_especial.domain.entities import EntityDef

from .errors import DuplicateKeyError


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session for one entity table."""

    def __init__(self, entity: EntityDef) -> None:
        self.entity = entity
        self.model = MODELS[entity.name]
        self._columns = ("id", "created_at", *entity.fields)

    def _to_dict(self, row) -> dict:
        record = {}
        for name in self._columns:
            value = getattr(row, name)
            if isinstance(value, datetime):
                value = as_utc(value)
            record[name] = value
        return record

    def _column(self, field: str):
        if field not in self._columns:
            raise KeyError(field)
        return getattr(self.model, field)

    # -------------------------- queries --------------------------
    def list(self, filters: dict[str, str] | None = None) -> list[dict]:
        stmt = select(self.model)
        for key, term in (filters or {}).items():
            stmt = stmt.where(func.lower(self._column(key)).contains(term.lower(), autoescape=True))
        stmt = stmt.order_by(self.model.created_at)
        with get_session() as session:
            return [self._to_dict(row) for row in session.execute(stmt).scalars().all()]

    def get(self, record_id: str) -> Optional[dict]:
        with get_session() as session:
            row = session.get(self.model, record_id)
            return self._to_dict(row) if row else None

    def find_by(self, field: str, value) -> Optional[dict]:
        stmt = select(self.model).where(self._column(field) == value).limit(1)
        with get_session() as session:
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_dict(row) if row else None

    def between(self, field: str, start: datetime, end: datetime) -> list[dict]:
        column = self._column(field)
        stmt = select(self.model).where(column >= start, column <= end).order_by(column)
        with get_session() as session:
            return [self._to_dict(row) for row in session.execute(stmt).scalars().all()]

    def count(self) -> int:
        with get_session() as session:
            return int(session.execute(select(func.count()).select_from(self.model)).scalar_one())

    # -------------------------- mutations --------------------------
    def _conflict(self, record: dict, unique: tuple[str, ...]) -> str | None:
        with get_session() as session:
            for field in unique:
                stmt = select(self.model.id).where(
                    self._column(field) == record.get(field),
                    self.model.id != record.get("id"),
                )
                if session.execute(stmt.limit(1)).first():
                    return field
        return None

    def _commit(self, session, record: dict, unique: tuple[str, ...]) -> None:
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            field = self._conflict(record, unique)
            if field:
                raise DuplicateKeyError(field)
            raise

    def insert(self, record: dict, unique: tuple[str, ...] = ()) -> dict:
        """Insert a row; a unique constraint hit on ``unique`` becomes DuplicateKeyError."""
        entity = self.model(**{k: record.get(k) for k in self._columns})
        with get_session() as session:
            session.add(entity)
            self._commit(session, record, unique)
            session.refresh(entity)
            return self._to_dict(entity)

    def modify(self, record_id: str, mutate: Callable[[dict], dict], unique: tuple[str, ...] = ()) -> Optional[dict]:
        """Apply ``mutate(current)`` to a row inside a single session."""
        with get_session() as session:
            row = session.get(self.model, record_id, with_for_update=True)
            if not row:
                return None
            updated = mutate(self._to_dict(row))
            for name in self._columns:
                if name == "id":
                    continue
                setattr(row, name, updated.get(name))
            self._commit(session, {**updated, "id": record_id}, unique)
            session.refresh(row)
            return self._to_dict(row)

    def delete(self, record_id: str) -> Optional[dict]:
        with get_session() as session:
            row = session.get(self.model, record_id)
            if not row:
                return None
            record = self._to_dict(row)
            session.execute(delete(self.model).where(self.model.id == record_id))
            session.commit()
            return record
