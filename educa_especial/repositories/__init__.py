"""
Persistence adapters.

Two interchangeable backends (JSON files or SQL through SQLAlchemy) expose
the same operations; services only talk to the object returned by
get_repository().
"""
from __future__ import annotations

from typing import Union

from educa_especial.core.config import get_settings
from educa_especial.domain.entities import EntityDef

from .errors import DuplicateKeyError
from .json_storage import JsonRepository
from .sql_repository import SQLRepository

Repository = Union[JsonRepository, SQLRepository]


def get_repository(entity: EntityDef) -> Repository:
    settings = get_settings()
    if settings.storage_backend == "sql":
        return SQLRepository(entity)
    return JsonRepository(entity, settings.data_dir)


__all__ = ["DuplicateKeyError", "JsonRepository", "SQLRepository", "Repository", "get_repository"]
