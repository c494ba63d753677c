"""
JSON-file persistence adapter.

Each entity lives in ``<DATA_DIR>/<entity>.json`` as an array of records.
Every read-modify-write runs under a lock shared by all repositories that
point at the same file, and the file is replaced atomically on save.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
import json
import os
import tempfile
import threading
from typing import Callable, Iterator

from educa_especial.core.logger import get_logger
from educa_especial.domain.date_range import parse_datetime
from educa_especial.domain.entities import EntityDef

from .errors import DuplicateKeyError

logger = get_logger(__name__)

_locks: dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


def _check_unique(records: list[dict], candidate: dict, unique: tuple[str, ...]) -> None:
    for field in unique:
        value = candidate.get(field)
        for other in records:
            if other.get("id") != candidate.get("id") and other.get(field) == value:
                raise DuplicateKeyError(field)


def _matches(record: dict, filters: dict[str, str]) -> bool:
    for key, term in filters.items():
        value = record.get(key)
        if value is None or term.lower() not in str(value).lower():
            return False
    return True


class JsonRepository:
    """CRUD helpers over one JSON array file."""

    def __init__(self, entity: EntityDef, data_dir: str | Path) -> None:
        self.entity = entity
        self.path = Path(data_dir) / f"{entity.name}.json"
        self._lock = _lock_for(self.path)

    # -------------------------- file io --------------------------
    def _decode(self, raw: dict) -> dict:
        record = dict(raw)
        for fname in self.entity.datetime_fields:
            if record.get(fname):
                record[fname] = parse_datetime(record[fname])
        return record

    def _encode(self, record: dict) -> dict:
        return {k: (v.isoformat() if isinstance(v, datetime) else v) for k, v in record.items()}

    def load_raw(self) -> list[dict]:
        """Records exactly as stored (datetimes still as strings)."""
        with self._lock:
            if not self.path.exists():
                return []
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except ValueError:
                logger.error("Arquivo JSON corrompido: %s", self.path)
                raise
        if not isinstance(data, list):
            logger.error("Arquivo JSON nao contem uma lista: %s", self.path)
            raise ValueError(f"{self.path} deve conter uma lista de registros")
        return data

    def load(self) -> list[dict]:
        raw = self.load_raw()
        try:
            return [self._decode(item) for item in raw]
        except (TypeError, ValueError):
            logger.error("Registro com data invalida em %s", self.path)
            raise

    def save(self, records: list[dict]) -> None:
        payload = json.dumps([self._encode(r) for r in records], ensure_ascii=False, indent=2)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise

    @contextmanager
    def transaction(self) -> Iterator[list[dict]]:
        """Hold the file lock across load/modify/save; saves on normal exit."""
        with self._lock:
            records = self.load()
            yield records
            self.save(records)

    # -------------------------- queries --------------------------
    def list(self, filters: dict[str, str] | None = None) -> list[dict]:
        records = self.load()
        if filters:
            records = [r for r in records if _matches(r, filters)]
        return records

    def get(self, record_id: str) -> dict | None:
        for record in self.load():
            if record.get("id") == record_id:
                return record
        return None

    def find_by(self, field: str, value) -> dict | None:
        for record in self.load():
            if record.get(field) == value:
                return record
        return None

    def between(self, field: str, start: datetime, end: datetime) -> list[dict]:
        found = []
        for record in self.load():
            value = record.get(field)
            if isinstance(value, datetime) and start <= value <= end:
                found.append(record)
        found.sort(key=lambda r: r[field])
        return found

    def count(self) -> int:
        return len(self.load())

    # -------------------------- mutations --------------------------
    def insert(self, record: dict, unique: tuple[str, ...] = ()) -> dict:
        """Append a record; ``unique`` fields are checked under the file lock."""
        with self.transaction() as records:
            _check_unique(records, record, unique)
            records.append(record)
        return record

    def modify(self, record_id: str, mutate: Callable[[dict], dict], unique: tuple[str, ...] = ()) -> dict | None:
        """Replace a record with ``mutate(current)`` while holding the file lock."""
        with self.transaction() as records:
            for idx, current in enumerate(records):
                if current.get("id") == record_id:
                    updated = mutate(dict(current))
                    _check_unique(records, updated, unique)
                    records[idx] = updated
                    return updated
        return None

    def delete(self, record_id: str) -> dict | None:
        with self.transaction() as records:
            for idx, current in enumerate(records):
                if current.get("id") == record_id:
                    return records.pop(idx)
        return None
