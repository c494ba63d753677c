"""One-off migration script: JSON files (DATA_DIR) -> SQL database (DATABASE_URL)."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import sys

from pydantic import ValidationError

# Garantir que o pacote seja importavel quando rodado diretamente
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from educa_especial.core.config import get_settings
from educa_especial.core.logger import get_logger
from educa_especial.db.create_tables import create_all
from educa_especial.domain.date_range import parse_datetime
from educa_especial.domain.entities import ENTITIES, EntityDef
from educa_especial.domain.ids import id_from_legacy, is_valid_id, new_id
from educa_especial.repositories import DuplicateKeyError, JsonRepository, SQLRepository

logger = get_logger("educa_especial.scripts.migrate_json_to_sql")


def _to_datetime(value) -> datetime | None:
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        return None


def _normalize(entity: EntityDef, raw: dict) -> dict | None:
    """Validate one stored record and fill what older data lacks (id, created_at)."""
    try:
        values = entity.schema.model_validate(raw).model_dump()
    except ValidationError as exc:
        logger.warning("%s: registro ignorado (%s): %s", entity.name, raw.get("id"), exc.errors()[0].get("msg"))
        return None

    legacy = str(raw.get("id") or "").strip()
    record_id = legacy.lower()
    if not legacy:
        record_id = new_id()
        logger.warning("%s: registro sem id recebeu %s", entity.name, record_id)
    elif not is_valid_id(record_id):
        record_id = id_from_legacy(entity.name, legacy)
        logger.warning("%s: id legado %s convertido para %s", entity.name, legacy, record_id)

    created_at = _to_datetime(raw.get("created_at"))
    if created_at is None:
        created_at = datetime.now(timezone.utc)
        logger.warning("%s: registro %s sem created_at valido, usando agora", entity.name, record_id)
    return {"id": record_id, "created_at": created_at, **values}


def migrate() -> dict[str, int]:
    settings = get_settings()
    create_all()
    copied: dict[str, int] = {}
    for entity in ENTITIES.values():
        source = JsonRepository(entity, settings.data_dir)
        target = SQLRepository(entity)
        total = 0
        for raw in source.load_raw():
            record = _normalize(entity, raw)
            if record is None or target.get(record["id"]):
                continue
            try:
                target.insert(record, unique=entity.unique_fields)
            except DuplicateKeyError as exc:
                logger.warning("%s: registro %s ignorado, %s repetido", entity.name, record["id"], exc.field)
                continue
            total += 1
        copied[entity.name] = total
        logger.info("%s: %s registro(s) migrado(s)", entity.name, total)
    return copied


if __name__ == "__main__":
    for name, total in migrate().items():
        print(f"{name}: {total} registro(s) migrado(s)")
    print("Migration finished.")
