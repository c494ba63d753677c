"""
Configuration helpers for the Educacao Especial backend.

Routers/services read configuration through get_settings() instead of
fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

BASE_DIR = Path(__file__).resolve().parents[2]

STORAGE_BACKENDS = ("json", "sql")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    data_dir: str
    database_url: str
    cors_origins: tuple[str, ...]
    log_level: str
    admin_session_ttl_seconds: int
    login_rate_limit: int

    @property
    def expose_errors(self) -> bool:
        return self.app_env != "prod"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _list(value: str | None) -> tuple[str, ...]:
        return tuple(item.strip().rstrip("/") for item in (value or "").split(",") if item.strip())

    backend = (os.getenv("STORAGE_BACKEND") or "json").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(f"STORAGE_BACKEND invalido: {backend!r} (use json ou sql)")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=backend,
        data_dir=os.getenv("DATA_DIR") or str(BASE_DIR / "data"),
        database_url=os.getenv("DATABASE_URL") or f"sqlite:///{BASE_DIR / 'educa.db'}",
        cors_origins=_list(os.getenv("CORS_ORIGINS")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        admin_session_ttl_seconds=max(600, _int(os.getenv("ADMIN_SESSION_TTL_SECONDS", "43200"), 43200)),
        login_rate_limit=max(1, _int(os.getenv("LOGIN_RATE_LIMIT", "10"), 10)),
    )
