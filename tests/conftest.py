"""
Shared fixtures: every test runs against a fresh DATA_DIR and a temporary
SQLite file, and API/admin tests run once per storage backend.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Garante que o pacote seja importavel durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from educa_especial.core import config as core_config
from educa_especial.core.rate_limiter import reset_limits
from educa_especial.db import session as db_session
from educa_especial.db.create_tables import create_all
from educa_especial.services.crud_service import UserService
from educa_especial.services.session_service import clear_sessions


def _reload_settings() -> None:
    core_config.get_settings.cache_clear()
    db_session.reset_engine()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.delenv("LOGIN_RATE_LIMIT", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    _reload_settings()
    reset_limits()
    clear_sessions()
    yield tmp_path
    # libera o arquivo SQLite antes do tmp_path ser removido
    db_session.reset_engine()
    core_config.get_settings.cache_clear()


@pytest.fixture(params=["json", "sql"])
def backend(request, monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", request.param)
    _reload_settings()
    if request.param == "sql":
        create_all()
    return request.param


@pytest.fixture()
def client(backend):
    from educa_especial.app import create_app

    with TestClient(create_app()) as c:
        yield c


@pytest.fixture()
def admin_client(backend):
    from educa_especial.admin_app import create_admin_app

    with TestClient(create_admin_app()) as c:
        yield c


@pytest.fixture()
def make_user(backend):
    def _make(username: str = "admin", password: str = "segredo", *, level: str = "admin", status: bool = True) -> dict:
        return UserService().create(
            {
                "name": username.title(),
                "email": f"{username}@escola.br",
                "username": username,
                "password": password,
                "level": level,
                "status": status,
            }
        )

    return _make


@pytest.fixture()
def student_payload() -> dict:
    return {
        "name": "Maria Souza",
        "age": 9,
        "parents": "Ana Souza",
        "phone_number": "(11) 99999-0000",
        "special_needs": "TEA",
        "status": "ativo",
    }
