from __future__ import annotations

from datetime import datetime, timezone

from educa_especial.core import config as core_config
from educa_especial.core.security import is_hashed
from educa_especial.domain.entities import USERS
from educa_especial.domain.ids import new_id
from educa_especial.repositories import get_repository


def _login(client, username, password):
    return client.post("/api/users/login", json={"username": username, "password": password})


def test_login_success(client, make_user):
    user = make_user("admin", "segredo")

    resp = _login(client, "admin", "segredo")
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Login realizado com sucesso!",
        "user": {"id": user["id"], "username": "admin", "level": "admin"},
    }


def test_login_unknown_user(client):
    resp = _login(client, "fantasma", "x")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Usuario nao encontrado."}


def test_login_wrong_password(client, make_user):
    make_user("admin", "segredo")
    resp = _login(client, "admin", "errada")
    assert resp.status_code == 401
    assert resp.json() == {"message": "Senha incorreta."}


def test_login_inactive_user(client, make_user):
    make_user("admin", "segredo", status=False)
    resp = _login(client, "admin", "segredo")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Usuario inativo. Contate o administrador."


def test_login_requires_admin_level(client, make_user):
    make_user("prof", "segredo", level="professor")
    resp = _login(client, "prof", "segredo")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Acesso negado. Apenas administradores podem acessar."


def test_admin_level_is_case_insensitive(client, make_user):
    make_user("chefe", "segredo", level="Admin")
    assert _login(client, "chefe", "segredo").status_code == 200


def test_login_with_blank_fields_is_400(client):
    assert client.post("/api/users/login", json={"username": "admin"}).status_code == 400
    assert _login(client, "", "").status_code == 400


def test_legacy_plaintext_password_is_upgraded(client):
    repo = get_repository(USERS)
    repo.insert(
        {
            "id": new_id(),
            "created_at": datetime.now(timezone.utc),
            "name": "Antigo",
            "email": "antigo@escola.br",
            "username": "antigo",
            "password": "123456",
            "level": "admin",
            "status": True,
        }
    )

    assert _login(client, "antigo", "123456").status_code == 200
    assert is_hashed(repo.find_by("username", "antigo")["password"])
    assert _login(client, "antigo", "123456").status_code == 200
    assert _login(client, "antigo", "654321").status_code == 401


def test_patch_without_password_keeps_credentials(client, make_user):
    user = make_user("admin", "segredo")
    resp = client.patch(f"/api/users/{user['id']}", json={"email": "novo@escola.br"})
    assert resp.status_code == 200
    assert _login(client, "admin", "segredo").status_code == 200

    client.patch(f"/api/users/{user['id']}", json={"password": "trocada"})
    assert _login(client, "admin", "segredo").status_code == 401
    assert _login(client, "admin", "trocada").status_code == 200


def test_login_is_rate_limited(client, monkeypatch):
    monkeypatch.setenv("LOGIN_RATE_LIMIT", "2")
    core_config.get_settings.cache_clear()

    assert _login(client, "x", "y").status_code == 404
    assert _login(client, "x", "y").status_code == 404
    resp = _login(client, "x", "y")
    assert resp.status_code == 429
