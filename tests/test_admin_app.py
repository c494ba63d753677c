"""
Admin pages: login flow, CSRF and record forms.
"""
from __future__ import annotations

import uuid

import pytest

from educa_especial.domain.entities import EVENTS, STUDENTS
from educa_especial.services.crud_service import CrudService, UserService


def _csrf(client) -> str:
    if not client.cookies.get("csrf_token"):
        client.get("/login")
    return client.cookies.get("csrf_token")


def _login(client, username="admin", password="segredo", next_url="/"):
    return client.post(
        "/login",
        data={"username": username, "password": password, "next": next_url, "csrf_token": _csrf(client)},
        follow_redirects=False,
    )


@pytest.fixture()
def logged_in(admin_client, make_user):
    make_user("admin", "segredo")
    resp = _login(admin_client)
    assert resp.status_code == 303
    return admin_client


def test_pages_redirect_to_login_without_session(admin_client):
    resp = admin_client.get("/students", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login?next=%2Fstudents"


def test_login_page_sets_csrf_cookie(admin_client):
    resp = admin_client.get("/login")
    assert resp.status_code == 200
    assert admin_client.cookies.get("csrf_token")
    assert resp.headers["x-frame-options"] == "DENY"


def test_login_without_csrf_is_forbidden(admin_client, make_user):
    make_user("admin", "segredo")
    resp = admin_client.post("/login", data={"username": "admin", "password": "segredo"}, follow_redirects=False)
    assert resp.status_code == 403


def test_login_with_wrong_password_shows_error(admin_client, make_user):
    make_user("admin", "segredo")
    resp = _login(admin_client, password="errada")
    assert resp.status_code == 401
    assert "Senha incorreta." in resp.text


def test_login_redirects_to_next_and_dashboard_counts(logged_in):
    resp = logged_in.get("/")
    assert resp.status_code == 200
    assert "Estudantes" in resp.text
    assert "Usuarios" in resp.text


def test_login_ignores_external_next(admin_client, make_user):
    make_user("admin", "segredo")
    resp = _login(admin_client, next_url="https://evil.example/")
    assert resp.headers["location"] == "/"


def test_logout_ends_session(logged_in):
    resp = logged_in.get("/logout", follow_redirects=False)
    assert resp.status_code == 303
    assert logged_in.get("/", follow_redirects=False).status_code == 303


def test_unknown_entity_is_404(logged_in):
    assert logged_in.get("/cards").status_code == 404


def test_create_student_through_form(logged_in):
    form = {
        "csrf_token": _csrf(logged_in),
        "name": "Lucas Prado",
        "age": "8",
        "parents": "Rita Prado",
        "phone_number": "1198",
        "special_needs": "",
        "status": "ativo",
    }
    resp = logged_in.post("/students/new", data=form, follow_redirects=False)
    assert resp.status_code == 303

    records = CrudService(STUDENTS).list()
    assert [r["name"] for r in records] == ["Lucas Prado"]
    assert records[0]["age"] == 8
    assert records[0]["special_needs"] is None
    assert "Lucas Prado" in logged_in.get("/students").text


def test_create_with_missing_fields_rerenders_form(logged_in):
    resp = logged_in.post("/students/new", data={"csrf_token": _csrf(logged_in), "name": "Sem dados"})
    assert resp.status_code == 400
    assert "Todos os campos obrigatorios" in resp.text
    assert CrudService(STUDENTS).count() == 0


def test_form_post_requires_csrf(logged_in):
    resp = logged_in.post("/students/new", data={"name": "x"})
    assert resp.status_code == 403


def test_edit_and_delete_event(logged_in):
    event = CrudService(EVENTS).create({"description": "Reuniao de pais", "date": "2024-05-01T10:00:00Z"})

    page = logged_in.get(f"/events/{event['id']}/edit")
    assert page.status_code == 200
    assert "2024-05-01T10:00" in page.text

    resp = logged_in.post(
        f"/events/{event['id']}/edit",
        data={"csrf_token": _csrf(logged_in), "description": "Reuniao geral", "comments": "", "date": "2024-05-02T09:30"},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    updated = CrudService(EVENTS).get(event["id"])
    assert updated["description"] == "Reuniao geral"
    assert updated["date"].day == 2

    resp = logged_in.post(f"/events/{event['id']}/delete", data={"csrf_token": _csrf(logged_in)}, follow_redirects=False)
    assert resp.status_code == 303
    assert CrudService(EVENTS).count() == 0


def test_event_date_search_page(logged_in):
    service = CrudService(EVENTS)
    service.create({"description": "Feira", "date": "2024-05-01T10:00:00Z"})
    service.create({"description": "Palestra", "date": "2024-06-01T10:00:00Z"})

    page = logged_in.get("/events", params={"search_type": "date", "start_date": "2024-05-01", "end_date": "2024-05-31"})
    assert "Feira" in page.text
    assert "Palestra" not in page.text

    bad = logged_in.get("/events", params={"search_type": "id", "q": "nao-e-id"})
    assert "ID invalido!" in bad.text


def test_detail_of_missing_record(logged_in):
    resp = logged_in.get(f"/students/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert "Estudante nao encontrado!" in resp.text


def test_user_edit_keeps_password_when_blank(logged_in, make_user):
    other = make_user("prof", "segredo", level="professor")
    resp = logged_in.post(
        f"/users/{other['id']}/edit",
        data={
            "csrf_token": _csrf(logged_in),
            "name": "Prof",
            "email": "prof@escola.br",
            "username": "prof",
            "password": "",
            "level": "admin",
            # checkbox ausente: usuario desativado
        },
        follow_redirects=False,
    )
    assert resp.status_code == 303
    saved = UserService().repository.get(other["id"])
    assert saved["status"] is False
    assert saved["level"] == "admin"
    assert _login(logged_in, "prof", "segredo").status_code == 401
    assert "Usuario inativo" in _login(logged_in, "prof", "segredo").text


def test_form_post_from_other_scheme_is_rejected(logged_in):
    resp = logged_in.post(
        "/students/new",
        data={"csrf_token": _csrf(logged_in), "name": "x"},
        headers={"origin": "https://testserver"},
    )
    assert resp.status_code == 403
    assert CrudService(STUDENTS).count() == 0
