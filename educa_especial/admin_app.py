"""
Server-rendered admin for the institution records.

Runs as its own app (``uvicorn educa_especial.admin_app:app --port 8001``)
and talks to the same services as the JSON API.
"""
from __future__ import annotations

import os
from datetime import datetime
from typing import Any
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from educa_especial.core import csrf
from educa_especial.core.config import get_settings
from educa_especial.core.logger import get_logger
from educa_especial.core.middleware import SecurityHeadersMiddleware
from educa_especial.core.rate_limiter import rate_limit_ip
from educa_especial.domain.date_range import DateRangeError
from educa_especial.domain.entities import ENTITIES, EntityDef, get_entity
from educa_especial.services.auth_service import AuthError, AuthService
from educa_especial.services.crud_service import (
    CrudError,
    DuplicateRecordError,
    RecordNotFoundError,
    RecordValidationError,
    get_service,
)
from educa_especial.services.session_service import (
    clear_session_cookie,
    current_session,
    delete_session,
    issue_session,
    set_session_cookie,
    SESSION_COOKIE_NAME,
)

logger = get_logger(__name__)

BASE = os.path.dirname(__file__)
templates = Jinja2Templates(directory=os.path.join(BASE, "templates"))

SEARCH_TYPES = ("id", "name", "date")


# ---------------------- helpers ----------------------
def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Sim" if value else "Nao"
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    return str(value)


templates.env.filters["fmt"] = _format_value


def _input_type(entity: EntityDef, name: str) -> str:
    if name == "password":
        return "password"
    annotation = entity.schema.model_fields[name].annotation
    if annotation is bool:
        return "checkbox"
    if annotation is int:
        return "number"
    if name in entity.datetime_fields:
        return "datetime-local"
    return "text"


def _input_value(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M")
    if value is None:
        return ""
    return str(value)


def _form_fields(entity: EntityDef, values: dict | None = None, *, editing: bool = False) -> list[dict]:
    values = values or {}
    fields = []
    for name, info in entity.schema.model_fields.items():
        kind = _input_type(entity, name)
        fields.append(
            {
                "name": name,
                "label": info.title or name,
                "type": kind,
                "required": info.is_required() and kind != "checkbox" and not (editing and kind == "password"),
                "value": "" if kind == "password" else _input_value(values.get(name)),
                "checked": bool(values.get(name)) if kind == "checkbox" else False,
            }
        )
    return fields


def _form_to_data(entity: EntityDef, form: dict, *, editing: bool = False) -> dict:
    data: dict[str, Any] = {}
    for name in entity.fields:
        kind = _input_type(entity, name)
        if kind == "checkbox":
            data[name] = name in form
            continue
        raw = (form.get(name) or "").strip()
        if kind == "password" and editing and not raw:
            continue
        data[name] = raw or None
    return data


def _safe_next(target: str | None) -> str:
    target = (target or "").strip()
    if not target.startswith("/") or target.startswith("//"):
        return "/"
    return target


def _login_redirect(request: Request) -> RedirectResponse:
    dest = request.url.path
    if request.url.query:
        dest += "?" + request.url.query
    return RedirectResponse(f"/login?next={quote(dest, safe='')}", status_code=303)


def _entity_or_404(entity_name: str) -> EntityDef:
    try:
        return get_entity(entity_name)
    except KeyError:
        raise HTTPException(404, "Pagina nao encontrada")


def _render(request: Request, name: str, context: dict, status_code: int = 200) -> HTMLResponse:
    token = csrf.ensure_csrf_token(request)
    ctx = {
        "csrf_token": token,
        "session": current_session(request),
        "entities": list(ENTITIES.values()),
    }
    ctx.update(context)
    response = templates.TemplateResponse(request, name, ctx, status_code=status_code)
    csrf.set_csrf_cookie(response, token)
    return response


async def _read_form(request: Request) -> dict:
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


# ---------------------- auth ----------------------
def login_page(request: Request, next: str = "/", error: str = ""):
    return _render(request, "login.html", {"next": _safe_next(next), "error": error})


def do_login(request: Request, form: dict = Depends(_read_form)):
    csrf.validate_csrf(request, form.get("csrf_token"))
    rate_limit_ip(request, "admin:login", limit=get_settings().login_rate_limit, window_seconds=300)
    next_url = _safe_next(form.get("next"))
    try:
        result = AuthService().login(form.get("username", ""), form.get("password", ""))
    except AuthError as exc:
        return _render(request, "login.html", {"next": next_url, "error": exc.message}, status_code=401)
    token = issue_session(result.id, result.username)
    logger.info("Sessao admin iniciada: %s", result.username)
    response = RedirectResponse(next_url, status_code=303)
    set_session_cookie(response, token)
    return response


def logout(request: Request):
    delete_session(request.cookies.get(SESSION_COOKIE_NAME))
    logger.info("Sessao admin encerrada")
    response = RedirectResponse("/login", status_code=303)
    clear_session_cookie(response)
    return response


# ---------------------- dashboard ----------------------
def dashboard(request: Request):
    if not current_session(request):
        return _login_redirect(request)
    counts = [(entity, get_service(entity).count()) for entity in ENTITIES.values()]
    return _render(request, "dashboard.html", {"counts": counts})


# ---------------------- records ----------------------
def list_records(
    request: Request,
    entity_name: str,
    search_type: str = "name",
    q: str = "",
    start_date: str = "",
    end_date: str = "",
):
    if not current_session(request):
        return _login_redirect(request)
    entity = _entity_or_404(entity_name)
    service = get_service(entity)
    search_type = search_type if search_type in SEARCH_TYPES else "name"
    error = ""
    try:
        if search_type == "id" and q.strip():
            records = [service.get(q)]
        elif search_type == "date" and (start_date or end_date):
            records = service.search_by_date(start_date, end_date)
        elif search_type == "name" and q.strip():
            records = service.list({entity.name_field: q})
        else:
            records = service.list()
    except (CrudError, DateRangeError) as exc:
        records = []
        error = getattr(exc, "message", None) or str(exc)
    context = {
        "entity": entity,
        "records": records,
        "search_type": search_type,
        "q": q,
        "start_date": start_date,
        "end_date": end_date,
        "error": error,
        "ok": request.query_params.get("ok", ""),
    }
    return _render(request, "list.html", context)


def new_record_form(request: Request, entity_name: str):
    if not current_session(request):
        return _login_redirect(request)
    entity = _entity_or_404(entity_name)
    return _render(request, "form.html", {"entity": entity, "fields": _form_fields(entity), "record": None, "errors": []})


def create_record(request: Request, entity_name: str, form: dict = Depends(_read_form)):
    if not current_session(request):
        return _login_redirect(request)
    csrf.validate_csrf(request, form.get("csrf_token"))
    entity = _entity_or_404(entity_name)
    data = _form_to_data(entity, form)
    try:
        get_service(entity).create(data)
    except (RecordValidationError, DuplicateRecordError) as exc:
        context = {
            "entity": entity,
            "fields": _form_fields(entity, data),
            "record": None,
            "message": exc.message,
            "errors": getattr(exc, "errors", []),
        }
        return _render(request, "form.html", context, status_code=400)
    return RedirectResponse(f"/{entity.name}?ok=created", status_code=303)


def _load_or_404(request: Request, entity: EntityDef, record_id: str):
    try:
        return get_service(entity).get(record_id), None
    except CrudError as exc:
        status = 404 if isinstance(exc, RecordNotFoundError) else 400
        return None, _render(request, "message.html", {"title": entity.label, "message": exc.message}, status_code=status)


def read_record(request: Request, entity_name: str, record_id: str):
    if not current_session(request):
        return _login_redirect(request)
    entity = _entity_or_404(entity_name)
    record, error_page = _load_or_404(request, entity, record_id)
    if error_page:
        return error_page
    return _render(request, "detail.html", {"entity": entity, "record": record})


def edit_record_form(request: Request, entity_name: str, record_id: str):
    if not current_session(request):
        return _login_redirect(request)
    entity = _entity_or_404(entity_name)
    record, error_page = _load_or_404(request, entity, record_id)
    if error_page:
        return error_page
    context = {"entity": entity, "fields": _form_fields(entity, record, editing=True), "record": record, "errors": []}
    return _render(request, "form.html", context)


def update_record(request: Request, entity_name: str, record_id: str, form: dict = Depends(_read_form)):
    if not current_session(request):
        return _login_redirect(request)
    csrf.validate_csrf(request, form.get("csrf_token"))
    entity = _entity_or_404(entity_name)
    data = _form_to_data(entity, form, editing=True)
    try:
        get_service(entity).patch(record_id, data)
    except (RecordValidationError, DuplicateRecordError) as exc:
        context = {
            "entity": entity,
            "fields": _form_fields(entity, data, editing=True),
            "record": {"id": record_id},
            "message": exc.message,
            "errors": getattr(exc, "errors", []),
        }
        return _render(request, "form.html", context, status_code=400)
    except CrudError as exc:
        return _render(request, "message.html", {"title": entity.label, "message": exc.message}, status_code=404)
    return RedirectResponse(f"/{entity.name}/{record_id}?ok=updated", status_code=303)


def delete_record_form(request: Request, entity_name: str, record_id: str):
    if not current_session(request):
        return _login_redirect(request)
    entity = _entity_or_404(entity_name)
    record, error_page = _load_or_404(request, entity, record_id)
    if error_page:
        return error_page
    return _render(request, "delete.html", {"entity": entity, "record": record})


def delete_record(request: Request, entity_name: str, record_id: str, form: dict = Depends(_read_form)):
    if not current_session(request):
        return _login_redirect(request)
    csrf.validate_csrf(request, form.get("csrf_token"))
    entity = _entity_or_404(entity_name)
    try:
        get_service(entity).delete(record_id)
    except CrudError as exc:
        return _render(request, "message.html", {"title": entity.label, "message": exc.message}, status_code=404)
    return RedirectResponse(f"/{entity.name}?ok=deleted", status_code=303)


def create_admin_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    settings = get_settings()
    admin = FastAPI(title="Educacao Especial Admin", docs_url=None, redoc_url=None, openapi_url=None)
    admin.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    admin.add_api_route("/login", login_page, methods=["GET"], response_class=HTMLResponse)
    admin.add_api_route("/login", do_login, methods=["POST"])
    admin.add_api_route("/logout", logout, methods=["GET"])
    admin.add_api_route("/", dashboard, methods=["GET"], response_class=HTMLResponse)
    admin.add_api_route("/{entity_name}", list_records, methods=["GET"], response_class=HTMLResponse)
    admin.add_api_route("/{entity_name}/new", new_record_form, methods=["GET"], response_class=HTMLResponse)
    admin.add_api_route("/{entity_name}/new", create_record, methods=["POST"])
    admin.add_api_route("/{entity_name}/{record_id}", read_record, methods=["GET"], response_class=HTMLResponse)
    admin.add_api_route("/{entity_name}/{record_id}/edit", edit_record_form, methods=["GET"], response_class=HTMLResponse)
    admin.add_api_route("/{entity_name}/{record_id}/edit", update_record, methods=["POST"])
    admin.add_api_route("/{entity_name}/{record_id}/delete", delete_record_form, methods=["GET"], response_class=HTMLResponse)
    admin.add_api_route("/{entity_name}/{record_id}/delete", delete_record, methods=["POST"])
    return admin


app = create_admin_app()
