from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from educa_especial.core.config import get_settings
from educa_especial.core.logger import get_logger
from educa_especial.core.middleware import SecurityHeadersMiddleware
from educa_especial.domain.date_range import DateRangeError
from educa_especial.routers import api_router
from educa_especial.services.auth_service import (
    AuthError,
    InactiveUserError,
    InvalidCredentialsError,
    NotAdminError,
    UserNotFoundError,
)
from educa_especial.services.crud_service import (
    CrudError,
    DuplicateRecordError,
    InvalidIdError,
    RecordNotFoundError,
    RecordValidationError,
    field_errors,
)

logger = get_logger(__name__)

DEV_ORIGINS = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8001",
    "http://127.0.0.1:8001",
}

_CRUD_STATUS = {
    InvalidIdError: 400,
    RecordValidationError: 400,
    RecordNotFoundError: 404,
    DuplicateRecordError: 409,
}
_AUTH_STATUS = {
    UserNotFoundError: 404,
    InvalidCredentialsError: 401,
    InactiveUserError: 403,
    NotAdminError: 403,
}


@asynccontextmanager
async def _lifespan(app: FastAPI):
    settings = get_settings()
    if settings.storage_backend == "sql":
        from educa_especial.db.create_tables import create_all

        create_all()
    logger.info("API iniciada (storage=%s, env=%s)", settings.storage_backend, settings.app_env)
    yield


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"message": "Todos os campos obrigatorios devem ser preenchidos!", "errors": field_errors(exc)},
            status_code=400,
        )

    @app.exception_handler(CrudError)
    async def _crud_error(request: Request, exc: CrudError):
        body = {"message": exc.message}
        if isinstance(exc, RecordValidationError):
            body["errors"] = exc.errors
        return JSONResponse(body, status_code=_CRUD_STATUS.get(type(exc), 400))

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError):
        return JSONResponse({"message": exc.message}, status_code=_AUTH_STATUS.get(type(exc), 401))

    @app.exception_handler(DateRangeError)
    async def _date_range_error(request: Request, exc: DateRangeError):
        return JSONResponse({"message": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Erro ao processar %s %s", request.method, request.url.path)
        body = {"message": "Erro interno no servidor"}
        if get_settings().expose_errors:
            body["error"] = str(exc)
        return JSONResponse(body, status_code=500)


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    settings = get_settings()
    app = FastAPI(
        title="Educacao Especial API",
        description="Cadastro de estudantes, professores, profissionais, eventos, compromissos e usuarios.",
        version="1.0.0",
        lifespan=_lifespan,
    )

    allowed_cors = set(settings.cors_origins)
    if settings.app_env != "prod":
        allowed_cors.update(DEV_ORIGINS)
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    _register_error_handlers(app)
    app.include_router(api_router)

    @app.get("/healthz", tags=["health"])
    def healthz():
        return {"status": "ok", "storage": get_settings().storage_backend}

    return app


app = create_app()
