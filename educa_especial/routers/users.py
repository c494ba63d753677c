from __future__ import annotations

from fastapi import APIRouter, Request

from educa_especial.core.config import get_settings
from educa_especial.core.rate_limiter import rate_limit_ip
from educa_especial.domain.entities import USERS
from educa_especial.domain.schemas import LoginRequest
from educa_especial.routers.crud import build_router
from educa_especial.services.auth_service import AuthService

router = APIRouter(prefix=f"/{USERS.name}", tags=[USERS.label_plural])


@router.post("/login", summary="Autentica um administrador (sem emissao de sessao)")
def login(request: Request, payload: LoginRequest):
    rate_limit_ip(request, "api:login", limit=get_settings().login_rate_limit, window_seconds=300)
    result = AuthService().login(payload.username, payload.password)
    return {
        "message": "Login realizado com sucesso!",
        "user": {"id": result.id, "username": result.username, "level": result.level},
    }


build_router(USERS, router)
