"""
FastAPI routers grouped by entity.

Every entity gets the same CRUD surface from crud.build_router(); users
add the login endpoint on top of it. api_router mounts all of them under
/api.
"""
from __future__ import annotations

from fastapi import APIRouter

from educa_especial.domain.entities import ENTITIES, USERS

from . import users
from .crud import build_router

api_router = APIRouter(prefix="/api")
for _entity in ENTITIES.values():
    if _entity is USERS:
        continue
    api_router.include_router(build_router(_entity))
api_router.include_router(users.router)

__all__ = ["api_router", "build_router"]
