"""
REST surface shared by every entity.

build_router() produces the list/search/read/create/update/delete routes
for one registry entry. Static paths (/date, /name/...) are declared
before /{record_id} so they are never captured as identifiers.
"""
# No `from __future__ import annotations` here: the payload annotations
# reference the entity schema through a closure variable.

from typing import Optional

from fastapi import APIRouter, Body, Query, Request, Response

from educa_especial.domain.entities import EntityDef
from educa_especial.services.crud_service import get_service


def build_router(entity: EntityDef, router: Optional[APIRouter] = None) -> APIRouter:
    router = router or APIRouter(prefix=f"/{entity.name}", tags=[entity.label_plural])
    schema = entity.schema

    @router.get("", summary=f"Lista {entity.label_plural.lower()} (filtros: {', '.join(entity.text_filters)})")
    def list_records(request: Request):
        return get_service(entity).list(dict(request.query_params))

    @router.get("/date", summary=f"{entity.label_plural} por intervalo de datas ({entity.date_field})")
    def search_by_date(
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
    ):
        return get_service(entity).search_by_date(start_date, end_date)

    @router.get("/name/{term}", summary=f"{entity.label_plural} por {entity.name_field}")
    def search_by_name(term: str):
        return get_service(entity).search_by_name(term)

    @router.get("/{record_id}", summary=f"Retorna um {entity.label.lower()} pelo ID")
    def get_record(record_id: str):
        return get_service(entity).get(record_id)

    @router.post("", status_code=201, summary=f"Cria um {entity.label.lower()}")
    def create_record(payload: schema):
        return get_service(entity).create(payload)

    @router.put("/{record_id}", summary=f"Substitui um {entity.label.lower()}")
    def replace_record(record_id: str, payload: schema):
        return get_service(entity).replace(record_id, payload)

    @router.patch("/{record_id}", summary=f"Altera campos de um {entity.label.lower()}")
    def patch_record(record_id: str, payload: dict = Body(...)):
        return get_service(entity).patch(record_id, payload)

    @router.delete("/{record_id}", status_code=204, response_class=Response, summary=f"Remove um {entity.label.lower()}")
    def delete_record(record_id: str):
        get_service(entity).delete(record_id)
        return Response(status_code=204)

    return router
