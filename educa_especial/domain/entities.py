"""Registry of the record types exposed by the API and the admin."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import get_args

from pydantic import BaseModel

from educa_especial.domain import schemas


@dataclass(frozen=True)
class EntityDef:
    """Everything the generic CRUD layer needs to know about one entity."""

    name: str
    label: str
    label_plural: str
    schema: type[BaseModel]
    text_filters: tuple[str, ...]
    name_field: str
    date_field: str = "created_at"
    hidden_fields: tuple[str, ...] = field(default_factory=tuple)
    list_columns: tuple[str, ...] = field(default_factory=tuple)
    unique_fields: tuple[str, ...] = field(default_factory=tuple)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.schema.model_fields)

    @property
    def datetime_fields(self) -> tuple[str, ...]:
        names = ["created_at"]
        for fname, info in self.schema.model_fields.items():
            annotation = info.annotation
            if annotation is datetime or datetime in get_args(annotation):
                names.append(fname)
        return tuple(names)

    @property
    def not_found_message(self) -> str:
        return f"{self.label} nao encontrado!"

    def public(self, record: dict) -> dict:
        """Drop fields that never leave the service (e.g. password hashes)."""
        return {k: v for k, v in record.items() if k not in self.hidden_fields}


STUDENTS = EntityDef(
    name="students",
    label="Estudante",
    label_plural="Estudantes",
    schema=schemas.Student,
    text_filters=("name",),
    name_field="name",
    list_columns=("name", "age", "parents", "status"),
)
TEACHERS = EntityDef(
    name="teachers",
    label="Professor",
    label_plural="Professores",
    schema=schemas.Teacher,
    text_filters=("name",),
    name_field="name",
    list_columns=("name", "school_disciplines", "contact", "status"),
)
PROFESSIONALS = EntityDef(
    name="professionals",
    label="Profissional",
    label_plural="Profissionais",
    schema=schemas.Professional,
    text_filters=("name",),
    name_field="name",
    list_columns=("name", "specialty", "contact", "status"),
)
EVENTS = EntityDef(
    name="events",
    label="Evento",
    label_plural="Eventos",
    schema=schemas.Event,
    text_filters=("description",),
    name_field="description",
    date_field="date",
    list_columns=("description", "date", "comments"),
)
APPOINTMENTS = EntityDef(
    name="appointments",
    label="Compromisso",
    label_plural="Compromissos",
    schema=schemas.Appointment,
    text_filters=("student", "professional"),
    name_field="student",
    date_field="date",
    list_columns=("specialty", "date", "student", "professional"),
)
USERS = EntityDef(
    name="users",
    label="Usuario",
    label_plural="Usuarios",
    schema=schemas.User,
    text_filters=("name",),
    name_field="name",
    hidden_fields=("password",),
    unique_fields=("username",),
    list_columns=("name", "email", "username", "level", "status"),
)

ENTITIES: dict[str, EntityDef] = {
    entity.name: entity
    for entity in (STUDENTS, TEACHERS, PROFESSIONALS, EVENTS, APPOINTMENTS, USERS)
}


def get_entity(name: str) -> EntityDef:
    """Resolve a registry entry; raises KeyError for unknown names."""
    return ENTITIES[name]
