"""Pydantic models describing the writable fields of each entity."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from educa_especial.domain.date_range import as_utc

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Optional[Annotated[str, StringConstraints(strip_whitespace=True)]]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class EntityModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Student(EntityModel):
    name: Text = Field(title="Nome")
    age: int = Field(ge=0, title="Idade")
    parents: Text = Field(title="Responsaveis")
    phone_number: Text = Field(title="Telefone")
    special_needs: OptionalText = Field(default=None, title="Necessidades especiais")
    status: Text = Field(title="Status")


class Teacher(EntityModel):
    name: Text = Field(title="Nome")
    school_disciplines: Text = Field(title="Disciplinas")
    contact: Text = Field(title="Contato")
    phone_number: Text = Field(title="Telefone")
    status: Text = Field(title="Status")


class Professional(EntityModel):
    name: Text = Field(title="Nome")
    specialty: Text = Field(title="Especialidade")
    contact: Text = Field(title="Contato")
    phone_number: Text = Field(title="Telefone")
    status: Text = Field(title="Status")


class Event(EntityModel):
    description: Text = Field(title="Descricao")
    comments: OptionalText = Field(default=None, title="Comentarios")
    date: UtcDatetime = Field(title="Data")


class Appointment(EntityModel):
    specialty: Text = Field(title="Especialidade")
    comments: OptionalText = Field(default=None, title="Comentarios")
    date: UtcDatetime = Field(title="Data")
    student: Text = Field(title="Estudante")
    professional: Text = Field(title="Profissional")


class User(EntityModel):
    name: Text = Field(title="Nome")
    email: Text = Field(title="E-mail")
    username: Text = Field(title="Usuario")
    password: Text = Field(title="Senha")
    level: Text = Field(title="Nivel")
    status: bool = Field(title="Ativo")


class LoginRequest(BaseModel):
    username: Text
    password: Text
