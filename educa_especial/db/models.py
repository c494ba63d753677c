"""SQLAlchemy models mirroring the JSON collections one table per entity."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
)

from .session import Base


class _RecordMixin:
    id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)


class Student(_RecordMixin, Base):
    __tablename__ = "students"

    name = Column(String(255), nullable=False, index=True)
    age = Column(Integer, nullable=False)
    parents = Column(String(255), nullable=False)
    phone_number = Column(String(64), nullable=False)
    special_needs = Column(Text, nullable=True)
    status = Column(String(32), nullable=False)


class Teacher(_RecordMixin, Base):
    __tablename__ = "teachers"

    name = Column(String(255), nullable=False, index=True)
    school_disciplines = Column(String(255), nullable=False)
    contact = Column(String(255), nullable=False)
    phone_number = Column(String(64), nullable=False)
    status = Column(String(32), nullable=False)


class Professional(_RecordMixin, Base):
    __tablename__ = "professionals"

    name = Column(String(255), nullable=False, index=True)
    specialty = Column(String(255), nullable=False)
    contact = Column(String(255), nullable=False)
    phone_number = Column(String(64), nullable=False)
    status = Column(String(32), nullable=False)


class Event(_RecordMixin, Base):
    __tablename__ = "events"

    description = Column(String(255), nullable=False)
    comments = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)


class Appointment(_RecordMixin, Base):
    __tablename__ = "appointments"

    specialty = Column(String(255), nullable=False)
    comments = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    student = Column(String(255), nullable=False)
    professional = Column(String(255), nullable=False)


class User(_RecordMixin, Base):
    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    username = Column(String(128), nullable=False, unique=True)
    password = Column(Text, nullable=False)
    level = Column(String(32), nullable=False)
    status = Column(Boolean, nullable=False, default=True)


MODELS = {
    "students": Student,
    "teachers": Teacher,
    "professionals": Professional,
    "events": Event,
    "appointments": Appointment,
    "users": User,
}
