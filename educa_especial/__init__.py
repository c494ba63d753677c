"""Educacao Especial: REST API and admin for special-education records."""

__version__ = "1.0.0"
