"""Errors raised by the persistence adapters."""


class DuplicateKeyError(Exception):
    """A write would repeat a value that must be unique in the collection."""

    def __init__(self, field: str):
        super().__init__(f"valor duplicado em {field}")
        self.field = field
