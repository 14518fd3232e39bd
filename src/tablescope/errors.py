"""Exceptions raised by tablescope."""

from __future__ import annotations


class TablescopeError(Exception):
    """Base class for all tablescope errors."""


class DatabaseConnectionError(TablescopeError, ConnectionError):
    """A session could not be opened against the database."""


class TableNotFoundError(TablescopeError, LookupError):
    """The named table is not part of the current schema."""

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table '{table_name}' not found")
        self.table_name = table_name


class InvalidSortColumnError(TablescopeError, ValueError):
    """A sort references a column that is missing or cannot be ordered."""

    def __init__(self, table_name: str, column: str, reason: str = "does not exist") -> None:
        super().__init__(f"Cannot sort '{table_name}' by '{column}': column {reason}")
        self.table_name = table_name
        self.column = column


class StoreError(TablescopeError):
    """The reference store rejected a write or could not be created."""


class SchemaError(StoreError):
    """A schema definition or stored metadata is invalid."""
