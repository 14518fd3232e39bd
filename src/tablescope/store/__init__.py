"""Reference store: a file-based typed table database readable by tablescope."""

from tablescope.store.database import Database
from tablescope.store.parser import SchemaParser, parse_schema
from tablescope.store.schema import ColumnDefinition, SchemaRegistry, TableDefinition
from tablescope.store.session import StoreSession, open_session
from tablescope.store.storage import StorageManager

__all__ = [
    "ColumnDefinition",
    "Database",
    "SchemaParser",
    "SchemaRegistry",
    "StorageManager",
    "StoreSession",
    "TableDefinition",
    "open_session",
    "parse_schema",
]
