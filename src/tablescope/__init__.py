"""tablescope - Display-safe paging of rows from a typed table database."""

from tablescope.collection import format_scalar, render_collection
from tablescope.errors import (
    DatabaseConnectionError,
    InvalidSortColumnError,
    SchemaError,
    StoreError,
    TableNotFoundError,
    TablescopeError,
)
from tablescope.formatter import format_cell
from tablescope.scanner import count_rows, scan_rows
from tablescope.schema_reader import list_columns, list_tables
from tablescope.types import (
    NULL_TOKEN,
    UNKNOWN_VALUE,
    Cell,
    ColumnDescriptor,
    DatabaseHandle,
    Direction,
    ListDisplay,
    Row,
    SortSpec,
    StorageType,
    display_text,
)

__all__ = [
    # Main API
    "list_tables",
    "list_columns",
    "count_rows",
    "scan_rows",
    # Formatting
    "format_cell",
    "format_scalar",
    "render_collection",
    "display_text",
    # Data model
    "Cell",
    "ColumnDescriptor",
    "DatabaseHandle",
    "Direction",
    "ListDisplay",
    "Row",
    "SortSpec",
    "StorageType",
    "NULL_TOKEN",
    "UNKNOWN_VALUE",
    # Errors
    "TablescopeError",
    "DatabaseConnectionError",
    "TableNotFoundError",
    "InvalidSortColumnError",
    "StoreError",
    "SchemaError",
]

__version__ = "0.1.0"
