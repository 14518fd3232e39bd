"""Conversion of stored cells into display values.

Every storage type maps to exactly one output rule:

    INTEGER, STRING, BINARY, DATE, FLOAT, DOUBLE -> text
    BOOLEAN                                      -> bool
    OBJECT                                       -> target row position as text
    LIST                                         -> ListDisplay of row positions
    *_LIST                                       -> ListDisplay of scalar texts

An absent value formats to None whatever the column type. A storage type
without a rule formats to ``UNKNOWN_VALUE`` instead of raising, so a scan
never fails on a column it cannot interpret.
"""

from __future__ import annotations

from tablescope.collection import SCALAR_FORMATTERS, format_scalar
from tablescope.engine import RowCursor
from tablescope.types import UNKNOWN_VALUE, Cell, ListDisplay, StorageType


def is_known_type(storage_type: object) -> bool:
    """Return whether ``storage_type`` has a display rule."""
    return (
        storage_type in SCALAR_FORMATTERS
        or storage_type in (StorageType.OBJECT, StorageType.LIST)
        or (isinstance(storage_type, StorageType) and storage_type.is_scalar_list)
    )


def format_cell(row: RowCursor, index: int) -> Cell:
    """Format the value in column ``index`` of ``row``."""
    if row.is_null(index):
        return None

    storage_type = row.column_type(index)
    if storage_type is StorageType.BOOLEAN:
        return bool(row.read(index))
    elif storage_type in SCALAR_FORMATTERS:
        return format_scalar(storage_type, row.read(index))
    elif storage_type is StorageType.OBJECT:
        return str(row.read(index))
    elif storage_type is StorageType.LIST:
        return ListDisplay(
            prefix=row.link_target(index) or "",
            element_kind=StorageType.LIST,
            elements=tuple(str(position) for position in row.read(index)),
        )
    elif isinstance(storage_type, StorageType) and storage_type.is_scalar_list:
        element_type = storage_type.element_type
        return ListDisplay(
            prefix=storage_type.name,
            element_kind=element_type,
            elements=tuple(format_scalar(element_type, v) for v in row.read(index)),
        )
    else:
        return UNKNOWN_VALUE


def format_row(row: RowCursor, column_count: int) -> tuple[Cell, ...]:
    """Format columns ``0 .. column_count - 1`` of ``row``."""
    return tuple(format_cell(row, i) for i in range(column_count))
