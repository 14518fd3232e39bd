"""Paged, optionally sorted reading of table rows."""

from __future__ import annotations

from itertools import islice

import structlog

from tablescope.engine import SessionOpener, TableHandle
from tablescope.errors import InvalidSortColumnError
from tablescope.formatter import format_row, is_known_type
from tablescope.schema_reader import resolve_table, session_scope
from tablescope.types import DatabaseHandle, Row, SortSpec

_logger = structlog.get_logger("tablescope.scanner")


def type_label(storage_type: object) -> str:
    """Return a storage type's name, or its text for kinds outside StorageType."""
    return getattr(storage_type, "name", str(storage_type))


def count_rows(handle: DatabaseHandle, table_name: str, *, opener: SessionOpener | None = None) -> int:
    """Return the number of rows currently stored in a table.

    Raises:
        TableNotFoundError: If the table does not exist.
        DatabaseConnectionError: If the database cannot be opened.
    """
    with session_scope(handle, opener) as session:
        return resolve_table(session, table_name).row_count


def resolve_sort_column(table: TableHandle, sort: SortSpec) -> int:
    """Return the index of the column ``sort`` orders by.

    Raises:
        InvalidSortColumnError: If the column does not exist in the live
            schema or its storage type cannot be ordered.
    """
    for i in range(table.column_count):
        if table.column_name(i) != sort.column:
            continue
        storage_type = table.column_type(i)
        if not is_known_type(storage_type) or not storage_type.is_sortable:
            raise InvalidSortColumnError(
                table.name, sort.column, f"of type {type_label(storage_type)} is not sortable"
            )
        return i
    raise InvalidSortColumnError(table.name, sort.column)


def scan_rows(
    handle: DatabaseHandle,
    table_name: str,
    start: int,
    count: int,
    sort: SortSpec | None = None,
    *,
    opener: SessionOpener | None = None,
) -> list[Row]:
    """Return the formatted rows ``[start, start + count)`` of a table.

    Paging is best effort: a negative ``start`` reads from the first row, a
    ``start`` past the end or a non-positive ``count`` returns an empty list,
    and a ``count`` larger than the remaining rows returns what is left.
    None of these cases is an error.

    Raises:
        TableNotFoundError: If the table does not exist.
        InvalidSortColumnError: If ``sort`` names a missing or unsortable
            column. Raised before any row is read.
        DatabaseConnectionError: If the database cannot be opened.
    """
    with session_scope(handle, opener) as session:
        table = resolve_table(session, table_name)
        sort_column = resolve_sort_column(table, sort) if sort is not None else None

        column_count = table.column_count
        for i in range(column_count):
            storage_type = table.column_type(i)
            if not is_known_type(storage_type):
                _logger.warning(
                    "unknown_storage_type",
                    table=table_name,
                    column=table.column_name(i),
                    storage_type=type_label(storage_type),
                )

        if count <= 0:
            return []

        if sort is None:
            view = table.scan()
        else:
            view = table.scan(sort_column, sort.direction)

        start = max(0, start)
        rows = [
            Row(position=cursor.position, cells=format_row(cursor, column_count))
            for cursor in islice(view, start, start + count)
        ]
        _logger.debug(
            "rows_scanned", table=table_name, start=start, count=count, returned=len(rows)
        )
        return rows
