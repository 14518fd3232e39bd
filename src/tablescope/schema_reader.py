"""Listing of tables and column schemas."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import structlog

from tablescope.engine import Session, SessionOpener, TableHandle
from tablescope.errors import TableNotFoundError
from tablescope.store import open_session
from tablescope.types import ColumnDescriptor, DatabaseHandle

_logger = structlog.get_logger("tablescope.schema_reader")


@contextmanager
def session_scope(handle: DatabaseHandle, opener: SessionOpener | None = None) -> Iterator[Session]:
    """Open a session for the duration of one operation.

    The session is closed on every exit path, including errors raised by the
    caller's block.
    """
    session = (opener or open_session)(handle)
    _logger.debug("session_opened", path=str(handle.path))
    try:
        yield session
    finally:
        session.close()
        _logger.debug("session_closed", path=str(handle.path))


def resolve_table(session: Session, table_name: str) -> TableHandle:
    """Return the named table or raise TableNotFoundError."""
    table = session.get_table(table_name)
    if table is None:
        raise TableNotFoundError(table_name)
    return table


def describe_columns(table: TableHandle) -> list[ColumnDescriptor]:
    """Return descriptors for every column of ``table`` in index order."""
    return [
        ColumnDescriptor(
            name=table.column_name(i),
            storage_type=table.column_type(i),
            nullable=table.is_column_nullable(i),
            link_target=table.link_target(i),
        )
        for i in range(table.column_count)
    ]


def list_tables(handle: DatabaseHandle, *, opener: SessionOpener | None = None) -> list[str]:
    """Return the names of all tables in engine order.

    Raises:
        DatabaseConnectionError: If the database cannot be opened.
    """
    with session_scope(handle, opener) as session:
        return list(session.table_names())


def list_columns(
    handle: DatabaseHandle, table_name: str, *, opener: SessionOpener | None = None
) -> list[ColumnDescriptor]:
    """Return the column descriptors of a table in column index order.

    Raises:
        TableNotFoundError: If the table does not exist.
        DatabaseConnectionError: If the database cannot be opened.
    """
    with session_scope(handle, opener) as session:
        return describe_columns(resolve_table(session, table_name))
