"""Read-only sessions over a reference store database."""

from __future__ import annotations

import math
import struct
from typing import Any

from tablescope.errors import DatabaseConnectionError, StoreError
from tablescope.store.schema import TableDefinition, is_variable_length
from tablescope.store.storage import StorageManager, load_registry_from_metadata
from tablescope.types import DatabaseHandle, Direction, StorageType

# Values of zero-length strings and binaries; empty lists read as []
EMPTY_VALUES: dict[StorageType, Any] = {StorageType.STRING: "", StorageType.BINARY: b""}


class StoreRow:
    """Cursor on one row record, valid while its session is open."""

    def __init__(self, table: StoreTable, position: int) -> None:
        self._table = table
        self._position = position
        self._slots: list[Any] | None = None

    @property
    def position(self) -> int:
        return self._position

    @property
    def column_count(self) -> int:
        return self._table.column_count

    @property
    def slots(self) -> list[Any]:
        """Raw record slots: inline values, array headers or None."""
        if self._slots is None:
            self._slots = self._table.record_table.get(self._position)
        return self._slots

    def column_type(self, index: int) -> StorageType:
        return self._table.column_type(index)

    def is_null(self, index: int) -> bool:
        return self.slots[index] is None

    def read(self, index: int) -> Any:
        """Return the stored value of a column, resolving array storage."""
        value = self.slots[index]
        if value is None:
            return None
        column = self._table.definition.columns[index]
        if is_variable_length(column.storage_type):
            start_index, length = value
            if length == 0:
                return EMPTY_VALUES.get(column.storage_type, [])
            return self._table.array_table(column.name).get(start_index, length)
        return value

    def link_target(self, index: int) -> str | None:
        return self._table.link_target(index)

    def __repr__(self) -> str:
        return f"StoreRow({self._table.name!r}, {self._position})"


def _sort_key(value: Any) -> tuple:
    """Total order over one column's values: nulls, then NaN, then the rest."""
    if value is None:
        return (0,)
    if isinstance(value, float) and math.isnan(value):
        return (1, 0)
    return (1, 1, value)


class StoreTable:
    """Schema and rows of one table as seen by a session."""

    def __init__(self, session: StoreSession, definition: TableDefinition) -> None:
        self._session = session
        self.definition = definition

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def record_table(self):
        return self._session.storage.get_table(self.definition.name)

    def array_table(self, column_name: str):
        return self._session.storage.get_array_table(self.definition.name, column_name)

    @property
    def column_count(self) -> int:
        return len(self.definition.columns)

    @property
    def row_count(self) -> int:
        return self.record_table.count

    def column_name(self, index: int) -> str:
        return self.definition.columns[index].name

    def column_type(self, index: int) -> StorageType:
        return self.definition.columns[index].storage_type

    def is_column_nullable(self, index: int) -> bool:
        return self.definition.columns[index].nullable

    def link_target(self, index: int) -> str | None:
        return self.definition.columns[index].target

    def scan(
        self, sort_column: int | None = None, direction: Direction = Direction.ASCENDING
    ) -> list[StoreRow]:
        """Return cursors on every row, stably sorted by ``sort_column`` if given."""
        rows = [StoreRow(self, i) for i in range(self.row_count)]
        if sort_column is None:
            return rows
        if not self.column_type(sort_column).is_sortable:
            raise StoreError(
                f"Column '{self.name}.{self.column_name(sort_column)}' cannot be sorted"
            )
        return sorted(
            rows,
            key=lambda row: _sort_key(row.read(sort_column)),
            reverse=direction is Direction.DESCENDING,
        )


class StoreSession:
    """Read-only session on a database directory.

    Files are mapped read-only when the session opens and unmapped by
    close(). Each session maps its own files, so sessions can be used from
    different threads independently.
    """

    def __init__(self, storage: StorageManager) -> None:
        self.storage = storage
        self._closed = False

    def table_names(self) -> list[str]:
        return self.storage.registry.list_tables()

    def get_table(self, name: str) -> StoreTable | None:
        definition = self.storage.registry.get(name)
        if definition is None:
            return None
        return StoreTable(self, definition)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self.storage.close()
        self._closed = True

    def __enter__(self) -> StoreSession:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def open_session(handle: DatabaseHandle) -> StoreSession:
    """Open a read-only session on the database at ``handle.path``.

    Every table file is opened up front so that a missing or damaged file
    fails here rather than halfway through a scan.

    Raises:
        DatabaseConnectionError: If the directory, its metadata or one of its
            table files cannot be opened.
    """
    data_dir = handle.path
    if not data_dir.is_dir():
        raise DatabaseConnectionError(f"Database directory not found: {data_dir}")

    try:
        registry = load_registry_from_metadata(data_dir)
    except (OSError, StoreError) as e:
        raise DatabaseConnectionError(f"Cannot open database {data_dir}: {e}") from e

    storage = StorageManager(data_dir, registry, read_only=True)
    try:
        for definition in registry:
            storage.get_table(definition.name)
            for column in definition.columns:
                if is_variable_length(column.storage_type):
                    storage.get_array_table(definition.name, column.name)
    except (OSError, ValueError, struct.error) as e:
        storage.close()
        raise DatabaseConnectionError(f"Cannot open database {data_dir}: {e}") from e

    return StoreSession(storage)
