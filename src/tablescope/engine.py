"""What tablescope needs from a storage engine.

The schema reader and row scanner only talk to the engine through these
protocols. A session is opened per operation and closed before the operation
returns; nothing obtained from a session may outlive it.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, Sequence

from tablescope.types import DatabaseHandle, Direction, StorageType


class RowCursor(Protocol):
    """Read access to one stored row, valid while its session is open."""

    @property
    def position(self) -> int:
        """Stable position identifier of the row."""
        ...

    @property
    def column_count(self) -> int: ...

    def column_type(self, index: int) -> StorageType: ...

    def is_null(self, index: int) -> bool:
        """Return whether the value (or link) in a column is absent."""
        ...

    def read(self, index: int) -> Any:
        """Return the engine-native value of a column.

        Object links read as the target row position, object lists as a
        sequence of target positions and scalar lists as a sequence of
        native scalars.
        """
        ...

    def link_target(self, index: int) -> str | None:
        """Return the target table name of a link or object-list column."""
        ...


class TableHandle(Protocol):
    """Schema and rows of one table."""

    @property
    def name(self) -> str: ...

    @property
    def column_count(self) -> int: ...

    @property
    def row_count(self) -> int: ...

    def column_name(self, index: int) -> str: ...

    def column_type(self, index: int) -> StorageType: ...

    def is_column_nullable(self, index: int) -> bool: ...

    def link_target(self, index: int) -> str | None: ...

    def scan(
        self, sort_column: int | None = None, direction: Direction = Direction.ASCENDING
    ) -> Sequence[RowCursor]:
        """Return every row, ordered by ``sort_column`` when one is given.

        The ordering is stable and total. Null values sort first in
        ascending order.
        """
        ...


class Session(Protocol):
    """Short-lived read-only view of a database."""

    def table_names(self) -> list[str]: ...

    def get_table(self, name: str) -> TableHandle | None:
        """Return the named table, or None if the schema has no such table."""
        ...

    def close(self) -> None: ...

    def __enter__(self) -> Session: ...

    def __exit__(self, *args: Any) -> None: ...


# Opens a session; raises DatabaseConnectionError when it cannot.
SessionOpener = Callable[[DatabaseHandle], Session]
