"""Value types shared by the schema reader, row scanner and cell formatter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union


class StorageType(Enum):
    """Native type tag of a column as reported by the storage engine."""

    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRING = "string"
    BINARY = "binary"
    DATE = "date"
    FLOAT = "float"
    DOUBLE = "double"
    OBJECT = "object"
    LIST = "list"
    INTEGER_LIST = "integer_list"
    BOOLEAN_LIST = "boolean_list"
    STRING_LIST = "string_list"
    BINARY_LIST = "binary_list"
    DATE_LIST = "date_list"
    FLOAT_LIST = "float_list"
    DOUBLE_LIST = "double_list"
    # Kinds an engine may report that have no display rule.
    LINKING_OBJECTS = "linking_objects"
    DECIMAL128 = "decimal128"
    OBJECT_ID = "object_id"
    UUID = "uuid"
    MIXED = "mixed"

    @property
    def is_link(self) -> bool:
        """Return whether values of this type point at rows of another table."""
        return self in (StorageType.OBJECT, StorageType.LIST)

    @property
    def is_scalar_list(self) -> bool:
        """Return whether this is a list of primitive values."""
        return self in SCALAR_LIST_ELEMENTS

    @property
    def element_type(self) -> StorageType | None:
        """Return the scalar type of a primitive list's elements."""
        return SCALAR_LIST_ELEMENTS.get(self)

    @property
    def is_sortable(self) -> bool:
        """Return whether rows can be ordered by a column of this type."""
        return self in SORTABLE_TYPES


SCALAR_LIST_ELEMENTS: dict[StorageType, StorageType] = {
    StorageType.INTEGER_LIST: StorageType.INTEGER,
    StorageType.BOOLEAN_LIST: StorageType.BOOLEAN,
    StorageType.STRING_LIST: StorageType.STRING,
    StorageType.BINARY_LIST: StorageType.BINARY,
    StorageType.DATE_LIST: StorageType.DATE,
    StorageType.FLOAT_LIST: StorageType.FLOAT,
    StorageType.DOUBLE_LIST: StorageType.DOUBLE,
}

SORTABLE_TYPES = frozenset(
    {
        StorageType.INTEGER,
        StorageType.BOOLEAN,
        StorageType.STRING,
        StorageType.DATE,
        StorageType.FLOAT,
        StorageType.DOUBLE,
    }
)

# How hosts print a Null cell
NULL_TOKEN = "[null]"

# Placeholder for values whose storage type has no display rule
UNKNOWN_VALUE = "[UNKNOWN_VALUE]"


class Direction(Enum):
    """Sort direction."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class SortSpec:
    """Single-column ordering applied to a scan."""

    column: str
    direction: Direction = Direction.ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction is Direction.DESCENDING

    @classmethod
    def parse(cls, order: str | None, reverse: bool = False) -> SortSpec | None:
        """Build a sort from a column name and a reverse flag.

        A leading ``-`` on the column name also selects descending order.
        Returns None when no column is given.
        """
        if not order:
            return None
        if order.startswith("-"):
            order = order[1:]
            reverse = not reverse
        direction = Direction.DESCENDING if reverse else Direction.ASCENDING
        return cls(column=order, direction=direction)


@dataclass(frozen=True)
class DatabaseHandle:
    """Identifies a database directory. Callers pass one in on every call."""

    path: Path

    def __post_init__(self) -> None:
        if not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))


@dataclass(frozen=True)
class ColumnDescriptor:
    """Name, storage type and nullability of one column."""

    name: str
    storage_type: StorageType
    nullable: bool
    link_target: str | None = None

    @property
    def type_name(self) -> str:
        """Return the storage type's display name, e.g. ``INTEGER_LIST``."""
        return self.storage_type.name


@dataclass(frozen=True)
class ListDisplay:
    """Rendered elements of a list cell, copied out of storage."""

    prefix: str
    element_kind: StorageType
    elements: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.elements)

    def __str__(self) -> str:
        from tablescope.collection import render_collection

        return render_collection(self.prefix, self.elements)


Cell = Union[None, bool, str, ListDisplay]


@dataclass(frozen=True)
class Row:
    """Formatted cells of one row, in column index order."""

    position: int
    cells: tuple[Cell, ...]

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]


def display_text(cell: Cell) -> str:
    """Return the text a host prints for a cell."""
    if cell is None:
        return NULL_TOKEN
    if isinstance(cell, bool):
        return "true" if cell else "false"
    return str(cell)
