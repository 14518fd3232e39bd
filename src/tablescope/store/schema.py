"""Table and column definitions for the reference store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tablescope.errors import SchemaError
from tablescope.types import StorageType

# Schema DSL names of the scalar column types
SCALAR_TYPE_NAMES: dict[str, StorageType] = {
    "int": StorageType.INTEGER,
    "bool": StorageType.BOOLEAN,
    "string": StorageType.STRING,
    "binary": StorageType.BINARY,
    "date": StorageType.DATE,
    "float": StorageType.FLOAT,
    "double": StorageType.DOUBLE,
    "uuid": StorageType.UUID,
}

# List type of each scalar type that can be stored in a list
LIST_TYPES: dict[StorageType, StorageType] = {
    StorageType.INTEGER: StorageType.INTEGER_LIST,
    StorageType.BOOLEAN: StorageType.BOOLEAN_LIST,
    StorageType.STRING: StorageType.STRING_LIST,
    StorageType.BINARY: StorageType.BINARY_LIST,
    StorageType.DATE: StorageType.DATE_LIST,
    StorageType.FLOAT: StorageType.FLOAT_LIST,
    StorageType.DOUBLE: StorageType.DOUBLE_LIST,
}

# struct formats of values stored inline in a record slot
INLINE_FORMATS: dict[StorageType, str] = {
    StorageType.INTEGER: "<q",
    StorageType.BOOLEAN: "<?",
    StorageType.DATE: "<q",
    StorageType.FLOAT: "<f",
    StorageType.DOUBLE: "<d",
    StorageType.UUID: "<QQ",
    StorageType.OBJECT: "<I",
}

# Variable-length values store (start_index, length) in their slot
ARRAY_HEADER_FORMAT = "<II"


def slot_format(storage_type: StorageType) -> str:
    """Return the struct format of a column's record slot."""
    return INLINE_FORMATS.get(storage_type, ARRAY_HEADER_FORMAT)


def is_variable_length(storage_type: StorageType) -> bool:
    """Return whether a column's values live in a separate array file."""
    return storage_type not in INLINE_FORMATS


def has_item_file(storage_type: StorageType) -> bool:
    """Return whether list elements are themselves variable length."""
    return storage_type in (StorageType.STRING_LIST, StorageType.BINARY_LIST)


@dataclass
class ColumnDefinition:
    """A column of a stored table."""

    name: str
    storage_type: StorageType
    nullable: bool = False
    target: str | None = None  # linked table of OBJECT and LIST columns

    def to_json(self) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "name": self.name,
            "type": self.storage_type.value,
            "nullable": self.nullable,
        }
        if self.target is not None:
            entry["target"] = self.target
        return entry

    @classmethod
    def from_json(cls, spec: dict[str, Any]) -> ColumnDefinition:
        try:
            storage_type = StorageType(spec["type"])
        except ValueError:
            raise SchemaError(f"Unknown column type '{spec['type']}'") from None
        return cls(
            name=spec["name"],
            storage_type=storage_type,
            nullable=bool(spec.get("nullable", False)),
            target=spec.get("target"),
        )


@dataclass
class TableDefinition:
    """A stored table.

    A row record layout:
      [null_bitmap (ceil(N/8) bytes)] [column0 slot] [column1 slot] ...

    Fixed-size values are stored inline. Strings, binaries and lists store
    (start_index, length) into the column's array file.
    """

    name: str
    columns: list[ColumnDefinition] = field(default_factory=list)

    @property
    def null_bitmap_size(self) -> int:
        """Return the number of bytes needed for the null bitmap."""
        if not self.columns:
            return 0
        return (len(self.columns) + 7) // 8

    def get_column(self, name: str) -> ColumnDefinition | None:
        """Get a column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def column_index(self, name: str) -> int:
        """Get the index of a column by name."""
        for i, column in enumerate(self.columns):
            if column.name == name:
                return i
        raise KeyError(f"Column '{name}' not found in table '{self.name}'")

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "columns": [c.to_json() for c in self.columns]}

    @classmethod
    def from_json(cls, spec: dict[str, Any]) -> TableDefinition:
        return cls(
            name=spec["name"],
            columns=[ColumnDefinition.from_json(c) for c in spec.get("columns", [])],
        )


class SchemaRegistry:
    """All tables of a database in declaration order."""

    def __init__(self) -> None:
        self._tables: dict[str, TableDefinition] = {}

    def register(self, table_def: TableDefinition) -> None:
        """Register a table definition."""
        if table_def.name in self._tables:
            raise SchemaError(f"Table '{table_def.name}' is already defined")
        self._tables[table_def.name] = table_def

    def get(self, name: str) -> TableDefinition | None:
        """Get a table by name."""
        return self._tables.get(name)

    def get_or_raise(self, name: str) -> TableDefinition:
        """Get a table by name, raising if not found."""
        table_def = self._tables.get(name)
        if table_def is None:
            raise KeyError(f"Table '{name}' not found")
        return table_def

    def list_tables(self) -> list[str]:
        """List all table names."""
        return list(self._tables.keys())

    def validate(self) -> None:
        """Check column names and link targets of every table."""
        for table_def in self._tables.values():
            seen: set[str] = set()
            for column in table_def.columns:
                if column.name in seen:
                    raise SchemaError(
                        f"Column '{column.name}' is defined twice in table '{table_def.name}'"
                    )
                seen.add(column.name)
                if column.storage_type.is_link and column.target not in self._tables:
                    raise SchemaError(
                        f"Column '{table_def.name}.{column.name}' links to unknown table "
                        f"'{column.target}'"
                    )

    def to_json(self) -> dict[str, Any]:
        return {"tables": [t.to_json() for t in self._tables.values()]}

    @classmethod
    def from_json(cls, metadata: dict[str, Any]) -> SchemaRegistry:
        registry = cls()
        for spec in metadata.get("tables", []):
            registry.register(TableDefinition.from_json(spec))
        registry.validate()
        return registry

    def __contains__(self, name: str) -> bool:
        return name in self._tables

    def __iter__(self):
        return iter(self._tables.values())
