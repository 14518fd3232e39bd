"""Writable handle on a reference store database."""

from __future__ import annotations

import math
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

import structlog

from tablescope.errors import SchemaError, StoreError
from tablescope.store.parser import parse_schema
from tablescope.store.schema import ColumnDefinition, TableDefinition, is_variable_length
from tablescope.store.storage import METADATA_FILE, StorageManager, load_registry_from_metadata
from tablescope.types import StorageType

_logger = structlog.get_logger("tablescope.store")

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def to_epoch_millis(value: datetime | int) -> int:
    """Convert a datetime (or epoch milliseconds) to epoch milliseconds."""
    if isinstance(value, datetime):
        return round(value.timestamp() * 1000)
    return int(value)


class Database:
    """Schema plus storage of a database directory, opened for writing."""

    def __init__(self, storage: StorageManager) -> None:
        self.storage = storage
        self.registry = storage.registry

    @classmethod
    def create(cls, data_dir: Path | str, schema_text: str) -> Database:
        """Create a database from schema DSL text.

        Raises:
            SchemaError: If the schema is invalid or the directory already
                holds a database.
        """
        data_dir = Path(data_dir)
        if (data_dir / METADATA_FILE).exists():
            raise SchemaError(f"A database already exists in {data_dir}")
        try:
            registry = parse_schema(schema_text)
        except SyntaxError as e:
            raise SchemaError(str(e)) from e

        storage = StorageManager(data_dir, registry)
        storage.save_metadata()
        storage.create_files()
        for name in registry.list_tables():
            _logger.debug("table_created", path=str(data_dir), table=name)
        return cls(storage)

    @classmethod
    def open(cls, data_dir: Path | str) -> Database:
        """Open an existing database for writing."""
        data_dir = Path(data_dir)
        registry = load_registry_from_metadata(data_dir)
        return cls(StorageManager(data_dir, registry))

    @property
    def path(self) -> Path:
        return self.storage.data_dir

    def list_tables(self) -> list[str]:
        """List all table names in declaration order."""
        return self.registry.list_tables()

    def count(self, table_name: str) -> int:
        """Return the number of rows in a table."""
        return self.storage.get_table(self._table_def(table_name).name).count

    def insert(self, table_name: str, values: Mapping[str, Any] | Sequence[Any]) -> int:
        """Insert a row and return its position.

        Args:
            table_name: Name of the table.
            values: Column values as a dict (missing columns are null) or a
                sequence in column order. Object links take the target row
                position, dates take a datetime or epoch milliseconds.

        Raises:
            StoreError: If a value does not fit its column.
        """
        table_def = self._table_def(table_name)
        if isinstance(values, Mapping):
            unknown = set(values) - {c.name for c in table_def.columns}
            if unknown:
                raise StoreError(f"Unknown columns for '{table_name}': {sorted(unknown)}")
            row = [values.get(c.name) for c in table_def.columns]
        else:
            row = list(values)
            if len(row) != len(table_def.columns):
                raise StoreError(
                    f"Table '{table_name}' has {len(table_def.columns)} columns, "
                    f"got {len(row)} values"
                )

        # Validate everything before writing anything
        checked = [self._check_value(table_def, c, v) for c, v in zip(table_def.columns, row)]

        slots: list[Any] = []
        for column, value in zip(table_def.columns, checked):
            if value is not None and is_variable_length(column.storage_type):
                value = self.storage.get_array_table(table_name, column.name).insert(value)
            slots.append(value)

        position = self.storage.get_table(table_name).insert(slots)
        _logger.debug("row_inserted", table=table_name, position=position)
        return position

    def _table_def(self, table_name: str) -> TableDefinition:
        table_def = self.registry.get(table_name)
        if table_def is None:
            raise StoreError(f"Table '{table_name}' not found")
        return table_def

    def _check_value(self, table_def: TableDefinition, column: ColumnDefinition, value: Any) -> Any:
        """Validate and normalize one column value."""
        where = f"{table_def.name}.{column.name}"
        storage_type = column.storage_type

        if value is None:
            if storage_type is StorageType.LIST:
                return []
            if not column.nullable:
                raise StoreError(f"Column '{where}' is not nullable")
            return None

        if storage_type is StorageType.OBJECT:
            return self._check_link(where, column.target, value)  # type: ignore[arg-type]
        if storage_type is StorageType.LIST:
            return [self._check_link(where, column.target, v) for v in value]  # type: ignore[arg-type]
        if storage_type.is_scalar_list:
            if isinstance(value, (str, bytes)):
                raise StoreError(f"Column '{where}' expects a list")
            element_type = storage_type.element_type
            elements = []
            for element in value:
                if element is None:
                    raise StoreError(f"Column '{where}' cannot hold null elements")
                elements.append(self._check_scalar(where, element_type, element))  # type: ignore[arg-type]
            return elements
        return self._check_scalar(where, storage_type, value)

    def _check_link(self, where: str, target: str, position: Any) -> int:
        if not isinstance(position, int) or isinstance(position, bool):
            raise StoreError(f"Column '{where}' expects a row position of '{target}'")
        if not 0 <= position < self.count(target):
            raise StoreError(f"Column '{where}': '{target}' has no row at position {position}")
        return position

    def _check_scalar(self, where: str, storage_type: StorageType, value: Any) -> Any:
        try:
            if storage_type is StorageType.INTEGER:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(value)
                if not INT64_MIN <= value <= INT64_MAX:
                    raise ValueError(value)
                return value
            if storage_type is StorageType.BOOLEAN:
                if not isinstance(value, bool):
                    raise ValueError(value)
                return value
            if storage_type is StorageType.STRING:
                if not isinstance(value, str):
                    raise ValueError(value)
                return value
            if storage_type is StorageType.BINARY:
                if isinstance(value, str):
                    raise ValueError(value)
                return bytes(value)
            if storage_type is StorageType.DATE:
                return to_epoch_millis(value)
            if storage_type is StorageType.FLOAT:
                value = float(value)
                if math.isfinite(value) and abs(value) > 3.4028234663852886e38:
                    raise ValueError(value)
                return value
            if storage_type is StorageType.DOUBLE:
                return float(value)
            if storage_type is StorageType.UUID:
                if isinstance(value, uuid.UUID):
                    value = value.int
                elif isinstance(value, str):
                    value = int(value.replace("-", ""), 16)
                if not 0 <= value < (1 << 128):
                    raise ValueError(value)
                return value
        except (TypeError, ValueError):
            raise StoreError(
                f"Column '{where}' cannot store {value!r} as {storage_type.name}"
            ) from None
        raise StoreError(f"Column '{where}' has unsupported type {storage_type.name}")

    def close(self) -> None:
        """Close all storage resources."""
        self.storage.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
