"""Storage manager for the reference store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tablescope.errors import SchemaError
from tablescope.store.array_table import ArrayTable, create_array_table
from tablescope.store.schema import SchemaRegistry, is_variable_length
from tablescope.store.table import RecordLayout, Table

METADATA_FILE = "_metadata.json"


def load_registry_from_metadata(data_dir: Path) -> SchemaRegistry:
    """Load the schema registry from a database directory's metadata file.

    Raises:
        FileNotFoundError: If the metadata file does not exist.
        SchemaError: If the metadata cannot be decoded.
    """
    metadata_path = data_dir / METADATA_FILE
    if not metadata_path.exists():
        raise FileNotFoundError(f"Metadata file not found: {metadata_path}")

    with open(metadata_path) as f:
        try:
            metadata = json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Corrupt metadata file {metadata_path}: {e}") from e

    try:
        return SchemaRegistry.from_json(metadata)
    except (KeyError, TypeError, AttributeError) as e:
        raise SchemaError(f"Invalid metadata in {metadata_path}: {e}") from e


class StorageManager:
    """Manages the record and array files of every table in a database."""

    def __init__(self, data_dir: Path, registry: SchemaRegistry, read_only: bool = False) -> None:
        """Initialize the storage manager.

        Args:
            data_dir: Directory holding the table files.
            registry: Schema of the database.
            read_only: Open existing files without write access.
        """
        self.data_dir = data_dir
        self.registry = registry
        self.read_only = read_only
        self._tables: dict[str, Table] = {}
        self._array_tables: dict[tuple[str, str], ArrayTable] = {}

    def save_metadata(self) -> None:
        """Write the schema to the metadata file."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.data_dir / METADATA_FILE, "w") as f:
            json.dump(self.registry.to_json(), f, indent=2)

    def create_files(self) -> None:
        """Create the files of every table so read-only sessions can open them."""
        for table_def in self.registry:
            self.get_table(table_def.name)
            for column in table_def.columns:
                if is_variable_length(column.storage_type):
                    self.get_array_table(table_def.name, column.name)

    def get_table(self, table_name: str) -> Table:
        """Get or open the record file of a table."""
        if table_name in self._tables:
            return self._tables[table_name]

        table_def = self.registry.get_or_raise(table_name)
        table = Table(
            RecordLayout(table_def),
            self.data_dir / f"{table_name}.bin",
            read_only=self.read_only,
        )
        self._tables[table_name] = table
        return table

    def get_array_table(self, table_name: str, column_name: str) -> ArrayTable:
        """Get or open the array files of a variable-length column."""
        key = (table_name, column_name)
        if key in self._array_tables:
            return self._array_tables[key]

        column = self.registry.get_or_raise(table_name).get_column(column_name)
        if column is None or not is_variable_length(column.storage_type):
            raise ValueError(f"Column '{table_name}.{column_name}' has no array storage")

        array_table = create_array_table(
            column.storage_type,
            self.data_dir,
            f"{table_name}.{column_name}",
            read_only=self.read_only,
        )
        self._array_tables[key] = array_table
        return array_table

    def close(self) -> None:
        """Close all tables."""
        for table in self._tables.values():
            table.close()
        for array_table in self._array_tables.values():
            array_table.close()
        self._tables.clear()
        self._array_tables.clear()

    def __enter__(self) -> StorageManager:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
