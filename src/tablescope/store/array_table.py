"""Array storage for variable-length column values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from tablescope.store.schema import ARRAY_HEADER_FORMAT, INLINE_FORMATS, has_item_file
from tablescope.store.table import Table, ValueLayout
from tablescope.types import StorageType

BYTE_FORMAT = "<B"


class ArrayTable:
    """Manages storage for the values of one variable-length column.

    Elements live in an element table. The (start_index, length) pair is
    stored inline in the row record that owns the array. String and binary
    values are arrays of bytes; string and binary lists are arrays of
    (start_index, length) headers into a second, byte-valued item table.
    """

    def __init__(
        self,
        storage_type: StorageType,
        element_table: Table,
        item_table: Table | None = None,
    ) -> None:
        self.storage_type = storage_type
        self.element_table = element_table
        self.item_table = item_table

    @property
    def count(self) -> int:
        """Return the number of elements stored."""
        return self.element_table.count

    def insert(self, value: Any) -> tuple[int, int]:
        """Store a column value and return (start_index, length)."""
        if self.storage_type is StorageType.STRING:
            return self._insert_bytes(self.element_table, value.encode("utf-8"))
        if self.storage_type is StorageType.BINARY:
            return self._insert_bytes(self.element_table, bytes(value))
        if self.item_table is not None:
            headers = [self._insert_bytes(self.item_table, self._encode_item(v)) for v in value]
            return self._insert_elements(headers)
        return self._insert_elements(list(value))

    def get(self, start_index: int, length: int) -> Any:
        """Read back a column value stored by insert()."""
        if self.storage_type is StorageType.STRING:
            return self.element_table.read_bytes(start_index, length).decode("utf-8")
        if self.storage_type is StorageType.BINARY:
            return self.element_table.read_bytes(start_index, length)
        elements = self.element_table.get_range(start_index, length)
        if self.item_table is not None:
            return [self._decode_item(self.item_table.read_bytes(s, n)) for s, n in elements]
        return elements

    def _encode_item(self, value: Any) -> bytes:
        if self.storage_type is StorageType.STRING_LIST:
            return value.encode("utf-8")
        return bytes(value)

    def _decode_item(self, data: bytes) -> Any:
        if self.storage_type is StorageType.STRING_LIST:
            return data.decode("utf-8")
        return data

    def _insert_elements(self, elements: list[Any]) -> tuple[int, int]:
        if not elements:
            return (0, 0)
        return (self.element_table.insert_many(elements), len(elements))

    @staticmethod
    def _insert_bytes(table: Table, data: bytes) -> tuple[int, int]:
        if not data:
            return (0, 0)
        return (table.insert_many(list(data)), len(data))

    def close(self) -> None:
        """Close underlying tables."""
        self.element_table.close()
        if self.item_table is not None:
            self.item_table.close()


def element_format(storage_type: StorageType) -> str:
    """Return the struct format of one element of a variable-length column."""
    if storage_type in (StorageType.STRING, StorageType.BINARY):
        return BYTE_FORMAT
    if storage_type is StorageType.LIST:
        return INLINE_FORMATS[StorageType.OBJECT]
    if has_item_file(storage_type):
        return ARRAY_HEADER_FORMAT
    return INLINE_FORMATS[storage_type.element_type]  # type: ignore[index]


def create_array_table(
    storage_type: StorageType,
    data_dir: Path,
    table_name: str,
    read_only: bool = False,
) -> ArrayTable:
    """Open (or create) the array files of one column.

    Args:
        storage_type: Storage type of the column.
        data_dir: Directory holding the table files.
        table_name: File stem, ``<Table>.<column>``.
        read_only: Open existing files without write access.

    Returns:
        An ArrayTable instance.
    """
    element_table = Table(
        ValueLayout(element_format(storage_type)),
        data_dir / f"{table_name}.bin",
        read_only=read_only,
    )
    item_table = None
    if has_item_file(storage_type):
        try:
            item_table = Table(
                ValueLayout(BYTE_FORMAT),
                data_dir / f"{table_name}.items.bin",
                read_only=read_only,
            )
        except Exception:
            element_table.close()
            raise

    return ArrayTable(storage_type, element_table, item_table)
