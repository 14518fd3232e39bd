"""Memory-mapped record files."""

from __future__ import annotations

import mmap
import struct
from pathlib import Path
from typing import Any

from tablescope.store.schema import TableDefinition, is_variable_length, slot_format
from tablescope.types import StorageType


class ValueLayout:
    """Fixed-size record holding one struct-packed value."""

    def __init__(self, fmt: str) -> None:
        self._struct = struct.Struct(fmt)

    @property
    def size_bytes(self) -> int:
        return self._struct.size

    def pack(self, value: Any) -> bytes:
        if isinstance(value, tuple):
            return self._struct.pack(*value)
        return self._struct.pack(value)

    def unpack(self, data: bytes) -> Any:
        values = self._struct.unpack(data)
        return values[0] if len(values) == 1 else values


class RecordLayout:
    """Row record of a table: null bitmap followed by one slot per column.

    Slot contents:
      - fixed-size scalars and object links: the value itself
      - uuid: two little-endian uint64 (low, high)
      - strings, binaries and lists: (start_index, length) into an array file
    """

    def __init__(self, table_def: TableDefinition) -> None:
        self.table_def = table_def
        self._slots = [struct.Struct(slot_format(c.storage_type)) for c in table_def.columns]

    @property
    def size_bytes(self) -> int:
        """Return the total record size: bitmap + all slots."""
        return max(1, self.table_def.null_bitmap_size + sum(s.size for s in self._slots))

    def pack(self, values: list[Any]) -> bytes:
        """Pack slot values; None marks a null column."""
        bitmap = bytearray(self.table_def.null_bitmap_size)
        for i, value in enumerate(values):
            if value is None:
                bitmap[i // 8] |= 1 << (i % 8)

        parts = [bytes(bitmap)]
        for column, slot, value in zip(self.table_def.columns, self._slots, values):
            if value is None:
                # Null column: write zeroed bytes
                parts.append(b"\x00" * slot.size)
            elif column.storage_type is StorageType.UUID:
                parts.append(slot.pack(value & ((1 << 64) - 1), (value >> 64) & ((1 << 64) - 1)))
            elif is_variable_length(column.storage_type):
                parts.append(slot.pack(*value))
            else:
                parts.append(slot.pack(value))
        data = b"".join(parts)
        return data + b"\x00" * (self.size_bytes - len(data))

    def unpack(self, data: bytes) -> list[Any]:
        """Unpack a record into slot values, None for null columns."""
        bitmap_size = self.table_def.null_bitmap_size
        bitmap = data[:bitmap_size]
        offset = bitmap_size

        result: list[Any] = []
        for i, (column, slot) in enumerate(zip(self.table_def.columns, self._slots)):
            chunk = data[offset : offset + slot.size]
            offset += slot.size
            if bitmap[i // 8] & (1 << (i % 8)):
                result.append(None)
            elif column.storage_type is StorageType.UUID:
                low, high = slot.unpack(chunk)
                result.append((high << 64) | low)
            elif is_variable_length(column.storage_type):
                result.append(slot.unpack(chunk))
            else:
                result.append(slot.unpack(chunk)[0])
        return result


class Table:
    """Manages binary storage for a single record file.

    File layout: an 8-byte record count followed by fixed-size records.
    A table opened read-only maps the file once and sees the records that
    existed when it was opened.
    """

    # Initial file size and growth increment
    INITIAL_SIZE = 4096
    GROWTH_FACTOR = 2

    def __init__(
        self, layout: ValueLayout | RecordLayout, file_path: Path, read_only: bool = False
    ) -> None:
        self.layout = layout
        self.file_path = file_path
        self.read_only = read_only
        self._record_size = layout.size_bytes
        self._file: Any = None
        self._mmap: mmap.mmap | None = None
        self._count = 0
        self._capacity = 0  # Number of records that fit in current file

        self._open_or_create()

    def _open_or_create(self) -> None:
        """Open existing file or create new one."""
        if self.file_path.exists() or self.read_only:
            self._open_existing()
        else:
            self._create_new()

    def _create_new(self) -> None:
        """Create a new table file."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        initial_size = max(self.INITIAL_SIZE, 8 + self._record_size)
        with open(self.file_path, "wb") as f:
            # Header: 8 bytes for count
            f.write(struct.pack("<Q", 0))
            f.write(b"\x00" * (initial_size - 8))

        self._open_file()
        self._count = 0
        self._capacity = (initial_size - 8) // self._record_size

    def _open_existing(self) -> None:
        """Open an existing table file."""
        self._open_file()
        self._count = struct.unpack("<Q", self._mmap[0:8])[0]  # type: ignore
        self._capacity = (self._mmap.size() - 8) // self._record_size  # type: ignore
        if self._count > self._capacity:
            self.close()
            raise ValueError(
                f"Corrupt table file {self.file_path}: {self._count} records claimed, "
                f"room for {self._capacity}"
            )

    def _open_file(self) -> None:
        """Open file and create memory map."""
        if self.read_only:
            self._file = open(self.file_path, "rb")
            self._mmap = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
        else:
            self._file = open(self.file_path, "r+b")
            self._mmap = mmap.mmap(self._file.fileno(), 0)

    def _grow_file(self, min_records: int) -> None:
        """Grow the file to hold at least ``min_records`` records."""
        self._close_map()

        new_size = self.file_path.stat().st_size
        while (new_size - 8) // self._record_size < min_records:
            new_size *= self.GROWTH_FACTOR

        with open(self.file_path, "r+b") as f:
            f.seek(new_size - 1)
            f.write(b"\x00")

        self._open_file()
        self._capacity = (new_size - 8) // self._record_size

    def _update_count(self) -> None:
        """Update the count in the file header."""
        self._mmap[0:8] = struct.pack("<Q", self._count)  # type: ignore

    def _record_offset(self, index: int) -> int:
        """Get byte offset for a record index."""
        return 8 + index * self._record_size  # 8 bytes for header

    def _check_writable(self) -> None:
        if self.read_only:
            raise PermissionError(f"Table {self.file_path} is opened read-only")

    @property
    def count(self) -> int:
        """Return the number of records in the table."""
        return self._count

    def insert(self, value: Any) -> int:
        """Insert a value and return its index."""
        return self.insert_many([value])

    def insert_many(self, values: list[Any]) -> int:
        """Insert values as consecutive records and return the first index."""
        self._check_writable()
        start = self._count
        if not values:
            return start
        if start + len(values) > self._capacity:
            self._grow_file(start + len(values))

        data = b"".join(self.layout.pack(v) for v in values)
        offset = self._record_offset(start)
        self._mmap[offset : offset + len(data)] = data  # type: ignore

        self._count += len(values)
        self._update_count()
        self._mmap.flush()  # type: ignore
        return start

    def get(self, index: int) -> Any:
        """Get a value by index."""
        if index < 0 or index >= self._count:
            raise IndexError(f"Index {index} out of range [0, {self._count})")

        offset = self._record_offset(index)
        return self.layout.unpack(self._mmap[offset : offset + self._record_size])  # type: ignore

    def get_range(self, start: int, length: int) -> list[Any]:
        """Get ``length`` consecutive values starting at ``start``."""
        return [self.get(start + i) for i in range(length)]

    def read_bytes(self, start: int, length: int) -> bytes:
        """Return the raw contents of ``length`` one-byte records."""
        if length == 0:
            return b""
        if start < 0 or start + length > self._count:
            raise IndexError(f"Range [{start}, {start + length}) out of range [0, {self._count})")
        offset = self._record_offset(start)
        return bytes(self._mmap[offset : offset + length * self._record_size])  # type: ignore

    def _close_map(self) -> None:
        if self._mmap is not None:
            if not self.read_only:
                self._mmap.flush()
            self._mmap.close()
            self._mmap = None
        if self._file is not None:
            self._file.close()
            self._file = None

    def close(self) -> None:
        """Close the table file."""
        self._close_map()

    def __enter__(self) -> Table:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
