"""Tests for cell formatting."""

from __future__ import annotations

import math

import pytest

from tablescope import UNKNOWN_VALUE, ListDisplay, StorageType, format_cell
from tablescope.formatter import format_row, is_known_type


class FakeRow:
    """In-memory row cursor: one (storage_type, value) pair per column."""

    def __init__(self, *columns, position=0, targets=None):
        self._columns = list(columns)
        self._targets = targets or {}
        self.position = position
        self.reads: list[int] = []

    @property
    def column_count(self):
        return len(self._columns)

    def column_type(self, index):
        return self._columns[index][0]

    def is_null(self, index):
        return self._columns[index][1] is None

    def read(self, index):
        self.reads.append(index)
        return self._columns[index][1]

    def link_target(self, index):
        return self._targets.get(index)


def cell(storage_type, value, **kwargs):
    return format_cell(FakeRow((storage_type, value), **kwargs), 0)


class TestScalars:
    """Tests for scalar storage types."""

    def test_integer_is_decimal_text(self):
        """Integers format as decimal text, including the int64 extremes."""
        assert cell(StorageType.INTEGER, 42) == "42"
        assert cell(StorageType.INTEGER, -(1 << 63)) == "-9223372036854775808"
        assert cell(StorageType.INTEGER, (1 << 63) - 1) == "9223372036854775807"

    def test_boolean_is_the_value(self):
        """Booleans stay booleans."""
        assert cell(StorageType.BOOLEAN, True) is True
        assert cell(StorageType.BOOLEAN, False) is False

    def test_string_is_unmodified(self):
        """Strings pass through untouched."""
        assert cell(StorageType.STRING, "  héllo\n") == "  héllo\n"
        assert cell(StorageType.STRING, "") == ""

    def test_binary_is_a_summary(self):
        """Binary values format as a length plus hex preview."""
        assert cell(StorageType.BINARY, b"\x00\x01\xff") == "byte[3] 00 01 ff"
        assert cell(StorageType.BINARY, b"") == "byte[0]"

    def test_long_binary_is_truncated(self):
        """Only the first bytes of a long binary value are shown."""
        text = cell(StorageType.BINARY, bytes(range(40)))
        assert text.startswith("byte[40] 00 01 02")
        assert text.endswith(" ...")
        assert "10" not in text.split()[2:-1]

    def test_date_has_millis_suffix(self):
        """Dates show the long local form followed by epoch milliseconds."""
        text = cell(StorageType.DATE, 1_000_000_000_000)
        assert text.endswith(" (1000000000000)")
        assert "2001" in text

    def test_double_is_decimal_text(self):
        """Doubles format as decimal text."""
        assert cell(StorageType.DOUBLE, 3.5) == "3.5"
        assert cell(StorageType.DOUBLE, -0.25) == "-0.25"

    def test_float_uses_single_precision_text(self):
        """Floats read back from 32-bit storage show their short form."""
        stored = 0.10000000149011612  # 0.1 after a float32 round trip
        assert cell(StorageType.FLOAT, stored) == "0.1"
        assert cell(StorageType.FLOAT, 2.5) == "2.5"


class TestNonFinite:
    """Tests for NaN and infinity."""

    @pytest.mark.parametrize("storage_type", [StorageType.FLOAT, StorageType.DOUBLE])
    def test_nan(self, storage_type):
        assert cell(storage_type, math.nan) == "NaN"

    @pytest.mark.parametrize("storage_type", [StorageType.FLOAT, StorageType.DOUBLE])
    def test_infinities(self, storage_type):
        assert cell(storage_type, math.inf) == "Infinity"
        assert cell(storage_type, -math.inf) == "-Infinity"


class TestNull:
    """Tests for absent values."""

    @pytest.mark.parametrize("storage_type", list(StorageType))
    def test_null_for_every_type(self, storage_type):
        """An absent value is None whatever the declared type."""
        row = FakeRow((storage_type, None))
        assert format_cell(row, 0) is None
        assert row.reads == []


class TestLinks:
    """Tests for object links and lists."""

    def test_object_link_is_position_text(self):
        """A link formats as the target row's position."""
        assert cell(StorageType.OBJECT, 12, targets={0: "Pet"}) == "12"

    def test_object_list(self):
        """An object list is prefixed by its target table."""
        result = cell(StorageType.LIST, [4, 0, 9], targets={0: "Pet"})
        assert result == ListDisplay("Pet", StorageType.LIST, ("4", "0", "9"))
        assert str(result) == "Pet{4,0,9}"

    def test_empty_object_list(self):
        assert str(cell(StorageType.LIST, [], targets={0: "Pet"})) == "Pet{}"

    def test_object_list_copies_elements(self):
        """The rendered list does not alias the engine's list."""
        positions = [1, 2]
        result = cell(StorageType.LIST, positions, targets={0: "Pet"})
        positions.append(3)
        assert result.elements == ("1", "2")


class TestScalarLists:
    """Tests for lists of primitive values."""

    def test_integer_list(self):
        result = cell(StorageType.INTEGER_LIST, [1, -2, 3])
        assert result.element_kind is StorageType.INTEGER
        assert str(result) == "INTEGER_LIST{1,-2,3}"

    def test_boolean_list(self):
        assert str(cell(StorageType.BOOLEAN_LIST, [True, False])) == "BOOLEAN_LIST{true,false}"

    def test_string_list(self):
        assert str(cell(StorageType.STRING_LIST, ["a", "b c"])) == "STRING_LIST{a,b c}"

    def test_double_list_uses_special_values(self):
        result = cell(StorageType.DOUBLE_LIST, [math.nan, math.inf, -math.inf, 1.5])
        assert str(result) == "DOUBLE_LIST{NaN,Infinity,-Infinity,1.5}"

    def test_float_list(self):
        assert str(cell(StorageType.FLOAT_LIST, [0.10000000149011612])) == "FLOAT_LIST{0.1}"

    def test_date_list(self):
        result = cell(StorageType.DATE_LIST, [0, 1_000_000_000_000])
        assert len(result) == 2
        assert result.elements[0].endswith(" (0)")
        assert result.elements[1].endswith(" (1000000000000)")

    def test_binary_list(self):
        assert str(cell(StorageType.BINARY_LIST, [b"\x01", b""])) == "BINARY_LIST{byte[1] 01,byte[0]}"

    def test_empty_list(self):
        assert str(cell(StorageType.STRING_LIST, [])) == "STRING_LIST{}"


class TestUnknownTypes:
    """Tests for storage types without a display rule."""

    @pytest.mark.parametrize(
        "storage_type",
        [
            StorageType.UUID,
            StorageType.DECIMAL128,
            StorageType.OBJECT_ID,
            StorageType.MIXED,
            StorageType.LINKING_OBJECTS,
            "geo_point",
        ],
    )
    def test_unknown_type_is_placeholder(self, storage_type):
        """Unknown kinds format to the placeholder instead of raising."""
        assert cell(storage_type, object()) == UNKNOWN_VALUE
        assert not is_known_type(storage_type)

    def test_known_types(self):
        assert is_known_type(StorageType.INTEGER)
        assert is_known_type(StorageType.LIST)
        assert is_known_type(StorageType.DATE_LIST)


class TestFormatRow:
    """Tests for formatting whole rows."""

    def test_cells_follow_column_order(self):
        row = FakeRow(
            (StorageType.INTEGER, 1),
            (StorageType.STRING, None),
            (StorageType.DOUBLE, math.nan),
        )
        assert format_row(row, 3) == ("1", None, "NaN")
