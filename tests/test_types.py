"""Tests for the shared value types."""

from pathlib import Path

import pytest

from tablescope import (
    NULL_TOKEN,
    DatabaseHandle,
    Direction,
    ListDisplay,
    Row,
    SortSpec,
    StorageType,
    display_text,
)


class TestStorageType:
    def test_scalar_list_elements(self):
        assert StorageType.INTEGER_LIST.element_type is StorageType.INTEGER
        assert StorageType.BINARY_LIST.is_scalar_list
        assert not StorageType.LIST.is_scalar_list
        assert StorageType.LIST.element_type is None

    def test_links(self):
        assert StorageType.OBJECT.is_link
        assert StorageType.LIST.is_link
        assert not StorageType.STRING_LIST.is_link

    def test_sortable(self):
        sortable = {t for t in StorageType if t.is_sortable}
        assert sortable == {
            StorageType.INTEGER,
            StorageType.BOOLEAN,
            StorageType.STRING,
            StorageType.DATE,
            StorageType.FLOAT,
            StorageType.DOUBLE,
        }


class TestSortSpec:
    def test_defaults_to_ascending(self):
        assert SortSpec("id").direction is Direction.ASCENDING
        assert not SortSpec("id").descending

    @pytest.mark.parametrize(
        "order, reverse, expected",
        [
            ("id", False, SortSpec("id", Direction.ASCENDING)),
            ("id", True, SortSpec("id", Direction.DESCENDING)),
            ("-id", False, SortSpec("id", Direction.DESCENDING)),
            ("-id", True, SortSpec("id", Direction.ASCENDING)),
        ],
    )
    def test_parse(self, order, reverse, expected):
        assert SortSpec.parse(order, reverse) == expected

    def test_parse_without_column(self):
        assert SortSpec.parse(None) is None
        assert SortSpec.parse("", True) is None


class TestValues:
    def test_handle_coerces_path(self):
        assert DatabaseHandle("some/dir").path == Path("some/dir")

    def test_handles_compare_by_path(self):
        assert DatabaseHandle("a") == DatabaseHandle(Path("a"))

    def test_row_indexing(self):
        row = Row(position=4, cells=("1", None, True))
        assert len(row) == 3
        assert row[2] is True

    def test_display_text(self):
        assert display_text(None) == NULL_TOKEN == "[null]"
        assert display_text(True) == "true"
        assert display_text(False) == "false"
        assert display_text("x") == "x"
        assert display_text(ListDisplay("Pet", StorageType.LIST, ("1", "2"))) == "Pet{1,2}"
