"""Tests for listing tables and columns."""

from __future__ import annotations

import pytest

from tablescope import (
    ColumnDescriptor,
    DatabaseConnectionError,
    DatabaseHandle,
    StorageType,
    TableNotFoundError,
    list_columns,
    list_tables,
)
from tablescope.store import open_session


class RecordingOpener:
    """Session opener that remembers every session it hands out."""

    def __init__(self):
        self.sessions = []

    def __call__(self, handle):
        session = open_session(handle)
        self.sessions.append(session)
        return session


class TestListTables:
    """Tests for list_tables."""

    def test_tables_in_declaration_order(self, people_handle):
        assert list_tables(people_handle) == ["Pet", "Person"]

    def test_session_is_closed(self, people_handle):
        opener = RecordingOpener()
        list_tables(people_handle, opener=opener)
        assert len(opener.sessions) == 1
        assert opener.sessions[0].closed

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DatabaseConnectionError):
            list_tables(DatabaseHandle(tmp_path / "nope"))

    def test_directory_without_metadata(self, tmp_path):
        with pytest.raises(DatabaseConnectionError):
            list_tables(DatabaseHandle(tmp_path))

    def test_connection_error_is_builtin_connection_error(self, tmp_path):
        with pytest.raises(ConnectionError):
            list_tables(DatabaseHandle(tmp_path / "nope"))

    def test_handle_accepts_strings(self, people_handle):
        assert list_tables(DatabaseHandle(str(people_handle.path))) == ["Pet", "Person"]


class TestListColumns:
    """Tests for list_columns."""

    def test_simple_table(self, users_handle):
        assert list_columns(users_handle, "Users") == [
            ColumnDescriptor("id", StorageType.INTEGER, False),
            ColumnDescriptor("name", StorageType.STRING, True),
            ColumnDescriptor("score", StorageType.DOUBLE, False),
        ]

    def test_link_columns(self, people_handle):
        columns = {c.name: c for c in list_columns(people_handle, "Person")}

        assert columns["best_friend"].storage_type is StorageType.OBJECT
        assert columns["best_friend"].nullable
        assert columns["best_friend"].link_target == "Person"

        assert columns["pets"].storage_type is StorageType.LIST
        assert not columns["pets"].nullable
        assert columns["pets"].link_target == "Pet"

    def test_list_and_unknown_columns(self, people_handle):
        columns = {c.name: c for c in list_columns(people_handle, "Person")}

        assert columns["lucky_numbers"].type_name == "INTEGER_LIST"
        assert not columns["lucky_numbers"].nullable
        assert columns["nicknames"].type_name == "STRING_LIST"
        assert columns["nicknames"].nullable
        assert columns["tag"].storage_type is StorageType.UUID

    def test_column_order_is_declaration_order(self, people_handle):
        names = [c.name for c in list_columns(people_handle, "Person")]
        assert names[:4] == ["id", "name", "active", "avatar"]
        assert names[-1] == "weights"
        assert len(names) == 18

    def test_missing_table(self, users_handle):
        opener = RecordingOpener()
        with pytest.raises(TableNotFoundError) as exc_info:
            list_columns(users_handle, "Nope", opener=opener)
        assert exc_info.value.table_name == "Nope"
        assert opener.sessions[0].closed

    def test_missing_table_is_lookup_error(self, users_handle):
        with pytest.raises(LookupError):
            list_columns(users_handle, "users")
