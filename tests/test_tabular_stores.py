"""
Tests for the TabularStore implementations.

Both backends must honor the same contract; JSONL-specific tests cover
persistence and file handling.
"""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from thumbnail_tester.exceptions import StoreError
from thumbnail_tester.interfaces import TabularStore
from thumbnail_tester.storage.jsonl_storage import JSONLTabularStore
from thumbnail_tester.storage.memory_storage import MemoryTabularStore


@pytest.fixture(params=["memory", "jsonl"])
def store(request: pytest.FixtureRequest) -> Iterator[TabularStore]:
    if request.param == "memory":
        yield MemoryTabularStore()
        return
    with tempfile.TemporaryDirectory() as temp_dir:
        yield JSONLTabularStore(Path(temp_dir) / "tables")


class TestTabularStoreContract:
    """Behavior shared by every TabularStore."""

    def test_get_or_create_only_initializes_once(self, store: TabularStore) -> None:
        """Second create returns False and keeps the existing rows."""
        # Act
        created = store.get_or_create_table("t", [["header"]])
        store.append_row("t", ["row"])
        created_again = store.get_or_create_table("t", [["other header"]])

        # Assert
        assert created is True
        assert created_again is False
        assert store.read_rows("t") == [["header"], ["row"]]

    def test_append_and_read(self, store: TabularStore) -> None:
        # Arrange
        store.get_or_create_table("t")

        # Act
        store.append_row("t", ["a", 1, 2.5])
        store.append_row("t", ["b", "", 0])

        # Assert
        assert store.read_rows("t") == [["a", 1, 2.5], ["b", "", 0]]

    def test_write_rows_overwrites_and_extends(self, store: TabularStore) -> None:
        # Arrange
        store.get_or_create_table("t", [["h"], ["1"], ["2"]])

        # Act
        store.write_rows("t", 1, [["one"], ["two"], ["three"]])

        # Assert
        assert store.read_rows("t") == [["h"], ["one"], ["two"], ["three"]]

    def test_write_rows_past_end_pads_with_empty_rows(self, store: TabularStore) -> None:
        store.get_or_create_table("t", [["h"]])

        store.write_rows("t", 3, [["x"]])

        assert store.read_rows("t") == [["h"], [], [], ["x"]]

    def test_delete_row_shifts_rows(self, store: TabularStore) -> None:
        # Arrange
        store.get_or_create_table("t", [["h"], ["1"], ["2"]])

        # Act
        store.delete_row("t", 1)

        # Assert
        assert store.read_rows("t") == [["h"], ["2"]]
        with pytest.raises(StoreError):
            store.delete_row("t", 5)

    def test_missing_table_operations_fail(self, store: TabularStore) -> None:
        with pytest.raises(StoreError):
            store.read_rows("missing")
        with pytest.raises(StoreError):
            store.append_row("missing", ["x"])
        with pytest.raises(StoreError):
            store.write_rows("missing", 0, [["x"]])

    def test_delete_table_is_idempotent(self, store: TabularStore) -> None:
        # Arrange
        store.get_or_create_table("t")

        # Act & Assert
        assert store.delete_table("t") is True
        assert store.delete_table("t") is False
        assert not store.table_exists("t")

    def test_list_tables(self, store: TabularStore) -> None:
        store.get_or_create_table("Test-a")
        store.get_or_create_table("My Leaderboard / v2")

        assert sorted(store.list_tables()) == ["My Leaderboard / v2", "Test-a"]


class TestJSONLTabularStore:
    """JSONL-specific behavior."""

    def test_tables_survive_new_instance(self) -> None:
        """Data written by one store instance is read by the next."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            tables_dir = Path(temp_dir) / "tables"
            first = JSONLTabularStore(tables_dir)
            first.get_or_create_table("Summer Thumbs", [["h"]])
            first.append_row("Summer Thumbs", ["é", 3])

            # Act
            second = JSONLTabularStore(tables_dir)

            # Assert
            assert second.table_exists("Summer Thumbs")
            assert second.read_rows("Summer Thumbs") == [["h"], ["é", 3]]

    def test_names_are_encoded_into_single_files(self) -> None:
        """Slashes and dots in table names never escape the tables directory."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            tables_dir = Path(temp_dir) / "tables"
            store = JSONLTabularStore(tables_dir)

            # Act
            store.get_or_create_table("../escape/attempt")

            # Assert
            files = list(tables_dir.iterdir())
            assert len(files) == 1
            assert files[0].parent == tables_dir
            assert store.list_tables() == ["../escape/attempt"]

    def test_corrupted_file_raises_store_error(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            tables_dir = Path(temp_dir) / "tables"
            store = JSONLTabularStore(tables_dir)
            store.get_or_create_table("t", [["h"]])
            with open(tables_dir / "t.jsonl", "a", encoding="utf-8") as f:
                f.write("corrupted line\n")

            # Act & Assert
            with pytest.raises(StoreError):
                store.read_rows("t")

    def test_empty_name_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = JSONLTabularStore(Path(temp_dir))

            with pytest.raises(StoreError):
                store.get_or_create_table("")
