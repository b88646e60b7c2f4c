"""
In-memory tabular storage.

Keeps every table as a list of rows in a dict. Used by tests and for
throwaway runs; nothing survives the process.
"""

import threading
from collections.abc import Sequence

from typing_extensions import override

from ..exceptions import StoreError
from ..interfaces import Cell, Row, TabularStore
from ..logging_config import get_logger

logger = get_logger("memory_storage")


class MemoryTabularStore(TabularStore):
    """Dict-of-lists TabularStore guarded by a single lock."""

    def __init__(self) -> None:
        self._tables = dict[str, list[Row]]()
        self._lock: threading.Lock = threading.Lock()

    def _table(self, name: str) -> list[Row]:
        if name not in self._tables:
            raise StoreError(f"Table not found: {name}")
        return self._tables[name]

    @override
    def get_or_create_table(self, name: str, initial_rows: Sequence[Sequence[Cell]] = ()) -> bool:
        with self._lock:
            if name in self._tables:
                return False
            self._tables[name] = [list(row) for row in initial_rows]
        logger.debug(f"Created table {name} with {len(initial_rows)} rows")
        return True

    @override
    def table_exists(self, name: str) -> bool:
        return name in self._tables

    @override
    def list_tables(self) -> list[str]:
        return list(self._tables.keys())

    @override
    def read_rows(self, name: str) -> list[Row]:
        with self._lock:
            return [list(row) for row in self._table(name)]

    @override
    def append_row(self, name: str, row: Sequence[Cell]) -> None:
        with self._lock:
            self._table(name).append(list(row))

    @override
    def write_rows(self, name: str, start: int, rows: Sequence[Sequence[Cell]]) -> None:
        if start < 0:
            raise StoreError(f"Invalid start row {start} for table {name}")
        with self._lock:
            table = self._table(name)
            while len(table) < start + len(rows):
                table.append([])
            for offset, row in enumerate(rows):
                table[start + offset] = list(row)

    @override
    def delete_row(self, name: str, index: int) -> None:
        with self._lock:
            table = self._table(name)
            if not 0 <= index < len(table):
                raise StoreError(f"Row {index} out of range for table {name}")
            del table[index]

    @override
    def delete_table(self, name: str) -> bool:
        with self._lock:
            return self._tables.pop(name, None) is not None
