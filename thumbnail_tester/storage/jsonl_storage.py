"""
JSONL storage implementation.

Persists each table as a JSONL file (one JSON array per row) inside a data
directory. Appends are plain file appends; overwrites and deletions rewrite
the file through a temporary file and an atomic rename.
"""

import json
import os
import threading
import typing
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import quote, unquote

from typing_extensions import override

from ..exceptions import StoreError
from ..interfaces import Cell, Row, TabularStore
from ..logging_config import get_logger

# Module-level logger
logger = get_logger("jsonl_storage")

TABLE_SUFFIX = ".jsonl"


class JSONLTabularStore(TabularStore):
    """
    JSONL-based TabularStore.

    Table names are percent-encoded into file names so any display name
    (including spaces and slashes) maps to exactly one file.
    """

    tables_dir: Path

    def __init__(self, tables_dir: Path):
        """
        Initialize JSONL storage.

        Args:
            tables_dir: Directory holding one JSONL file per table
        """
        self.tables_dir = Path(tables_dir)
        self.tables_dir.mkdir(parents=True, exist_ok=True)
        self._lock: threading.Lock = threading.Lock()

        logger.info(f"JSONL storage initialized: tables_dir={self.tables_dir}")

    def _path(self, name: str) -> Path:
        if not name:
            raise StoreError("Table name cannot be empty")
        return self.tables_dir / (quote(name, safe="") + TABLE_SUFFIX)

    def _load(self, name: str) -> list[Row]:
        path = self._path(name)
        if not path.exists():
            raise StoreError(f"Table not found: {name}")

        rows = list[Row]()
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, 1):
                    line = line.rstrip("\n")
                    if not line:
                        continue
                    data = json.loads(line)
                    if not isinstance(data, list):
                        raise StoreError(
                            f"Corrupted row {line_number} in {path}: expected a JSON array"
                        )
                    rows.append(typing.cast(Row, data))
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupted table file {path}: {e}") from e
        except OSError as e:
            raise StoreError(f"Failed to read table {name}: {e}") from e
        return rows

    def _dump(self, name: str, rows: Sequence[Sequence[Cell]]) -> None:
        path = self._path(name)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                for row in rows:
                    json.dump(list(row), f, ensure_ascii=False)
                    f.write("\n")
            os.replace(tmp_path, path)
        except OSError as e:
            raise StoreError(f"Failed to write table {name}: {e}") from e

    @override
    def get_or_create_table(self, name: str, initial_rows: Sequence[Sequence[Cell]] = ()) -> bool:
        with self._lock:
            if self._path(name).exists():
                return False
            self._dump(name, initial_rows)
        logger.debug(f"Created table {name} with {len(initial_rows)} rows")
        return True

    @override
    def table_exists(self, name: str) -> bool:
        return self._path(name).exists()

    @override
    def list_tables(self) -> list[str]:
        return sorted(
            unquote(path.name[: -len(TABLE_SUFFIX)])
            for path in self.tables_dir.glob("*" + TABLE_SUFFIX)
        )

    @override
    def read_rows(self, name: str) -> list[Row]:
        with self._lock:
            return self._load(name)

    @override
    def append_row(self, name: str, row: Sequence[Cell]) -> None:
        with self._lock:
            path = self._path(name)
            if not path.exists():
                raise StoreError(f"Table not found: {name}")
            try:
                with open(path, "a", encoding="utf-8") as f:
                    json.dump(list(row), f, ensure_ascii=False)
                    f.write("\n")
            except OSError as e:
                raise StoreError(f"Failed to append to table {name}: {e}") from e

    @override
    def write_rows(self, name: str, start: int, rows: Sequence[Sequence[Cell]]) -> None:
        if start < 0:
            raise StoreError(f"Invalid start row {start} for table {name}")
        with self._lock:
            table = self._load(name)
            while len(table) < start + len(rows):
                table.append([])
            for offset, row in enumerate(rows):
                table[start + offset] = list(row)
            self._dump(name, table)

    @override
    def delete_row(self, name: str, index: int) -> None:
        with self._lock:
            table = self._load(name)
            if not 0 <= index < len(table):
                raise StoreError(f"Row {index} out of range for table {name}")
            del table[index]
            self._dump(name, table)

    @override
    def delete_table(self, name: str) -> bool:
        with self._lock:
            path = self._path(name)
            if not path.exists():
                return False
            try:
                path.unlink()
            except OSError as e:
                raise StoreError(f"Failed to delete table {name}: {e}") from e
        logger.debug(f"Deleted table file {path}")
        return True
