"""
Abstract base classes defining the interfaces for the thumbnail tester.

The core never assumes a storage technology: everything it persists goes
through a TabularStore (rows in named tables) or a BlobStore (binary
payloads with public URLs).
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from .models import LeaderboardEntry, PairwiseOutcome

Cell = str | int | float
Row = list[Cell]


class TabularStore(ABC):
    """Interface for a spreadsheet-like store of named tables of rows.

    Row indices are zero-based. Individual row mutations are expected to be
    serialized by the implementation; there are no multi-call transactions.
    """

    @abstractmethod
    def get_or_create_table(self, name: str, initial_rows: Sequence[Sequence[Cell]] = ()) -> bool:
        """
        Create table ``name`` with ``initial_rows`` unless it already exists.

        Returns:
            True if the table was created, False if it already existed
            (in which case it is left unchanged)
        """
        pass

    @abstractmethod
    def table_exists(self, name: str) -> bool:
        """Whether a table with this exact name exists."""
        pass

    @abstractmethod
    def list_tables(self) -> list[str]:
        """Names of all tables."""
        pass

    @abstractmethod
    def read_rows(self, name: str) -> list[Row]:
        """Read every row of a table. Raises StoreError for a missing table."""
        pass

    @abstractmethod
    def append_row(self, name: str, row: Sequence[Cell]) -> None:
        """Append a row after the last row of a table."""
        pass

    @abstractmethod
    def write_rows(self, name: str, start: int, rows: Sequence[Sequence[Cell]]) -> None:
        """Overwrite rows starting at ``start``, extending the table if needed."""
        pass

    @abstractmethod
    def delete_row(self, name: str, index: int) -> None:
        """Delete a single row, shifting later rows up."""
        pass

    @abstractmethod
    def delete_table(self, name: str) -> bool:
        """Delete a table. Returns False (not an error) if it does not exist."""
        pass


class BlobStore(ABC):
    """Interface for storing thumbnail images under per-test folders."""

    @abstractmethod
    def upload(self, folder: str, filename: str, mime_type: str, payload: bytes) -> str:
        """
        Store a binary payload.

        Returns:
            Stable public URL of the stored payload
        """
        pass

    @abstractmethod
    def trash_folder(self, folder: str) -> bool:
        """Remove a folder and its payloads. Returns False if it does not exist."""
        pass


class Ranker(ABC):
    """Interface for turning pairwise outcomes into a leaderboard."""

    @abstractmethod
    def rank(self, outcomes: Iterable[PairwiseOutcome]) -> list[LeaderboardEntry]:
        """
        Rank every thumbnail referenced by the outcomes.

        Must be deterministic: the same outcome sequence always yields the
        same ordered entries.
        """
        pass
