"""
Results store: one table of submissions per test.

Grid tables are a single header row followed by one row per rating.

Head-to-head tables have two regions so a reviewer opening the table sees
the leaderboard first::

    row 0        title ("Leaderboard")
    row 1        summary header
    rows 2..14   ranked leaderboard entries (SUMMARY_CAPACITY rows)
    row 15       raw-data header (RAW_HEADER_ROW)
    rows 16..    one row per judged matchup, appended

The summary region is a cache; it is always rebuilt from the raw region.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from .config_store import CONFIG_TABLE
from .interfaces import Cell, Row, TabularStore
from .logging_config import get_logger
from .models import (
    HEAD_TO_HEAD,
    LeaderboardEntry,
    OutcomeSubmission,
    PairwiseOutcome,
    RatingRecord,
    RatingSubmission,
    Respondent,
    TestType,
)

# Module-level logger
logger = get_logger("results_store")

TEST_TABLE_PREFIX = "Test-"

GRID_HEADER: Row = [
    "Timestamp",
    "Test ID",
    "Name",
    "Email",
    "Age Group",
    "Gender",
    "Video Title",
    "Rating",
    "Rating Score",
]

OUTCOME_HEADER: Row = [
    "Timestamp",
    "Test ID",
    "Name",
    "Email",
    "Age Group",
    "Gender",
    "Matchup Number",
    "Thumbnail A",
    "Thumbnail B",
    "Winner",
]

SUMMARY_TITLE: Row = ["Leaderboard"]
SUMMARY_HEADER: Row = ["Rank", "Thumbnail", "Wins", "Losses", "Total", "Win Rate"]

# Head-to-head layout (zero-based rows)
SUMMARY_TITLE_ROW = 0
SUMMARY_HEADER_ROW = 1
SUMMARY_FIRST_ROW = 2
SUMMARY_CAPACITY = 13
RAW_HEADER_ROW = SUMMARY_FIRST_ROW + SUMMARY_CAPACITY
RAW_FIRST_ROW = RAW_HEADER_ROW + 1

# Grid layout
GRID_FIRST_ROW = 1

NO_RATINGS_PLACEHOLDER = "No ratings provided"
NO_RESULTS_PLACEHOLDER = "No results provided"

# Column positions shared by both raw layouts
RESPONDENT_COLUMNS = slice(2, 6)
VIDEO_TITLE_COLUMN = 6
RATING_LABEL_COLUMN = 7
MATCHUP_COLUMN = 6
THUMBNAIL_A_COLUMN = 7
THUMBNAIL_B_COLUMN = 8
WINNER_COLUMN = 9

_BLANK_SUMMARY_ROW: Row = [""] * len(SUMMARY_HEADER)


def default_table_name(test_id: str) -> str:
    """Name of a test's results table (and blob folder) keyed by id."""
    return f"{TEST_TABLE_PREFIX}{test_id}"


def resolve_table_name(test_id: str, test_type: str, test_name: str | None = None) -> str:
    """
    Resolve the results table of a test.

    Head-to-head tables are named after the human-readable test name when
    there is one; grid tables are always ``Test-<id>``.
    """
    if test_type == HEAD_TO_HEAD and test_name and test_name != CONFIG_TABLE:
        return test_name
    return default_table_name(test_id)


def initial_rows(test_type: str) -> list[Row]:
    """Rows a freshly created results table starts with."""
    if test_type == HEAD_TO_HEAD:
        return (
            [list(SUMMARY_TITLE), list(SUMMARY_HEADER)]
            + [list(_BLANK_SUMMARY_ROW) for _ in range(SUMMARY_CAPACITY)]
            + [list(OUTCOME_HEADER)]
        )
    return [list(GRID_HEADER)]


@dataclass
class ResultsTable:
    """Handle on a test's results table."""

    name: str
    test_type: TestType


def _text(row: Row, column: int) -> str:
    if column >= len(row) or row[column] is None:
        return ""
    return str(row[column])


def _is_blank(row: Row) -> bool:
    return all(cell in ("", None) for cell in row)


def _respondent_cells(respondent: Respondent) -> list[Cell]:
    return [respondent.name, respondent.email, respondent.age_group, respondent.gender]


def _respondent_from_row(row: Row) -> Respondent:
    name, email, age_group, gender = (
        _text(row, column) for column in range(RESPONDENT_COLUMNS.start, RESPONDENT_COLUMNS.stop)
    )
    return Respondent(name=name, email=email, age_group=age_group, gender=gender)


def _matchup_number(cell: str) -> int | str:
    try:
        return int(cell)
    except ValueError:
        return cell


class ResultsStore:
    """Per-test results tables in a TabularStore."""

    def __init__(self, store: TabularStore):
        self.store: TabularStore = store

    def get_or_create_table(self, test_id: str, test_type: TestType, test_name: str | None = None) -> ResultsTable:
        """Return the test's results table, initializing its layout if it is new."""
        table = ResultsTable(name=resolve_table_name(test_id, test_type, test_name), test_type=test_type)
        if self.store.get_or_create_table(table.name, initial_rows(test_type)):
            logger.info(f"Created new {test_type} results table: {table.name}")
        return table

    def find_table(self, test_id: str, test_type: TestType, test_name: str | None = None) -> ResultsTable | None:
        """Return the test's results table if it exists, without creating it."""
        name = resolve_table_name(test_id, test_type, test_name)
        if not self.store.table_exists(name):
            return None
        return ResultsTable(name=name, test_type=test_type)

    def append_rating_rows(self, table: ResultsTable, submission: RatingSubmission) -> int:
        """Append one row per rating, or a single placeholder row. Returns rows written."""
        prefix: list[Cell] = [submission.submitted_at, submission.test_id] + _respondent_cells(submission.respondent)

        if not submission.records:
            self.store.append_row(table.name, prefix + [NO_RATINGS_PLACEHOLDER, "", ""])
            logger.debug(f"Wrote placeholder rating row to {table.name}")
            return 1

        for record in submission.records:
            self.store.append_row(
                table.name, prefix + [record.video_title, record.rating_label, record.rating_score]
            )
        logger.info(f"Wrote {len(submission.records)} ratings to {table.name} for test: {submission.test_id}")
        return len(submission.records)

    def append_outcome_rows(self, table: ResultsTable, submission: OutcomeSubmission) -> int:
        """Append one raw-region row per outcome, or a single placeholder row."""
        prefix: list[Cell] = [submission.submitted_at, submission.test_id] + _respondent_cells(submission.respondent)

        if not submission.outcomes:
            self.store.append_row(table.name, prefix + ["", NO_RESULTS_PLACEHOLDER, "", ""])
            logger.debug(f"Wrote placeholder outcome row to {table.name}")
            return 1

        for outcome in submission.outcomes:
            self.store.append_row(
                table.name,
                prefix + [outcome.matchup_number, outcome.thumbnail_a, outcome.thumbnail_b, outcome.winner],
            )
        logger.info(f"Wrote {len(submission.outcomes)} outcomes to {table.name} for test: {submission.test_id}")
        return len(submission.outcomes)

    def read_raw_outcomes(self, table: ResultsTable) -> list[PairwiseOutcome]:
        """Read every outcome from the raw-data region (the summary is never input)."""
        outcomes = list[PairwiseOutcome]()
        for row in self.store.read_rows(table.name)[RAW_FIRST_ROW:]:
            if _is_blank(row):
                continue
            if _text(row, THUMBNAIL_A_COLUMN) == NO_RESULTS_PLACEHOLDER and not _text(row, THUMBNAIL_B_COLUMN):
                continue
            outcomes.append(
                PairwiseOutcome(
                    test_id=_text(row, 1),
                    submitted_at=_text(row, 0),
                    respondent=_respondent_from_row(row),
                    matchup_number=_matchup_number(_text(row, MATCHUP_COLUMN)),
                    thumbnail_a=_text(row, THUMBNAIL_A_COLUMN),
                    thumbnail_b=_text(row, THUMBNAIL_B_COLUMN),
                    winner=_text(row, WINNER_COLUMN),
                )
            )
        return outcomes

    def read_rating_records(self, table: ResultsTable) -> list[RatingRecord]:
        """Read every grid rating, skipping placeholder rows."""
        records = list[RatingRecord]()
        for row in self.store.read_rows(table.name)[GRID_FIRST_ROW:]:
            if _is_blank(row):
                continue
            title = _text(row, VIDEO_TITLE_COLUMN)
            label = _text(row, RATING_LABEL_COLUMN)
            if title == NO_RATINGS_PLACEHOLDER and not label:
                continue
            records.append(
                RatingRecord(
                    test_id=_text(row, 1),
                    submitted_at=_text(row, 0),
                    respondent=_respondent_from_row(row),
                    video_title=title,
                    rating_label=label,
                )
            )
        return records

    def write_summary(self, table: ResultsTable, entries: Sequence[LeaderboardEntry]) -> int:
        """
        Overwrite the summary region with ranked entries.

        Entries beyond SUMMARY_CAPACITY are dropped from the snapshot and
        rows past the last entry are blanked. Returns the number of entries
        written.
        """
        if table.test_type != HEAD_TO_HEAD:
            raise ValueError(f"Table {table.name} has no leaderboard region")

        shown = list(entries[:SUMMARY_CAPACITY])
        if len(entries) > SUMMARY_CAPACITY:
            logger.warning(
                f"Leaderboard for {table.name} has {len(entries)} entries, keeping top {SUMMARY_CAPACITY}"
            )

        rows: list[Row] = [
            [rank, entry.thumbnail_url, entry.wins, entry.losses, entry.total, f"{entry.win_rate:.1f}%"]
            for rank, entry in enumerate(shown, 1)
        ]
        rows.extend(list(_BLANK_SUMMARY_ROW) for _ in range(SUMMARY_CAPACITY - len(rows)))

        self.store.write_rows(table.name, SUMMARY_FIRST_ROW, rows)
        logger.info(f"Updated leaderboard for {table.name} with {len(shown)} entries")
        return len(shown)

    def delete_table(self, name: str) -> bool:
        """Delete a results table by name. Returns False if it did not exist."""
        deleted = self.store.delete_table(name)
        if deleted:
            logger.info(f"Deleted results table: {name}")
        return deleted
