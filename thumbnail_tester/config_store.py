"""
Config store: test id -> test configuration.

Backed by a single ``TestConfigs`` table with one row per test holding the
id, the creation timestamp and the configuration serialized as JSON.
"""

import json
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from typing_extensions import NotRequired, TypedDict

from .exceptions import DuplicateTestError, InvalidTestError
from .interfaces import Row, TabularStore
from .logging_config import get_logger
from .models import (
    GRID,
    TestConfig,
    TestSummary,
    Video,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

# Module-level logger
logger = get_logger("config_store")

CONFIG_TABLE = "TestConfigs"
CONFIG_HEADER: Row = ["Test ID", "Created", "Config JSON"]

ID_COLUMN = 0
CREATED_COLUMN = 1
CONFIG_COLUMN = 2


class StoredVideo(TypedDict):
    """A video as serialized in the config document."""

    title: str
    thumbnail: str


class StoredConfigDocument(TypedDict):
    """Config document layout. Older documents only carry ``videos``."""

    videos: list[StoredVideo]
    testName: NotRequired[str | None]
    testType: NotRequired[str | None]
    matchupsPerThumbnail: NotRequired[int | None]


_document_adapter = TypeAdapter(StoredConfigDocument)


def _cell(row: Row, column: int) -> str:
    if column >= len(row) or row[column] is None:
        return ""
    return str(row[column])


class ConfigStore:
    """Create/read/list/delete test configurations in a TabularStore."""

    def __init__(self, store: TabularStore, clock: Callable[[], datetime] = utc_now):
        """
        Initialize config store.

        Args:
            store: Tabular store holding the TestConfigs table
            clock: Source of creation timestamps (injectable for tests)
        """
        self.store: TabularStore = store
        self.clock: Callable[[], datetime] = clock

    def _data_rows(self) -> list[tuple[int, Row]]:
        """(row index, row) pairs below the header, or [] if no table yet."""
        if not self.store.table_exists(CONFIG_TABLE):
            return []
        rows = self.store.read_rows(CONFIG_TABLE)
        return [(index, row) for index, row in enumerate(rows) if index > 0]

    def _parse(self, row: Row) -> TestConfig:
        document = _document_adapter.validate_python(json.loads(_cell(row, CONFIG_COLUMN)))
        return TestConfig(
            test_id=_cell(row, ID_COLUMN),
            test_type=document.get("testType") or GRID,  # type: ignore[arg-type]
            videos=[Video(title=v["title"], thumbnail_url=v["thumbnail"]) for v in document["videos"]],
            test_name=document.get("testName") or "",
            matchups_per_thumbnail=document.get("matchupsPerThumbnail"),
            created_at=_cell(row, CREATED_COLUMN),
        )

    def exists(self, test_id: str) -> bool:
        """Whether any config row carries ``test_id`` (readable or not)."""
        return any(_cell(row, ID_COLUMN) == test_id for _, row in self._data_rows())

    def create(self, config: TestConfig) -> TestConfig:
        """
        Persist a new test configuration.

        Sets ``config.created_at``.

        Raises:
            DuplicateTestError: If a test with the same id already exists
        """
        if self.exists(config.test_id):
            raise DuplicateTestError(f"Test already exists: {config.test_id}")

        _ = self.store.get_or_create_table(CONFIG_TABLE, [CONFIG_HEADER])

        config.created_at = format_timestamp(self.clock())
        self.store.append_row(
            CONFIG_TABLE,
            [config.test_id, config.created_at, json.dumps(config.to_document(), ensure_ascii=False)],
        )
        logger.info(f"Saved test config for: {config.test_id} ({config.test_type}, {len(config.videos)} videos)")
        return config

    def get(self, test_id: str) -> TestConfig | None:
        """Exact-match lookup. Returns None for unknown or unreadable tests."""
        for _, row in self._data_rows():
            if _cell(row, ID_COLUMN) != test_id:
                continue
            try:
                return self._parse(row)
            except (json.JSONDecodeError, PydanticValidationError, InvalidTestError) as e:
                logger.error(f"Error parsing config for {test_id}: {e}")
                return None
        return None

    def list(self) -> list[TestSummary]:
        """Summaries of every readable test, newest first."""
        summaries = list[TestSummary]()
        for _, row in self._data_rows():
            test_id = _cell(row, ID_COLUMN)
            if not test_id:
                continue
            try:
                summaries.append(self._parse(row).to_summary())
            except (json.JSONDecodeError, PydanticValidationError, InvalidTestError) as e:
                logger.warning(f"Skipping unreadable test config for {test_id}: {e}")

        return sorted(summaries, key=_created_sort_key, reverse=True)

    def delete(self, test_id: str) -> bool:
        """Remove every config row for ``test_id``. Returns False if none existed."""
        matches = [index for index, row in self._data_rows() if _cell(row, ID_COLUMN) == test_id]
        # Delete bottom-up so earlier indices stay valid
        for index in reversed(matches):
            self.store.delete_row(CONFIG_TABLE, index)

        if matches:
            logger.info(f"Deleted test config for: {test_id}")
        return bool(matches)


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_sort_key(summary: TestSummary) -> datetime:
    try:
        return parse_timestamp(summary.created_at)
    except ValueError:
        return _EPOCH
