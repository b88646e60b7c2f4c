"""
Request dispatcher for the thumbnail tester.

Coordinates the config store, results store, blob store and ranker. Every
request is handled to completion independently; errors never escape
``handle``/``handle_query`` and are turned into ``{"status": "error"}``
responses instead.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from loguru import Logger

from .blobs.data_url import decode_data_url
from .config_store import ConfigStore
from .exceptions import (
    DuplicateTestError,
    ImageUploadError,
    InvalidRequestError,
    InvalidTestError,
    NotFoundError,
    ThumbnailTesterError,
)
from .interfaces import BlobStore, Ranker
from .logging_config import get_logger
from .models import (
    GRID,
    HEAD_TO_HEAD,
    LeaderboardEntry,
    OutcomeSubmission,
    RatingSubmission,
    TestConfig,
    TestSummary,
    Video,
    utc_now,
)
from .rankers.rating_summary import summarize_ratings
from .rankers.win_rate_ranker import WinRateRanker
from .request_parser import (
    CreateTest,
    DeleteTest,
    GetLeaderboard,
    GetTest,
    InvalidRequest,
    ListTests,
    Request,
    parse_query,
    parse_request,
)
from .results_store import ResultsStore, ResultsTable, default_table_name, resolve_table_name


@dataclass
class ResyncReport:
    """Outcome of re-aggregating one head-to-head test."""

    test_id: str
    table_name: str
    entries: int = 0
    error: str | None = None


def success(**fields: Any) -> dict[str, Any]:
    return {"status": "success", **fields}


def error(message: str) -> dict[str, Any]:
    return {"status": "error", "message": message}


class Dispatcher:
    """Routes decoded requests to the stores and shapes their responses."""

    def __init__(
        self,
        config_store: ConfigStore,
        results_store: ResultsStore,
        blob_store: BlobStore,
        ranker: Ranker | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize dispatcher with all components.

        Args:
            config_store: Test configurations
            results_store: Per-test results tables
            blob_store: Thumbnail image storage
            ranker: Leaderboard ranker (default: WinRateRanker)
            clock: Source of submission timestamps (injectable for tests)
        """
        self.config_store: ConfigStore = config_store
        self.results_store: ResultsStore = results_store
        self.blob_store: BlobStore = blob_store
        self.ranker: Ranker = ranker if ranker is not None else WinRateRanker()
        self.clock: Callable[[], datetime] = clock

        self.logger: Logger = get_logger("dispatcher")

    # Transport-facing entry points

    def handle(self, payload: Any) -> dict[str, Any]:
        """Handle a request body (create, delete or submit, or an explicit read action)."""
        try:
            return self.dispatch(parse_request(payload, self.clock))
        except ThumbnailTesterError as e:
            self.logger.warning(f"Request failed: {type(e).__name__}: {e}")
            return error(str(e))
        except Exception as e:
            self.logger.exception(f"Unexpected error handling request: {e}")
            return error(str(e))

    def handle_query(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Handle read-only query parameters (list tests, get test, leaderboard)."""
        try:
            return self.dispatch(parse_query(params))
        except ThumbnailTesterError as e:
            self.logger.warning(f"Query failed: {type(e).__name__}: {e}")
            return error(str(e))
        except Exception as e:
            self.logger.exception(f"Unexpected error handling query: {e}")
            return error(str(e))

    def dispatch(self, request: Request) -> dict[str, Any]:
        """Run a decoded request and build its success response. Errors propagate."""
        if isinstance(request, CreateTest):
            config = self.create_test(request)
            return success(
                message="Test created successfully",
                testId=config.test_id,
                videoCount=len(config.videos),
            )
        if isinstance(request, (RatingSubmission, OutcomeSubmission)):
            self.submit(request)
            return success(message="Data recorded successfully", testId=request.test_id)
        if isinstance(request, DeleteTest):
            deleted = self.delete_test(request.test_id)
            return success(message="Test deleted successfully", testId=request.test_id, deleted=deleted)
        if isinstance(request, ListTests):
            return success(tests=[summary.to_dict() for summary in self.list_tests()])
        if isinstance(request, GetTest):
            config = self.get_test(request.test_id)
            return success(
                testId=config.test_id,
                testName=config.display_name,
                testType=config.test_type,
                videos=[video.to_dict() for video in config.videos],
                matchupsPerThumbnail=config.matchups_per_thumbnail,
            )
        if isinstance(request, GetLeaderboard):
            return success(**self.get_leaderboard(request.test_id))
        if isinstance(request, InvalidRequest):
            raise InvalidRequestError(request.reason)
        raise InvalidRequestError(f"Unsupported request: {type(request).__name__}")

    # Operations

    def create_test(self, request: CreateTest) -> TestConfig:
        """
        Upload a test's thumbnails and persist its configuration.

        Nothing is written to the config store unless every upload succeeds.
        Blobs uploaded before a failing one are left behind.
        """
        if not request.test_id or not request.videos:
            raise InvalidTestError("Invalid test data: missing testId or videos")

        # Validate everything that does not need the uploads first
        config = TestConfig(
            test_id=request.test_id,
            test_type=request.test_type,
            videos=[Video(title=video.title, thumbnail_url="") for video in request.videos],
            test_name=request.test_name,
            matchups_per_thumbnail=request.matchups_per_thumbnail,
        )
        if self.config_store.exists(config.test_id):
            raise DuplicateTestError(f"Test already exists: {config.test_id}")
        self._check_table_name_available(config)

        folder = default_table_name(config.test_id)
        for index, (video, upload) in enumerate(zip(config.videos, request.videos)):
            try:
                image = decode_data_url(upload.data_url)
                video.thumbnail_url = self.blob_store.upload(
                    folder, f"thumbnail-{index + 1}.{image.extension}", image.mime_type, image.payload
                )
            except Exception as e:
                self.logger.error(f"Error uploading image {index} for {config.test_id}: {e}")
                raise ImageUploadError(index, str(e)) from e
            self.logger.info(f"Uploaded thumbnail {index + 1}: {video.thumbnail_url}")

        return self.config_store.create(config)

    def _check_table_name_available(self, config: TestConfig) -> None:
        """Reject a test whose results table is used by a live test or already exists."""
        table_name = resolve_table_name(config.test_id, config.test_type, config.test_name)
        for summary in self.config_store.list():
            if resolve_table_name(summary.test_id, summary.test_type, summary.test_name) == table_name:
                raise DuplicateTestError(
                    f"Results table '{table_name}' is already used by test {summary.test_id}"
                )
        # Tables can outlive their config row
        if self.results_store.find_table(config.test_id, config.test_type, config.test_name) is not None:
            raise DuplicateTestError(f"Results table '{table_name}' already exists")

    def submit(self, submission: RatingSubmission | OutcomeSubmission) -> int:
        """
        Record a submission in the test's results table.

        Head-to-head submissions also rebuild the test's leaderboard from all
        raw outcomes. Returns the number of rows appended.
        """
        if not submission.test_id:
            raise InvalidTestError("Invalid submission: missing testId")

        config = self.config_store.get(submission.test_id)
        if config is None:
            raise NotFoundError(f"Test not found: {submission.test_id}")

        if isinstance(submission, RatingSubmission):
            if config.test_type != GRID:
                raise InvalidRequestError(f"Test {config.test_id} is a {config.test_type} test and takes results, not ratings")
            table = self.results_store.get_or_create_table(config.test_id, config.test_type, config.test_name)
            return self.results_store.append_rating_rows(table, submission)

        if config.test_type != HEAD_TO_HEAD:
            raise InvalidRequestError(f"Test {config.test_id} is a {config.test_type} test and takes ratings, not results")
        uncountable = sum(1 for outcome in submission.outcomes if not outcome.is_countable)
        if uncountable:
            self.logger.warning(
                f"{uncountable} of {len(submission.outcomes)} outcomes for {config.test_id} have no valid winner and will not be ranked"
            )

        table = self.results_store.get_or_create_table(config.test_id, config.test_type, config.test_name)
        appended = self.results_store.append_outcome_rows(table, submission)
        _ = self._refresh(table)
        return appended

    def _refresh(self, table: ResultsTable) -> list[LeaderboardEntry]:
        """Recompute a leaderboard from the raw outcomes and store the snapshot."""
        entries = self.ranker.rank(self.results_store.read_raw_outcomes(table))
        _ = self.results_store.write_summary(table, entries)
        return entries

    def list_tests(self) -> list[TestSummary]:
        return self.config_store.list()

    def get_test(self, test_id: str) -> TestConfig:
        if not test_id:
            raise InvalidTestError("Missing test ID parameter")
        config = self.config_store.get(test_id)
        if config is None:
            raise NotFoundError("Test not found")
        return config

    def get_leaderboard(self, test_id: str) -> dict[str, Any]:
        """
        Aggregated results of a test.

        Head-to-head tests get the full (untruncated) ranking recomputed from
        raw outcomes; grid tests get per-video rating summaries.
        """
        config = self.get_test(test_id)
        table = self.results_store.find_table(config.test_id, config.test_type, config.test_name)

        if config.test_type == HEAD_TO_HEAD:
            outcomes = self.results_store.read_raw_outcomes(table) if table else []
            entries = self.ranker.rank(outcomes)
            return {
                "testId": config.test_id,
                "testType": config.test_type,
                "entries": [entry.to_dict() for entry in entries],
            }

        records = self.results_store.read_rating_records(table) if table else []
        return {
            "testId": config.test_id,
            "testType": config.test_type,
            "ratings": [summary.to_dict() for summary in summarize_ratings(records)],
        }

    def delete_test(self, test_id: str) -> dict[str, bool]:
        """
        Delete a test's config row, results table and blob folder.

        Each step is attempted independently; a step that fails (or finds
        nothing to delete) is reported as False without failing the others.
        """
        if not test_id:
            raise InvalidTestError("Missing test ID for deletion")

        # The table name must be resolved before the config row disappears
        table_name = default_table_name(test_id)
        try:
            config = self.config_store.get(test_id)
            if config is not None:
                table_name = resolve_table_name(test_id, config.test_type, config.test_name)
        except Exception as e:
            self.logger.warning(f"Could not read config of {test_id} before deletion: {e}")

        steps: dict[str, Callable[[], bool]] = {
            "config": lambda: self.config_store.delete(test_id),
            "results": lambda: self.results_store.delete_table(table_name),
            "images": lambda: self.blob_store.trash_folder(default_table_name(test_id)),
        }
        deleted = dict[str, bool]()
        for step, action in steps.items():
            try:
                deleted[step] = action()
            except Exception as e:
                self.logger.warning(f"Failed to delete {step} of test {test_id}: {e}")
                deleted[step] = False

        self.logger.info(f"Deleted test {test_id}: {deleted}")
        return deleted

    def resync_all(self) -> list[ResyncReport]:
        """
        Rebuild the stored leaderboard of every head-to-head test.

        Safe to run any number of times and alongside live submissions.
        Tests without a results table yet are reported with zero entries.
        """
        reports = list[ResyncReport]()
        for summary in self.config_store.list():
            if summary.test_type != HEAD_TO_HEAD:
                continue

            report = ResyncReport(
                test_id=summary.test_id,
                table_name=resolve_table_name(summary.test_id, summary.test_type, summary.test_name),
            )
            try:
                table = self.results_store.find_table(summary.test_id, summary.test_type, summary.test_name)
                if table is not None:
                    report.entries = len(self._refresh(table))
            except Exception as e:
                self.logger.error(f"Resync failed for {summary.test_id}: {e}")
                report.error = str(e)
            reports.append(report)

        self.logger.info(f"Resynced {len(reports)} head-to-head leaderboards")
        return reports
