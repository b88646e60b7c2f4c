"""
Core dataclasses for the thumbnail tester.

Defines tests, their videos, viewer submissions and the derived
leaderboard rows, with validation where a bad value would corrupt a store.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from .exceptions import InvalidTestError

TestType = Literal["grid", "head-to-head"]

GRID: TestType = "grid"
HEAD_TO_HEAD: TestType = "head-to-head"
TEST_TYPES: tuple[TestType, ...] = (GRID, HEAD_TO_HEAD)

# Grid rating labels in ascending order of preference
RATING_SCORES: dict[str, int] = {
    "hate": 1,
    "no": 2,
    "meh": 3,
    "interesting": 4,
    "love": 5,
}


def rating_to_score(label: str) -> int:
    """Convert a rating label to its 1-5 score (0 for unknown labels)."""
    return RATING_SCORES.get(label, 0)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render a datetime the way stores and responses carry it."""
    return moment.isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Video:
    """A candidate thumbnail and the title it is shown with."""

    title: str
    thumbnail_url: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "thumbnail": self.thumbnail_url}


@dataclass
class TestConfig:
    """A published thumbnail test."""

    test_id: str
    test_type: TestType
    videos: list[Video]
    test_name: str = ""
    matchups_per_thumbnail: int | None = None
    created_at: str = ""

    __test__ = False  # not a pytest test class

    def __post_init__(self) -> None:
        """Validate test data."""
        if not self.test_id:
            raise InvalidTestError("Invalid test data: missing testId")
        if not self.videos:
            raise InvalidTestError("Invalid test data: missing videos")
        if self.test_type not in TEST_TYPES:
            raise InvalidTestError(f"Unknown test type: {self.test_type}")
        if self.test_type != HEAD_TO_HEAD:
            self.matchups_per_thumbnail = None
        elif self.matchups_per_thumbnail is not None and self.matchups_per_thumbnail < 1:
            raise InvalidTestError(
                f"matchupsPerThumbnail must be positive, got {self.matchups_per_thumbnail}"
            )

    @property
    def display_name(self) -> str:
        """Name shown to people; the id when no name was given."""
        return self.test_name or self.test_id

    def to_document(self) -> dict[str, Any]:
        """Serializable config document (everything except id and creation time)."""
        return {
            "testName": self.test_name,
            "testType": self.test_type,
            "videos": [video.to_dict() for video in self.videos],
            "matchupsPerThumbnail": self.matchups_per_thumbnail,
        }

    def to_summary(self) -> "TestSummary":
        return TestSummary(
            test_id=self.test_id,
            test_name=self.test_name,
            created_at=self.created_at,
            video_count=len(self.videos),
            test_type=self.test_type,
            matchups_per_thumbnail=self.matchups_per_thumbnail,
        )


@dataclass
class TestSummary:
    """One line of the test listing."""

    test_id: str
    test_name: str  # as stored, empty for unnamed tests
    created_at: str
    video_count: int
    test_type: TestType
    matchups_per_thumbnail: int | None = None

    __test__ = False  # not a pytest test class

    def to_dict(self) -> dict[str, Any]:
        return {
            "testId": self.test_id,
            "testName": self.test_name or self.test_id,
            "createdAt": self.created_at,
            "videoCount": self.video_count,
            "testType": self.test_type,
            "matchupsPerThumbnail": self.matchups_per_thumbnail,
        }


@dataclass
class Respondent:
    """Optional, self-reported viewer details attached to a submission."""

    name: str = ""
    email: str = ""
    age_group: str = ""
    gender: str = ""


@dataclass
class RatingRecord:
    """A single grid rating by one respondent."""

    test_id: str
    submitted_at: str
    respondent: Respondent
    video_title: str
    rating_label: str

    @property
    def rating_score(self) -> int:
        return rating_to_score(self.rating_label)


@dataclass
class PairwiseOutcome:
    """A single head-to-head matchup judged by one respondent."""

    test_id: str
    submitted_at: str
    respondent: Respondent = field(default_factory=Respondent)
    matchup_number: int | str = ""
    thumbnail_a: str = ""
    thumbnail_b: str = ""
    winner: str = ""

    @property
    def is_countable(self) -> bool:
        """True when the outcome names both sides and the winner is one of them."""
        if not self.thumbnail_a or not self.thumbnail_b:
            return False
        return self.winner in (self.thumbnail_a, self.thumbnail_b)


@dataclass
class LeaderboardEntry:
    """Win/loss record of one thumbnail, derived from pairwise outcomes."""

    thumbnail_url: str
    wins: int = 0
    losses: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        """Percentage of matchups won (0 when never judged)."""
        if self.total == 0:
            return 0.0
        return self.wins / self.total * 100.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "thumbnailUrl": self.thumbnail_url,
            "wins": self.wins,
            "losses": self.losses,
            "total": self.total,
            "winRate": round(self.win_rate, 1),
        }


@dataclass
class RatingSummary:
    """Aggregated grid ratings for one video title."""

    video_title: str
    responses: int = 0
    score_total: int = 0
    scored_responses: int = 0
    label_counts: dict[str, int] = field(default_factory=dict)

    @property
    def average_score(self) -> float:
        if self.scored_responses == 0:
            return 0.0
        return self.score_total / self.scored_responses

    def to_dict(self) -> dict[str, Any]:
        return {
            "videoTitle": self.video_title,
            "responses": self.responses,
            "averageScore": round(self.average_score, 2),
            "labelCounts": dict(self.label_counts),
        }


@dataclass
class RatingSubmission:
    """One respondent's grid ratings for a test (possibly none)."""

    test_id: str
    submitted_at: str
    respondent: Respondent
    records: list[RatingRecord] = field(default_factory=list)


@dataclass
class OutcomeSubmission:
    """One respondent's judged head-to-head matchups for a test (possibly none)."""

    test_id: str
    submitted_at: str
    respondent: Respondent
    outcomes: list[PairwiseOutcome] = field(default_factory=list)
