"""
Inbound request decoding.

Requests arrive as loosely-shaped JSON objects: some carry an explicit
``action``, submissions are recognized only by whether they carry a
``ratings`` or a ``results`` list. ``parse_request`` and ``parse_query``
settle the shape once, up front, into one of the request dataclasses so
handlers never sniff fields themselves.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from typing_extensions import NotRequired, TypedDict

from .exceptions import InvalidRequestError, InvalidTestError
from .models import (
    GRID,
    HEAD_TO_HEAD,
    OutcomeSubmission,
    PairwiseOutcome,
    RatingRecord,
    RatingSubmission,
    Respondent,
    TestType,
    format_timestamp,
    utc_now,
)

CREATE_ACTIONS: dict[str, TestType] = {
    "createTest": GRID,
    "createHeadToHeadTest": HEAD_TO_HEAD,
}
DELETE_ACTION = "deleteTest"
LIST_ACTION = "listTests"
GET_ACTION = "getTest"
LEADERBOARD_ACTION = "getLeaderboard"


class VideoPayload(TypedDict):
    title: NotRequired[str | None]
    thumbnail: str


class CreateTestPayload(TypedDict):
    testId: NotRequired[str | None]
    testName: NotRequired[str | None]
    videos: NotRequired[list[VideoPayload] | None]
    matchupsPerThumbnail: NotRequired[int | None]


class RatingPayload(TypedDict):
    video: NotRequired[str | None]
    rating: NotRequired[str | None]


class OutcomePayload(TypedDict):
    matchupNumber: NotRequired[int | str | None]
    thumbnailA: NotRequired[str | None]
    thumbnailB: NotRequired[str | None]
    winner: NotRequired[str | None]


class SubmissionFields(TypedDict):
    testId: NotRequired[str | None]
    timestamp: NotRequired[str | None]
    name: NotRequired[str | None]
    email: NotRequired[str | None]
    ageGroup: NotRequired[str | None]
    gender: NotRequired[str | None]


class RatingSubmissionPayload(SubmissionFields):
    ratings: list[RatingPayload]


class OutcomeSubmissionPayload(SubmissionFields):
    results: list[OutcomePayload]


_create_adapter = TypeAdapter(CreateTestPayload)
_ratings_adapter = TypeAdapter(RatingSubmissionPayload)
_outcomes_adapter = TypeAdapter(OutcomeSubmissionPayload)


@dataclass
class VideoUpload:
    """A video as submitted for creation, thumbnail still inline."""

    title: str
    data_url: str


@dataclass
class CreateTest:
    test_id: str
    test_type: TestType
    videos: list[VideoUpload] = field(default_factory=list)
    test_name: str = ""
    matchups_per_thumbnail: int | None = None


@dataclass
class DeleteTest:
    test_id: str


@dataclass
class ListTests:
    pass


@dataclass
class GetTest:
    test_id: str


@dataclass
class GetLeaderboard:
    test_id: str


@dataclass
class InvalidRequest:
    reason: str


Request = Union[
    CreateTest,
    DeleteTest,
    RatingSubmission,
    OutcomeSubmission,
    ListTests,
    GetTest,
    GetLeaderboard,
    InvalidRequest,
]


def _describe(error: PydanticValidationError) -> str:
    """One-line summary of the first validation problem."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "request"
    return f"{location}: {first['msg']}"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _matchup_number(value: Any) -> int | str:
    return value if isinstance(value, int) else _text(value)


def _respondent(data: Mapping[str, Any]) -> Respondent:
    return Respondent(
        name=_text(data.get("name")),
        email=_text(data.get("email")),
        age_group=_text(data.get("ageGroup")),
        gender=_text(data.get("gender")),
    )


def _parse_create(payload: Mapping[str, Any], test_type: TestType) -> CreateTest:
    try:
        data = _create_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise InvalidTestError(f"Invalid test data: {_describe(e)}") from e

    return CreateTest(
        test_id=_text(data.get("testId")),
        test_type=test_type,
        videos=[
            VideoUpload(title=_text(video.get("title")), data_url=video["thumbnail"])
            for video in data.get("videos") or []
        ],
        test_name=_text(data.get("testName")),
        matchups_per_thumbnail=data.get("matchupsPerThumbnail"),
    )


def _parse_ratings(payload: Mapping[str, Any], submitted_at: str) -> RatingSubmission:
    try:
        data = _ratings_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise InvalidRequestError(f"Invalid rating submission: {_describe(e)}") from e

    test_id = _text(data.get("testId"))
    submitted_at = data.get("timestamp") or submitted_at
    respondent = _respondent(data)
    return RatingSubmission(
        test_id=test_id,
        submitted_at=submitted_at,
        respondent=respondent,
        records=[
            RatingRecord(
                test_id=test_id,
                submitted_at=submitted_at,
                respondent=respondent,
                video_title=_text(rating.get("video")),
                rating_label=_text(rating.get("rating")),
            )
            for rating in data["ratings"]
        ],
    )


def _parse_outcomes(payload: Mapping[str, Any], submitted_at: str) -> OutcomeSubmission:
    try:
        data = _outcomes_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise InvalidRequestError(f"Invalid outcome submission: {_describe(e)}") from e

    test_id = _text(data.get("testId"))
    submitted_at = data.get("timestamp") or submitted_at
    respondent = _respondent(data)
    return OutcomeSubmission(
        test_id=test_id,
        submitted_at=submitted_at,
        respondent=respondent,
        outcomes=[
            PairwiseOutcome(
                test_id=test_id,
                submitted_at=submitted_at,
                respondent=respondent,
                matchup_number=_matchup_number(result.get("matchupNumber")),
                thumbnail_a=_text(result.get("thumbnailA")),
                thumbnail_b=_text(result.get("thumbnailB")),
                winner=_text(result.get("winner")),
            )
            for result in data["results"]
        ],
    )


def parse_request(payload: Any, clock: Callable[[], datetime] = utc_now) -> Request:
    """
    Decode a request body into a request dataclass.

    Unrecognized or ambiguous shapes become ``InvalidRequest``; payloads
    whose shape is recognized but whose fields have the wrong types raise
    ``InvalidTestError`` (creation) or ``InvalidRequestError``.
    """
    if not isinstance(payload, Mapping):
        return InvalidRequest("Request body must be a JSON object")

    action = payload.get("action")
    if action in CREATE_ACTIONS:
        return _parse_create(payload, CREATE_ACTIONS[action])
    if action == DELETE_ACTION:
        return DeleteTest(test_id=_text(payload.get("testId")))
    if action == LIST_ACTION:
        return ListTests()
    if action == GET_ACTION:
        return GetTest(test_id=_text(payload.get("testId") or payload.get("test")))
    if action == LEADERBOARD_ACTION:
        return GetLeaderboard(test_id=_text(payload.get("testId") or payload.get("test")))
    if action is not None:
        return InvalidRequest(f"Unknown action: {action}")

    has_ratings = "ratings" in payload
    has_results = "results" in payload
    if has_ratings and has_results:
        return InvalidRequest("Ambiguous submission: carries both ratings and results")

    submitted_at = format_timestamp(clock())
    if has_ratings:
        return _parse_ratings(payload, submitted_at)
    if has_results:
        return _parse_outcomes(payload, submitted_at)
    return InvalidRequest("Invalid request format")


def parse_query(params: Mapping[str, Any]) -> Request:
    """
    Decode read-only query parameters (``?action=listTests`` or ``?test=<id>``).
    """
    action = params.get("action")
    test_id = _text(params.get("test") or params.get("testId"))

    if action == LIST_ACTION:
        return ListTests()
    if action == LEADERBOARD_ACTION:
        return GetLeaderboard(test_id=test_id)
    if action in (None, "", GET_ACTION):
        return GetTest(test_id=test_id)
    return InvalidRequest(f"Unknown action: {action}")
