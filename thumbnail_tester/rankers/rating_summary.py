"""
Per-video aggregation of grid ratings.
"""

from collections.abc import Iterable

from ..models import RatingRecord, RatingSummary


def summarize_ratings(records: Iterable[RatingRecord]) -> list[RatingSummary]:
    """
    Summarize grid ratings per video title, in first-seen order.

    Labels without a score (unknown or missing labels) are counted
    in ``label_counts`` but do not affect the average score.
    """
    summaries = dict[str, RatingSummary]()
    for record in records:
        summary = summaries.get(record.video_title)
        if summary is None:
            summary = summaries[record.video_title] = RatingSummary(video_title=record.video_title)

        summary.responses += 1
        label = record.rating_label
        summary.label_counts[label] = summary.label_counts.get(label, 0) + 1

        score = record.rating_score
        if score > 0:
            summary.score_total += score
            summary.scored_responses += 1

    return list(summaries.values())
