"""
Win-rate ranker implementation.

Counts wins and losses per thumbnail from raw pairwise outcomes and ranks
by win rate. The leaderboard is always recomputed from scratch, so replaying
the same outcomes any number of times yields the same result.
"""

from collections.abc import Iterable

from typing_extensions import override

from ..interfaces import Ranker
from ..logging_config import get_logger
from ..models import LeaderboardEntry, PairwiseOutcome

logger = get_logger("win_rate_ranker")


class WinRateRanker(Ranker):
    """
    Ranks thumbnails by the percentage of head-to-head matchups they won.

    Ties keep the order in which thumbnails were first seen in the outcomes.
    """

    @override
    def rank(self, outcomes: Iterable[PairwiseOutcome]) -> list[LeaderboardEntry]:
        entries = dict[str, LeaderboardEntry]()
        skipped = 0

        for outcome in outcomes:
            a, b = outcome.thumbnail_a, outcome.thumbnail_b
            if not a or not b:
                skipped += 1
                continue

            # Both sides enter the leaderboard even if the winner is bogus
            if a not in entries:
                entries[a] = LeaderboardEntry(thumbnail_url=a)
            if b not in entries:
                entries[b] = LeaderboardEntry(thumbnail_url=b)

            if outcome.winner == a:
                entries[a].wins += 1
                entries[b].losses += 1
            elif outcome.winner == b:
                entries[b].wins += 1
                entries[a].losses += 1
            else:
                skipped += 1

        if skipped:
            logger.debug(f"Ignored {skipped} outcomes without a valid matchup or winner")

        # sorted() is stable: equal win rates stay in first-seen order
        return sorted(entries.values(), key=lambda entry: entry.win_rate, reverse=True)


def aggregate(outcomes: Iterable[PairwiseOutcome]) -> list[LeaderboardEntry]:
    """Rank thumbnails by win rate (see WinRateRanker)."""
    return WinRateRanker().rank(outcomes)
