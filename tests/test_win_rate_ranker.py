"""
Tests for WinRateRanker / aggregate.

Focus on win/loss counting, ordering and tie-breaking.
"""

import pytest

from thumbnail_tester.models import PairwiseOutcome
from thumbnail_tester.rankers.win_rate_ranker import WinRateRanker, aggregate


def outcome(a: str, b: str, winner: str) -> PairwiseOutcome:
    return PairwiseOutcome(
        test_id="h2h-test",
        submitted_at="2026-01-01T00:00:00Z",
        thumbnail_a=a,
        thumbnail_b=b,
        winner=winner,
    )


class TestWinRateRanker:
    """Test WinRateRanker behavior through public interface."""

    def test_empty_outcomes_give_empty_leaderboard(self) -> None:
        """No outcomes means no entries."""
        assert aggregate([]) == []

    def test_two_to_one_scenario(self) -> None:
        """A beats B twice and loses once: A 2-1 (66.7%), B 1-2 (33.3%)."""
        # Arrange
        outcomes = [outcome("A", "B", "A"), outcome("A", "B", "A"), outcome("A", "B", "B")]

        # Act
        entries = aggregate(outcomes)

        # Assert
        assert [entry.thumbnail_url for entry in entries] == ["A", "B"]
        a, b = entries
        assert (a.wins, a.losses, a.total) == (2, 1, 3)
        assert (b.wins, b.losses, b.total) == (1, 2, 3)
        assert a.win_rate == pytest.approx(66.7, abs=0.05)
        assert b.win_rate == pytest.approx(33.3, abs=0.05)
        assert a.to_dict()["winRate"] == 66.7

    def test_sorted_descending_by_win_rate(self) -> None:
        """Higher win rate ranks first regardless of discovery order."""
        # Arrange
        outcomes = [
            outcome("low", "high", "high"),
            outcome("mid", "high", "high"),
            outcome("low", "mid", "mid"),
        ]

        # Act
        entries = aggregate(outcomes)

        # Assert
        assert [entry.thumbnail_url for entry in entries] == ["high", "mid", "low"]
        rates = [entry.win_rate for entry in entries]
        assert rates == sorted(rates, reverse=True)

    def test_ties_keep_first_seen_order(self) -> None:
        """Equal win rates stay in the order thumbnails first appeared."""
        # Arrange - every thumbnail ends at 50%
        outcomes = [
            outcome("C", "A", "C"),
            outcome("A", "B", "A"),
            outcome("B", "C", "B"),
        ]

        # Act
        entries = aggregate(outcomes)

        # Assert
        assert [entry.thumbnail_url for entry in entries] == ["C", "A", "B"]

    def test_invalid_winner_is_ignored_but_thumbnails_listed(self) -> None:
        """A winner matching neither side counts for nobody."""
        # Arrange
        outcomes = [outcome("A", "B", "A"), outcome("C", "D", "nobody")]

        # Act
        entries = {entry.thumbnail_url: entry for entry in aggregate(outcomes)}

        # Assert
        assert set(entries) == {"A", "B", "C", "D"}
        assert (entries["C"].wins, entries["C"].losses) == (0, 0)
        assert (entries["D"].wins, entries["D"].losses) == (0, 0)
        assert entries["C"].win_rate == 0.0
        assert entries["A"].wins == 1
        assert entries["B"].losses == 1

    def test_outcomes_missing_a_side_are_skipped(self) -> None:
        """Outcomes without both thumbnails never create entries."""
        # Arrange
        outcomes = [outcome("", "B", "B"), outcome("A", "", "A")]

        # Act
        entries = aggregate(outcomes)

        # Assert
        assert entries == []

    def test_wins_equal_losses(self) -> None:
        """Every counted outcome adds exactly one win and one loss."""
        # Arrange
        outcomes = [
            outcome("A", "B", "A"),
            outcome("B", "C", "C"),
            outcome("C", "A", "A"),
            outcome("D", "A", "D"),
            outcome("B", "D", "broken"),
        ]

        # Act
        entries = aggregate(outcomes)

        # Assert
        assert sum(entry.wins for entry in entries) == sum(entry.losses for entry in entries) == 4

    def test_repeated_runs_are_identical(self) -> None:
        """Ranking the same outcomes twice yields the same ordered result."""
        # Arrange
        outcomes = [
            outcome("A", "B", "B"),
            outcome("C", "B", "C"),
            outcome("A", "C", "A"),
            outcome("D", "A", "A"),
        ]
        ranker = WinRateRanker()

        # Act
        first = ranker.rank(outcomes)
        second = ranker.rank(outcomes)

        # Assert
        assert first == second
        assert [e.thumbnail_url for e in first] == [e.thumbnail_url for e in aggregate(outcomes)]

    def test_accepts_generators(self) -> None:
        """Outcomes may be any iterable."""
        entries = aggregate(outcome("A", "B", "B") for _ in range(3))

        assert [(e.thumbnail_url, e.wins, e.losses) for e in entries] == [("B", 3, 0), ("A", 0, 3)]
