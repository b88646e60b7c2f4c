"""
Ranker implementations.

Provides implementations of the Ranker interface for building leaderboards
from head-to-head outcomes, plus the grid rating summary.

Available implementations:
- WinRateRanker: Wins/losses per thumbnail ranked by win rate
"""

from .rating_summary import summarize_ratings
from .win_rate_ranker import WinRateRanker, aggregate

__all__ = ["WinRateRanker", "aggregate", "summarize_ratings"]
