"""
Thumbnail Tester - Thumbnail A/B Testing Backend

Stores candidate thumbnails, publishes them as grid-rating or head-to-head
tests, records anonymous viewer feedback and ranks thumbnails by win rate.
"""

from .config import AppConfig
from .config_store import ConfigStore
from .dispatcher import Dispatcher
from .interfaces import BlobStore, Ranker, TabularStore
from .models import LeaderboardEntry, PairwiseOutcome, TestConfig, Video
from .rankers import WinRateRanker, aggregate
from .results_store import ResultsStore

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "BlobStore",
    "ConfigStore",
    "Dispatcher",
    "LeaderboardEntry",
    "PairwiseOutcome",
    "Ranker",
    "ResultsStore",
    "TabularStore",
    "TestConfig",
    "Video",
    "WinRateRanker",
    "aggregate",
]
