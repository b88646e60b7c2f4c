"""
Matchup planning for head-to-head tests.

Builds the list of thumbnail pairs a client presents to a respondent.
Thumbnails with the fewest appearances so far are paired first, so coverage
stays even before any thumbnail is shown many more times than others.
"""

import itertools
from collections.abc import Sequence

import numpy as np

from .logging_config import get_logger

# Module-level logger
logger = get_logger("matchups")

Matchup = tuple[str, str]


def _pick_least_shown(counts: dict[str, int], pool: Sequence[str], rng: np.random.Generator) -> str:
    """Random choice among the pool members shown the fewest times."""
    lowest = min(counts[url] for url in pool)
    bucket = [url for url in pool if counts[url] == lowest]
    return bucket[int(rng.integers(len(bucket)))]


def _oriented(a: str, b: str, rng: np.random.Generator) -> Matchup:
    """Randomize which side each thumbnail is shown on."""
    return (a, b) if rng.random() < 0.5 else (b, a)


def plan_matchups(
    thumbnail_urls: Sequence[str],
    matchups_per_thumbnail: int | None = None,
    seed: int | None = None,
) -> list[Matchup]:
    """
    Plan head-to-head matchups.

    Args:
        thumbnail_urls: Thumbnails of the test (duplicates and blanks ignored)
        matchups_per_thumbnail: Minimum appearances per thumbnail; None plans
            every pair exactly once (round robin)
        seed: Seed for reproducible plans

    Returns:
        List of (thumbnail A, thumbnail B) pairs
    """
    urls = list(dict.fromkeys(url for url in thumbnail_urls if url))
    if len(urls) < 2:
        logger.warning("Insufficient thumbnails for matchups")
        return []

    rng = np.random.default_rng(seed)

    if matchups_per_thumbnail is None:
        pairs = list(itertools.combinations(urls, 2))
        return [_oriented(*pairs[i], rng) for i in rng.permutation(len(pairs))]

    if matchups_per_thumbnail < 1:
        raise ValueError(f"matchups_per_thumbnail must be positive, got {matchups_per_thumbnail}")

    counts = {url: 0 for url in urls}
    used = set[frozenset[str]]()
    plan = list[Matchup]()

    while min(counts.values()) < matchups_per_thumbnail:
        first = _pick_least_shown(counts, urls, rng)
        opponents = [url for url in urls if url != first]
        fresh = [url for url in opponents if frozenset((first, url)) not in used]
        second = _pick_least_shown(counts, fresh or opponents, rng)

        plan.append(_oriented(first, second, rng))
        used.add(frozenset((first, second)))
        counts[first] += 1
        counts[second] += 1

    logger.debug(f"Planned {len(plan)} matchups for {len(urls)} thumbnails")
    return plan
