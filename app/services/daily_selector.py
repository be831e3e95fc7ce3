"""
Daily Top-N Selector

Bounds how many releases are persisted per calendar day: only the K most
popular titles of each release date survive an ingestion batch.
"""

from itertools import groupby
from operator import attrgetter
from typing import Dict, Iterable, List, Optional

from ..config import get_settings
from ..models.release import CatalogItem

_by_date = attrgetter("release_date")


def _rank_key(item: CatalogItem):
    return (-item.popularity, item.source_id)


def _most_popular_per_source(items: Iterable[CatalogItem]) -> List[CatalogItem]:
    # TMDB pages shift while they are walked, so one title can appear twice
    best: Dict[int, CatalogItem] = {}
    for item in items:
        current = best.get(item.source_id)
        if current is None or item.popularity > current.popularity:
            best[item.source_id] = item
    return list(best.values())


def select_top_per_day(items: Iterable[CatalogItem], k: Optional[int] = None) -> List[CatalogItem]:
    """
    Keep the `k` most popular items of every release date.

    Items sharing a source id are collapsed first, keeping the most
    popular copy. Days are emitted in ascending date order; within a day
    items are ordered by popularity descending, ties broken by source id
    ascending. A day with fewer than `k` items keeps all of them.
    """
    if k is None:
        k = get_settings().daily_top_k

    unique = _most_popular_per_source(items)
    selected: List[CatalogItem] = []
    for _, group in groupby(sorted(unique, key=_by_date), key=_by_date):
        selected.extend(sorted(group, key=_rank_key)[:k])
    return selected
