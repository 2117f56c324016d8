from __future__ import annotations

from levelup.models.cache import CacheEntry, CacheState
from levelup.models.content import Category, Chapter
from levelup.models.topics import DEFAULT_TOPICS, TopicCluster

__all__ = [
    # content
    "Category",
    "Chapter",
    # cache
    "CacheEntry",
    "CacheState",
    # selector
    "TopicCluster",
    "DEFAULT_TOPICS",
]
