from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from levelup.models.content import Category, Chapter

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """One cached payload plus its load bookkeeping.

    ``fetched_at`` is the time of the last successful write. ``None`` means the
    entry was never loaded or has been invalidated.
    """

    data: T
    fetched_at: datetime | None = None
    loading: bool = False
    error: str | None = None

    def mark_loading(self) -> None:
        self.loading = True
        self.error = None

    def mark_error(self, message: str) -> None:
        self.loading = False
        self.error = message

    def store(self, data: T, now: datetime) -> None:
        self.data = data
        self.fetched_at = now
        self.loading = False
        self.error = None


@dataclass
class CacheState:
    """All cached reads for one session. Starts empty and stale."""

    chapters: CacheEntry[list[Chapter]] = field(default_factory=lambda: CacheEntry(data=[]))
    categories: CacheEntry[list[Category]] = field(default_factory=lambda: CacheEntry(data=[]))

    # chapter id → entry; data stays None until the first successful load
    individual_chapters: dict[str, CacheEntry[Chapter | None]] = field(default_factory=dict)
