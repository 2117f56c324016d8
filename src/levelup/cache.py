"""In-memory chapter/category cache with TTL freshness and single-flight reads.

All cache operations catch read failures internally and degrade gracefully:
list fetch failures are recorded on both list entries, individual fetch
failures are recorded on the chapter's entry and ``fetch_one`` returns
``None``. Read errors never cross the ResourceCache boundary. They are logged
with ``exc_info=True`` and the UI layer reads them back through the
``*_error`` accessors.

Concurrency model: everything runs on one asyncio loop. In-flight guards are
set synchronously before the first await, so concurrent callers on the same
key never issue duplicate reads.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from levelup.errors import ErrorCode, LevelUpError
from levelup.models.cache import CacheEntry, CacheState

if TYPE_CHECKING:
    from collections.abc import Callable

    from levelup.models.content import Category, Chapter
    from levelup.protocols import ReaderProtocol

log = structlog.get_logger()

CHAPTERS_KEY = "chapters"
CATEGORIES_KEY = "categories"

DEFAULT_TTL = timedelta(minutes=5)

LIST_FETCH_ERROR = "Failed to fetch data"
CHAPTER_FETCH_ERROR = "Failed to fetch chapter"
CHAPTER_NOT_FOUND = "Chapter not found"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _find(chapters: list[Chapter], chapter_id: str) -> Chapter | None:
    return next((ch for ch in chapters if ch.id == chapter_id), None)


class ResourceCache:
    """Single source of truth for chapter and category reads in one session."""

    def __init__(
        self,
        reader: ReaderProtocol,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._reader = reader
        self._ttl = ttl
        self._clock = clock
        self._state = CacheState()
        self._list_fetch: asyncio.Task[None] | None = None
        self._chapter_fetches: dict[str, asyncio.Task[Chapter | None]] = {}

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def chapters(self) -> list[Chapter]:
        return self._state.chapters.data

    @property
    def categories(self) -> list[Category]:
        return self._state.categories.data

    @property
    def chapters_loading(self) -> bool:
        return self._state.chapters.loading

    @property
    def categories_loading(self) -> bool:
        return self._state.categories.loading

    @property
    def chapters_error(self) -> str | None:
        return self._state.chapters.error

    @property
    def categories_error(self) -> str | None:
        return self._state.categories.error

    def get_one(self, chapter_id: str) -> Chapter | None:
        """Best-effort synchronous lookup, ignoring freshness."""
        entry = self._state.individual_chapters.get(chapter_id)
        if entry is not None and entry.data is not None:
            return entry.data
        return _find(self._state.chapters.data, chapter_id)

    def get_one_loading(self, chapter_id: str) -> bool:
        entry = self._state.individual_chapters.get(chapter_id)
        return entry.loading if entry is not None else False

    def get_one_error(self, chapter_id: str) -> str | None:
        entry = self._state.individual_chapters.get(chapter_id)
        return entry.error if entry is not None else None

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch_list_and_categories(self) -> None:
        """Load the chapter and category lists unless both are fresh.

        Returns immediately while another list fetch is in flight. Both reads
        run concurrently and either both entries are stored or both record
        the same error. The read runs in its own task, so cancelling the
        caller leaves it to finish.
        """
        chapters = self._state.chapters
        categories = self._state.categories

        if self._is_fresh(chapters) and self._is_fresh(categories):
            log.debug("list_fetch_skipped", reason="fresh")
            return

        if self._list_fetch is not None:
            log.debug("list_fetch_skipped", reason="in_flight")
            return

        chapters.mark_loading()
        categories.mark_loading()
        self._list_fetch = asyncio.ensure_future(self._load_lists())

        await asyncio.shield(self._list_fetch)

    async def _load_lists(self) -> None:
        chapters = self._state.chapters
        categories = self._state.categories
        try:
            results = await asyncio.gather(
                self._reader.fetch_chapters(),
                self._reader.fetch_categories(),
                return_exceptions=True,
            )
        finally:
            self._list_fetch = None

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for exc in failures:
                log.warning("list_fetch_failed", exc_info=exc)
            chapters.mark_error(LIST_FETCH_ERROR)
            categories.mark_error(LIST_FETCH_ERROR)
            return

        chapter_list, category_list = results
        now = self._clock()
        chapters.store(chapter_list, now)
        categories.store(category_list, now)
        log.info(
            "list_fetch_complete",
            chapters=len(chapter_list),
            categories=len(category_list),
        )

    async def fetch_one(self, chapter_id: str) -> Chapter | None:
        """Return one chapter, reading the full list only when necessary.

        Concurrent calls for the same id share one in-flight read. Returns
        ``None`` on any failure, with the message recorded on the entry.
        """
        entry = self._state.individual_chapters.get(chapter_id)
        if entry is not None and self._is_fresh(entry):
            log.debug("chapter_cache_hit", chapter_id=chapter_id, source="individual")
            return entry.data

        if self._is_fresh(self._state.chapters):
            chapter = _find(self._state.chapters.data, chapter_id)
            if chapter is not None:
                log.debug("chapter_cache_hit", chapter_id=chapter_id, source="list")
                self._store_individual(chapter)
                return chapter

        task = self._chapter_fetches.get(chapter_id)
        if task is None:
            self._individual_entry(chapter_id).mark_loading()
            task = asyncio.ensure_future(self._load_chapter(chapter_id))
            self._chapter_fetches[chapter_id] = task
        else:
            log.debug("chapter_fetch_joined", chapter_id=chapter_id)

        # Shielded: a caller being cancelled does not cancel the shared read
        return await asyncio.shield(task)

    async def _load_chapter(self, chapter_id: str) -> Chapter | None:
        entry = self._individual_entry(chapter_id)
        try:
            chapters = await self._reader.fetch_chapters()
        except LevelUpError as exc:
            log.warning(
                "chapter_fetch_failed",
                chapter_id=chapter_id,
                code=exc.code,
                recoverable=exc.recoverable,
                exc_info=True,
            )
            # HTTP and network detail stays in the log, not the entry
            entry.mark_error(
                CHAPTER_FETCH_ERROR if exc.code == ErrorCode.FETCH_FAILED else exc.message
            )
            return None
        except Exception as exc:
            log.warning("chapter_fetch_failed", chapter_id=chapter_id, exc_info=True)
            entry.mark_error(str(exc) or CHAPTER_FETCH_ERROR)
            return None
        finally:
            self._chapter_fetches.pop(chapter_id, None)

        chapter = _find(chapters, chapter_id)
        if chapter is None:
            log.info("chapter_not_found", chapter_id=chapter_id, searched=len(chapters))
            entry.mark_error(CHAPTER_NOT_FOUND)
            return None

        entry.store(chapter, self._clock())
        log.info("chapter_fetch_complete", chapter_id=chapter_id)
        return chapter

    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------

    def add(self, chapter: Chapter) -> None:
        """Record a chapter created through the admin write API."""
        chapters = self._state.chapters
        chapters.data = [*chapters.data, chapter]
        chapters.fetched_at = self._clock()
        self._store_individual(chapter)

    def update(self, chapter: Chapter) -> None:
        """Replace a chapter by id. Never inserts into the list."""
        chapters = self._state.chapters
        chapters.data = [chapter if ch.id == chapter.id else ch for ch in chapters.data]
        chapters.fetched_at = self._clock()
        self._store_individual(chapter)

    def remove(self, chapter_id: str) -> None:
        chapters = self._state.chapters
        chapters.data = [ch for ch in chapters.data if ch.id != chapter_id]
        chapters.fetched_at = self._clock()
        self._state.individual_chapters.pop(chapter_id, None)

    def invalidate(self, key: str | None = None) -> None:
        """Mark entries stale without discarding their data.

        ``key`` is ``"chapters"``, ``"categories"`` or a chapter id. Omitting
        it invalidates every entry. In-flight reads are left running.
        """
        state = self._state
        if key is None:
            state.chapters.fetched_at = None
            state.categories.fetched_at = None
            for entry in state.individual_chapters.values():
                entry.fetched_at = None
        elif key == CHAPTERS_KEY:
            state.chapters.fetched_at = None
        elif key == CATEGORIES_KEY:
            state.categories.fetched_at = None
        else:
            entry = state.individual_chapters.get(key)
            if entry is not None:
                entry.fetched_at = None
        log.debug("cache_invalidated", key=key or "all")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_fresh(self, entry: CacheEntry) -> bool:
        if entry.fetched_at is None or entry.loading or entry.error is not None:
            return False
        return self._clock() - entry.fetched_at < self._ttl

    def _individual_entry(self, chapter_id: str) -> CacheEntry[Chapter | None]:
        return self._state.individual_chapters.setdefault(chapter_id, CacheEntry(data=None))

    def _store_individual(self, chapter: Chapter) -> None:
        self._individual_entry(chapter.id).store(chapter, self._clock())
