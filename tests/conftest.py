"""Shared test fixtures for the levelup test suite."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from levelup.cache import ResourceCache
from levelup.models.content import Category, Chapter


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeReader:
    """In-memory ReaderProtocol implementation that counts calls.

    ``gate`` lets a test hold reads open to observe in-flight state.
    ``fail_chapters`` / ``fail_categories`` hold the exception to raise.
    """

    def __init__(self, chapters: list[Chapter], categories: list[Category]) -> None:
        self.chapters = chapters
        self.categories = categories
        self.chapter_calls = 0
        self.category_calls = 0
        self.fail_chapters: Exception | None = None
        self.fail_categories: Exception | None = None
        self.gate: asyncio.Event | None = None

    @property
    def calls(self) -> int:
        return self.chapter_calls + self.category_calls

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)

    async def fetch_chapters(self) -> list[Chapter]:
        self.chapter_calls += 1
        await self._wait()
        if self.fail_chapters is not None:
            raise self.fail_chapters
        return list(self.chapters)

    async def fetch_categories(self) -> list[Category]:
        self.category_calls += 1
        await self._wait()
        if self.fail_categories is not None:
            raise self.fail_categories
        return list(self.categories)


@pytest.fixture()
def sample_categories() -> list[Category]:
    return [
        Category(id="cat1", name="Leadership", description="Leading people", sort_order=1),
        Category(id="cat2", name="Execution", description="Getting things done", sort_order=2),
    ]


@pytest.fixture()
def sample_chapters(sample_categories: list[Category]) -> list[Chapter]:
    leadership, execution = sample_categories
    return [
        Chapter(
            id="ch1",
            category_id="cat1",
            title="Delegation Basics",
            content="Don't let the monkey jump back onto your shoulder.",
            preview="Hand off work without losing control.",
            sort_order=1,
            category=leadership,
        ),
        Chapter(
            id="ch2",
            category_id="cat2",
            title="Meeting Hygiene",
            content="Agendas, owners and decisions.",
            preview="Run meetings people want to attend.",
            sort_order=2,
            category=execution,
        ),
        Chapter(
            id="ch3",
            category_id="cat1",
            title="Feedback That Lands",
            content="Use the four-step model and the camera test. SBI keeps it factual.",
            preview="Give feedback people can act on.",
            sort_order=3,
            content_type="book_summary",
            category=leadership,
        ),
    ]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def reader(sample_chapters: list[Chapter], sample_categories: list[Category]) -> FakeReader:
    return FakeReader(sample_chapters, sample_categories)


@pytest.fixture()
def cache(reader: FakeReader, clock: FakeClock) -> ResourceCache:
    return ResourceCache(reader, ttl=timedelta(minutes=5), clock=clock)
