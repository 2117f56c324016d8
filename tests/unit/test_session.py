"""Unit tests for levelup.session."""

from __future__ import annotations

from datetime import timedelta

import httpx
import respx

from levelup.cache import ResourceCache
from levelup.config import Settings
from levelup.selector import RelevanceSelector
from levelup.session import open_session

BASE_URL = "https://levelup.test"


def _settings() -> Settings:
    return Settings(
        api={"base_url": BASE_URL},
        cache={"ttl_seconds": 120},
        selector={"limit": 1},
        logging={"level": "WARNING", "format": "text"},
    )


def _api(request: httpx.Request) -> httpx.Response:
    if request.url.params.get("categories") == "true":
        return httpx.Response(200, json={"categories": [{"id": "cat1", "name": "Leadership"}]})
    return httpx.Response(
        200,
        json={
            "chapters": [
                {
                    "id": "ch1",
                    "category_id": "cat1",
                    "title": "Delegation Basics",
                    "content": "monkey back",
                },
                {"id": "ch2", "category_id": "cat1", "title": "Delegation Advanced"},
            ]
        },
    )


class TestOpenSession:
    async def test_wires_components(self) -> None:
        async with open_session(_settings()) as state:
            assert isinstance(state.cache, ResourceCache)
            assert isinstance(state.selector, RelevanceSelector)
            assert state.cache._ttl == timedelta(seconds=120)
            assert state.http_client is not None
            client = state.http_client

        assert client.is_closed

    async def test_cache_and_selector_end_to_end(self) -> None:
        with respx.mock:
            route = respx.get(f"{BASE_URL}/api/chapters").mock(side_effect=_api)
            async with open_session(_settings()) as state:
                await state.cache.fetch_list_and_categories()
                await state.cache.fetch_list_and_categories()
                chapter = await state.cache.fetch_one("ch1")
                selected = state.selector.select("how do I delegate?", state.cache.chapters)

        assert route.call_count == 2
        assert chapter is not None and chapter.title == "Delegation Basics"
        # Configured limit of 1 applies when none is passed
        assert [ch.id for ch in selected] == ["ch1"]
        assert [c.name for c in state.cache.categories] == ["Leadership"]
