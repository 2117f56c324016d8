"""Protocol interfaces for swappable components.

ResourceCache references the read API through this protocol rather than the
concrete httpx client. Tests use lightweight in-memory readers, and another
backend can be plugged in without touching the cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from levelup.models.content import Category, Chapter


class ReaderProtocol(Protocol):
    """Interface for the chapters read API."""

    async def fetch_chapters(self) -> list[Chapter]: ...

    async def fetch_categories(self) -> list[Category]: ...
