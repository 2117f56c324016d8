"""HTTP client for the chapters read API.

All network I/O for chapter and category reads goes through a single
ChapterReader shared by the session. The reader receives an httpx.AsyncClient
via constructor injection. The session owns the client lifecycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from levelup import __version__
from levelup.errors import ErrorCode, LevelUpError
from levelup.models.content import Category, Chapter

if TYPE_CHECKING:
    from levelup.config import Settings

log = structlog.get_logger()

_CHAPTERS = TypeAdapter(list[Chapter])
_CATEGORIES = TypeAdapter(list[Category])


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once per session."""
    return httpx.AsyncClient(
        base_url=settings.api.base_url,
        timeout=httpx.Timeout(settings.api.timeout_seconds),
        headers={"User-Agent": f"levelup/{__version__}"},
    )


class ChapterReader:
    """Reads the chapter list and category list from the read API.

    The API has no single-chapter endpoint. Both lists come from the same
    resource, and ``?categories=true`` selects the category list.
    """

    def __init__(self, client: httpx.AsyncClient, *, chapters_path: str = "/api/chapters") -> None:
        self._client = client
        self._chapters_path = chapters_path

    async def fetch_chapters(self) -> list[Chapter]:
        payload = await self._get_json(self._chapters_path)
        return self._validate(_CHAPTERS, payload.get("chapters") or [], "chapters")

    async def fetch_categories(self) -> list[Category]:
        payload = await self._get_json(self._chapters_path, params={"categories": "true"})
        return self._validate(_CATEGORIES, payload.get("categories") or [], "categories")

    async def _get_json(
        self, path: str, params: dict[str, str] | None = None
    ) -> dict[str, Any]:
        """GET ``path`` and decode a JSON object body.

        Raises LevelUpError on network errors, non-2xx responses and bodies
        that are not a JSON object.
        """
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise LevelUpError(
                code=ErrorCode.FETCH_FAILED,
                message=f"Network error fetching {path}: {exc}",
                recoverable=True,
            ) from exc

        if not response.is_success:
            # Error bodies are never parsed
            raise LevelUpError(
                code=ErrorCode.FETCH_FAILED,
                message=f"HTTP {response.status_code} fetching {path}",
                recoverable=response.status_code >= 500,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise LevelUpError(
                code=ErrorCode.INVALID_RESPONSE,
                message=f"Invalid JSON from {path}",
                recoverable=False,
            ) from exc

        if not isinstance(payload, dict):
            raise LevelUpError(
                code=ErrorCode.INVALID_RESPONSE,
                message=f"Expected a JSON object from {path}",
                recoverable=False,
            )

        log.debug("read_complete", path=path, status_code=response.status_code)
        return payload

    @staticmethod
    def _validate(adapter: TypeAdapter, items: Any, key: str) -> list:
        try:
            return adapter.validate_python(items)
        except ValidationError as exc:
            raise LevelUpError(
                code=ErrorCode.INVALID_RESPONSE,
                message=f"Malformed '{key}' payload: {exc.error_count()} validation error(s)",
                recoverable=False,
            ) from exc
