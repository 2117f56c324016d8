"""Application state container.

AppState is created once per session by ``open_session`` and passed by
reference to whatever needs the cache or the selector. There is no
module-level singleton.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from levelup.cache import ResourceCache
    from levelup.config import Settings
    from levelup.protocols import ReaderProtocol
    from levelup.selector import RelevanceSelector


@dataclass
class AppState:
    """Holds all shared runtime state for one session."""

    settings: Settings
    cache: ResourceCache
    selector: RelevanceSelector
    reader: ReaderProtocol | None = None
    http_client: httpx.AsyncClient | None = None
