"""Session entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Build the shared http client, reader, cache and selector
- Close the http client when the session ends
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

from levelup import __version__
from levelup.cache import ResourceCache
from levelup.config import Settings
from levelup.reader import ChapterReader, build_http_client
from levelup.selector import RelevanceSelector
from levelup.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from levelup.protocols import ReaderProtocol

log = structlog.get_logger()


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once per session before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def build_state(settings: Settings, reader: ReaderProtocol) -> AppState:
    """Wire the cache and selector around an existing reader."""
    return AppState(
        settings=settings,
        reader=reader,
        cache=ResourceCache(reader, ttl=timedelta(seconds=settings.cache.ttl_seconds)),
        selector=RelevanceSelector(
            settings.selector.topics, default_limit=settings.selector.limit
        ),
    )


@asynccontextmanager
async def open_session(settings: Settings | None = None) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for one session."""
    if settings is None:
        settings = Settings()
    setup_logging(settings)

    log.info(
        "session_starting",
        version=__version__,
        base_url=settings.api.base_url,
        ttl_seconds=settings.cache.ttl_seconds,
    )

    http_client = build_http_client(settings)
    reader = ChapterReader(http_client, chapters_path=settings.api.chapters_path)
    state = build_state(settings, reader)
    state.http_client = http_client

    try:
        yield state
    finally:
        await http_client.aclose()
        log.info("session_closed")
