"""Chapter relevance selection for chat prompt context.

Pure business logic: receives a query and candidate chapters, returns the
best-scoring ones. No knowledge of the cache, HTTP, or the LLM request.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from levelup.models.topics import DEFAULT_TOPICS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from levelup.models.content import Chapter
    from levelup.models.topics import TopicCluster

log = structlog.get_logger()

TITLE_PATTERN_BONUS = 50
CONTENT_TERMS_BONUS = 30
CATEGORY_IN_QUERY_BONUS = 15

# Per query token, each field checked independently
TOKEN_IN_TITLE = 10
TOKEN_IN_PREVIEW = 5
TOKEN_IN_CONTENT = 2
TOKEN_IN_CATEGORY = 3

MIN_TOKEN_LENGTH = 4


class RelevanceSelector:
    """Ranks chapters against a free-text query.

    Topic clusters dominate the score so that a chapter about the asked-for
    topic beats one that merely shares incidental words with the query.
    """

    def __init__(
        self,
        topics: Sequence[TopicCluster] = DEFAULT_TOPICS,
        *,
        default_limit: int = 3,
    ) -> None:
        self._default_limit = default_limit
        self._topics = [
            (
                topic,
                re.compile(topic.title_pattern, re.IGNORECASE)
                if topic.title_pattern
                else None,
            )
            for topic in topics
        ]

    def select(
        self, query: str, chapters: Sequence[Chapter], limit: int | None = None
    ) -> list[Chapter]:
        """Return up to ``limit`` chapters with a nonzero score, best first.

        ``limit`` defaults to the selector's ``default_limit`` (3). Ties keep
        their input order. A chapter scoring 0 is never returned, even when
        that leaves fewer than ``limit`` results.
        """
        if limit is None:
            limit = self._default_limit
        if not chapters or limit <= 0:
            return []

        query_lower, tokens, active_topics = self._prepare(query)

        scored = [
            (self._score(chapter, query_lower, tokens, active_topics), chapter)
            for chapter in chapters
        ]
        # sorted() is stable, so equal scores keep input order
        ranked = sorted(scored, key=lambda pair: pair[0], reverse=True)
        selected = [chapter for score, chapter in ranked if score > 0][:limit]

        log.debug(
            "chapters_selected",
            candidates=len(chapters),
            selected=[ch.id for ch in selected],
            topics=len(active_topics),
        )
        return selected

    def score(self, query: str, chapter: Chapter) -> int:
        """Relevance of a single chapter to ``query``, as ranked by ``select``."""
        return self._score(chapter, *self._prepare(query))

    def _prepare(
        self, query: str
    ) -> tuple[str, list[str], list[tuple[TopicCluster, re.Pattern[str] | None]]]:
        query_lower = query.lower()
        tokens = [word for word in query_lower.split() if len(word) >= MIN_TOKEN_LENGTH]
        active_topics = [
            (topic, pattern)
            for topic, pattern in self._topics
            if any(kw in query_lower for kw in topic.keywords)
        ]
        return query_lower, tokens, active_topics

    @staticmethod
    def _score(
        chapter: Chapter,
        query_lower: str,
        tokens: list[str],
        active_topics: list[tuple[TopicCluster, re.Pattern[str] | None]],
    ) -> int:
        title = chapter.title.lower()
        content = chapter.content.lower()
        preview = chapter.preview.lower()
        category = chapter.category_name.lower()

        score = 0

        for topic, pattern in active_topics:
            if pattern is not None and pattern.search(title):
                score += TITLE_PATTERN_BONUS
            if topic.content_terms and all(term in content for term in topic.content_terms):
                score += CONTENT_TERMS_BONUS

        if category and category in query_lower:
            score += CATEGORY_IN_QUERY_BONUS

        for token in tokens:
            if token in title:
                score += TOKEN_IN_TITLE
            if token in preview:
                score += TOKEN_IN_PREVIEW
            if token in content:
                score += TOKEN_IN_CONTENT
            if token in category:
                score += TOKEN_IN_CATEGORY

        return score
