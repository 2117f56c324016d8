from __future__ import annotations

import re

from pydantic import BaseModel, field_validator


class TopicCluster(BaseModel):
    """Trigger keywords, title pattern and content terms for one topic.

    When any keyword occurs in a query, chapters whose title matches
    ``title_pattern`` and whose body contains every ``content_terms`` entry
    earn a topic bonus.
    """

    keywords: list[str]
    title_pattern: str | None = None  # Regex, searched in the lowercased title
    content_terms: list[str] = []

    @field_validator("keywords", "content_terms")
    @classmethod
    def lowercase_terms(cls, v: list[str]) -> list[str]:
        return [term.lower() for term in v]

    @field_validator("title_pattern")
    @classmethod
    def validate_title_pattern(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"Invalid title pattern {v!r}: {exc}") from exc
        return v


DEFAULT_TOPICS: list[TopicCluster] = [
    TopicCluster(
        keywords=["delegate", "delegation"],
        title_pattern="deleg",
        content_terms=["monkey", "back"],
    ),
    TopicCluster(
        keywords=["feedback"],
        title_pattern="feedback",
        content_terms=["four-step", "camera", "sbi"],
    ),
    TopicCluster(keywords=["author", "editor"], title_pattern="author|editor"),
    TopicCluster(
        keywords=["account"],
        title_pattern="account",
        content_terms=["blame", "axis"],
    ),
    TopicCluster(
        keywords=["meeting"],
        title_pattern="meeting",
        content_terms=["cia", "sabotage"],
    ),
    TopicCluster(
        keywords=["motivat"],
        title_pattern="motivat",
        content_terms=["play", "purpose", "potential"],
    ),
    TopicCluster(
        keywords=["growth", "mindset"],
        title_pattern="growth|mindset",
        content_terms=["know-it-all", "learn-it-all"],
    ),
    TopicCluster(
        keywords=["coach"],
        title_pattern="coach",
        content_terms=["question", "framework"],
    ),
    TopicCluster(
        keywords=["influence", "persuad"],
        title_pattern="influence",
        content_terms=["cabi", "small yes"],
    ),
    TopicCluster(
        keywords=["standard", "performance"],
        title_pattern="standard|performance",
        content_terms=["bill walsh", "excellence"],
    ),
]
