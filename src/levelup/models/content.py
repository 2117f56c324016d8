from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    """A named grouping of chapters with a display order."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    sort_order: int = 0


class Chapter(BaseModel):
    """Single lesson or book summary as returned by the chapters read API.

    Chapters are replaced whole on update, never patched field by field.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    category_id: str  # Not checked against the category list
    title: str
    content: str = ""  # Markdown body
    preview: str = ""
    sort_order: int = 0
    chapter_number: int = 0
    content_type: Literal["lesson", "book_summary"] = "lesson"
    reading_time: int | None = None

    podcast_title: str | None = None
    podcast_url: str | None = None
    podcast_header: str | None = None
    video_title: str | None = None
    video_url: str | None = None
    video_header: str | None = None

    try_this_week: str | None = None
    author: str | None = None
    description: str | None = None
    key_takeaways: list[str] | None = None

    audio_url: str | None = None
    audio_voice: str | None = None
    audio_generated_at: str | None = None

    # The read API joins the owning category row under "categories"
    category: Category | None = Field(default=None, alias="categories")

    @property
    def category_name(self) -> str:
        return self.category.name if self.category is not None else ""
