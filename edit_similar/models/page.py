"""
Page and category models.

``Page`` mirrors one row of the ``page`` table. Titles are stored in their
database form (underscores for spaces); ``display_title`` gives the form
shown to readers.

``PageRecord`` is the import-side shape: a page plus the full list of
category names it should carry.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from edit_similar.utils.names import normalize_name


class Page(BaseModel):
    """A content page.

    Attributes:
        page_id: Stable numeric page ID.
        namespace: Namespace number (0 = main/article namespace).
        title: Title in database form, without namespace prefix.
    """

    model_config = ConfigDict(frozen=True)

    page_id: int
    namespace: int = 0
    title: str

    @field_validator("page_id")
    @classmethod
    def validate_page_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"page_id must be a positive integer, got {v}.")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = normalize_name(v)
        if not v:
            raise ValueError("Page title must not be empty.")
        return v

    @property
    def display_title(self) -> str:
        return self.title.replace("_", " ")

    @property
    def is_subpage(self) -> bool:
        return "/" in self.title


class PageRecord(BaseModel):
    """A page together with the categories it belongs to."""

    model_config = ConfigDict(frozen=True)

    page: Page
    categories: tuple[str, ...] = ()

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        names = [normalize_name(c) for c in v]
        # dict.fromkeys keeps the first occurrence of each name
        return tuple(dict.fromkeys(n for n in names if n))
