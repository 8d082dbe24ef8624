"""
Shared pytest fixtures for the edit-similar test suite.

Provides:
  - ``in_memory_db``: a fresh in-memory SQLite connection with the schema
    applied.
  - ``seeded_db``: ``in_memory_db`` populated with a small wiki (see
    ``SEED_PAGES``).
  - ``InMemoryCategoryStore``: a dict-backed ``CategoryStore`` that also
    records every call, for engine tests that do not need SQL.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Collection
from typing import Generator

import pytest

from edit_similar.db.repositories.category_repo import CategoryRepository
from edit_similar.db.repositories.page_repo import PageRepository
from edit_similar.db.schema import apply_schema
from edit_similar.models.page import Page

# page_id → (namespace, title, categories)
SEED_PAGES: dict[int, tuple[int, str, tuple[str, ...]]] = {
    1: (0, "Rivers_of_Europe", ("Geography", "Rivers")),
    2: (0, "Danube", ("Rivers", "Stubs")),
    3: (0, "Alps", ("Geography", "Mountains", "Articles_needing_cleanup")),
    4: (0, "Rhine", ("Rivers",)),
    5: (0, "Loire/Tributaries", ("Rivers", "Stubs")),
    6: (2, "Example_sandbox", ("Stubs",)),
    7: (0, "Uncategorized_page", ()),
    8: (0, "Pyrenees", ("Mountains", "Stubs")),
}


class InMemoryCategoryStore:
    """Dict-backed ``CategoryStore`` that logs each lookup in ``calls``."""

    def __init__(self, links: dict[int, Collection[str]]) -> None:
        self.links = {page_id: set(cats) for page_id, cats in links.items()}
        self.calls: list[tuple[str, object]] = []

    def categories_of(self, page_id: int) -> set[str]:
        self.calls.append(("categories_of", page_id))
        return set(self.links.get(page_id, ()))

    def items_with_category(self, category: str) -> set[int]:
        self.calls.append(("items_with_category", category))
        return {p for p, cats in self.links.items() if category in cats}

    def items_with_category_and_any_of(
        self, category: str, categories: Collection[str]
    ) -> set[int]:
        self.calls.append(("items_with_category_and_any_of", category))
        wanted = set(categories)
        return {p for p, cats in self.links.items() if category in cats and cats & wanted}

    def items_with_any_of_categories(self, categories: Collection[str]) -> set[int]:
        self.calls.append(("items_with_any_of_categories", tuple(categories)))
        wanted = set(categories)
        return {p for p, cats in self.links.items() if cats & wanted}


# ── Database fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def seeded_db(in_memory_db: sqlite3.Connection) -> sqlite3.Connection:
    """``in_memory_db`` with ``SEED_PAGES`` inserted."""
    pages = PageRepository(in_memory_db)
    categories = CategoryRepository(in_memory_db)
    for page_id, (namespace, title, cats) in SEED_PAGES.items():
        pages.upsert(Page(page_id=page_id, namespace=namespace, title=title))
        categories.replace_categories(page_id, cats)
    in_memory_db.commit()
    return in_memory_db


@pytest.fixture
def seeded_store() -> InMemoryCategoryStore:
    """An ``InMemoryCategoryStore`` holding the same links as ``seeded_db``."""
    return InMemoryCategoryStore({pid: cats for pid, (_, _, cats) in SEED_PAGES.items()})


@pytest.fixture
def make_store():
    """Factory fixture: ``make_store({page_id: categories})``."""
    return InMemoryCategoryStore


@pytest.fixture
def restore_root_logger():
    """Undo ``configure_logging()`` side effects on the root logger."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
