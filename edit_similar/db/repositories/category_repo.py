"""
Category Store backed by the ``categorylinks`` table.

``CategoryRepository`` implements the ``CategoryStore`` protocol used by the
recommendation engine (see ``edit_similar.suggest.engine``). All lookups are
read-only and safe to run against a replica.

Failures are never reported as "no results": any ``sqlite3.Error`` raised by
a lookup, and any row that does not carry an integer page ID or a text
category name, surfaces as ``CategoryStoreError`` so callers can tell an
outage apart from an empty category.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Collection, Iterable, Iterator
from contextlib import contextmanager

from edit_similar.db.repositories.base import BaseRepository, placeholders

logger = logging.getLogger(__name__)


class CategoryStoreError(RuntimeError):
    """Raised when the category store is unreachable or returns malformed data.

    Attributes:
        operation: Name of the lookup that failed.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        super().__init__(f"Category store lookup '{operation}' failed: {detail}")


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise CategoryStoreError(operation, str(exc)) from exc


class CategoryRepository(BaseRepository):
    """Read/write access to the ``categorylinks`` table."""

    # ── CategoryStore protocol ────────────────────────────────────────────────

    def categories_of(self, page_id: int) -> set[str]:
        """Return every category attached to ``page_id``."""
        with _store_errors("categories_of"):
            rows = self.fetchall(
                "SELECT cl_to FROM categorylinks WHERE cl_from = ?;", (page_id,)
            )
        return {_category_name(row, "categories_of") for row in rows}

    def items_with_category(self, category: str) -> set[int]:
        """Return the IDs of all pages tagged with ``category``."""
        with _store_errors("items_with_category"):
            rows = self.fetchall(
                "SELECT cl_from FROM categorylinks WHERE cl_to = ?;", (category,)
            )
        return {_page_id(row, "items_with_category") for row in rows}

    def items_with_category_and_any_of(
        self,
        category: str,
        categories: Collection[str],
    ) -> set[int]:
        """Return pages tagged with ``category`` and at least one of ``categories``.

        A self-join of ``categorylinks`` on the page ID. An empty
        ``categories`` collection matches nothing and issues no query.
        """
        if not categories:
            return set()
        names = sorted(categories)
        with _store_errors("items_with_category_and_any_of"):
            rows = self.fetchall(
                f"""
                SELECT DISTINCT c1.cl_from
                FROM categorylinks AS c1
                JOIN categorylinks AS c2 ON c1.cl_from = c2.cl_from
                WHERE c1.cl_to = ?
                  AND c2.cl_to IN ({placeholders(names)});
                """,
                (category, *names),
            )
        return {_page_id(row, "items_with_category_and_any_of") for row in rows}

    def items_with_any_of_categories(self, categories: Collection[str]) -> set[int]:
        """Return pages tagged with at least one of ``categories``."""
        if not categories:
            return set()
        names = sorted(categories)
        with _store_errors("items_with_any_of_categories"):
            rows = self.fetchall(
                f"""
                SELECT DISTINCT cl_from FROM categorylinks
                WHERE cl_to IN ({placeholders(names)});
                """,
                tuple(names),
            )
        return {_page_id(row, "items_with_any_of_categories") for row in rows}

    # ── Writes (import side) ──────────────────────────────────────────────────

    def replace_categories(self, page_id: int, categories: Iterable[str]) -> int:
        """Replace the full category list of ``page_id``.

        Args:
            page_id: The page whose links are rewritten.
            categories: Normalised category names.

        Returns:
            Number of category links written.
        """
        names = list(dict.fromkeys(categories))
        self.execute("DELETE FROM categorylinks WHERE cl_from = ?;", (page_id,))
        if names:
            self.executemany(
                "INSERT INTO categorylinks (cl_from, cl_to) VALUES (?, ?);",
                [(page_id, name) for name in names],
            )
        logger.debug("Page %d now has %d categories.", page_id, len(names))
        return len(names)

    def count_links(self) -> int:
        """Return the total number of category links."""
        row = self.fetchone("SELECT COUNT(*) AS n FROM categorylinks;")
        assert row is not None
        return int(row["n"])


# ── Private helpers ────────────────────────────────────────────────────────────

def _page_id(row: sqlite3.Row, operation: str) -> int:
    value = row[0]
    if isinstance(value, bool) or not isinstance(value, int):
        raise CategoryStoreError(operation, f"malformed page id {value!r}")
    return value


def _category_name(row: sqlite3.Row, operation: str) -> str:
    value = row[0]
    if not isinstance(value, str) or not value:
        raise CategoryStoreError(operation, f"malformed category name {value!r}")
    return value
