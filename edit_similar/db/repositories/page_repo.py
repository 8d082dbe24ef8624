"""
Repository for pages, including the id → title resolution used to turn
sampled suggestions into something a reader can follow.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Collection, Sequence
from typing import Optional

from edit_similar.db.repositories.base import BaseRepository, placeholders
from edit_similar.models.page import Page

logger = logging.getLogger(__name__)


class PageRepository(BaseRepository):
    """Read/write access to the ``page`` table."""

    def upsert(self, page: Page) -> int:
        """Insert a page or update its namespace and title by ``page_id``.

        Returns:
            The ``page_id``.
        """
        self.execute(
            """
            INSERT INTO page (page_id, page_namespace, page_title)
            VALUES (?, ?, ?)
            ON CONFLICT(page_id) DO UPDATE SET
                page_namespace = excluded.page_namespace,
                page_title     = excluded.page_title;
            """,
            (page.page_id, page.namespace, page.title),
        )
        return page.page_id

    def get_by_id(self, page_id: int) -> Optional[Page]:
        """Fetch a page by primary key, or ``None``."""
        row = self.fetchone("SELECT * FROM page WHERE page_id = ?;", (page_id,))
        return _row_to_page(row) if row else None

    def get_by_title(self, title: str, namespace: int = 0) -> Optional[Page]:
        """Fetch a page by namespace and title (spaces or underscores)."""
        row = self.fetchone(
            "SELECT * FROM page WHERE page_namespace = ? AND page_title = ?;",
            (namespace, title.strip().replace(" ", "_")),
        )
        return _row_to_page(row) if row else None

    def ids_to_titles(
        self,
        page_ids: Sequence[int],
        content_namespaces: Collection[int],
    ) -> list[Page]:
        """Resolve page IDs to pages in one query.

        Pages outside ``content_namespaces`` and subpages (titles containing
        ``/``) are dropped, as are IDs with no page row. The result follows
        the order of ``page_ids``.

        Args:
            page_ids: IDs to resolve, typically an already-sampled selection.
            content_namespaces: Namespaces whose pages may be shown.

        Returns:
            List of ``Page`` objects, possibly shorter than ``page_ids``.
        """
        if not page_ids:
            return []
        rows = self.fetchall(
            f"SELECT * FROM page WHERE page_id IN ({placeholders(page_ids)});",
            tuple(page_ids),
        )
        by_id = {int(row["page_id"]): _row_to_page(row) for row in rows}

        pages: list[Page] = []
        for page_id in page_ids:
            page = by_id.get(page_id)
            if page is None:
                logger.debug("Page %d no longer exists; dropped.", page_id)
                continue
            if page.namespace not in content_namespaces or page.is_subpage:
                logger.debug("Page %d (%s) is not content; dropped.", page_id, page.title)
                continue
            pages.append(page)
        return pages

    def count(self) -> int:
        """Return the total number of pages."""
        row = self.fetchone("SELECT COUNT(*) AS n FROM page;")
        assert row is not None
        return int(row["n"])


def _row_to_page(row: sqlite3.Row) -> Page:
    return Page(
        page_id=row["page_id"],
        namespace=row["page_namespace"],
        title=row["page_title"],
    )
