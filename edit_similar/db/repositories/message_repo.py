"""
Repository for operator-editable interface messages.

The marker category list lives here under ``MARKER_CATEGORIES_KEY`` so that
operators can change it without a deploy.
"""

from __future__ import annotations

import logging
from typing import Optional

from edit_similar.db.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

MARKER_CATEGORIES_KEY = "EditSimilar-Categories"


class MessageRepository(BaseRepository):
    """Read/write access to the ``interface_messages`` table."""

    def get_text(self, key: str) -> Optional[str]:
        """Return the text stored under ``key``, or ``None`` if unset."""
        row = self.fetchone(
            "SELECT msg_text FROM interface_messages WHERE msg_key = ?;", (key,)
        )
        return row["msg_text"] if row else None

    def set_text(self, key: str, text: str) -> None:
        """Create or replace the message stored under ``key``."""
        self.execute(
            """
            INSERT INTO interface_messages (msg_key, msg_text)
            VALUES (?, ?)
            ON CONFLICT(msg_key) DO UPDATE SET
                msg_text   = excluded.msg_text,
                updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now');
            """,
            (key, text),
        )
        logger.info("Interface message '%s' updated (%d chars).", key, len(text))

    def delete(self, key: str) -> bool:
        """Remove the message under ``key``. Returns ``True`` if a row was deleted."""
        cur = self.execute("DELETE FROM interface_messages WHERE msg_key = ?;", (key,))
        return cur.rowcount > 0
