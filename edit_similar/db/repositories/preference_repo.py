"""
Repository for per-user preferences.

Only the ``edit-similar`` toggle is read by this package. Values are stored
as text; ``"1"`` means on and ``"0"`` means off.
"""

from __future__ import annotations

from typing import Optional

from edit_similar.db.repositories.base import BaseRepository

EDIT_SIMILAR_PREFERENCE = "edit-similar"


class PreferenceRepository(BaseRepository):
    """Read/write access to the ``user_preferences`` table."""

    def get(self, user_id: int, name: str) -> Optional[str]:
        row = self.fetchone(
            "SELECT pref_value FROM user_preferences WHERE user_id = ? AND pref_name = ?;",
            (user_id, name),
        )
        return row["pref_value"] if row else None

    def set(self, user_id: int, name: str, value: str) -> None:
        self.execute(
            """
            INSERT INTO user_preferences (user_id, pref_name, pref_value)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id, pref_name) DO UPDATE SET pref_value = excluded.pref_value;
            """,
            (user_id, name, value),
        )

    def is_enabled(self, user_id: int, name: str = EDIT_SIMILAR_PREFERENCE) -> bool:
        """Return whether a toggle is on. Unset toggles default to on.

        Anonymous users (``user_id == 0``) cannot store preferences and
        always get the default.
        """
        if user_id <= 0:
            return True
        value = self.get(user_id, name)
        return value is None or value == "1"
