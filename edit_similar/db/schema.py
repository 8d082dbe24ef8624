"""
SQLite schema DDL — all CREATE TABLE and CREATE INDEX statements.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.

Tables:
  1. page                 (no FKs)
  2. categorylinks        (→ page)
  3. interface_messages   (no FKs) — operator-editable texts such as the
                          marker category list
  4. user_preferences     (no FKs) — per-user toggles

``categorylinks`` stores category names in their normalised form
(underscores instead of spaces), the same form the marker parser produces.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_PAGE = """
CREATE TABLE IF NOT EXISTS page (
    page_id         INTEGER PRIMARY KEY,
    page_namespace  INTEGER NOT NULL DEFAULT 0,
    page_title      TEXT    NOT NULL,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    UNIQUE (page_namespace, page_title)
);
"""

_DDL_CATEGORYLINKS = """
CREATE TABLE IF NOT EXISTS categorylinks (
    cl_from  INTEGER NOT NULL REFERENCES page(page_id) ON DELETE CASCADE,
    cl_to    TEXT    NOT NULL,
    PRIMARY KEY (cl_from, cl_to)
);

CREATE INDEX IF NOT EXISTS idx_categorylinks_to
    ON categorylinks(cl_to, cl_from);
"""

_DDL_INTERFACE_MESSAGES = """
CREATE TABLE IF NOT EXISTS interface_messages (
    msg_key     TEXT NOT NULL PRIMARY KEY,
    msg_text    TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_USER_PREFERENCES = """
CREATE TABLE IF NOT EXISTS user_preferences (
    user_id     INTEGER NOT NULL,
    pref_name   TEXT    NOT NULL,
    pref_value  TEXT    NOT NULL,
    PRIMARY KEY (user_id, pref_name)
);
"""

_ALL_DDL: list[str] = [
    _DDL_PAGE,
    _DDL_CATEGORYLINKS,
    _DDL_INTERFACE_MESSAGES,
    _DDL_USER_PREFERENCES,
]

ALL_TABLE_NAMES: list[str] = [
    "page",
    "categorylinks",
    "interface_messages",
    "user_preferences",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent — safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection`` (FK enforcement should be ON).
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the names of all tables in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return the names of all indexes in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
