"""
CSV import parser for pages and their categories.

Format — comma delimited, with a header row.
Required columns:
  page_id, title, categories

Optional columns:
  namespace   → integer, defaults to 0 when empty or missing

``categories`` is a ``|``-separated list; names may use spaces or
underscores (``Articles needing cleanup`` == ``Articles_needing_cleanup``).
An empty cell means the page has no categories.

See ``config/pages_example.csv`` for an example.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from pydantic import ValidationError

from edit_similar.models.page import Page, PageRecord

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({"page_id", "title", "categories"})

CATEGORY_SEPARATOR = "|"

_MAX_REPORTED_ERRORS = 10


def parse_page_csv(path: Path) -> list[PageRecord]:
    """Parse a CSV file of pages into validated :class:`PageRecord` objects.

    All rows are validated before any are returned. If any row fails, a
    single :class:`ValueError` lists the first 10 failures.

    Args:
        path: Path to the CSV file.

    Returns:
        List of validated records in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing, a page ID repeats, or
            any row fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Page CSV file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = set(reader.fieldnames)
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        records: list[PageRecord] = []
        errors: list[str] = []
        seen_ids: set[int] = set()

        # Line 1 is the header.
        for line_no, row in enumerate(reader, start=2):
            try:
                record = _parse_row(row)
            except (ValidationError, ValueError) as exc:
                errors.append(f"line {line_no}: {exc}")
                continue

            if record.page.page_id in seen_ids:
                errors.append(f"line {line_no}: duplicate page_id {record.page.page_id}")
                continue
            seen_ids.add(record.page.page_id)
            records.append(record)

    if errors:
        shown = "\n  ".join(errors[:_MAX_REPORTED_ERRORS])
        more = len(errors) - _MAX_REPORTED_ERRORS
        suffix = f"\n  ... and {more} more." if more > 0 else ""
        raise ValueError(f"{len(errors)} row(s) failed validation:\n  {shown}{suffix}")

    logger.info("Parsed %d page(s) from %s", len(records), path)
    return records


def _parse_row(row: dict[str, str | None]) -> PageRecord:
    namespace_raw = (row.get("namespace") or "").strip()
    raw_categories = (row.get("categories") or "").split(CATEGORY_SEPARATOR)

    page = Page(
        page_id=int((row.get("page_id") or "").strip()),
        namespace=int(namespace_raw) if namespace_raw else 0,
        title=row.get("title") or "",
    )
    return PageRecord(page=page, categories=tuple(raw_categories))
