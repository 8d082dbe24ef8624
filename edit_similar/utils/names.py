"""Category and title name normalisation."""

from __future__ import annotations


def normalize_name(name: str) -> str:
    """Trim ``name`` and replace spaces with underscores.

    This is the form category names take in ``categorylinks.cl_to`` and the
    form titles take in ``page.page_title``.

    >>> normalize_name("  Articles needing cleanup ")
    'Articles_needing_cleanup'
    """
    return name.strip().replace(" ", "_")
