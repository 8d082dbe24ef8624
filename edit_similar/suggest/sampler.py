"""
Bounded random selection from a candidate pool.

Selection is uniform and without replacement; there is no seed control, so
two calls with the same pool may return different pages in different orders.
"""

from __future__ import annotations

import random
from collections.abc import Collection


def sample(candidates: Collection[int], display_limit: int) -> list[int]:
    """Pick up to ``display_limit`` distinct page IDs from ``candidates``.

    Args:
        candidates: Non-empty pool of page IDs (any collection; sets allowed).
        display_limit: Maximum number of IDs to return; must be >= 1.

    Returns:
        ``min(display_limit, len(candidates))`` distinct IDs in random order.

    Raises:
        ValueError: If ``candidates`` is empty or ``display_limit`` < 1.
    """
    if display_limit < 1:
        raise ValueError(f"display_limit must be >= 1, got {display_limit}")
    if not candidates:
        raise ValueError("cannot sample from an empty candidate pool")

    pool = list(candidates)
    if len(pool) == 1:
        return [pool[0]]

    return random.sample(pool, min(display_limit, len(pool)))
