"""
Recommendation engine: find pages related to a just-saved page that also
need attention.

Search order
------------
1. Base categories: every category on the saved page that is not itself a
   marker.
2. Topical tier: for each marker, in listed order, pages carrying that
   marker AND at least one base category. Scanning stops as soon as the
   pool holds ``display_limit`` pages, so later markers may never be looked
   at. Results are ``similar=True``.
3. Fallback tier, only when tier 2 found nothing: pages carrying any marker
   at all. Results are ``similar=False``.

The saved page is never a candidate. A pool larger than ``pool_limit`` is
cut down to a random ``pool_limit``-sized subset, then sampled down to
``display_limit``, so every candidate stays equally likely to be shown.

Nothing here catches store errors: a failing store propagates, so that an
outage is not mistaken for "no suggestions".
"""

from __future__ import annotations

import logging
import random
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Optional, Protocol

from edit_similar.suggest.markers import MarkerSet
from edit_similar.suggest.sampler import sample

logger = logging.getLogger(__name__)


class CategoryStore(Protocol):
    """Read-only view of the page ↔ category relation."""

    def categories_of(self, page_id: int) -> set[str]: ...

    def items_with_category(self, category: str) -> set[int]: ...

    def items_with_category_and_any_of(
        self, category: str, categories: Collection[str]
    ) -> set[int]: ...

    def items_with_any_of_categories(self, categories: Collection[str]) -> set[int]: ...


@dataclass(frozen=True)
class RecommendationResult:
    """Sampled suggestions for one saved page.

    Attributes:
        ids:     Sampled page IDs, at most ``display_limit`` long.
        similar: ``True`` if the pages share a category with the saved page,
                 ``False`` if they were taken from the marker-only fallback.
    """

    ids:     tuple[int, ...]
    similar: bool


class RecommendationEngine:
    """Two-tier category co-occurrence search over a ``CategoryStore``.

    Args:
        store:         Category relation to query.
        pool_limit:    Maximum number of candidates kept before sampling.
        display_limit: Maximum number of pages returned.
    """

    def __init__(
        self,
        store: CategoryStore,
        pool_limit: int = 50,
        display_limit: int = 3,
    ) -> None:
        _check_limits(pool_limit, display_limit)
        self.store = store
        self.pool_limit = pool_limit
        self.display_limit = display_limit

    def base_categories(self, base_id: int, markers: MarkerSet) -> set[str]:
        """Categories of ``base_id`` that are not markers."""
        return self.store.categories_of(base_id) - set(markers)

    def find_candidates(
        self,
        base_id: int,
        markers: Optional[MarkerSet],
        display_limit: Optional[int] = None,
    ) -> Optional[tuple[list[int], bool]]:
        """Collect the candidate pool for ``base_id``.

        Args:
            base_id: ID of the page that was just saved.
            markers: Marker set; ``None`` or empty disables the search.
            display_limit: Early-stop threshold for the topical tier;
                defaults to the engine's ``display_limit``.

        Returns:
            ``(candidates, similar)`` with de-duplicated IDs in discovery
            order, or ``None`` when disabled or nothing was found.
        """
        if not markers:
            return None
        limit = self.display_limit if display_limit is None else display_limit
        _check_limits(self.pool_limit, limit)

        topical = self.base_categories(base_id, markers)
        candidates: dict[int, None] = {}

        if topical:
            for marker in markers:
                if len(candidates) >= limit:
                    break
                found = self.store.items_with_category_and_any_of(marker, topical)
                _merge(candidates, found, base_id)
        else:
            logger.debug("Page %d has no non-marker categories; skipping topical tier.", base_id)

        if candidates:
            logger.debug("Page %d: %d topical candidate(s).", base_id, len(candidates))
            return list(candidates), True

        _merge(candidates, self.store.items_with_any_of_categories(markers), base_id)
        if not candidates:
            logger.debug("Page %d: no candidates in any marker category.", base_id)
            return None

        logger.debug("Page %d: %d fallback candidate(s).", base_id, len(candidates))
        return list(candidates), False

    def recommend(
        self,
        base_id: int,
        markers: Optional[MarkerSet],
        pool_limit: Optional[int] = None,
        display_limit: Optional[int] = None,
    ) -> Optional[RecommendationResult]:
        """Return sampled suggestions for ``base_id``, or ``None``.

        ``None`` covers both "disabled" (no markers) and "nothing found".
        """
        pool_limit = self.pool_limit if pool_limit is None else pool_limit
        display_limit = self.display_limit if display_limit is None else display_limit
        _check_limits(pool_limit, display_limit)

        found = self.find_candidates(base_id, markers, display_limit)
        if found is None:
            return None

        candidates, similar = found
        if len(candidates) > pool_limit:
            logger.debug(
                "Page %d: capping %d candidates to a random %d.",
                base_id, len(candidates), pool_limit,
            )
            candidates = random.sample(candidates, pool_limit)
        ids = sample(candidates, display_limit)
        return RecommendationResult(ids=tuple(ids), similar=similar)


def _check_limits(pool_limit: int, display_limit: int) -> None:
    if pool_limit < 1 or display_limit < 1:
        raise ValueError(
            f"pool_limit and display_limit must be >= 1, "
            f"got {pool_limit} and {display_limit}"
        )


def _merge(candidates: dict[int, None], found: Iterable[int], base_id: int) -> None:
    for page_id in sorted(found):
        if page_id != base_id:
            candidates.setdefault(page_id, None)
