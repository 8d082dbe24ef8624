"""
Tests for edit_similar/suggest/engine.py.

What we test
------------
find_candidates():
  - Topical tier unions results across markers and de-duplicates them.
  - Topical tier stops querying once the pool reaches display_limit.
  - Fallback tier only runs when the topical tier found nothing.
  - The base page is never a candidate.
  - Markers are not treated as topical categories.
  - None / empty markers disable the search without touching the store.

recommend():
  - similar flag reflects the tier the pool came from.
  - Result size never exceeds display_limit.
  - pool_limit caps the pool with a random subset, so no page is
    excluded by its ID.
  - Explicit zero limits are rejected.
  - Store failures propagate.
"""

from __future__ import annotations

import pytest

import edit_similar.suggest.engine as engine_module
from edit_similar.db.repositories.category_repo import CategoryRepository, CategoryStoreError
from edit_similar.suggest.engine import RecommendationEngine, RecommendationResult

MARKERS = ("Stubs", "Articles_needing_cleanup")


# ── Scenarios ─────────────────────────────────────────────────────────────────

class TestScenarios:
    def test_topical_matches_under_different_markers(self, make_store):
        store = make_store({
            1: {"A", "B"},
            10: {"A", "M1"},
            11: {"B", "M2"},
        })
        result = RecommendationEngine(store, display_limit=3).recommend(1, ("M1", "M2"))

        assert result is not None
        assert result.similar is True
        assert set(result.ids) == {10, 11}
        assert not any(c[0] == "items_with_any_of_categories" for c in store.calls)

    def test_uncategorized_base_falls_back(self, make_store):
        store = make_store({1: set(), 20: {"M1"}})
        result = RecommendationEngine(store).recommend(1, ("M1",))

        assert result == RecommendationResult(ids=(20,), similar=False)

    def test_empty_markers_return_none_without_queries(self, make_store):
        store = make_store({1: {"A"}, 2: {"A", "M1"}})
        engine = RecommendationEngine(store)

        assert engine.recommend(1, ()) is None
        assert engine.recommend(1, None) is None
        assert store.calls == []

    def test_base_with_only_marker_categories_falls_back(self, make_store):
        store = make_store({1: {"M1"}, 2: {"M1"}})
        result = RecommendationEngine(store).recommend(1, ("M1",))

        assert result is not None
        assert result.similar is False
        assert result.ids == (2,)

    def test_nothing_anywhere_returns_none(self, make_store):
        store = make_store({1: {"A"}, 2: {"A"}})
        assert RecommendationEngine(store).recommend(1, ("M1",)) is None

    def test_base_is_the_only_marked_page(self, make_store):
        store = make_store({1: {"A", "M1"}, 2: {"A"}})
        assert RecommendationEngine(store).recommend(1, ("M1",)) is None


# ── Topical tier ──────────────────────────────────────────────────────────────

class TestTopicalTier:
    def test_early_stop_skips_later_markers(self, make_store):
        store = make_store({
            1: {"A"},
            2: {"A", "M1"},
            3: {"A", "M1"},
            4: {"A", "M2"},
        })
        found = RecommendationEngine(store, display_limit=2).find_candidates(1, ("M1", "M2"))

        assert found == ([2, 3], True)
        queried = [c[1] for c in store.calls if c[0] == "items_with_category_and_any_of"]
        assert queried == ["M1"]

    def test_continues_until_limit_reached(self, make_store):
        store = make_store({
            1: {"A"},
            2: {"A", "M1"},
            4: {"A", "M2"},
            5: {"A", "M3"},
        })
        found = RecommendationEngine(store, display_limit=2).find_candidates(
            1, ("M1", "M2", "M3")
        )

        assert found == ([2, 4], True)
        queried = [c[1] for c in store.calls if c[0] == "items_with_category_and_any_of"]
        assert queried == ["M1", "M2"]

    def test_duplicates_across_markers_are_merged(self, make_store):
        store = make_store({1: {"A"}, 2: {"A", "M1", "M2"}})
        found = RecommendationEngine(store, display_limit=5).find_candidates(1, ("M1", "M2"))

        assert found == ([2], True)

    def test_marker_categories_are_not_topical(self, make_store):
        # Page 2 shares only the marker with the base page.
        store = make_store({1: {"A", "M1"}, 2: {"M1"}, 3: {"A", "M1"}})
        found = RecommendationEngine(store).find_candidates(1, ("M1",))

        assert found == ([3], True)

    def test_no_base_categories_skips_join_queries(self, make_store):
        store = make_store({1: set(), 2: {"M1"}})
        RecommendationEngine(store).find_candidates(1, ("M1",))

        assert not any(c[0] == "items_with_category_and_any_of" for c in store.calls)

    def test_find_candidates_respects_explicit_display_limit(self, make_store):
        store = make_store({1: {"A"}, 2: {"A", "M1"}, 3: {"A", "M2"}})
        found = RecommendationEngine(store, display_limit=5).find_candidates(
            1, ("M1", "M2"), display_limit=1
        )

        assert found == ([2], True)


# ── Seeded SQLite wiki ────────────────────────────────────────────────────────

class TestAgainstSqliteStore:
    def test_topical_result_for_rivers_page(self, seeded_db):
        engine = RecommendationEngine(CategoryRepository(seeded_db), display_limit=3)
        result = engine.recommend(1, MARKERS)

        assert result is not None
        assert result.similar is True
        assert set(result.ids) == {2, 3, 5}

    def test_fallback_for_uncategorized_page(self, seeded_db):
        engine = RecommendationEngine(CategoryRepository(seeded_db), display_limit=10)
        result = engine.recommend(7, MARKERS)

        assert result is not None
        assert result.similar is False
        assert set(result.ids) == {2, 3, 5, 6, 8}

    def test_self_match_excluded(self, seeded_db):
        engine = RecommendationEngine(CategoryRepository(seeded_db))
        result = engine.recommend(8, MARKERS)

        assert result == RecommendationResult(ids=(3,), similar=True)


# ── Properties ────────────────────────────────────────────────────────────────

class TestResultProperties:
    @pytest.mark.parametrize("display_limit", [1, 2, 3, 10])
    @pytest.mark.parametrize("base_id", [1, 2, 3, 4, 5, 6, 7, 8, 99])
    def test_bounded_and_excludes_base(self, seeded_store, base_id, display_limit):
        engine = RecommendationEngine(seeded_store, display_limit=display_limit)
        result = engine.recommend(base_id, MARKERS)

        assert result is not None
        assert base_id not in result.ids
        assert 1 <= len(result.ids) <= display_limit
        assert len(set(result.ids)) == len(result.ids)

    @pytest.mark.parametrize("base_id", [7, 99])
    def test_uncategorized_base_never_similar(self, seeded_store, base_id):
        result = RecommendationEngine(seeded_store).recommend(base_id, MARKERS)
        assert result is None or result.similar is False

    def test_pool_limit_caps_pool_size(self, seeded_store, monkeypatch):
        capped: list[int] = []
        real_sample = engine_module.sample

        def spy(candidates, display_limit):
            capped.append(len(candidates))
            return real_sample(candidates, display_limit)

        monkeypatch.setattr(engine_module, "sample", spy)
        engine = RecommendationEngine(seeded_store, pool_limit=2, display_limit=5)
        result = engine.recommend(7, MARKERS)

        assert result is not None
        assert capped == [2]
        assert len(result.ids) == 2
        assert set(result.ids) <= {2, 3, 5, 6, 8}

    def test_pages_beyond_pool_limit_can_be_suggested(self, make_store):
        store = make_store({page_id: {"Stubs"} for page_id in range(1, 201)})
        store.links[0] = set()
        engine = RecommendationEngine(store, pool_limit=50, display_limit=3)

        seen: set[int] = set()
        for _ in range(300):
            seen.update(engine.recommend(0, ("Stubs",)).ids)

        assert max(seen) > 50
        assert len(seen) > 50

    def test_call_overrides_take_precedence(self, seeded_store):
        engine = RecommendationEngine(seeded_store, pool_limit=50, display_limit=5)
        result = engine.recommend(7, MARKERS, pool_limit=3, display_limit=1)

        assert result is not None
        assert len(result.ids) == 1
        assert result.ids[0] in {2, 3, 5, 6, 8}

    @pytest.mark.parametrize("overrides", [{"pool_limit": 0}, {"display_limit": 0}])
    def test_zero_override_rejected(self, seeded_store, overrides):
        engine = RecommendationEngine(seeded_store)
        with pytest.raises(ValueError):
            engine.recommend(7, MARKERS, **overrides)

    def test_zero_display_limit_rejected_by_find_candidates(self, seeded_store):
        with pytest.raises(ValueError):
            RecommendationEngine(seeded_store).find_candidates(7, MARKERS, display_limit=0)


# ── Errors ────────────────────────────────────────────────────────────────────

class _FailingStore:
    def categories_of(self, page_id):
        raise CategoryStoreError("categories_of", "database is locked")


class TestErrors:
    def test_store_failure_propagates(self):
        engine = RecommendationEngine(_FailingStore())
        with pytest.raises(CategoryStoreError, match="database is locked"):
            engine.recommend(1, ("M1",))

    @pytest.mark.parametrize("pool_limit,display_limit", [(0, 3), (50, 0)])
    def test_invalid_limits_rejected(self, make_store, pool_limit, display_limit):
        with pytest.raises(ValueError):
            RecommendationEngine(make_store({}), pool_limit=pool_limit, display_limit=display_limit)
