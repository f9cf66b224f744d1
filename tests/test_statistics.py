"""Statistics aggregation over the usage ledger."""

from __future__ import annotations

from datetime import date

import pytest

from logic.statistics import (
    GAP_THRESHOLD_DAYS,
    StatsRange,
    build_statistics,
    range_bounds,
    round_percent,
)
from memory.kv_store import InMemoryKeyValueStore
from models.taxonomy import CosmeticCategory, category_color
from tools.beauty_store import BeautyStore

TODAY = date(2025, 1, 10)


@pytest.fixture()
def store() -> BeautyStore:
    return BeautyStore(kv_store=InMemoryKeyValueStore(), today=lambda: TODAY)


def _stats(store: BeautyStore, stats_range="week", **kwargs):
    return build_statistics(store.snapshot(), stats_range, today=TODAY, **kwargs)


@pytest.mark.parametrize(
    ("count", "total", "expected"),
    [(3, 4, 75), (1, 4, 25), (1, 8, 13), (1, 3, 33), (2, 3, 67), (5, 5, 100), (0, 0, 0), (1, 200, 1), (1, 201, 0)],
)
def test_round_percent_rounds_half_away_from_zero(count: int, total: int, expected: int) -> None:
    assert round_percent(count, total) == expected


def test_range_bounds_are_inclusive_trailing_windows() -> None:
    assert range_bounds(StatsRange.WEEK, TODAY) == (date(2025, 1, 4), TODAY)
    assert range_bounds(StatsRange.MONTH, TODAY) == (date(2024, 12, 12), TODAY)


def test_stats_range_parse() -> None:
    assert StatsRange.parse("week") is StatsRange.WEEK
    assert StatsRange.parse("Month") is StatsRange.MONTH
    assert StatsRange.parse(StatsRange.MONTH) is StatsRange.MONTH
    with pytest.raises(ValueError):
        StatsRange.parse("year")


def test_two_categories_three_to_one(store: BeautyStore) -> None:
    lip = store.add_cosmetic("Red Lip", CosmeticCategory.LIPSTICK)
    lash = store.add_cosmetic("Volume", CosmeticCategory.MASCARA)
    store.add_cosmetic_to_day("2025-01-08", lip.id)
    store.add_cosmetic_to_day("2025-01-09", lip.id)
    store.set_usage_for_day("2025-01-10", [], [lip.id, lash.id])

    model = _stats(store)

    assert model.total_count == 4
    assert [(row.category, row.percent) for row in model.legend_rows] == [
        (CosmeticCategory.LIPSTICK, 75),
        (CosmeticCategory.MASCARA, 25),
    ]
    assert model.legend_rows[0].color == category_color(CosmeticCategory.LIPSTICK) == "#D21919"
    assert model.legend_rows[0].title == "Lipstick"
    assert [seg.fraction for seg in model.segments] == [0.75, 0.25]
    assert model.favorite.cosmetic_id == lip.id
    assert model.favorite.count == 3
    assert model.top_cosmetic_insight == "Red Lip lipstick is your favorite: 75% of all uses!"
    assert model.gap is None


def test_single_category_is_exactly_one_hundred(store: BeautyStore) -> None:
    a = store.add_cosmetic("A", CosmeticCategory.POWDER)
    b = store.add_cosmetic("B", CosmeticCategory.POWDER)
    store.set_usage_for_day("2025-01-09", [], [a.id, b.id])
    store.add_cosmetic_to_day("2025-01-10", b.id)

    model = _stats(store)

    assert [(row.category, row.percent) for row in model.legend_rows] == [(CosmeticCategory.POWDER, 100)]


def test_legend_ties_fall_back_to_category_order(store: BeautyStore) -> None:
    brush = store.add_cosmetic("Kabuki", CosmeticCategory.BRUSHES)
    lip = store.add_cosmetic("Lip", CosmeticCategory.LIPSTICK)
    shadow = store.add_cosmetic("Smoky", CosmeticCategory.EYESHADOW)
    store.set_usage_for_day("2025-01-10", [], [brush.id, shadow.id, lip.id])

    model = _stats(store)

    assert [row.category for row in model.legend_rows] == [
        CosmeticCategory.LIPSTICK,
        CosmeticCategory.EYESHADOW,
        CosmeticCategory.BRUSHES,
    ]
    assert [row.percent for row in model.legend_rows] == [33, 33, 33]


def test_only_entries_inside_the_window_are_tallied(store: BeautyStore) -> None:
    lip = store.add_cosmetic("Lip", CosmeticCategory.LIPSTICK)
    store.add_cosmetic_to_day("2025-01-03", lip.id)
    store.add_cosmetic_to_day("2025-01-04", lip.id)
    store.add_cosmetic_to_day("2025-01-11", lip.id)

    week = _stats(store, "week")
    month = _stats(store, StatsRange.MONTH)

    assert week.total_count == 1
    assert month.total_count == 2
    assert week.period_top_line == "04.01.2025"
    assert week.period_bottom_line == "10.01.2025"
    assert month.period_top_line == "12.12.2024"


def test_dangling_references_count_toward_favorite_denominator(store: BeautyStore) -> None:
    lip = store.add_cosmetic("Lip", CosmeticCategory.LIPSTICK)
    store.set_usage_for_day("2025-01-10", [], [lip.id, "DELETED-ELSEWHERE"])

    model = _stats(store)

    assert model.total_count == 1
    assert model.legend_rows[0].percent == 100
    assert model.favorite.percent == 50


def test_favorite_tie_prefers_most_recent_day(store: BeautyStore) -> None:
    older = store.add_cosmetic("Older", CosmeticCategory.POWDER)
    newer = store.add_cosmetic("Newer", CosmeticCategory.POWDER)
    store.add_cosmetic_to_day("2025-01-09", newer.id)
    store.add_cosmetic_to_day("2025-01-06", older.id)

    assert _stats(store).favorite.cosmetic_id == newer.id


def test_favorite_tie_on_same_day_prefers_first_seen(store: BeautyStore) -> None:
    first = store.add_cosmetic("First", CosmeticCategory.POWDER)
    second = store.add_cosmetic("Second", CosmeticCategory.BROWS)
    store.set_usage_for_day("2025-01-10", [], [first.id, second.id])

    assert _stats(store).favorite.cosmetic_id == first.id


def test_gap_insight_suggests_party_look(store: BeautyStore) -> None:
    lip = store.add_cosmetic("Lip", CosmeticCategory.LIPSTICK)
    lash = store.add_cosmetic("Lash", CosmeticCategory.MASCARA)
    store.add_look("Daily")
    store.add_look("Party night")
    store.add_look("Office")
    store.add_cosmetic_to_day("2025-01-01", lash.id)
    store.add_cosmetic_to_day("2025-01-10", lip.id)

    model = _stats(store)

    assert model.gap.category is CosmeticCategory.MASCARA
    assert model.gap.days == 9
    assert model.gap.suggested_look == "Party night"
    assert model.gap_insight == "You haven't used mascara for 9 days. Try the “Party night” look!"


def test_gap_insight_falls_back_to_first_look_then_generic_text(store: BeautyStore) -> None:
    lash = store.add_cosmetic("Lash", CosmeticCategory.MASCARA)
    store.add_cosmetic_to_day("2024-12-01", lash.id)

    assert _stats(store).gap_insight == "You haven't used mascara for 40 days. Try a new look!"

    store.add_look("Office")
    store.add_look("Brunch")
    assert _stats(store).gap.suggested_look == "Brunch"
    assert _stats(store, suggestion_keyword="office").gap.suggested_look == "Office"


def test_gap_below_threshold_is_silent(store: BeautyStore) -> None:
    lash = store.add_cosmetic("Lash", CosmeticCategory.MASCARA)
    store.add_cosmetic_to_day("2025-01-04", lash.id)

    assert (TODAY - date(2025, 1, 4)).days == GAP_THRESHOLD_DAYS - 1
    assert _stats(store).gap is None

    store.add_cosmetic_to_day("2025-01-03", lash.id)
    store.remove_cosmetic_from_day("2025-01-04", lash.id)
    assert _stats(store).gap.days == GAP_THRESHOLD_DAYS


def test_unused_categories_are_not_gaps(store: BeautyStore) -> None:
    lip = store.add_cosmetic("Lip", CosmeticCategory.LIPSTICK)
    store.add_cosmetic("Never", CosmeticCategory.BRUSHES)
    store.add_cosmetic_to_day("2025-01-10", lip.id)

    assert _stats(store).gap is None


def test_empty_store_yields_empty_model(store: BeautyStore) -> None:
    model = _stats(store, "month")

    assert model.is_empty
    assert model.legend_rows == []
    assert model.segments == []
    assert model.favorite is None
    assert model.top_cosmetic_insight is None
    assert model.gap is None


def test_statistics_do_not_mutate_the_store(store: BeautyStore) -> None:
    lip = store.add_cosmetic("Lip", CosmeticCategory.LIPSTICK)
    store.add_cosmetic_to_day("2024-12-01", lip.id)
    before = store.snapshot()

    _stats(store)

    assert store.snapshot() == before


def test_to_dict_serialises_display_model(store: BeautyStore) -> None:
    lip = store.add_cosmetic("Red Lip", CosmeticCategory.LIPSTICK)
    store.add_cosmetic_to_day("2025-01-10", lip.id)

    data = _stats(store).to_dict()

    assert data["range"] == "Week"
    assert data["start_date"] == "2025-01-04"
    assert data["legend"] == [{"category": "Lipstick", "title": "Lipstick", "percent": 100, "color": "#D21919"}]
    assert data["favorite"]["text"] == "Red Lip lipstick is your favorite: 100% of all uses!"
    assert data["gap"] is None
