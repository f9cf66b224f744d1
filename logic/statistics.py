"""Usage statistics: category distribution, favorite item and gap insight.

Everything here is a pure function of a :class:`StoreSnapshot`, a range and
the current day. Nothing is mutated or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional

from beauty_app.config import DEFAULT_SUGGESTION_KEYWORD
from models.taxonomy import CosmeticCategory, category_color
from tools.beauty_store import StoreSnapshot
from tools.day_keys import format_display_date, parse_day_key

GAP_THRESHOLD_DAYS = 7


class StatsRange(str, Enum):
    WEEK = "Week"
    MONTH = "Month"

    @property
    def days(self) -> int:
        return 7 if self is StatsRange.WEEK else 30

    @classmethod
    def parse(cls, value: "StatsRange | str") -> "StatsRange":
        """Accept a member, its raw value or its name in any case."""

        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if key in {member.value.lower(), member.name.lower()}:
                return member
        raise ValueError(f"Unsupported range '{value}'. Allowed: {[m.value for m in cls]}")


@dataclass(frozen=True)
class LegendRow:
    category: CosmeticCategory
    percent: int
    color: str

    @property
    def title(self) -> str:
        return self.category.value


@dataclass(frozen=True)
class DonutSegment:
    category: CosmeticCategory
    color: str
    fraction: float


@dataclass(frozen=True)
class FavoriteInsight:
    cosmetic_id: str
    name: str
    category: CosmeticCategory
    count: int
    percent: int

    @property
    def text(self) -> str:
        return f"{self.name} {self.category.value.lower()} is your favorite: {self.percent}% of all uses!"


@dataclass(frozen=True)
class GapInsight:
    category: CosmeticCategory
    days: int
    suggested_look: Optional[str] = None

    @property
    def text(self) -> str:
        missing = f"You haven't used {self.category.value.lower()} for {self.days} days"
        if self.suggested_look:
            return f"{missing}. Try the “{self.suggested_look}” look!"
        return f"{missing}. Try a new look!"


@dataclass(frozen=True)
class StatsModel:
    """Display model for the statistics screen."""

    range: StatsRange
    start_date: date
    end_date: date
    total_count: int
    legend_rows: List[LegendRow] = field(default_factory=list)
    segments: List[DonutSegment] = field(default_factory=list)
    favorite: Optional[FavoriteInsight] = None
    gap: Optional[GapInsight] = None

    @property
    def period_top_line(self) -> str:
        return format_display_date(self.start_date)

    @property
    def period_bottom_line(self) -> str:
        return format_display_date(self.end_date)

    @property
    def top_cosmetic_insight(self) -> Optional[str]:
        return self.favorite.text if self.favorite else None

    @property
    def gap_insight(self) -> Optional[str]:
        return self.gap.text if self.gap else None

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "range": self.range.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "period_top_line": self.period_top_line,
            "period_bottom_line": self.period_bottom_line,
            "total_count": self.total_count,
            "legend": [
                {"category": row.category.value, "title": row.title, "percent": row.percent, "color": row.color}
                for row in self.legend_rows
            ],
            "segments": [
                {"category": seg.category.value, "color": seg.color, "fraction": seg.fraction}
                for seg in self.segments
            ],
            "favorite": None
            if self.favorite is None
            else {
                "cosmetic_id": self.favorite.cosmetic_id,
                "name": self.favorite.name,
                "category": self.favorite.category.value,
                "count": self.favorite.count,
                "percent": self.favorite.percent,
                "text": self.favorite.text,
            },
            "gap": None
            if self.gap is None
            else {
                "category": self.gap.category.value,
                "days": self.gap.days,
                "suggested_look": self.gap.suggested_look,
                "text": self.gap.text,
            },
        }


def round_percent(count: int, total: int) -> int:
    """``round(count * 100 / total)`` with halves rounded away from zero."""

    if total <= 0:
        return 0
    numerator = count * 200 + total
    return numerator // (2 * total)


def range_bounds(stats_range: StatsRange, today: date) -> tuple[date, date]:
    """Trailing window ending today, inclusive on both ends."""

    return today - timedelta(days=stats_range.days - 1), today


def build_statistics(
    snapshot: StoreSnapshot,
    stats_range: StatsRange | str = StatsRange.WEEK,
    today: Optional[date] = None,
    suggestion_keyword: str = DEFAULT_SUGGESTION_KEYWORD,
) -> StatsModel:
    """Aggregate usage for the trailing week or month."""

    stats_range = StatsRange.parse(stats_range)
    today = today or date.today()
    start, end = range_bounds(stats_range, today)
    entries = snapshot.usage_in_range(start, end)

    category_counts: Dict[CosmeticCategory, int] = {}
    item_counts: Dict[str, int] = {}
    item_last_day: Dict[str, date] = {}
    item_first_seen: Dict[str, int] = {}
    category_last_day: Dict[CosmeticCategory, date] = {}
    all_references = 0

    for entry in entries:
        day = parse_day_key(entry.day_key) or end
        all_references += len(entry.cosmetic_ids)
        for cosmetic_id in entry.cosmetic_ids:
            item = snapshot.cosmetic(cosmetic_id)
            if item is None:
                continue
            category_counts[item.category] = category_counts.get(item.category, 0) + 1
            item_counts[item.id] = item_counts.get(item.id, 0) + 1
            item_first_seen.setdefault(item.id, len(item_first_seen))
            if item.id not in item_last_day or day > item_last_day[item.id]:
                item_last_day[item.id] = day
            if item.category not in category_last_day or day > category_last_day[item.category]:
                category_last_day[item.category] = day

    total = sum(category_counts.values())

    legend = [
        LegendRow(category=category, percent=round_percent(count, total), color=category_color(category))
        for category in CosmeticCategory
        if (count := category_counts.get(category, 0)) > 0
    ]
    legend.sort(key=lambda row: row.percent, reverse=True)
    segments = [DonutSegment(category=row.category, color=row.color, fraction=row.percent / 100.0) for row in legend]

    favorite = None
    if total > 0:
        top_id = max(
            item_counts,
            key=lambda item_id: (item_counts[item_id], item_last_day[item_id], -item_first_seen[item_id]),
        )
        top_item = snapshot.cosmetic(top_id)
        favorite = FavoriteInsight(
            cosmetic_id=top_id,
            name=top_item.name,
            category=top_item.category,
            count=item_counts[top_id],
            percent=round_percent(item_counts[top_id], max(1, all_references)),
        )

    gap = _gap_insight(snapshot, category_last_day, today, suggestion_keyword)

    return StatsModel(
        range=stats_range,
        start_date=start,
        end_date=end,
        total_count=total,
        legend_rows=legend,
        segments=segments,
        favorite=favorite,
        gap=gap,
    )


def _gap_insight(
    snapshot: StoreSnapshot,
    category_last_day: Dict[CosmeticCategory, date],
    today: date,
    suggestion_keyword: str,
) -> Optional[GapInsight]:
    if not snapshot.has_any_cosmetics_usage():
        return None

    worst: Optional[tuple[CosmeticCategory, int]] = None
    for category in CosmeticCategory:
        last = category_last_day.get(category) or snapshot.last_usage_date(category)
        if last is None:
            continue
        days = max(0, (today - last).days)
        if worst is None or days > worst[1]:
            worst = (category, days)

    if worst is None or worst[1] < GAP_THRESHOLD_DAYS:
        return None
    category, days = worst
    return GapInsight(
        category=category,
        days=days,
        suggested_look=snapshot.suggested_look_title(suggestion_keyword),
    )


__all__ = [
    "DonutSegment",
    "FavoriteInsight",
    "GAP_THRESHOLD_DAYS",
    "GapInsight",
    "LegendRow",
    "StatsModel",
    "StatsRange",
    "build_statistics",
    "range_bounds",
    "round_percent",
]
