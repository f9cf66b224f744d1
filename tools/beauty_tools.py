"""Dict-in/dict-out wrappers exposing BeautyStore operations to callers."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional

from beauty_app.config import DEFAULT_SUGGESTION_KEYWORD
from logic.statistics import build_statistics
from logic.validation import CosmeticInput, DayUsageInput, LookInput, StatsInput
from models.cosmetic_item import cosmetic_to_dict, look_to_dict, usage_to_dict
from tools.beauty_store import BeautyStore
from tools.observability import instrument_tool

LOOK_PREVIEW_LIMIT = 5


class BeautyTools:
    """Thin wrapper that validates payloads and serialises store results."""

    def __init__(self, store: BeautyStore, suggestion_keyword: str = DEFAULT_SUGGESTION_KEYWORD) -> None:
        self.store = store
        self.suggestion_keyword = suggestion_keyword

    # Cosmetics

    @instrument_tool("add_cosmetic", input_model=CosmeticInput)
    def add_cosmetic(self, payload: CosmeticInput) -> Optional[Dict[str, Any]]:
        item = self.store.add_cosmetic(
            name=payload.name,
            category=payload.category,
            type=payload.type,
            status=payload.status,
            photo=payload.photo_bytes(),
        )
        return cosmetic_to_dict(item) if item else None

    @instrument_tool("update_cosmetic", input_model=CosmeticInput)
    def update_cosmetic(self, cosmetic_id: str, payload: CosmeticInput) -> Optional[Dict[str, Any]]:
        current = self.store.cosmetic(cosmetic_id)
        if current is None:
            return None
        photo = payload.photo_bytes() if "photo" in payload.model_fields_set else current.photo
        stored = self.store.update_cosmetic(
            replace(
                current,
                name=payload.name,
                category=payload.category,
                type=payload.type,
                status=payload.status,
                photo=photo,
            )
        )
        return cosmetic_to_dict(stored) if stored else None

    @instrument_tool("get_cosmetic")
    def get_cosmetic(self, cosmetic_id: str) -> Optional[Dict[str, Any]]:
        item = self.store.cosmetic(cosmetic_id)
        return cosmetic_to_dict(item) if item else None

    def get_cosmetic_photo(self, cosmetic_id: str) -> Optional[bytes]:
        item = self.store.cosmetic(cosmetic_id)
        return item.photo if item else None

    @instrument_tool("list_cosmetics")
    def list_cosmetics(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        items = self.store.cosmetics_with_status(status) if status else self.store.cosmetics
        return [cosmetic_to_dict(item) for item in items]

    @instrument_tool("delete_cosmetic")
    def delete_cosmetic(self, cosmetic_id: str) -> bool:
        existed = self.store.cosmetic(cosmetic_id) is not None
        self.store.delete_cosmetic(cosmetic_id)
        return existed

    # Looks

    def _look_payload(self, look) -> Dict[str, Any]:
        data = look_to_dict(look)
        data["preview"] = [
            cosmetic_to_dict(item) for item in self.store.cosmetics_for_look(look, LOOK_PREVIEW_LIMIT)
        ]
        return data

    @instrument_tool("add_look", input_model=LookInput)
    def add_look(self, payload: LookInput) -> Optional[Dict[str, Any]]:
        look = self.store.add_look(payload.title, payload.note, payload.cosmetic_ids)
        return self._look_payload(look) if look else None

    @instrument_tool("update_look", input_model=LookInput)
    def update_look(self, look_id: str, payload: LookInput) -> Optional[Dict[str, Any]]:
        current = self.store.look(look_id)
        if current is None:
            return None
        stored = self.store.update_look(
            replace(current, title=payload.title, note=payload.note, cosmetic_ids=tuple(payload.cosmetic_ids))
        )
        return self._look_payload(stored) if stored else None

    @instrument_tool("get_look")
    def get_look(self, look_id: str) -> Optional[Dict[str, Any]]:
        look = self.store.look(look_id)
        return self._look_payload(look) if look else None

    @instrument_tool("list_looks")
    def list_looks(self) -> List[Dict[str, Any]]:
        return [self._look_payload(look) for look in self.store.looks]

    @instrument_tool("delete_look")
    def delete_look(self, look_id: str) -> bool:
        existed = self.store.look(look_id) is not None
        self.store.delete_look(look_id)
        return existed

    # Usage

    def _day_payload(self, day_key: str) -> Dict[str, Any]:
        entry = self.store.usage_entry(day_key)
        return {
            "day_key": day_key,
            "entry": usage_to_dict(entry) if entry else None,
            "looks": [look_to_dict(look) for look in self.store.looks_for_day(day_key)],
            "cosmetics": [cosmetic_to_dict(item) for item in self.store.cosmetics_for_day(day_key)],
        }

    @instrument_tool("get_day")
    def get_day(self, day_key: str) -> Dict[str, Any]:
        return self._day_payload(day_key)

    @instrument_tool("set_day", input_model=DayUsageInput)
    def set_day(self, payload: DayUsageInput) -> Dict[str, Any]:
        self.store.set_usage_for_day(payload.day_key, payload.look_ids, payload.cosmetic_ids)
        return self._day_payload(payload.day_key)

    @instrument_tool("add_look_to_day")
    def add_look_to_day(self, day_key: str, look_id: str) -> Dict[str, Any]:
        self.store.add_look_to_day(day_key, look_id)
        return self._day_payload(day_key)

    @instrument_tool("remove_look_from_day")
    def remove_look_from_day(self, day_key: str, look_id: str) -> Dict[str, Any]:
        self.store.remove_look_from_day(day_key, look_id)
        return self._day_payload(day_key)

    @instrument_tool("add_cosmetic_to_day")
    def add_cosmetic_to_day(self, day_key: str, cosmetic_id: str) -> Dict[str, Any]:
        self.store.add_cosmetic_to_day(day_key, cosmetic_id)
        return self._day_payload(day_key)

    @instrument_tool("remove_cosmetic_from_day")
    def remove_cosmetic_from_day(self, day_key: str, cosmetic_id: str) -> Dict[str, Any]:
        self.store.remove_cosmetic_from_day(day_key, cosmetic_id)
        return self._day_payload(day_key)

    @instrument_tool("clear_day")
    def clear_day(self, day_key: str) -> Dict[str, Any]:
        self.store.clear_day(day_key)
        return self._day_payload(day_key)

    @instrument_tool("usage_between")
    def usage_between(self, start: date, end: date) -> List[Dict[str, Any]]:
        entries = sorted(self.store.usage_in_range(start, end), key=lambda entry: entry.day_key)
        return [usage_to_dict(entry) for entry in entries]

    @instrument_tool("calendar_markers")
    def calendar_markers(self, year: int, month: int) -> Dict[str, Dict[str, bool]]:
        return {
            key: {"has_looks": marker.has_looks, "has_cosmetics": marker.has_cosmetics}
            for key, marker in self.store.usage_markers(year, month).items()
        }

    @instrument_tool("today_summary")
    def today_summary(self) -> Dict[str, Any]:
        looks = self.store.todays_looks()
        return {
            "day_key": self.store.day_key(self.store.today()),
            "has_usage": self.store.has_any_usage_today(),
            "looks": [self._look_payload(look) for look in looks],
            "cosmetics": [cosmetic_to_dict(item) for item in self.store.todays_cosmetics()],
        }

    # Statistics

    @instrument_tool("statistics", input_model=StatsInput)
    def statistics(self, payload: StatsInput) -> Dict[str, Any]:
        model = build_statistics(
            self.store.snapshot(),
            payload.range,
            today=self.store.today(),
            suggestion_keyword=self.suggestion_keyword,
        )
        result = model.to_dict()
        result["has_any_usage"] = self.store.has_any_cosmetics_usage()
        return result

    @instrument_tool("reset_all")
    def reset_all(self) -> Dict[str, Any]:
        self.store.reset_all()
        return {"status": "ok"}


__all__ = ["BeautyTools", "LOOK_PREVIEW_LIMIT"]
