"""The beauty store: authoritative catalog, looks and day-keyed usage ledger.

The store owns three ordered collections and is the only component that
mutates them. Every successful mutation is persisted immediately as one
snapshot blob in a :class:`~memory.kv_store.KeyValueStore`. Validation
problems (blank names, unknown ids) are silent no-ops; persistence problems
are logged and never raised.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, replace
from datetime import date, datetime
from functools import cached_property
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from beauty_app.config import DEFAULT_STORAGE_KEY, DEFAULT_SUGGESTION_KEYWORD
from beauty_app.logging_config import get_logger, log_event
from memory.kv_store import InMemoryKeyValueStore, KeyValueStore
from models.cosmetic_item import (
    CosmeticItem,
    Look,
    UsageEntry,
    clean_text,
    unique_ordered,
)
from models.snapshot import StorageSnapshot
from models.taxonomy import (
    CosmeticCategory,
    CosmeticStatus,
    CosmeticType,
    validate_category,
    validate_status,
)
from tools.day_keys import day_key as format_day_key
from tools.day_keys import is_day_key, local_date, parse_day_key

LOGGER = get_logger(__name__)

DayRef = str | date | datetime


def _key_for(day: DayRef) -> str:
    return day if isinstance(day, str) else format_day_key(day)


@dataclass(frozen=True)
class StoreChange:
    """Change notification delivered to store listeners."""

    kind: str
    ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DayMarker:
    """Calendar dot flags for one day."""

    has_looks: bool
    has_cosmetics: bool


@dataclass(frozen=True)
class StoreSnapshot:
    """Immutable read model over the store collections."""

    cosmetics: Tuple[CosmeticItem, ...] = ()
    looks: Tuple[Look, ...] = ()
    usage: Tuple[UsageEntry, ...] = ()

    @cached_property
    def _cosmetics_by_id(self) -> Dict[str, CosmeticItem]:
        index: Dict[str, CosmeticItem] = {}
        for item in self.cosmetics:
            index.setdefault(item.id, item)
        return index

    def cosmetic(self, cosmetic_id: str) -> Optional[CosmeticItem]:
        return self._cosmetics_by_id.get(cosmetic_id)

    def look(self, look_id: str) -> Optional[Look]:
        return next((look for look in self.looks if look.id == look_id), None)

    def usage_entry(self, day: DayRef) -> Optional[UsageEntry]:
        key = _key_for(day)
        return next((entry for entry in self.usage if entry.day_key == key), None)

    def resolve_cosmetics(self, ids: Iterable[str]) -> List[CosmeticItem]:
        """Resolve ids in order, skipping the ones that no longer exist."""

        return [item for item in (self.cosmetic(i) for i in ids) if item is not None]

    def usage_in_range(self, start: date | datetime, end: date | datetime) -> List[UsageEntry]:
        """Entries whose day lies between the local days of ``start`` and ``end``, inclusive."""

        start_day = local_date(start)
        end_day = local_date(end)
        selected = []
        for entry in self.usage:
            day = parse_day_key(entry.day_key)
            if day is not None and start_day <= day <= end_day:
                selected.append(entry)
        return selected

    def last_usage_date(self, category: CosmeticCategory) -> Optional[date]:
        """Most recent day, over the whole history, on which the category was used."""

        last: Optional[date] = None
        for entry in self.usage:
            day = parse_day_key(entry.day_key)
            if day is None:
                continue
            used = any(
                item.category == category for item in self.resolve_cosmetics(entry.cosmetic_ids)
            )
            if used and (last is None or day > last):
                last = day
        return last

    def has_any_cosmetics_usage(self) -> bool:
        return any(entry.cosmetic_ids for entry in self.usage)

    def suggested_look_title(self, keyword: str = DEFAULT_SUGGESTION_KEYWORD) -> Optional[str]:
        """First look whose title contains ``keyword``, else the first look."""

        needle = (keyword or "").lower()
        if needle:
            for look in self.looks:
                if needle in look.title.lower():
                    return look.title
        return self.looks[0].title if self.looks else None


class BeautyStore:
    """In-memory store of cosmetics, looks and usage with snapshot persistence.

    A single re-entrant lock serialises reads and mutations so the multi-step
    invariants (ordered dedup, cascade cleanup, empty-day purge) hold even
    when callers arrive from worker threads.
    """

    def __init__(
        self,
        kv_store: KeyValueStore | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        today: Callable[[], date] = date.today,
        suggestion_keyword: str = DEFAULT_SUGGESTION_KEYWORD,
        autoload: bool = True,
    ) -> None:
        self.kv_store = kv_store or InMemoryKeyValueStore()
        self.storage_key = storage_key
        self.suggestion_keyword = suggestion_keyword
        self._today = today
        self._lock = threading.RLock()
        self._cosmetics: List[CosmeticItem] = []
        self._looks: List[Look] = []
        self._usage: List[UsageEntry] = []
        self._listeners: List[Callable[[StoreChange], None]] = []
        if autoload:
            self.load()

    # Collections

    @property
    def cosmetics(self) -> Tuple[CosmeticItem, ...]:
        with self._lock:
            return tuple(self._cosmetics)

    @property
    def looks(self) -> Tuple[Look, ...]:
        with self._lock:
            return tuple(self._looks)

    @property
    def usage(self) -> Tuple[UsageEntry, ...]:
        with self._lock:
            return tuple(self._usage)

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                cosmetics=tuple(self._cosmetics),
                looks=tuple(self._looks),
                usage=tuple(self._usage),
            )

    def today(self) -> date:
        return self._today()

    # Change notification

    def subscribe(self, listener: Callable[[StoreChange], None]) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes it."""

        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: str, *ids: str) -> None:
        change = StoreChange(kind=kind, ids=tuple(ids))
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                log_event(LOGGER, logging.WARNING, "store_listener_failed", kind=kind, exc_info=True)

    # Storage

    def _clear(self) -> None:
        self._cosmetics = []
        self._looks = []
        self._usage = []

    def load(self) -> None:
        """Replace the in-memory collections with the persisted snapshot.

        A missing blob yields empty collections. A blob that cannot be read or
        decoded is logged and also yields empty collections; nothing from a
        partially valid blob is kept.
        """

        with self._lock:
            self._clear()
            try:
                blob = self.kv_store.get(self.storage_key)
            except (OSError, sqlite3.Error, ValueError) as exc:
                log_event(LOGGER, logging.ERROR, "store_load_failed", storage_key=self.storage_key, error=str(exc))
                blob = None

            if blob is not None:
                try:
                    snapshot = StorageSnapshot.decode(blob)
                    cosmetics = [record.to_item() for record in snapshot.cosmetics]
                    looks = [record.to_look() for record in snapshot.looks]
                    usage = [record.to_entry() for record in snapshot.usage]
                except ValueError as exc:
                    log_event(
                        LOGGER,
                        logging.ERROR,
                        "store_decode_failed",
                        storage_key=self.storage_key,
                        error=str(exc),
                    )
                else:
                    self._cosmetics = cosmetics
                    self._looks = [replace(look, cosmetic_ids=unique_ordered(look.cosmetic_ids)) for look in looks]
                    self._usage = _merge_days(usage)
                    log_event(
                        LOGGER,
                        logging.INFO,
                        "store_loaded",
                        cosmetics=len(self._cosmetics),
                        looks=len(self._looks),
                        usage_days=len(self._usage),
                    )
        self._notify("loaded")

    def save(self) -> bool:
        """Persist all three collections as one blob. Returns ``False`` on failure."""

        with self._lock:
            try:
                blob = StorageSnapshot.from_domain(self._cosmetics, self._looks, self._usage).encode()
                self.kv_store.set(self.storage_key, blob)
            except (OSError, sqlite3.Error, ValueError, TypeError) as exc:
                log_event(LOGGER, logging.ERROR, "store_save_failed", storage_key=self.storage_key, error=str(exc))
                return False
            log_event(LOGGER, logging.DEBUG, "store_saved", storage_key=self.storage_key, size=len(blob))
            return True

    def reset_all(self) -> None:
        with self._lock:
            self._clear()
            try:
                self.kv_store.delete(self.storage_key)
            except (OSError, sqlite3.Error, ValueError) as exc:
                log_event(LOGGER, logging.ERROR, "store_reset_failed", storage_key=self.storage_key, error=str(exc))
        self._notify("reset")

    # Day keys

    @staticmethod
    def day_key(value: date | datetime) -> str:
        return format_day_key(value)

    @staticmethod
    def parse_day_key(key: str) -> Optional[date]:
        return parse_day_key(key)

    # Finders

    def cosmetic(self, cosmetic_id: str) -> Optional[CosmeticItem]:
        with self._lock:
            return next((item for item in self._cosmetics if item.id == cosmetic_id), None)

    def look(self, look_id: str) -> Optional[Look]:
        with self._lock:
            return next((look for look in self._looks if look.id == look_id), None)

    # Cosmetics

    def add_cosmetic(
        self,
        name: str,
        category: CosmeticCategory | str,
        type: CosmeticType | str | None = None,
        status: CosmeticStatus | str = CosmeticStatus.IN_USE,
        photo: bytes | None = None,
    ) -> Optional[CosmeticItem]:
        trimmed = (name or "").strip()
        if not trimmed:
            return None

        item = CosmeticItem(name=trimmed, category=category, type=type, status=status, photo=photo)
        with self._lock:
            self._cosmetics.insert(0, item)
            self.save()
        self._notify("cosmetic_added", item.id)
        return item

    def update_cosmetic(self, item: CosmeticItem) -> Optional[CosmeticItem]:
        trimmed = (item.name or "").strip()
        with self._lock:
            idx = self._index_of(self._cosmetics, item.id)
            if idx is None or not trimmed:
                return None
            stored = replace(item, name=trimmed)
            self._cosmetics[idx] = stored
            self.save()
        self._notify("cosmetic_updated", stored.id)
        return stored

    def delete_cosmetic(self, cosmetic_id: str) -> None:
        with self._lock:
            self._cosmetics = [item for item in self._cosmetics if item.id != cosmetic_id]
            self._looks = [
                replace(look, cosmetic_ids=tuple(i for i in look.cosmetic_ids if i != cosmetic_id))
                if cosmetic_id in look.cosmetic_ids
                else look
                for look in self._looks
            ]
            self._usage = [
                replace(entry, cosmetic_ids=tuple(i for i in entry.cosmetic_ids if i != cosmetic_id))
                for entry in self._usage
            ]
            self._purge_empty_days()
            self.save()
        self._notify("cosmetic_deleted", cosmetic_id)

    # Looks

    def add_look(self, title: str, note: Optional[str] = None, cosmetic_ids: Sequence[str] = ()) -> Optional[Look]:
        trimmed = (title or "").strip()
        if not trimmed:
            return None

        look = Look(title=trimmed, note=clean_text(note), cosmetic_ids=unique_ordered(cosmetic_ids))
        with self._lock:
            self._looks.insert(0, look)
            self.save()
        self._notify("look_added", look.id)
        return look

    def update_look(self, look: Look) -> Optional[Look]:
        trimmed = (look.title or "").strip()
        with self._lock:
            idx = self._index_of(self._looks, look.id)
            if idx is None or not trimmed:
                return None
            stored = replace(
                look,
                title=trimmed,
                note=clean_text(look.note),
                cosmetic_ids=unique_ordered(look.cosmetic_ids),
            )
            self._looks[idx] = stored
            self.save()
        self._notify("look_updated", stored.id)
        return stored

    def delete_look(self, look_id: str) -> None:
        with self._lock:
            self._looks = [look for look in self._looks if look.id != look_id]
            self._usage = [
                replace(entry, look_ids=tuple(i for i in entry.look_ids if i != look_id))
                for entry in self._usage
            ]
            self._purge_empty_days()
            self.save()
        self._notify("look_deleted", look_id)

    # Usage (day)

    def usage_entry(self, day: DayRef) -> Optional[UsageEntry]:
        key = _key_for(day)
        with self._lock:
            return next((entry for entry in self._usage if entry.day_key == key), None)

    def set_usage_for_day(self, day_key: str, look_ids: Sequence[str], cosmetic_ids: Sequence[str]) -> None:
        """Replace both lists for a day; an all-empty result removes the day."""

        if not is_day_key(day_key):
            return
        entry = UsageEntry(
            day_key=day_key,
            look_ids=unique_ordered(look_ids),
            cosmetic_ids=unique_ordered(cosmetic_ids),
        )
        with self._lock:
            self._put_entry(entry)
            self._purge_empty_days()
            self.save()
        self._notify("usage_changed", day_key)

    def clear_day(self, day_key: str) -> None:
        with self._lock:
            self._usage = [entry for entry in self._usage if entry.day_key != day_key]
            self.save()
        self._notify("usage_changed", day_key)

    def add_look_to_day(self, day_key: str, look_id: str) -> None:
        self._add_to_day(day_key, look_id, field_name="look_ids")

    def remove_look_from_day(self, day_key: str, look_id: str) -> None:
        self._remove_from_day(day_key, look_id, field_name="look_ids")

    def add_cosmetic_to_day(self, day_key: str, cosmetic_id: str) -> None:
        self._add_to_day(day_key, cosmetic_id, field_name="cosmetic_ids")

    def remove_cosmetic_from_day(self, day_key: str, cosmetic_id: str) -> None:
        self._remove_from_day(day_key, cosmetic_id, field_name="cosmetic_ids")

    def _add_to_day(self, day_key: str, ref_id: str, field_name: str) -> None:
        if not is_day_key(day_key) or not ref_id:
            return
        with self._lock:
            entry = self.usage_entry(day_key) or UsageEntry(day_key=day_key)
            current: Tuple[str, ...] = getattr(entry, field_name)
            if ref_id in current:
                return
            self._put_entry(replace(entry, **{field_name: current + (ref_id,)}))
            self._purge_empty_days()
            self.save()
        self._notify("usage_changed", day_key)

    def _remove_from_day(self, day_key: str, ref_id: str, field_name: str) -> None:
        with self._lock:
            entry = self.usage_entry(day_key)
            if entry is None:
                return
            current: Tuple[str, ...] = getattr(entry, field_name)
            self._put_entry(replace(entry, **{field_name: tuple(i for i in current if i != ref_id)}))
            self._purge_empty_days()
            self.save()
        self._notify("usage_changed", day_key)

    def _put_entry(self, entry: UsageEntry) -> None:
        for idx, existing in enumerate(self._usage):
            if existing.day_key == entry.day_key:
                self._usage[idx] = entry
                return
        self._usage.append(entry)

    def _purge_empty_days(self) -> None:
        """Drop every usage entry whose look and cosmetic lists are both empty.

        Every usage mutation and cascade ends here; no empty entry survives a
        store operation.
        """

        self._usage = [entry for entry in self._usage if not entry.is_empty]

    @staticmethod
    def _index_of(records: Sequence[CosmeticItem | Look], record_id: str) -> Optional[int]:
        for idx, record in enumerate(records):
            if record.id == record_id:
                return idx
        return None

    # Queries

    def cosmetics_with_status(self, status: CosmeticStatus | str) -> List[CosmeticItem]:
        wanted = validate_status(status)
        with self._lock:
            return [item for item in self._cosmetics if item.status == wanted]

    def in_use_cosmetics(self) -> List[CosmeticItem]:
        return self.cosmetics_with_status(CosmeticStatus.IN_USE)

    def cosmetics_for_look(self, look: Look, limit: int) -> List[CosmeticItem]:
        """Resolve up to ``limit`` referenced ids; missing items are skipped."""

        return self.snapshot().resolve_cosmetics(look.cosmetic_ids[: max(0, limit)])

    def usage_in_range(self, start: date | datetime, end: date | datetime) -> List[UsageEntry]:
        return self.snapshot().usage_in_range(start, end)

    def last_usage_date(self, category: CosmeticCategory | str) -> Optional[date]:
        return self.snapshot().last_usage_date(validate_category(category))

    def has_any_cosmetics_usage(self) -> bool:
        return self.snapshot().has_any_cosmetics_usage()

    def suggested_look_title(self, keyword: str | None = None) -> Optional[str]:
        return self.snapshot().suggested_look_title(keyword or self.suggestion_keyword)

    def looks_for_day(self, day: DayRef) -> List[Look]:
        entry = self.usage_entry(day)
        if entry is None or not entry.look_ids:
            return []
        wanted = set(entry.look_ids)
        with self._lock:
            return [look for look in self._looks if look.id in wanted]

    def cosmetics_for_day(self, day: DayRef) -> List[CosmeticItem]:
        entry = self.usage_entry(day)
        if entry is None:
            return []
        return self.snapshot().resolve_cosmetics(entry.cosmetic_ids)

    def has_looks_on(self, day: DayRef) -> bool:
        entry = self.usage_entry(day)
        return entry is not None and entry.has_looks

    def has_cosmetics_on(self, day: DayRef) -> bool:
        entry = self.usage_entry(day)
        return entry is not None and entry.has_cosmetics

    def usage_markers(self, year: int, month: int) -> Dict[str, DayMarker]:
        """Calendar dot flags for every day of a month that has usage."""

        markers: Dict[str, DayMarker] = {}
        with self._lock:
            for entry in self._usage:
                day = parse_day_key(entry.day_key)
                if day is None or day.year != year or day.month != month:
                    continue
                markers[entry.day_key] = DayMarker(has_looks=entry.has_looks, has_cosmetics=entry.has_cosmetics)
        return dict(sorted(markers.items()))

    def todays_looks(self) -> List[Look]:
        return self.looks_for_day(self.today())

    def todays_cosmetics(self) -> List[CosmeticItem]:
        return self.cosmetics_for_day(self.today())

    def has_any_usage_today(self) -> bool:
        entry = self.usage_entry(self.today())
        return entry is not None and not entry.is_empty


def _merge_days(entries: Iterable[UsageEntry]) -> List[UsageEntry]:
    """Fold entries sharing a day key together, dedup lists, drop empty days."""

    merged: Dict[str, UsageEntry] = {}
    for entry in entries:
        existing = merged.get(entry.day_key)
        if existing is None:
            merged[entry.day_key] = replace(
                entry,
                look_ids=unique_ordered(entry.look_ids),
                cosmetic_ids=unique_ordered(entry.cosmetic_ids),
            )
        else:
            merged[entry.day_key] = replace(
                existing,
                look_ids=unique_ordered(existing.look_ids + entry.look_ids),
                cosmetic_ids=unique_ordered(existing.cosmetic_ids + entry.cosmetic_ids),
            )
    return [entry for entry in merged.values() if not entry.is_empty]


__all__ = ["BeautyStore", "DayMarker", "StoreChange", "StoreSnapshot"]
