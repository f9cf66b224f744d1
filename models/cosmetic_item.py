"""Cosmetic catalog data models and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, Optional, Tuple, TypeVar
from uuid import uuid4

from models.taxonomy import (
    CosmeticCategory,
    CosmeticStatus,
    CosmeticType,
    validate_category,
    validate_status,
    validate_type,
)

H = TypeVar("H", bound=Hashable)


def new_id() -> str:
    """Return a fresh opaque identifier in canonical upper-case UUID form."""

    return str(uuid4()).upper()


def unique_ordered(values: Iterable[H] | None) -> Tuple[H, ...]:
    """Drop duplicates keeping the first occurrence and the original order."""

    seen = set()
    result = []
    for value in values or ():
        if value not in seen:
            seen.add(value)
            result.append(value)
    return tuple(result)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim optional free text; blank becomes ``None``."""

    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


@dataclass(frozen=True)
class CosmeticItem:
    """A single product in the user's cosmetics catalog."""

    name: str
    category: CosmeticCategory
    status: CosmeticStatus
    type: Optional[CosmeticType] = None
    photo: Optional[bytes] = field(default=None, repr=False)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", validate_category(self.category))
        object.__setattr__(self, "status", validate_status(self.status))
        object.__setattr__(self, "type", validate_type(self.type))


@dataclass(frozen=True)
class Look:
    """A named bundle of cosmetic references.

    ``cosmetic_ids`` are weak references: a look never owns its items and may
    hold ids of items that were deleted since.
    """

    title: str
    note: Optional[str] = None
    cosmetic_ids: Tuple[str, ...] = ()
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cosmetic_ids", tuple(self.cosmetic_ids or ()))


@dataclass(frozen=True)
class UsageEntry:
    """What was used on one calendar day, identified by its day key."""

    day_key: str
    look_ids: Tuple[str, ...] = ()
    cosmetic_ids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "look_ids", tuple(self.look_ids or ()))
        object.__setattr__(self, "cosmetic_ids", tuple(self.cosmetic_ids or ()))

    @property
    def has_looks(self) -> bool:
        return bool(self.look_ids)

    @property
    def has_cosmetics(self) -> bool:
        return bool(self.cosmetic_ids)

    @property
    def is_empty(self) -> bool:
        return not self.look_ids and not self.cosmetic_ids


def cosmetic_to_dict(item: CosmeticItem) -> Dict[str, Any]:
    """Plain representation for tools and the HTTP layer (photo flagged, not inlined)."""

    return {
        "id": item.id,
        "name": item.name,
        "category": item.category.value,
        "type": item.type.value if item.type else None,
        "status": item.status.value,
        "has_photo": item.photo is not None,
    }


def look_to_dict(look: Look) -> Dict[str, Any]:
    return {
        "id": look.id,
        "title": look.title,
        "note": look.note,
        "cosmetic_ids": list(look.cosmetic_ids),
    }


def usage_to_dict(entry: UsageEntry) -> Dict[str, Any]:
    return {
        "day_key": entry.day_key,
        "look_ids": list(entry.look_ids),
        "cosmetic_ids": list(entry.cosmetic_ids),
    }


__all__ = [
    "CosmeticItem",
    "Look",
    "UsageEntry",
    "clean_text",
    "cosmetic_to_dict",
    "look_to_dict",
    "new_id",
    "unique_ordered",
    "usage_to_dict",
]
