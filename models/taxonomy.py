"""Canonical taxonomy definitions for cosmetic items.

This module centralises the closed enumerations used by the catalog. The raw
string values are the persisted contract, so they must not change once data
has been written. Presentation lookups (legend colors) are kept in plain
tables next to the enums instead of on the enums themselves.
"""

from enum import Enum
from typing import Dict, Optional


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace("_", " ").replace("-", " ")


class CosmeticCategory(str, Enum):
    LIPSTICK = "Lipstick"
    EYESHADOW = "Eyeshadow"
    POWDER = "Powder"
    FOUNDATION = "Foundation"
    MASCARA = "Mascara"
    BROWS = "Brows"
    BRUSHES = "Brushes"


class CosmeticType(str, Enum):
    MATTE = "Matte"
    RADIANT = "Radiant"
    LIQUID = "Liquid"
    POWDER = "Powder"


class CosmeticStatus(str, Enum):
    IN_USE = "In use"
    IN_RESERVE = "In reserve"


CATEGORY_COLORS: Dict[CosmeticCategory, str] = {
    CosmeticCategory.LIPSTICK: "#D21919",
    CosmeticCategory.EYESHADOW: "#8E19D2",
    CosmeticCategory.POWDER: "#F99A34",
    CosmeticCategory.FOUNDATION: "#197FD2",
    CosmeticCategory.MASCARA: "#D219B0",
    CosmeticCategory.BROWS: "#19D22F",
    CosmeticCategory.BRUSHES: "#19C6D2",
}


def _lookup(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    key = _normalize_key(str(value))
    for member in enum_cls:
        if key in {_normalize_key(member.value), _normalize_key(member.name)}:
            return member
    allowed = [member.value for member in enum_cls]
    raise ValueError(f"Unsupported {enum_cls.__name__} '{value}'. Allowed: {allowed}")


def validate_category(value: str | CosmeticCategory) -> CosmeticCategory:
    """Validate and normalise a category value.

    Accepts the raw value (``"Lipstick"``) or the member name (``"lipstick"``)
    in any case. Raises a :class:`ValueError` for anything outside the
    closed set.
    """

    return _lookup(CosmeticCategory, value)


def validate_type(value: str | CosmeticType | None) -> Optional[CosmeticType]:
    """Validate an optional cosmetic type; ``None`` and blank mean no type."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _lookup(CosmeticType, value)


def validate_status(value: str | CosmeticStatus) -> CosmeticStatus:
    """Validate a status value (``"In use"``, ``"in_use"``, ``"IN_RESERVE"``...)."""

    return _lookup(CosmeticStatus, value)


def category_color(category: CosmeticCategory) -> str:
    return CATEGORY_COLORS[category]


__all__ = [
    "CATEGORY_COLORS",
    "CosmeticCategory",
    "CosmeticStatus",
    "CosmeticType",
    "category_color",
    "validate_category",
    "validate_status",
    "validate_type",
]
