"""Pydantic schemas and helpers for validating tool and API payloads."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from models.taxonomy import (
    CosmeticCategory,
    CosmeticStatus,
    CosmeticType,
    validate_category,
    validate_status,
    validate_type,
)
from tools.day_keys import DAY_KEY_PATTERN, parse_day_key


def _decode_photo(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("photo must be base64 encoded") from exc
    return value


class CosmeticInput(BaseModel):
    """Input contract for adding or editing a cosmetic item.

    Names are not checked for blankness here; the store treats a blank name
    as a no-op.
    """

    name: str
    category: CosmeticCategory
    type: Optional[CosmeticType] = None
    status: CosmeticStatus = CosmeticStatus.IN_USE
    photo: Optional[str] = Field(default=None, description="Base64 encoded image bytes")

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> CosmeticCategory:
        return validate_category(value)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> Optional[CosmeticType]:
        return validate_type(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> CosmeticStatus:
        return validate_status(value)

    @field_validator("photo")
    @classmethod
    def _photo(cls, value: Optional[str]) -> Optional[str]:
        return _decode_photo(value)

    def photo_bytes(self) -> Optional[bytes]:
        return base64.b64decode(self.photo) if self.photo is not None else None


class LookInput(BaseModel):
    """Input contract for adding or editing a look."""

    title: str
    note: Optional[str] = None
    cosmetic_ids: List[str] = Field(default_factory=list)


class DayUsageInput(BaseModel):
    """Full replacement of one day's usage lists."""

    day_key: str = Field(pattern=DAY_KEY_PATTERN.pattern)
    look_ids: List[str] = Field(default_factory=list)
    cosmetic_ids: List[str] = Field(default_factory=list)

    @field_validator("day_key")
    @classmethod
    def _valid_day(cls, value: str) -> str:
        if parse_day_key(value) is None:
            raise ValueError(f"'{value}' is not a calendar day")
        return value


class StatsInput(BaseModel):
    range: Literal["week", "month"] = "week"

    @field_validator("range", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> str:
        return str(value).strip().lower()


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    details = exc.errors(include_url=False, include_context=False)
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "CosmeticInput",
    "DayUsageInput",
    "LookInput",
    "StatsInput",
    "ValidationResult",
    "validation_failure",
]
