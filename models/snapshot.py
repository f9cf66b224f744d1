"""Pydantic schema for the persisted store blob.

The blob is one JSON document holding three ordered lists. Field names and
enum raw values are the on-disk contract; unknown enum values or malformed
photos fail validation for the whole document.
"""

from __future__ import annotations

import base64
import binascii
from typing import List, Optional
from uuid import NAMESPACE_URL, uuid5

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.cosmetic_item import CosmeticItem, Look, UsageEntry
from models.taxonomy import CosmeticCategory, CosmeticStatus, CosmeticType

_USAGE_NAMESPACE = uuid5(NAMESPACE_URL, "beauty-tracker:usage")


def usage_id_for(day_key: str) -> str:
    """Stable upper-case uuid for a day, so every write of that day carries the same id."""

    return str(uuid5(_USAGE_NAMESPACE, day_key)).upper()


class CosmeticRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str
    category: CosmeticCategory
    type: Optional[CosmeticType] = None
    status: CosmeticStatus
    photo_data: Optional[str] = Field(default=None, alias="photoData")

    @field_validator("photo_data")
    @classmethod
    def _validate_photo(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("photoData is not valid base64") from exc
        return value

    @classmethod
    def from_item(cls, item: CosmeticItem) -> "CosmeticRecord":
        photo = base64.b64encode(item.photo).decode("ascii") if item.photo is not None else None
        return cls(
            id=item.id,
            name=item.name,
            category=item.category,
            type=item.type,
            status=item.status,
            photo_data=photo,
        )

    def to_item(self) -> CosmeticItem:
        photo = base64.b64decode(self.photo_data) if self.photo_data is not None else None
        return CosmeticItem(
            id=self.id,
            name=self.name,
            category=self.category,
            type=self.type,
            status=self.status,
            photo=photo,
        )


class LookRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    title: str
    note: Optional[str] = None
    cosmetic_ids: List[str] = Field(default_factory=list, alias="cosmeticIDs")

    @classmethod
    def from_look(cls, look: Look) -> "LookRecord":
        return cls(id=look.id, title=look.title, note=look.note, cosmetic_ids=list(look.cosmetic_ids))

    def to_look(self) -> Look:
        return Look(id=self.id, title=self.title, note=self.note, cosmetic_ids=tuple(self.cosmetic_ids))


class UsageRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # The day key is the identity; ``id`` is derived from it on write and ignored on read.
    id: Optional[str] = None
    day_key: str = Field(alias="dayKey")
    look_ids: List[str] = Field(default_factory=list, alias="lookIDs")
    cosmetic_ids: List[str] = Field(default_factory=list, alias="cosmeticIDs")

    @classmethod
    def from_entry(cls, entry: UsageEntry) -> "UsageRecord":
        return cls(
            id=usage_id_for(entry.day_key),
            day_key=entry.day_key,
            look_ids=list(entry.look_ids),
            cosmetic_ids=list(entry.cosmetic_ids),
        )

    def to_entry(self) -> UsageEntry:
        return UsageEntry(
            day_key=self.day_key,
            look_ids=tuple(self.look_ids),
            cosmetic_ids=tuple(self.cosmetic_ids),
        )


class StorageSnapshot(BaseModel):
    """The whole persisted state: cosmetics, looks and usage, in order."""

    cosmetics: List[CosmeticRecord] = Field(default_factory=list)
    looks: List[LookRecord] = Field(default_factory=list)
    usage: List[UsageRecord] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls,
        cosmetics: List[CosmeticItem],
        looks: List[Look],
        usage: List[UsageEntry],
    ) -> "StorageSnapshot":
        return cls(
            cosmetics=[CosmeticRecord.from_item(item) for item in cosmetics],
            looks=[LookRecord.from_look(look) for look in looks],
            usage=[UsageRecord.from_entry(entry) for entry in usage],
        )

    def encode(self) -> bytes:
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")

    @classmethod
    def decode(cls, blob: bytes) -> "StorageSnapshot":
        """Parse a blob; raises :class:`pydantic.ValidationError` on any defect."""

        return cls.model_validate_json(blob)


__all__ = ["CosmeticRecord", "LookRecord", "StorageSnapshot", "UsageRecord", "usage_id_for"]
