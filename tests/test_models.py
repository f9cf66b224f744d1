"""Taxonomy, entity and snapshot codec tests."""

from __future__ import annotations

import base64
import json
import uuid

import pytest
from pydantic import ValidationError

from models import taxonomy
from models.cosmetic_item import CosmeticItem, Look, UsageEntry, clean_text, unique_ordered
from models.snapshot import StorageSnapshot, usage_id_for
from models.taxonomy import CosmeticCategory, CosmeticStatus, CosmeticType


def test_taxonomy_raw_values_are_stable() -> None:
    """Raw enum strings are the persisted contract."""

    assert [c.value for c in CosmeticCategory] == [
        "Lipstick",
        "Eyeshadow",
        "Powder",
        "Foundation",
        "Mascara",
        "Brows",
        "Brushes",
    ]
    assert [t.value for t in CosmeticType] == ["Matte", "Radiant", "Liquid", "Powder"]
    assert [s.value for s in CosmeticStatus] == ["In use", "In reserve"]
    assert set(taxonomy.CATEGORY_COLORS) == set(CosmeticCategory)


def test_validators_accept_values_and_names() -> None:
    assert taxonomy.validate_category("lipstick") is CosmeticCategory.LIPSTICK
    assert taxonomy.validate_category("Eyeshadow") is CosmeticCategory.EYESHADOW
    assert taxonomy.validate_status("in_use") is CosmeticStatus.IN_USE
    assert taxonomy.validate_status("In reserve") is CosmeticStatus.IN_RESERVE
    assert taxonomy.validate_type(None) is None
    assert taxonomy.validate_type("  ") is None
    assert taxonomy.validate_type("matte") is CosmeticType.MATTE

    with pytest.raises(ValueError):
        taxonomy.validate_category("blush")
    with pytest.raises(ValueError):
        taxonomy.validate_status("lost")


def test_unique_ordered_keeps_first_occurrence() -> None:
    assert unique_ordered(["a", "b", "a", "c", "b"]) == ("a", "b", "c")
    assert unique_ordered([]) == ()
    assert unique_ordered(None) == ()


def test_clean_text_normalises_blank_to_none() -> None:
    assert clean_text("  soft glam  ") == "soft glam"
    assert clean_text("   ") is None
    assert clean_text(None) is None


def test_entities_coerce_fields() -> None:
    item = CosmeticItem(name="Red Lip", category="Lipstick", status="In use", type="Matte")
    assert item.category is CosmeticCategory.LIPSTICK
    assert item.status is CosmeticStatus.IN_USE
    assert item.type is CosmeticType.MATTE
    assert item.id and item.id == item.id.upper()

    look = Look(title="Evening", cosmetic_ids=["x", "y"])
    assert look.cosmetic_ids == ("x", "y")

    entry = UsageEntry(day_key="2025-01-10", cosmetic_ids=["x"])
    assert entry.has_cosmetics and not entry.has_looks
    assert not entry.is_empty
    assert UsageEntry(day_key="2025-01-10").is_empty


def test_snapshot_encodes_contract_field_names() -> None:
    item = CosmeticItem(name="Lash", category=CosmeticCategory.MASCARA, status=CosmeticStatus.IN_RESERVE, photo=b"\x89PNG")
    look = Look(title="Day", note=None, cosmetic_ids=(item.id,))
    entry = UsageEntry(day_key="2025-03-01", look_ids=(look.id,), cosmetic_ids=(item.id,))

    blob = StorageSnapshot.from_domain([item], [look], [entry]).encode()
    data = json.loads(blob)

    assert data["cosmetics"][0]["category"] == "Mascara"
    assert data["cosmetics"][0]["status"] == "In reserve"
    assert "type" not in data["cosmetics"][0]
    assert base64.b64decode(data["cosmetics"][0]["photoData"]) == b"\x89PNG"
    assert data["looks"][0]["cosmeticIDs"] == [item.id]
    assert "note" not in data["looks"][0]
    assert data["usage"][0] == {
        "id": usage_id_for("2025-03-01"),
        "dayKey": "2025-03-01",
        "lookIDs": [look.id],
        "cosmeticIDs": [item.id],
    }

    decoded = StorageSnapshot.decode(blob)
    assert decoded.cosmetics[0].to_item() == item
    assert decoded.looks[0].to_look() == look
    assert decoded.usage[0].to_entry() == entry


def test_snapshot_accepts_legacy_usage_id() -> None:
    blob = json.dumps(
        {
            "cosmetics": [],
            "looks": [],
            "usage": [{"id": "6B1F-LEGACY", "dayKey": "2025-02-02", "lookIDs": ["L"], "cosmeticIDs": []}],
        }
    ).encode()
    snapshot = StorageSnapshot.decode(blob)
    assert snapshot.usage[0].to_entry() == UsageEntry(day_key="2025-02-02", look_ids=("L",))


@pytest.mark.parametrize(
    "cosmetic",
    [
        {"id": "1", "name": "x", "category": "Blush", "status": "In use"},
        {"id": "1", "name": "x", "category": "Lipstick", "status": "Lost"},
        {"id": "1", "name": "x", "category": "Lipstick", "status": "In use", "type": "Glossy"},
        {"id": "1", "name": "x", "category": "Lipstick", "status": "In use", "photoData": "not base64!"},
    ],
)
def test_snapshot_rejects_unknown_values(cosmetic: dict) -> None:
    blob = json.dumps({"cosmetics": [cosmetic], "looks": [], "usage": []}).encode()
    with pytest.raises(ValidationError):
        StorageSnapshot.decode(blob)


def test_usage_ids_are_stable_per_day() -> None:
    first = usage_id_for("2025-03-01")

    assert first == usage_id_for("2025-03-01")
    assert first != usage_id_for("2025-03-02")
    assert first == str(uuid.UUID(first)).upper()

    entry = UsageEntry(day_key="2025-03-01", cosmetic_ids=("C",))
    blobs = [StorageSnapshot.from_domain([], [], [entry]).encode() for _ in range(2)]
    assert blobs[0] == blobs[1]
    assert json.loads(blobs[0])["usage"][0]["id"] == first
