"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.cosmetic_item import CosmeticItem, Look, UsageEntry, unique_ordered

__all__ = ["CosmeticItem", "Look", "UsageEntry", "unique_ordered"]
