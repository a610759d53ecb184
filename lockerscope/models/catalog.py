"""
Catalog Models.

This module defines the boundary between raw account-report tokens
and catalog-backed cosmetic records.

INVARIANTS:
- OwnedItemToken is UNTRUSTED text pulled out of an account report
- CatalogRecord is built once from the catalog payload, read-only afterwards
- All models are frozen (immutable after construction)
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

DEFAULT_RARITY = "common"

# Thumbnail lookup order over a record's image refs
IMAGE_PREFERENCE = ("icon", "smallIcon", "featured", "lego.large", "lego.small")


class Category(str, Enum):
    """Recognized cosmetic categories, keyed by the catalog backend type."""

    CHARACTER = "AthenaCharacter"
    BACKPACK = "AthenaBackpack"
    PICKAXE = "AthenaPickaxe"
    GLIDER = "AthenaGlider"
    CONTRAIL = "AthenaSkyDiveContrail"
    EMOTE = "AthenaDance"
    MUSIC_PACK = "AthenaMusicPack"
    WRAP = "AthenaItemWrap"

    @classmethod
    def parse(cls, value: str | None) -> "Category | None":
        """Return the matching category, or None for unrecognized values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def folder(self) -> str:
        """Output folder name for this category."""
        return CATEGORY_FOLDERS[self]

    @property
    def count_label(self) -> str:
        """Label used in the cosmetic counts section of the account summary."""
        return CATEGORY_COUNT_LABELS[self]

    @property
    def display_name(self) -> str:
        return self.value.removeprefix("Athena")


CATEGORY_FOLDERS: dict[Category, str] = {
    Category.CHARACTER: "Characters",
    Category.BACKPACK: "Backpacks",
    Category.PICKAXE: "Pickaxes",
    Category.GLIDER: "Gliders",
    Category.CONTRAIL: "Contrails",
    Category.EMOTE: "Emotes",
    Category.MUSIC_PACK: "Music",
    Category.WRAP: "Wraps",
}

CATEGORY_COUNT_LABELS: dict[Category, str] = {
    Category.CHARACTER: "Total Skins",
    Category.BACKPACK: "Total Backblings",
    Category.PICKAXE: "Total Pickaxes",
    Category.GLIDER: "Total Gliders",
    Category.CONTRAIL: "Total Contrails",
    Category.EMOTE: "Total Emotes",
    Category.MUSIC_PACK: "Total Music Packs",
    Category.WRAP: "Total Wraps",
}


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    """
    One cosmetic from the external catalog.

    Attributes:
        id: Catalog-unique identifier (case-insensitive)
        category_code: Backend type value (e.g., "AthenaCharacter")
        display_name: Human-readable name, if the catalog has one
        rarity_code: Lower-cased rarity value, "common" when absent
        history_dates: Shop appearance dates, ascending
        image_refs: (kind, URL) pairs, nested kinds flattened (e.g. "lego.large")
    """

    id: str
    category_code: str
    display_name: str | None = None
    rarity_code: str = DEFAULT_RARITY
    history_dates: tuple[date, ...] = ()
    image_refs: tuple[tuple[str, str], ...] = ()

    @property
    def category(self) -> Category | None:
        return Category.parse(self.category_code)

    @property
    def last_seen(self) -> date | None:
        """Latest shop appearance, or None if the item never appeared."""
        if not self.history_dates:
            return None
        return max(self.history_dates)

    @property
    def images(self) -> dict[str, str]:
        """Image kind -> URL."""
        return dict(self.image_refs)

    def preferred_image(self) -> str | None:
        """First available image URL in IMAGE_PREFERENCE order."""
        images = self.images
        for kind in IMAGE_PREFERENCE:
            url = images.get(kind)
            if url:
                return url
        return None


@dataclass(frozen=True, slots=True)
class OwnedItemToken:
    """
    Raw item identifier from an account report.

    Already stripped of the trailing filler character, with underscores
    converted to hyphens.

    Attributes:
        text: Token text as extracted
        acquired_on: Acquisition date printed next to the token, if any
    """

    text: str
    acquired_on: date | None = None
