"""
Catalog Index.

Keyed views over the flat catalog record list so that loosely formatted
tokens can be looked up in O(1) under several naming conventions.

INVARIANTS:
1. Every record is in the primary map under its lower-cased id
2. Every record of a recognized category is also in that category's
   variant map under each of its key variants
3. Key collisions are last-write-wins
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from lockerscope.models.catalog import CatalogRecord, Category
from lockerscope.services.normalizer import normalize

logger = logging.getLogger(__name__)

# Glider alias key, registered for any glider whose id mentions an umbrella
UMBRELLA_KEY = "umbrella"


def variant_keys(record: CatalogRecord) -> list[str]:
    """
    All keys a record is registered under in its category's variant map.

    Order matters only for last-write-wins between records.
    """
    item_id = record.id.lower()
    keys = [item_id]

    normalized_name = normalize(record.display_name)
    if normalized_name:
        keys.append(normalized_name)

    if record.category is Category.GLIDER and UMBRELLA_KEY in item_id:
        keys.append(UMBRELLA_KEY)

    if "-" in item_id:
        keys.append(item_id.split("-", 1)[1])

    return keys


@dataclass(frozen=True)
class CatalogIndex:
    """
    Immutable lookup structure built once per catalog load.

    Attributes:
        by_id: Lower-cased id -> record, across all categories
        variants: Category -> (key variant -> record)
    """

    by_id: Mapping[str, CatalogRecord]
    variants: Mapping[Category, Mapping[str, CatalogRecord]]

    @classmethod
    def build(cls, records: Iterable[CatalogRecord]) -> "CatalogIndex":
        """
        Build the primary and per-category variant maps.

        Records with an unrecognized category are kept in the primary map
        only. No error is raised for them.
        """
        by_id: dict[str, CatalogRecord] = {}
        variants: dict[Category, dict[str, CatalogRecord]] = {c: {} for c in Category}
        skipped = 0

        for record in records:
            by_id[record.id.lower()] = record

            category = record.category
            if category is None:
                skipped += 1
                continue

            category_map = variants[category]
            for key in variant_keys(record):
                category_map[key] = record

        logger.info(
            "CATALOG_INDEX_BUILT",
            extra={
                "records": len(by_id),
                "uncategorized": skipped,
            },
        )

        return cls(
            by_id=MappingProxyType(by_id),
            variants=MappingProxyType(
                {category: MappingProxyType(keys) for category, keys in variants.items()}
            ),
        )

    def __len__(self) -> int:
        return len(self.by_id)

    def get(self, item_id: str) -> CatalogRecord | None:
        """Primary-map lookup by id (case-insensitive)."""
        return self.by_id.get(item_id.lower())

    def variant_map(self, category: Category) -> Mapping[str, CatalogRecord]:
        """Variant map for a recognized category."""
        return self.variants[category]

    def lookup(self, category: Category, key: str) -> CatalogRecord | None:
        """Exact variant-map lookup."""
        return self.variants[category].get(key)
