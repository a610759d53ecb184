"""
Exclusivity classification.

Decides whether an owned item counts as exclusive/legacy. Rules, first
true wins:

1. Seasonal windows (characters): the two 2017 trooper families are exclusive only
   when acquired inside the 2017 Halloween event window.
2. Shop absence (characters): an item last sold on or before the cutoff
   has been out of rotation long enough to count as exclusive. Items
   never sold fall back to the curated allow-list.
3. Curated allow-list membership by token, record id, or display name.

The allow-list itself is static data (data/exclusive_items.json), not logic.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any

from lockerscope.config import settings
from lockerscope.models.catalog import CatalogRecord, Category
from lockerscope.services.normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_ALLOW_LIST_PATH = Path(__file__).parent.parent / "data" / "exclusive_items.json"

# Each family is matched by any of its markers (case-insensitive substring)
SEASONAL_FAMILIES: tuple[tuple[str, ...], ...] = (
    ("cid_028_athena_commando_f_halloween", "ghoultrooper"),
    ("cid_029_athena_commando_m_halloween", "skulltrooper"),
)
SEASONAL_WINDOW_START = date(2017, 10, 26)
SEASONAL_WINDOW_END = date(2017, 12, 13)

# Last shop appearance on or before this date counts as exclusive
SHOP_ABSENCE_CUTOFF = date(2022, 7, 11)


@dataclass(frozen=True)
class ExclusiveAllowList:
    """
    Curated exclusive ids and display names.

    Attributes:
        ids: Lower-cased catalog ids
        names: Normalized display names
    """

    ids: frozenset[str] = frozenset()
    names: frozenset[str] = frozenset()

    def __contains__(self, key: object) -> bool:
        return key in self.ids or key in self.names

    def __len__(self) -> int:
        return len(self.ids | self.names)

    def contains_token(self, token: str) -> bool:
        """
        Token matches by lower-cased id or by its normalized form.

        Report tokens carry hyphens where catalog ids carry underscores, so
        the underscore form of the id is tried too.
        """
        lowered = token.strip().lower()
        if lowered in self or lowered.replace("-", "_") in self:
            return True
        return normalize(lowered) in self

    def contains_record(self, record: CatalogRecord) -> bool:
        """Record matches by lower-cased id or normalized display name."""
        if record.id.lower() in self:
            return True
        name = normalize(record.display_name)
        return bool(name) and name in self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ExclusiveAllowList":
        """
        Build from the per-category JSON structure.

        Expected shape: {category: {"ids": [...], "names": [...]}}
        """
        ids: set[str] = set()
        names: set[str] = set()

        for entry in data.values():
            for item_id in entry.get("ids", []):
                if item_id:
                    ids.add(str(item_id).lower())
            for name in entry.get("names", []):
                normalized = normalize(str(name))
                if normalized:
                    names.add(normalized)

        return cls(ids=frozenset(ids), names=frozenset(names))


def load_allow_list(path: Path | None = None) -> ExclusiveAllowList:
    """
    Load the curated allow-list.

    Args:
        path: JSON file. Defaults to settings.allow_list_path, then the
            packaged data/exclusive_items.json

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON
    """
    if path is None:
        path = settings.allow_list_path or DEFAULT_ALLOW_LIST_PATH

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Allow-list at {path} is corrupted: {e}") from e

    allow_list = ExclusiveAllowList.from_mapping(data)
    logger.info("Loaded %d allow-list keys from %s", len(allow_list), path)
    return allow_list


@lru_cache(maxsize=1)
def get_allow_list() -> ExclusiveAllowList:
    """Get cached allow-list (read-only configuration data)."""
    return load_allow_list()


def _seasonal_markers_match(token: str) -> bool:
    # Report tokens use hyphens where catalog ids use underscores
    variants = (token, token.replace("-", "_"))
    markers = [marker for family in SEASONAL_FAMILIES for marker in family]
    return any(marker in variant for marker in markers for variant in variants)


class ExclusivityClassifier:
    """
    Classifies resolved and unresolved items as exclusive or not.

    Stateless apart from its read-only inputs; safe to share across threads.
    """

    def __init__(
        self,
        allow_list: ExclusiveAllowList,
        acquisition_dates: Mapping[str, date] | None = None,
    ) -> None:
        """
        Args:
            allow_list: Curated exclusive ids and names
            acquisition_dates: Token -> acquisition date (character tokens only)
        """
        self._allow_list = allow_list
        self._acquisition_dates = {
            token.strip().lower(): acquired for token, acquired in (acquisition_dates or {}).items()
        }

    def acquisition_date(self, token: str) -> date | None:
        return self._acquisition_dates.get(token.strip().lower())

    def classify(self, token: str, record: CatalogRecord | None, category: str) -> bool:
        """
        Decide whether an item is exclusive.

        Args:
            token: Raw token as listed in the report
            record: Resolved catalog record, None when unresolved
            category: Category the token was listed under

        Returns:
            True if exclusive/legacy
        """
        if not token or not token.strip():
            return False

        lowered = token.strip().lower()

        is_character = category == Category.CHARACTER

        # Acquisition dates only exist for characters
        if is_character and _seasonal_markers_match(lowered):
            acquired = self._acquisition_dates.get(lowered)
            if acquired is None:
                return False
            return SEASONAL_WINDOW_START <= acquired <= SEASONAL_WINDOW_END

        if is_character and record is not None:
            last_seen = record.last_seen
            if last_seen is None:
                return self._allow_list.contains_token(lowered) or (
                    self._allow_list.contains_record(record)
                )
            if last_seen <= SHOP_ABSENCE_CUTOFF:
                return True

        if self._allow_list.contains_token(lowered):
            return True

        return record is not None and self._allow_list.contains_record(record)
