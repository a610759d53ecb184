"""
Match Resolution Service.

Resolves one raw report token to zero-or-one catalog record.

Resolution is tiered; the first tier that hits wins:
1. Curated-exclusive exact match in the category variant map
2. Primary id map, only if the record's category matches
3. Category variant map, exact
4. Pet-carrier suffix containment (backpacks only)
5. Variant map with the first hyphen segment stripped
6. Variant map with hyphens swapped for underscores
7. Umbrella alias (gliders only)
8. Bounded fuzzy fallback (positional character similarity)

INVARIANTS:
1. A miss returns None; it is never an error
2. Tiers 1-7 always run; tier 8 runs at most FuzzyBudget.limit times
   per category per run, counted across threads
3. An unrecognized category raises UnrecognizedCategoryError before any
   lookup happens
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from threading import Lock

from lockerscope.models.catalog import CatalogRecord, Category
from lockerscope.models.failure import UnrecognizedCategoryError
from lockerscope.services.catalog_index import UMBRELLA_KEY, CatalogIndex
from lockerscope.services.exclusivity import ExclusiveAllowList
from lockerscope.services.normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_ATTEMPTS = 10
DEFAULT_FUZZY_THRESHOLD = 0.65

# Variant keys shorter than this are never fuzzy candidates
FUZZY_MIN_KEY_LENGTH = 3

PET_CARRIER_MARKER = "petcarrier-"


def positional_similarity(key: str, token: str) -> float:
    """
    Index-aligned character match ratio.

    Counts positions where both strings hold the same character (over the
    shared prefix length) and divides by the longer length.
    """
    longest = max(len(key), len(token))
    if longest == 0:
        return 0.0
    matches = sum(1 for a, b in zip(key, token, strict=False) if a == b)
    return matches / longest


@dataclass
class FuzzyBudget:
    """
    Thread-safe per-category allowance of fuzzy scans.

    One budget is shared by every resolution in a run. An attempt is
    counted when the scan starts, whether or not it finds a match.
    """

    limit: int = DEFAULT_FUZZY_ATTEMPTS

    _used: dict[Category, int] = field(default_factory=dict)
    _exhausted: set[Category] = field(default_factory=set)
    _lock: Lock = field(default_factory=Lock)

    def try_acquire(self, category: Category) -> bool:
        """Take one attempt for a category. False once the quota is spent."""
        with self._lock:
            used = self._used.get(category, 0)
            if used >= self.limit:
                if category not in self._exhausted:
                    self._exhausted.add(category)
                    logger.info(
                        "FUZZY_BUDGET_EXHAUSTED",
                        extra={"category": category.value, "limit": self.limit},
                    )
                return False

            self._used[category] = used + 1
            return True

    def used(self, category: Category) -> int:
        with self._lock:
            return self._used.get(category, 0)

    def reset(self) -> None:
        with self._lock:
            self._used.clear()
            self._exhausted.clear()


class MatchResolver:
    """
    Resolves report tokens against a CatalogIndex.

    The index and allow-list are read-only; the fuzzy budget is the only
    shared mutable state and is internally locked.
    """

    def __init__(
        self,
        index: CatalogIndex,
        allow_list: ExclusiveAllowList,
        budget: FuzzyBudget | None = None,
        fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
    ) -> None:
        """
        Args:
            index: Catalog index built once at startup
            allow_list: Curated exclusive ids and names (tier 1)
            budget: Fuzzy attempt quota. A fresh default budget if omitted
            fuzzy_threshold: Similarity a fuzzy candidate must exceed
        """
        self._index = index
        self._allow_list = allow_list
        self.budget = budget if budget is not None else FuzzyBudget()
        self._fuzzy_threshold = fuzzy_threshold

    def resolve(self, token: str, category: str) -> CatalogRecord | None:
        """
        Resolve a raw token within a category.

        Args:
            token: Raw token (trimmed and lower-cased before lookup)
            category: Category value, e.g. Category.CHARACTER or "AthenaCharacter"

        Returns:
            The matched record, or None if no tier matched

        Raises:
            UnrecognizedCategoryError: If category is not a recognized category
        """
        resolved_category = Category.parse(category)
        if resolved_category is None:
            raise UnrecognizedCategoryError(str(category))

        key = token.strip().lower()
        variants = self._index.variant_map(resolved_category)

        record = self._resolve_exact(key, resolved_category, variants)
        if record is not None:
            return record

        return self._resolve_fuzzy(key, resolved_category, variants)

    def _resolve_exact(
        self,
        key: str,
        category: Category,
        variants: Mapping[str, CatalogRecord],
    ) -> CatalogRecord | None:
        """Tiers 1-7: exact and heuristic lookups, no quota."""
        # Exclusives win ties against any other same-id interpretation
        if key in self._allow_list and key in variants:
            return variants[key]

        record = self._index.get(key)
        if record is not None and record.category is category:
            return record

        if key in variants:
            return variants[key]

        if category is Category.BACKPACK and PET_CARRIER_MARKER in key:
            record = _match_pet_carrier(key, variants)
            if record is not None:
                return record

        if "-" in key:
            without_prefix = key.split("-", 1)[1]
            if without_prefix in variants:
                return variants[without_prefix]

        swapped = key.replace("-", "_")
        if swapped in variants:
            return variants[swapped]

        if category is Category.GLIDER and UMBRELLA_KEY in key:
            return variants.get(UMBRELLA_KEY)

        return None

    def _resolve_fuzzy(
        self,
        key: str,
        category: Category,
        variants: Mapping[str, CatalogRecord],
    ) -> CatalogRecord | None:
        """Tier 8: best positional-similarity candidate above the threshold."""
        if not self.budget.try_acquire(category):
            return None

        normalized = normalize(key)
        best_match: CatalogRecord | None = None
        best_score = self._fuzzy_threshold

        for candidate, record in variants.items():
            if len(candidate) < FUZZY_MIN_KEY_LENGTH:
                continue

            score = positional_similarity(normalize(candidate), normalized)
            if score > best_score:
                best_score = score
                best_match = record

        return best_match


def _match_pet_carrier(
    key: str,
    variants: Mapping[str, CatalogRecord],
) -> CatalogRecord | None:
    """
    Match pet carriers whose modifier order differs between report and catalog.

    Matches when either suffix-after-marker contains the other.
    """
    token_suffix = key.split(PET_CARRIER_MARKER, 1)[1]
    if not token_suffix:
        return None

    for candidate, record in variants.items():
        if PET_CARRIER_MARKER not in candidate:
            continue

        candidate_suffix = candidate.split(PET_CARRIER_MARKER, 1)[1]
        if not candidate_suffix:
            continue

        if token_suffix in candidate_suffix or candidate_suffix in token_suffix:
            return record

    return None
