from lockerscope.models.catalog import (
    CATEGORY_COUNT_LABELS,
    CATEGORY_FOLDERS,
    DEFAULT_RARITY,
    IMAGE_PREFERENCE,
    CatalogRecord,
    Category,
    OwnedItemToken,
)
from lockerscope.models.failure import (
    CatalogDownloadError,
    FailureKind,
    KnownError,
    UnrecognizedCategoryError,
)
from lockerscope.models.locker import LayoutPlan, MatchResult, PlacementRecord
from lockerscope.models.rarity import (
    CROSSOVER_RARITIES,
    EXCLUSIVE_RANK,
    RARITY_RANKS,
    rarity_rank,
)

__all__ = [
    "CATEGORY_COUNT_LABELS",
    "CATEGORY_FOLDERS",
    "CROSSOVER_RARITIES",
    "CatalogDownloadError",
    "CatalogRecord",
    "Category",
    "DEFAULT_RARITY",
    "EXCLUSIVE_RANK",
    "FailureKind",
    "IMAGE_PREFERENCE",
    "KnownError",
    "LayoutPlan",
    "MatchResult",
    "OwnedItemToken",
    "PlacementRecord",
    "RARITY_RANKS",
    "UnrecognizedCategoryError",
    "rarity_rank",
]
