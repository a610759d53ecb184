"""
LockerScope services.

Catalog indexing, token resolution, exclusivity classification and layout.
"""

from lockerscope.services.catalog_database import (
    download_catalog,
    get_catalog_index,
    load_catalog,
    parse_catalog_payload,
)
from lockerscope.services.catalog_index import CatalogIndex, variant_keys
from lockerscope.services.display_sorter import display_sort_key, sort_for_display
from lockerscope.services.exclusivity import (
    ExclusiveAllowList,
    ExclusivityClassifier,
    get_allow_list,
    load_allow_list,
)
from lockerscope.services.layout_planner import color_for, plan_layout
from lockerscope.services.locker_pipeline import (
    CategoryResult,
    LockerPipeline,
    LockerReport,
    RenderCell,
    acquire_thumbnails,
)
from lockerscope.services.match_resolver import FuzzyBudget, MatchResolver
from lockerscope.services.normalizer import normalize
from lockerscope.services.thumbnail_fetcher import ThumbnailFetcher

__all__ = [
    "CatalogIndex",
    "CategoryResult",
    "ExclusiveAllowList",
    "ExclusivityClassifier",
    "FuzzyBudget",
    "LockerPipeline",
    "LockerReport",
    "MatchResolver",
    "RenderCell",
    "ThumbnailFetcher",
    "acquire_thumbnails",
    "color_for",
    "display_sort_key",
    "download_catalog",
    "get_allow_list",
    "get_catalog_index",
    "load_allow_list",
    "load_catalog",
    "normalize",
    "parse_catalog_payload",
    "plan_layout",
    "sort_for_display",
    "variant_keys",
]
