"""
Locker pipeline.

Runs the full per-category flow: resolve every token, classify it, sort
the results for display, and plan the grid. A combined all-categories
layout is produced from the same results.

INVARIANTS:
1. One MatchResult per deduplicated token; nothing is dropped for being
   unresolved
2. One FuzzyBudget per run, shared by every category task
3. The catalog index and allow-list are never mutated
4. Combined results are the per-category results re-sorted with the same
   ordering, never re-resolved
"""

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date

from lockerscope.config import settings
from lockerscope.models.catalog import Category, OwnedItemToken
from lockerscope.models.failure import UnrecognizedCategoryError
from lockerscope.models.locker import LayoutPlan, MatchResult, PlacementRecord
from lockerscope.parsers.account_report import ParsedAccountReport, deduplicate_tokens
from lockerscope.services.catalog_index import CatalogIndex
from lockerscope.services.display_sorter import sort_for_display
from lockerscope.services.exclusivity import ExclusiveAllowList, ExclusivityClassifier
from lockerscope.services.layout_planner import plan_layout
from lockerscope.services.match_resolver import FuzzyBudget, MatchResolver
from lockerscope.services.thumbnail_fetcher import ThumbnailFetcher

logger = logging.getLogger(__name__)

COMBINED_CATEGORY = "combined"


@dataclass(frozen=True, slots=True)
class CategoryResult:
    """
    Resolution and layout output for one category.

    Attributes:
        category: Category value (or "combined")
        matches: Results in display order
        layout: Grid plan for the matches
        elapsed_seconds: Wall time spent resolving and planning
    """

    category: str
    matches: tuple[MatchResult, ...]
    layout: LayoutPlan
    elapsed_seconds: float = 0.0

    @property
    def total_count(self) -> int:
        return len(self.matches)

    @property
    def resolved_count(self) -> int:
        return sum(1 for match in self.matches if match.resolved)

    @property
    def unresolved_count(self) -> int:
        return self.total_count - self.resolved_count

    @property
    def exclusive_count(self) -> int:
        return sum(1 for match in self.matches if match.is_exclusive)


@dataclass(frozen=True)
class LockerReport:
    """
    Output of one pipeline run.

    Attributes:
        categories: Category value -> result, in input order
        combined: All categories together, None when not requested
        fuzzy_attempts: Category value -> fuzzy scans spent this run
    """

    categories: dict[str, CategoryResult]
    combined: CategoryResult | None = None
    fuzzy_attempts: dict[str, int] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        return sum(result.total_count for result in self.categories.values())

    @property
    def resolved_count(self) -> int:
        return sum(result.resolved_count for result in self.categories.values())

    @property
    def unresolved_count(self) -> int:
        return self.total_count - self.resolved_count


@dataclass(frozen=True, slots=True)
class RenderCell:
    """A placement paired with its fetched image bytes."""

    placement: PlacementRecord
    image: bytes | None

    @property
    def found(self) -> bool:
        return self.placement.match.resolved and self.image is not None


def _category_value(category: Category | str) -> str:
    return category.value if isinstance(category, Category) else str(category)


def _as_token(item: OwnedItemToken | str) -> OwnedItemToken:
    return item if isinstance(item, OwnedItemToken) else OwnedItemToken(text=item)


class LockerPipeline:
    """
    Resolves, classifies, sorts and lays out an owned-item inventory.

    One pipeline can serve many runs; each run gets a fresh fuzzy budget.
    """

    def __init__(
        self,
        index: CatalogIndex,
        allow_list: ExclusiveAllowList,
        *,
        fuzzy_attempts: int | None = None,
        fuzzy_threshold: float | None = None,
        max_workers: int | None = None,
    ) -> None:
        """
        Args:
            index: Catalog index (read-only, shared across threads)
            allow_list: Curated exclusive ids and names
            fuzzy_attempts: Fuzzy scans allowed per category per run.
                Defaults to settings
            fuzzy_threshold: Similarity a fuzzy match must exceed.
                Defaults to settings
            max_workers: Thread pool size. Defaults to one per category
        """
        self._index = index
        self._allow_list = allow_list
        self._fuzzy_attempts = (
            fuzzy_attempts if fuzzy_attempts is not None else settings.fuzzy_attempts_per_category
        )
        self._fuzzy_threshold = (
            fuzzy_threshold if fuzzy_threshold is not None else settings.fuzzy_threshold
        )
        self._max_workers = max_workers

    def run_report(
        self,
        report: ParsedAccountReport,
        include_combined: bool = True,
    ) -> LockerReport:
        """Run over a parsed account report."""
        return self.run(
            report.tokens,
            acquisition_dates=report.acquisition_dates,
            include_combined=include_combined,
        )

    def run(
        self,
        tokens_by_category: Mapping[Category | str, Sequence[OwnedItemToken | str]],
        acquisition_dates: Mapping[str, date] | None = None,
        include_combined: bool = True,
    ) -> LockerReport:
        """
        Process every category concurrently.

        Args:
            tokens_by_category: Category -> raw tokens. Keys need not be
                recognized categories; unrecognized ones yield unresolved results
            acquisition_dates: Token -> acquisition date (characters)
            include_combined: Also produce the all-categories layout

        Returns:
            LockerReport with one CategoryResult per input category
        """
        budget = FuzzyBudget(limit=self._fuzzy_attempts)
        resolver = MatchResolver(
            self._index,
            self._allow_list,
            budget=budget,
            fuzzy_threshold=self._fuzzy_threshold,
        )
        classifier = ExclusivityClassifier(self._allow_list, acquisition_dates)

        work = [
            (_category_value(category), [_as_token(item) for item in items])
            for category, items in tokens_by_category.items()
        ]

        categories: dict[str, CategoryResult] = {}
        if work:
            workers = self._max_workers or len(work)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(self._process_category, category, tokens, resolver, classifier)
                    for category, tokens in work
                ]
                for (category, _), future in zip(work, futures, strict=True):
                    categories[category] = future.result()

        combined = None
        if include_combined:
            combined = self._combine(categories.values())

        fuzzy_attempts = {
            category: budget.used(parsed)
            for category in categories
            if (parsed := Category.parse(category)) is not None
        }

        return LockerReport(categories=categories, combined=combined, fuzzy_attempts=fuzzy_attempts)

    def _process_category(
        self,
        category: str,
        tokens: Sequence[OwnedItemToken],
        resolver: MatchResolver,
        classifier: ExclusivityClassifier,
    ) -> CategoryResult:
        started = time.perf_counter()
        matches: list[MatchResult] = []
        unrecognized = False

        for token in deduplicate_tokens(tokens):
            record = None
            if not unrecognized:
                try:
                    record = resolver.resolve(token.text, category)
                except UnrecognizedCategoryError:
                    unrecognized = True
                    logger.warning(
                        "UNRECOGNIZED_CATEGORY",
                        extra={"category": category, "token_count": len(tokens)},
                    )

            is_exclusive = classifier.classify(token.text, record, category)
            matches.append(MatchResult.build(token, category, record, is_exclusive))

        ordered = sort_for_display(matches)
        layout = plan_layout(ordered)
        elapsed = time.perf_counter() - started

        result = CategoryResult(
            category=category,
            matches=tuple(ordered),
            layout=layout,
            elapsed_seconds=elapsed,
        )
        logger.info(
            "CATEGORY_PROCESSED",
            extra={
                "category": category,
                "total": result.total_count,
                "resolved": result.resolved_count,
                "exclusive": result.exclusive_count,
                "elapsed_seconds": round(elapsed, 3),
            },
        )
        return result

    def _combine(self, results: Iterable[CategoryResult]) -> CategoryResult:
        started = time.perf_counter()
        all_matches = [match for result in results for match in result.matches]
        ordered = sort_for_display(all_matches)
        return CategoryResult(
            category=COMBINED_CATEGORY,
            matches=tuple(ordered),
            layout=plan_layout(ordered),
            elapsed_seconds=time.perf_counter() - started,
        )


async def acquire_thumbnails(layout: LayoutPlan, fetcher: ThumbnailFetcher) -> list[RenderCell]:
    """
    Fetch every placement's image concurrently.

    The fetcher bounds concurrency; a failed fetch gives a cell with no
    image rather than an error.

    Returns:
        One RenderCell per placement, in placement order
    """
    images = await asyncio.gather(
        *(fetcher.fetch(p.image_url, p.cell_size) for p in layout.placements)
    )
    return [
        RenderCell(placement=placement, image=image)
        for placement, image in zip(layout.placements, images, strict=True)
    ]
