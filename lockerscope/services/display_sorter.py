"""
Display ordering for resolved items.

Primary key: effective rarity rank, highest first (exclusives are pinned
to the top rank, crossover rarities sit below common).
Secondary key: display label ascending (raw token when unresolved).
"""

from collections.abc import Iterable

from lockerscope.models.locker import MatchResult


def display_sort_key(result: MatchResult) -> tuple[int, str]:
    return (-result.rarity_rank, result.label.casefold())


def sort_for_display(results: Iterable[MatchResult]) -> list[MatchResult]:
    """
    Order match results for layout.

    The sort is stable: results with equal rank and label keep input order.
    """
    return sorted(results, key=display_sort_key)
