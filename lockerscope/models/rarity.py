"""
Rarity ranking table.

Exclusive items always take the top rank. Crossover rarities are pinned
below common so they sort last.
"""

from lockerscope.models.catalog import DEFAULT_RARITY

RARITY_RANKS: dict[str, int] = {
    "mythic": 6,
    "legendary": 5,
    "epic": 4,
    "rare": 3,
    "uncommon": 2,
    "common": 1,
    "marvel": 0,
    "dc": 0,
    "icon": 0,
    "starwars": 0,
}

CROSSOVER_RARITIES = frozenset(name for name, rank in RARITY_RANKS.items() if rank == 0)

EXCLUSIVE_RANK = RARITY_RANKS["mythic"]

# Rarity values the table does not know about
UNKNOWN_RARITY_RANK = 0


def rarity_rank(rarity_code: str | None, is_exclusive: bool = False) -> int:
    """
    Effective display rank for an item.

    Args:
        rarity_code: Catalog rarity, None for unresolved items
        is_exclusive: Exclusive items are forced to EXCLUSIVE_RANK

    Returns:
        Integer rank, higher sorts first
    """
    if is_exclusive:
        return EXCLUSIVE_RANK
    rarity = (rarity_code or DEFAULT_RARITY).lower()
    return RARITY_RANKS.get(rarity, UNKNOWN_RARITY_RANK)
