"""
Locker Models.

Resolution output and grid placement records handed to the renderer.

INVARIANTS:
- One MatchResult per (deduplicated) token per category
- One PlacementRecord per MatchResult
- All models are frozen (immutable after construction)
"""

from dataclasses import dataclass

from lockerscope.models.catalog import CatalogRecord, OwnedItemToken
from lockerscope.models.rarity import rarity_rank


@dataclass(frozen=True, slots=True)
class MatchResult:
    """
    A token paired with its catalog record (or None) and classification.

    Attributes:
        token: The raw token this result was resolved from
        category: Category the token was listed under
        record: Resolved catalog record, None when not found
        is_exclusive: True if classified exclusive/legacy
        rarity_rank: Effective display rank (see models.rarity)
    """

    token: OwnedItemToken
    category: str
    record: CatalogRecord | None
    is_exclusive: bool
    rarity_rank: int

    @classmethod
    def build(
        cls,
        token: OwnedItemToken,
        category: str,
        record: CatalogRecord | None,
        is_exclusive: bool,
    ) -> "MatchResult":
        """Create a result with its rank derived from record rarity and exclusivity."""
        return cls(
            token=token,
            category=category,
            record=record,
            is_exclusive=is_exclusive,
            rarity_rank=rarity_rank(record.rarity_code if record else None, is_exclusive),
        )

    @property
    def resolved(self) -> bool:
        return self.record is not None

    @property
    def label(self) -> str:
        """Display name when resolved and named, raw token otherwise."""
        if self.record is not None and self.record.display_name:
            return self.record.display_name
        return self.token.text


@dataclass(frozen=True, slots=True)
class PlacementRecord:
    """
    Where and how one item is drawn on the grid.

    Attributes:
        match: The result being placed
        col: Column index (0-based)
        row: Row index (0-based)
        pixel_x: Left edge of the cell
        pixel_y: Top edge of the cell
        cell_size: Square thumbnail size in pixels
        display_label: Label text, truncated to fit the cell
        color_key: Key into the renderer color table
    """

    match: MatchResult
    col: int
    row: int
    pixel_x: int
    pixel_y: int
    cell_size: int
    display_label: str
    color_key: str

    @property
    def image_url(self) -> str | None:
        if self.match.record is None:
            return None
        return self.match.record.preferred_image()


@dataclass(frozen=True, slots=True)
class LayoutPlan:
    """
    Grid geometry plus per-item placements.

    Attributes:
        columns: Number of grid columns
        rows: Number of grid rows
        cell_size: Thumbnail size in pixels
        base_font_size: Label font size the truncation was computed for
        grid_width: Canvas width in pixels
        grid_height: Canvas height in pixels
        placements: One record per item, in display order
    """

    columns: int
    rows: int
    cell_size: int
    base_font_size: int
    grid_width: int
    grid_height: int
    placements: tuple[PlacementRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.placements)

    @property
    def is_empty(self) -> bool:
        return not self.placements
