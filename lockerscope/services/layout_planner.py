"""
Grid layout planning.

Computes grid geometry from the item count and emits one PlacementRecord
per item. Does not touch pixels; the renderer draws from the plan.

Geometry for n items:
    cols      = ceil(sqrt(n * 1.5))      (wider than tall)
    rows      = ceil(n / cols)
    cell      = clamp(1200 // cols, 80, 200)
    row pitch = cell + max(40, cell // 2) + max(16, cell // 6)
"""

import math
from collections.abc import Sequence

from lockerscope.models.locker import LayoutPlan, MatchResult, PlacementRecord

TARGET_GRID_WIDTH = 1200
MIN_CELL_SIZE = 80
MAX_CELL_SIZE = 200

MIN_VERTICAL_SPACING = 40
MIN_TEXT_HEIGHT = 16
MIN_BASE_FONT_SIZE = 12

HORIZONTAL_SPACING = 0
OUTER_MARGIN = 60
# Title band between the top margin and the first row
HEADER_HEIGHT = 60

ELLIPSIS = "..."

EXCLUSIVE_COLOR_KEY = "exclusive"
NOT_FOUND_COLOR_KEY = "not_found"

# RGB fill behind each thumbnail, keyed by color_key
COLOR_TABLE: dict[str, tuple[int, int, int]] = {
    "common": (150, 150, 150),
    "uncommon": (96, 170, 58),
    "rare": (73, 172, 242),
    "epic": (177, 91, 226),
    "legendary": (211, 120, 65),
    "mythic": (235, 227, 88),
    EXCLUSIVE_COLOR_KEY: (235, 227, 88),
    "marvel": (197, 51, 52),
    "dc": (84, 117, 199),
    "icon": (63, 181, 181),
    "starwars": (32, 85, 128),
    NOT_FOUND_COLOR_KEY: (40, 40, 40),
}
FALLBACK_COLOR = (100, 100, 100)


def grid_dimensions(item_count: int) -> tuple[int, int]:
    """Return (columns, rows) for a number of items. (0, 0) when empty."""
    if item_count <= 0:
        return 0, 0
    cols = math.ceil(math.sqrt(item_count * 1.5))
    rows = math.ceil(item_count / cols)
    return cols, rows


def cell_size_for(columns: int) -> int:
    """Thumbnail size for a column count, clamped to [80, 200]."""
    return max(MIN_CELL_SIZE, min(MAX_CELL_SIZE, TARGET_GRID_WIDTH // columns))


def row_pitch_for(cell_size: int) -> int:
    vertical_spacing = max(MIN_VERTICAL_SPACING, cell_size // 2)
    text_height = max(MIN_TEXT_HEIGHT, cell_size // 6)
    return cell_size + vertical_spacing + text_height


def base_font_size_for(cell_size: int) -> int:
    return max(MIN_BASE_FONT_SIZE, cell_size // 8)


def truncate_label(label: str, cell_size: int, base_font_size: int) -> str:
    """
    Shorten a label to fit under a cell.

    Maximum length is proportional to cell_size / base_font_size; longer
    labels lose their tail to an ellipsis.
    """
    max_length = (cell_size // base_font_size) * 2
    if len(label) <= max_length:
        return label
    keep = max(0, max_length - len(ELLIPSIS))
    return label[:keep] + ELLIPSIS


def color_key_for(result: MatchResult) -> str:
    if result.is_exclusive:
        return EXCLUSIVE_COLOR_KEY
    if result.record is None:
        return NOT_FOUND_COLOR_KEY
    return result.record.rarity_code


def color_for(color_key: str) -> tuple[int, int, int]:
    """RGB for a color key; unknown rarities get the fallback gray."""
    return COLOR_TABLE.get(color_key, FALLBACK_COLOR)


def plan_layout(sorted_items: Sequence[MatchResult]) -> LayoutPlan:
    """
    Lay out items on a grid in the given order.

    Item i lands at row i // cols, column i % cols.

    Args:
        sorted_items: Results already in display order

    Returns:
        LayoutPlan with one placement per item. Empty input gives an
        empty plan with zero geometry.
    """
    item_count = len(sorted_items)
    if item_count == 0:
        return LayoutPlan(
            columns=0,
            rows=0,
            cell_size=0,
            base_font_size=0,
            grid_width=0,
            grid_height=0,
        )

    cols, rows = grid_dimensions(item_count)
    cell_size = cell_size_for(cols)
    pitch = row_pitch_for(cell_size)
    base_font_size = base_font_size_for(cell_size)

    placements: list[PlacementRecord] = []
    for i, result in enumerate(sorted_items):
        row, col = divmod(i, cols)
        placements.append(
            PlacementRecord(
                match=result,
                col=col,
                row=row,
                pixel_x=OUTER_MARGIN + col * (cell_size + HORIZONTAL_SPACING),
                pixel_y=OUTER_MARGIN + HEADER_HEIGHT + row * pitch,
                cell_size=cell_size,
                display_label=truncate_label(result.label, cell_size, base_font_size),
                color_key=color_key_for(result),
            )
        )

    return LayoutPlan(
        columns=cols,
        rows=rows,
        cell_size=cell_size,
        base_font_size=base_font_size,
        grid_width=2 * OUTER_MARGIN + cols * (cell_size + HORIZONTAL_SPACING),
        grid_height=2 * OUTER_MARGIN + HEADER_HEIGHT + rows * pitch,
        placements=tuple(placements),
    )
