"""
Locker API endpoints.

Turns account-report text into per-category grid plans and an account
summary. Image fetching and pixel rendering stay with the client; each
placement carries its image URL and fill color.
"""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from lockerscope.models.catalog import Category
from lockerscope.models.locker import LayoutPlan, PlacementRecord
from lockerscope.parsers.account_report import extract_account_details, parse_account_report
from lockerscope.services.catalog_database import get_catalog_index
from lockerscope.services.catalog_index import CatalogIndex
from lockerscope.services.exclusivity import ExclusiveAllowList, get_allow_list
from lockerscope.services.layout_planner import color_for
from lockerscope.services.locker_pipeline import CategoryResult, LockerPipeline

router = APIRouter(prefix="/locker", tags=["locker"])


def get_index() -> CatalogIndex:
    """Catalog index dependency. 503 when the catalog can't be loaded."""
    try:
        return get_catalog_index()
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cosmetics catalog not available. Please try again later.",
        ) from e


def get_exclusives() -> ExclusiveAllowList:
    return get_allow_list()


class ReportRequest(BaseModel):
    """Account report text, one string per page."""

    text_blocks: list[str] = Field(
        ...,
        description="Raw text of each report page",
        examples=[["AthenaCharacter: CID_028_Athena_Commando_F_Halloween [2017-11-02]"]],
    )


class LockerPlanRequest(ReportRequest):
    """Request model for planning locker grids."""

    include_combined: bool = Field(
        default=False,
        description="Also plan a single grid with every category",
    )


class PlacementResponse(BaseModel):
    """One item's position and appearance on the grid."""

    token: str
    item_id: str | None = None
    label: str
    col: int
    row: int
    pixel_x: int
    pixel_y: int
    cell_size: int
    color_key: str
    color: tuple[int, int, int]
    rarity: str | None = None
    resolved: bool
    exclusive: bool
    image_url: str | None = None


class LayoutResponse(BaseModel):
    """Grid geometry plus placements."""

    columns: int
    rows: int
    cell_size: int
    base_font_size: int
    grid_width: int
    grid_height: int
    placements: list[PlacementResponse] = Field(default_factory=list)


class CategoryPlanResponse(BaseModel):
    """Plan and counts for one category."""

    category: str
    folder: str | None = None
    total: int
    resolved: int
    unresolved: int
    exclusive: int
    layout: LayoutResponse


class LockerPlanResponse(BaseModel):
    """Response model for locker planning."""

    total_items: int
    resolved: int
    unresolved: int
    categories: list[CategoryPlanResponse] = Field(default_factory=list)
    combined: CategoryPlanResponse | None = None
    item_lists: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Sorted raw tokens per category",
    )


class AccountResponse(BaseModel):
    """Response model for the account summary."""

    summary: str
    total_items: int
    category_counts: dict[str, int] = Field(default_factory=dict)


def _placement_to_response(placement: PlacementRecord) -> PlacementResponse:
    match = placement.match
    return PlacementResponse(
        token=match.token.text,
        item_id=match.record.id if match.record else None,
        label=placement.display_label,
        col=placement.col,
        row=placement.row,
        pixel_x=placement.pixel_x,
        pixel_y=placement.pixel_y,
        cell_size=placement.cell_size,
        color_key=placement.color_key,
        color=color_for(placement.color_key),
        rarity=match.record.rarity_code if match.record else None,
        resolved=match.resolved,
        exclusive=match.is_exclusive,
        image_url=placement.image_url,
    )


def _layout_to_response(layout: LayoutPlan) -> LayoutResponse:
    return LayoutResponse(
        columns=layout.columns,
        rows=layout.rows,
        cell_size=layout.cell_size,
        base_font_size=layout.base_font_size,
        grid_width=layout.grid_width,
        grid_height=layout.grid_height,
        placements=[_placement_to_response(p) for p in layout.placements],
    )


def _category_to_response(result: CategoryResult) -> CategoryPlanResponse:
    category = Category.parse(result.category)
    return CategoryPlanResponse(
        category=result.category,
        folder=category.folder if category else None,
        total=result.total_count,
        resolved=result.resolved_count,
        unresolved=result.unresolved_count,
        exclusive=result.exclusive_count,
        layout=_layout_to_response(result.layout),
    )


@router.post("/plan", response_model=LockerPlanResponse)
async def plan_locker(
    request: LockerPlanRequest,
    index: Annotated[CatalogIndex, Depends(get_index)],
    allow_list: Annotated[ExclusiveAllowList, Depends(get_exclusives)],
) -> LockerPlanResponse:
    """
    Resolve an account report and plan one grid per category.

    Returns 400 if the report lists no owned items.
    """
    report = parse_account_report(request.text_blocks)
    if report.is_empty():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No owned items found in the report.",
        )

    pipeline = LockerPipeline(index, allow_list)
    result = await asyncio.to_thread(
        pipeline.run_report, report, include_combined=request.include_combined
    )

    return LockerPlanResponse(
        total_items=result.total_count,
        resolved=result.resolved_count,
        unresolved=result.unresolved_count,
        categories=[_category_to_response(r) for r in result.categories.values()],
        combined=_category_to_response(result.combined) if result.combined else None,
        item_lists={
            category.value: tokens for category, tokens in report.sorted_item_lists().items()
        },
    )


@router.post("/account", response_model=AccountResponse)
async def account_summary(request: ReportRequest) -> AccountResponse:
    """Extract account details and cosmetic counts from a report."""
    report = parse_account_report(request.text_blocks)
    counts = report.category_counts
    summary = extract_account_details(request.text_blocks, counts)

    return AccountResponse(
        summary=summary.render(),
        total_items=report.total_items,
        category_counts={category.value: count for category, count in counts.items()},
    )
