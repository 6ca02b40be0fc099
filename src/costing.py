"""
Fabrication cost aggregation.

Material is charged per opened sheet instance (whole sheet, never pro-rated).
Labor comes from volume-tiered category prices; disabled features (liner,
shelf, weight plate) contribute nothing. Also provides the tier lookup that
turns an envelope volume into per-category labor prices, per-row sheet
summaries, and sale pricing at a target margin.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from planter import SQ_IN_PER_SQ_FT, FabricationEnvelope, PlanterInput
from sheet_packing import Placement

logger = logging.getLogger(__name__)

NOT_SELECTED = "Not Selected"

CATEGORY_ORDER = [
    "Weld",
    "Grind",
    "Paint",
    "Assembly",
    "Saw",
    "Laser Bend",
    "Weight Plate",
    "Liner",
    "Shelf",
]


@dataclass
class CostThreshold:
    """Volume brackets (cubic inches) and labor price per bracket."""
    category: str
    low_threshold: float
    low_price: float
    medium_threshold: float
    medium_price: float
    high_price: float


DEFAULT_COST_THRESHOLDS: Dict[str, CostThreshold] = {
    "Weld": CostThreshold("Weld", 10000, 125, 28000, 165, 210),
    "Grind": CostThreshold("Grind", 8000, 85, 22000, 115, 145),
    "Paint": CostThreshold("Paint", 6000, 75, 20000, 100, 135),
    "Assembly": CostThreshold("Assembly", 5000, 140, 22000, 180, 215),
    "Saw": CostThreshold("Saw", 7000, 60, 24000, 85, 110),
    "Laser Bend": CostThreshold("Laser Bend", 9000, 110, 26000, 150, 195),
    "Weight Plate": CostThreshold("Weight Plate", 3000, 40, 15000, 60, 95),
    "Liner": CostThreshold("Liner", 5000, 95, 15000, 140, 180),
    "Shelf": CostThreshold("Shelf", 5000, 120, 15000, 160, 200),
}


@dataclass
class CostBreakdown:
    """Resolved labor price for one category."""
    category: str
    tier_used: str  # "Low" | "Medium" | "High" | "Not Selected"
    base_price: float
    override_price: Optional[float] = None

    @property
    def price(self) -> float:
        if self.override_price is not None:
            return self.override_price
        return self.base_price


@dataclass
class SheetUsage:
    """Summary of one opened sheet instance."""
    id: str
    row_id: str
    name: str
    width: float
    height: float
    cost_per_sqft: float
    placements: List[Placement] = field(default_factory=list)
    area_used_sqft: float = 0.0

    @property
    def sheet_area_sqft(self) -> float:
        return self.width * self.height / SQ_IN_PER_SQ_FT

    @property
    def sheet_cost(self) -> float:
        return self.sheet_area_sqft * self.cost_per_sqft

    @property
    def hosts_liner(self) -> bool:
        return any(p.is_liner for p in self.placements)


@dataclass
class RowSummary:
    """Sheets bought from one inventory row."""
    row_id: str
    name: str
    cost_per_sqft: float
    quantity_used: int
    total_area_available: float  # sqft
    total_area_used: float       # sqft
    cost_per_sheet: float
    utilization_pct: float
    unused_material_cost: float
    total_material_cost: float


@dataclass
class CostSummary:
    """Totals for one solve."""
    total_material_cost: float
    labor_cost: float
    add_on_cost: float
    total_fabrication_cost: float
    liner_labor_cost: float
    liner_material_cost: float
    material_area_sqft: float      # placed panel area
    purchased_area_sqft: float     # full area of opened sheets
    utilization_pct: float
    waste_pct: float


@dataclass
class PriceQuote:
    """Sale price derived from the fabrication cost."""
    fabrication_cost: float
    margin_pct: float
    suggested_price: float
    buffer: float
    discount: float
    final_price: float
    actual_margin_pct: float


def thresholds_from_records(records: Mapping[str, dict]) -> Dict[str, CostThreshold]:
    """Default thresholds with per-category fields replaced from ``records``.

    Raises ValueError for unknown categories or fields, non-finite values, and
    brackets where ``low_threshold`` is not below ``medium_threshold``.
    """
    thresholds = {name: CostThreshold(**vars(t)) for name, t in DEFAULT_COST_THRESHOLDS.items()}
    for category, fields in records.items():
        if category not in thresholds:
            raise ValueError(f"Unknown cost category '{category}'")
        for key, value in fields.items():
            if key == "category" or not hasattr(thresholds[category], key):
                raise ValueError(f"Unknown threshold field '{key}' for {category}")
            setattr(thresholds[category], key, float(value))
        _validate_threshold(thresholds[category])
    return thresholds


def determine_tier(volume: float, threshold: CostThreshold) -> CostBreakdown:
    """Pick the Low / Medium / High bracket for ``volume``."""
    if volume <= threshold.low_threshold:
        return CostBreakdown(threshold.category, "Low", threshold.low_price)
    if volume <= threshold.medium_threshold:
        return CostBreakdown(threshold.category, "Medium", threshold.medium_price)
    return CostBreakdown(threshold.category, "High", threshold.high_price)


def build_breakdowns(
    planter_input: PlanterInput,
    envelope: FabricationEnvelope,
    thresholds: Optional[Mapping[str, CostThreshold]] = None,
    overrides: Optional[Mapping[str, float]] = None,
) -> List[CostBreakdown]:
    """Resolve every labor category for the envelope volume.

    Disabled features come back as "Not Selected" at price 0.
    """
    if thresholds is None:
        thresholds = DEFAULT_COST_THRESHOLDS
    overrides = overrides or {}

    volume = envelope.volume
    breakdowns = []
    for category in CATEGORY_ORDER:
        if not _category_enabled(category, planter_input):
            breakdowns.append(CostBreakdown(category, NOT_SELECTED, 0.0))
            continue
        breakdown = determine_tier(volume, thresholds[category])
        if category in overrides:
            breakdown.override_price = max(0.0, overrides[category])
        breakdowns.append(breakdown)

    logger.debug("Resolved %d labor categories for volume %.0f in^3", len(breakdowns), volume)
    return breakdowns


def aggregate_costs(
    usages: Sequence[SheetUsage],
    breakdowns: Sequence[CostBreakdown],
    planter_input: PlanterInput,
    add_on_surcharges: Optional[Mapping[str, float]] = None,
) -> CostSummary:
    """
    Sum material, labor and add-on costs for a solve.

    Args:
        usages: Opened sheet instances with their placements
        breakdowns: Resolved labor prices by category
        planter_input: Feature flags (disabled features cost nothing)
        add_on_surcharges: Fixed extra charges by label

    Returns:
        CostSummary with totals and utilization
    """
    material_cost = sum(usage.sheet_cost for usage in usages)
    purchased_area = sum(usage.sheet_area_sqft for usage in usages)
    placed_area = sum(
        p.area for usage in usages for p in usage.placements
    ) / SQ_IN_PER_SQ_FT

    labor_cost = 0.0
    liner_labor = 0.0
    for breakdown in breakdowns:
        if not _category_enabled(breakdown.category, planter_input):
            continue
        labor_cost += breakdown.price
        if breakdown.category == "Liner":
            liner_labor = breakdown.price

    liner_material = sum(usage.sheet_cost for usage in usages if usage.hosts_liner)
    add_on_cost = sum((add_on_surcharges or {}).values())

    utilization = placed_area / purchased_area * 100 if purchased_area > 0 else 0.0
    waste = 100 - utilization if purchased_area > 0 else 0.0

    summary = CostSummary(
        total_material_cost=material_cost,
        labor_cost=labor_cost,
        add_on_cost=add_on_cost,
        total_fabrication_cost=material_cost + labor_cost + add_on_cost,
        liner_labor_cost=liner_labor,
        liner_material_cost=liner_material,
        material_area_sqft=placed_area,
        purchased_area_sqft=purchased_area,
        utilization_pct=utilization,
        waste_pct=waste,
    )
    logger.info(
        "Costs: material=$%.2f labor=$%.2f add_ons=$%.2f total=$%.2f utilization=%.1f%%",
        material_cost, labor_cost, add_on_cost, summary.total_fabrication_cost, utilization,
    )
    return summary


def summarize_rows(usages: Sequence[SheetUsage]) -> List[RowSummary]:
    """Group opened sheets by inventory row, sorted by name then row id."""
    buckets: Dict[str, dict] = {}
    for usage in usages:
        entry = buckets.get(usage.row_id)
        if entry is None:
            buckets[usage.row_id] = {
                "row_id": usage.row_id,
                "name": usage.name,
                "cost_per_sqft": usage.cost_per_sqft,
                "quantity_used": 1,
                "available": usage.sheet_area_sqft,
                "used": usage.area_used_sqft,
            }
            continue
        entry["quantity_used"] += 1
        entry["available"] += usage.sheet_area_sqft
        entry["used"] += usage.area_used_sqft

    summaries = []
    for entry in sorted(buckets.values(), key=lambda e: (e["name"], e["row_id"])):
        area_per_sheet = entry["available"] / entry["quantity_used"]
        cost_per_sheet = area_per_sheet * entry["cost_per_sqft"]
        summaries.append(RowSummary(
            row_id=entry["row_id"],
            name=entry["name"],
            cost_per_sqft=entry["cost_per_sqft"],
            quantity_used=entry["quantity_used"],
            total_area_available=entry["available"],
            total_area_used=entry["used"],
            cost_per_sheet=cost_per_sheet,
            utilization_pct=entry["used"] / entry["available"] * 100 if entry["available"] else 0.0,
            unused_material_cost=max(0.0, entry["available"] - entry["used"]) * entry["cost_per_sqft"],
            total_material_cost=cost_per_sheet * entry["quantity_used"],
        ))
    return summaries


def quote_sale_price(
    fabrication_cost: float,
    margin_pct: float,
    buffer: float = 0.0,
    discount: float = 0.0,
) -> PriceQuote:
    """Suggested sale price at ``margin_pct``, plus buffer minus discount.

    Margin is clamped to [0, 99]%; negative buffers and discounts are ignored.
    """
    margin = min(max(margin_pct / 100, 0.0), 0.99)
    if fabrication_cost > 0:
        suggested = fabrication_cost / (1 - margin)
    else:
        suggested = fabrication_cost
    buffer = max(buffer, 0.0)
    discount = max(discount, 0.0)
    final = max(0.0, suggested + buffer - discount)
    actual = (final - fabrication_cost) / final * 100 if final > 0 else 0.0
    return PriceQuote(
        fabrication_cost=fabrication_cost,
        margin_pct=margin * 100,
        suggested_price=suggested,
        buffer=buffer,
        discount=discount,
        final_price=final,
        actual_margin_pct=actual,
    )


def _category_enabled(category: str, planter_input: PlanterInput) -> bool:
    if category == "Liner":
        return planter_input.liner_enabled
    if category == "Shelf":
        return planter_input.shelf_enabled
    if category == "Weight Plate":
        return planter_input.weight_plate_enabled
    return True


def _validate_threshold(threshold: CostThreshold) -> None:
    for key in ("low_threshold", "low_price", "medium_threshold", "medium_price", "high_price"):
        if not math.isfinite(getattr(threshold, key)):
            raise ValueError(f"{threshold.category}: {key} must be a finite number")
    if threshold.low_threshold >= threshold.medium_threshold:
        raise ValueError(
            f"{threshold.category}: low_threshold ({threshold.low_threshold:g}) must be "
            f"below medium_threshold ({threshold.medium_threshold:g})"
        )
