"""
Planter nesting and cost solver.

One call takes a planter, its fabrication envelope, resolved labor prices and
the sheet inventory, and returns every panel's sheet position plus the cost
totals. The solve is pure and deterministic: no I/O, no state kept between
calls, and identical inputs give identical results apart from the timestamp.
"""
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from candidates import build_candidate_queue, build_candidates
from costing import CostBreakdown, SheetUsage, aggregate_costs
from materials import DEFAULT_SHEET_INVENTORY, SheetInventoryRow, cheapest_rate, order_sheet_rows
from panel_blueprints import build_panels, panel_area_sqft
from planter import (
    DEFAULT_LINER_HEIGHT_FRACTION,
    SQ_IN_PER_SQ_FT,
    FabricationEnvelope,
    PlanterInput,
)
from sheet_packing import Placement
from sheet_selector import SheetSelectionConfig, place_candidates

logger = logging.getLogger(__name__)


class SolverError(Exception):
    """Base exception for solver failures."""
    pass


class EmptyInventoryError(SolverError):
    """No sheet inventory to place panels on."""
    pass


@dataclass
class SolverOptions:
    """Inventory and policy options for one solve."""
    inventory: Optional[List[SheetInventoryRow]] = None  # None = shop default inventory
    mode: str = "auto"  # "auto" | "manual"
    manual_row_order: Optional[List[str]] = None
    liner_height_percent: float = DEFAULT_LINER_HEIGHT_FRACTION
    existing_sheet_policy: str = "least_waste"
    prefer_single_sheet_fit: bool = True
    bundle_savings_fraction: float = 0.0
    add_on_surcharges: Dict[str, float] = field(default_factory=dict)


@dataclass
class SolverResult:
    """Placements, sheet usage and cost totals for one solve."""
    placements: List[Placement]
    sheet_usages: List[SheetUsage]
    total_material_cost: float
    total_fabrication_cost: float
    labor_cost: float
    add_on_cost: float
    material_area_sqft: float
    utilization_pct: float
    bundle_savings: float
    liner_area_sqft: float
    liner_extra_cost: float
    liner_material_cost: float
    panel_ids: List[str]
    unplaced_panel_ids: List[str]
    solver_timestamp: str = ""

    @property
    def is_complete(self) -> bool:
        return not self.unplaced_panel_ids

    def to_dict(self, include_timestamp: bool = True) -> dict:
        """JSON-ready payload."""
        payload = {
            "placements": [_placement_to_dict(p) for p in self.placements],
            "sheet_usages": [
                {
                    "id": usage.id,
                    "row_id": usage.row_id,
                    "name": usage.name,
                    "width": usage.width,
                    "height": usage.height,
                    "cost_per_sqft": usage.cost_per_sqft,
                    "placement_ids": [p.id for p in usage.placements],
                    "area_used_sqft": usage.area_used_sqft,
                }
                for usage in self.sheet_usages
            ],
            "total_material_cost": self.total_material_cost,
            "total_fabrication_cost": self.total_fabrication_cost,
            "labor_cost": self.labor_cost,
            "add_on_cost": self.add_on_cost,
            "material_area_sqft": self.material_area_sqft,
            "utilization_pct": self.utilization_pct,
            "bundle_savings": self.bundle_savings,
            "liner_area_sqft": self.liner_area_sqft,
            "liner_extra_cost": self.liner_extra_cost,
            "liner_material_cost": self.liner_material_cost,
            "panel_ids": list(self.panel_ids),
            "unplaced_panel_ids": list(self.unplaced_panel_ids),
        }
        if include_timestamp:
            payload["solver_timestamp"] = self.solver_timestamp
        return payload


def run_planter_solver(
    planter_input: PlanterInput,
    fabrication_dims: FabricationEnvelope,
    breakdowns: Sequence[CostBreakdown],
    options: Optional[SolverOptions] = None,
) -> SolverResult:
    """Nest every panel of a planter onto purchased sheets and price the job.

    Args:
        planter_input: Box geometry and feature flags (validated upstream).
        fabrication_dims: Outer fabrication envelope.
        breakdowns: Labor prices already resolved per category.
        options: Inventory and selection policy.

    Returns:
        SolverResult. Panels that fit no sheet are listed in
        ``unplaced_panel_ids`` rather than raising.

    Raises:
        EmptyInventoryError: the inventory has no rows.
    """
    if options is None:
        options = SolverOptions()

    inventory = DEFAULT_SHEET_INVENTORY if options.inventory is None else options.inventory
    if not inventory:
        raise EmptyInventoryError("No sheet inventory provided to the solver.")

    rows = order_sheet_rows(inventory, options.mode, options.manual_row_order)
    if not rows:
        raise EmptyInventoryError("Manual row order selects no sheet inventory.")

    panels = build_panels(fabrication_dims, planter_input, options.liner_height_percent)
    singles, bundles = build_candidates(
        panels, cheapest_rate(rows), options.bundle_savings_fraction,
    )
    queue = build_candidate_queue(singles, bundles)
    logger.info(
        "Solving %d panels: %d candidates over %d inventory rows (%s mode)",
        len(panels), len(queue), len(rows), options.mode,
    )

    selection = place_candidates(
        queue,
        rows,
        SheetSelectionConfig(
            existing_sheet_policy=options.existing_sheet_policy,
            prefer_single_sheet_fit=options.prefer_single_sheet_fit,
        ),
    )

    usages = [
        SheetUsage(
            id=sheet.id,
            row_id=sheet.row_id,
            name=sheet.name,
            width=sheet.width,
            height=sheet.height,
            cost_per_sqft=sheet.cost_per_sqft,
            placements=list(sheet.placements),
            area_used_sqft=sheet.used_area_in2 / SQ_IN_PER_SQ_FT,
        )
        for sheet in selection.sheet_instances
    ]
    costs = aggregate_costs(usages, breakdowns, planter_input, options.add_on_surcharges)

    unplaced = [panel.id for panel in panels if panel.id not in selection.placed_panel_ids]
    if unplaced:
        logger.warning(
            "Plan incomplete: %d of %d panels fit no sheet (%s)",
            len(unplaced), len(panels), ", ".join(unplaced),
        )

    return SolverResult(
        placements=selection.placements,
        sheet_usages=usages,
        total_material_cost=costs.total_material_cost,
        total_fabrication_cost=costs.total_fabrication_cost,
        labor_cost=costs.labor_cost,
        add_on_cost=costs.add_on_cost,
        material_area_sqft=costs.material_area_sqft,
        utilization_pct=costs.utilization_pct,
        bundle_savings=selection.bundle_savings,
        liner_area_sqft=panel_area_sqft(panels, liner_only=True),
        liner_extra_cost=costs.liner_labor_cost,
        liner_material_cost=costs.liner_material_cost,
        panel_ids=[panel.id for panel in panels],
        unplaced_panel_ids=unplaced,
        solver_timestamp=datetime.now(timezone.utc).isoformat(),
    )


def _placement_to_dict(placement: Placement) -> dict:
    payload = asdict(placement)
    payload["panel_type"] = placement.panel_type.value
    return payload
