"""
Cut-plan audit.

Re-checks a solver result independently of the placement engine: every
placement stays on its sheet, no two placements on a sheet overlap, every
panel is cut at most once, and no inventory row is used beyond its quantity.
Unplaced panels are reported as warnings.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
from shapely.geometry import box
from shapely.ops import unary_union

from materials import SheetInventoryRow
from planter import SQ_IN_PER_SQ_FT
from planter_solver import SolverResult

logger = logging.getLogger(__name__)

# Overlaps smaller than this (in^2) are float noise along shared edges.
OVERLAP_TOLERANCE_IN2 = 1e-6


@dataclass
class PlanViolation:
    """A single cut-plan rule violation."""

    rule_name: str
    severity: str  # "error" or "warning"
    message: str
    sheet_instance_id: Optional[str] = None
    panel_id: Optional[str] = None


def check_plan(
    result: SolverResult,
    inventory: Optional[Sequence[SheetInventoryRow]] = None,
) -> List[PlanViolation]:
    """Run all audit checks on a solver result.

    Args:
        result: Output of run_planter_solver.
        inventory: Rows the solve used; enables the quantity check.

    Returns:
        List of violations (empty = plan is sound).
    """
    violations: List[PlanViolation] = []

    violations.extend(_check_bounds(result))
    violations.extend(_check_overlaps(result))
    violations.extend(_check_single_use(result))
    if inventory is not None:
        violations.extend(_check_quantities(result, inventory))
    violations.extend(_check_unplaced(result))

    errors = sum(1 for v in violations if v.severity == "error")
    logger.info("Plan audit: %d errors, %d warnings", errors, len(violations) - errors)
    return violations


def sheet_coverage_sqft(result: SolverResult) -> Dict[str, float]:
    """Union area covered by placements, per sheet instance."""
    coverage = {}
    for usage in result.sheet_usages:
        shapes = [
            box(p.x, p.y, p.x + p.width, p.y + p.height) for p in usage.placements
        ]
        area = unary_union(shapes).area if shapes else 0.0
        coverage[usage.id] = area / SQ_IN_PER_SQ_FT
    return coverage


# ─── Individual checks ───────────────────────────────────────────────────────


def _check_bounds(result: SolverResult) -> List[PlanViolation]:
    violations = []
    for usage in result.sheet_usages:
        sheet = box(0, 0, usage.width, usage.height)
        for p in usage.placements:
            piece = box(p.x, p.y, p.x + p.width, p.y + p.height)
            if not sheet.covers(piece):
                violations.append(PlanViolation(
                    rule_name="placement_bounds",
                    severity="error",
                    message=(
                        f"{p.name} at ({p.x:.3f}, {p.y:.3f}) size {p.width:.3f}x{p.height:.3f} "
                        f"leaves sheet {usage.id} ({usage.width:.3f}x{usage.height:.3f})"
                    ),
                    sheet_instance_id=usage.id,
                    panel_id=p.panel_id,
                ))
    return violations


def _check_overlaps(result: SolverResult) -> List[PlanViolation]:
    """Pairwise interior overlap on each sheet, vectorized per sheet."""
    violations = []
    for usage in result.sheet_usages:
        if len(usage.placements) < 2:
            continue
        rects = np.array(
            [[p.x, p.y, p.x + p.width, p.y + p.height] for p in usage.placements],
            dtype=float,
        )
        dx = np.minimum(rects[:, None, 2], rects[None, :, 2]) - np.maximum(rects[:, None, 0], rects[None, :, 0])
        dy = np.minimum(rects[:, None, 3], rects[None, :, 3]) - np.maximum(rects[:, None, 1], rects[None, :, 1])
        overlap = np.clip(dx, 0, None) * np.clip(dy, 0, None)
        rows, cols = np.nonzero(np.triu(overlap > OVERLAP_TOLERANCE_IN2, k=1))
        for i, j in zip(rows.tolist(), cols.tolist()):
            a, b = usage.placements[i], usage.placements[j]
            violations.append(PlanViolation(
                rule_name="placement_overlap",
                severity="error",
                message=f"{a.name} overlaps {b.name} on {usage.id} by {overlap[i, j]:.3f} in^2",
                sheet_instance_id=usage.id,
                panel_id=a.panel_id,
            ))
    return violations


def _check_single_use(result: SolverResult) -> List[PlanViolation]:
    violations = []
    seen: Dict[str, str] = {}
    for p in result.placements:
        if p.panel_id in seen:
            violations.append(PlanViolation(
                rule_name="panel_cut_twice",
                severity="error",
                message=f"{p.name} is placed on {seen[p.panel_id]} and {p.sheet_instance_id}",
                sheet_instance_id=p.sheet_instance_id,
                panel_id=p.panel_id,
            ))
            continue
        seen[p.panel_id] = p.sheet_instance_id
    return violations


def _check_quantities(
    result: SolverResult,
    inventory: Sequence[SheetInventoryRow],
) -> List[PlanViolation]:
    violations = []
    rows = {row.id: row for row in inventory}
    counts: Dict[str, int] = {}
    for usage in result.sheet_usages:
        counts[usage.row_id] = counts.get(usage.row_id, 0) + 1

    for row_id, count in counts.items():
        row = rows.get(row_id)
        if row is None:
            violations.append(PlanViolation(
                rule_name="unknown_row",
                severity="error",
                message=f"{count} sheet(s) opened from row {row_id}, which is not in the inventory",
            ))
            continue
        if count > row.max_instances:
            violations.append(PlanViolation(
                rule_name="row_quantity",
                severity="error",
                message=f"{count} sheets of {row.name} opened, only {row.quantity} in stock",
            ))
    return violations


def _check_unplaced(result: SolverResult) -> List[PlanViolation]:
    return [
        PlanViolation(
            rule_name="panel_unplaced",
            severity="warning",
            message=f"Panel {panel_id} fits no available sheet",
            panel_id=panel_id,
        )
        for panel_id in result.unplaced_panel_ids
    ]
