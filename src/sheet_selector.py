"""
Greedy sheet selection and placement.

Walks the candidate queue once. Each candidate goes onto an already-open sheet
instance when one fits; otherwise a new instance is opened from the ordered
inventory, honoring per-row quantity caps. Candidates that fit nowhere are
dropped and their panels reported as unplaced.

Open-sheet policies:
1) least_waste: evaluate every open sheet, keep the one leaving least waste
2) first_fit: take the first open sheet (creation order) that fits

Every open sheet and every inventory row is re-evaluated for every candidate.
That is O(candidates x sheets), which is fine at planter scale and keeps the
tie-break order exact.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from candidates import Candidate
from materials import SheetInventoryRow
from sheet_packing import Placement, SheetInstance, try_place_candidate

logger = logging.getLogger(__name__)

EXISTING_SHEET_POLICIES = ("least_waste", "first_fit")


@dataclass
class SheetSelectionConfig:
    """Configuration for sheet selection."""
    existing_sheet_policy: str = "least_waste"  # "least_waste" | "first_fit"
    prefer_single_sheet_fit: bool = True  # favor new rows that can host the whole remaining queue


@dataclass
class SheetSelection:
    """Result of sheet selection."""
    placements: List[Placement]
    sheet_instances: List[SheetInstance]
    placed_panel_ids: Set[str]
    unplaced_panel_ids: List[str]
    bundle_savings: float = 0.0
    row_usage: Dict[str, int] = field(default_factory=dict)
    selection_trace: List[dict] = field(default_factory=list)


@dataclass
class _NewSheetOption:
    row: SheetInventoryRow
    number: int
    attempt: List[Placement]
    sheet_cost: float
    waste_after: float
    fits_all_remaining: bool


def place_candidates(
    queue: Sequence[Candidate],
    rows: Sequence[SheetInventoryRow],
    config: Optional[SheetSelectionConfig] = None,
) -> SheetSelection:
    """Place every candidate of ``queue`` in order.

    Args:
        queue: Candidates in placement order (see candidates.build_candidate_queue).
        rows: Inventory rows in sheet-creation preference order.
        config: Selection policy.

    Returns:
        SheetSelection with placements, opened sheets and the decision trace.
    """
    if config is None:
        config = SheetSelectionConfig()

    if config.existing_sheet_policy not in EXISTING_SHEET_POLICIES:
        raise ValueError(
            f"Unknown existing_sheet_policy '{config.existing_sheet_policy}'. "
            "Expected 'least_waste' or 'first_fit'.",
        )

    sheets: List[SheetInstance] = []
    row_usage: Dict[str, int] = {}
    placements: List[Placement] = []
    placed: Set[str] = set()
    bundle_savings = 0.0
    trace: List[dict] = []

    for index, candidate in enumerate(queue):
        if any(panel_id in placed for panel_id in candidate.panel_ids):
            continue

        remaining = [
            queued for queued in queue[index + 1:]
            if not any(panel_id in placed for panel_id in queued.panel_ids)
        ]

        committed = place_candidate_on_sheets(
            candidate, sheets, rows, row_usage, remaining, config,
        )
        if committed is None:
            logger.debug("Dropped %s: no open or new sheet fits", candidate.id)
            trace.append({"candidate_id": candidate.id, "sheet_instance_id": None})
            continue

        placements.extend(committed)
        placed.update(p.panel_id for p in committed)
        bundle_savings += candidate.bundle_savings
        trace.append({
            "candidate_id": candidate.id,
            "sheet_instance_id": committed[0].sheet_instance_id,
        })

    all_panel_ids = []
    for candidate in queue:
        for panel_id in candidate.panel_ids:
            if panel_id not in all_panel_ids:
                all_panel_ids.append(panel_id)
    unplaced = [panel_id for panel_id in all_panel_ids if panel_id not in placed]

    logger.info(
        "Selection complete: placements=%d sheets=%d unplaced=%d",
        len(placements), len(sheets), len(unplaced),
    )
    return SheetSelection(
        placements=placements,
        sheet_instances=sheets,
        placed_panel_ids=placed,
        unplaced_panel_ids=unplaced,
        bundle_savings=bundle_savings,
        row_usage=row_usage,
        selection_trace=trace,
    )


def place_candidate_on_sheets(
    candidate: Candidate,
    sheets: List[SheetInstance],
    rows: Sequence[SheetInventoryRow],
    row_usage: Dict[str, int],
    remaining: Sequence[Candidate],
    config: Optional[SheetSelectionConfig] = None,
) -> Optional[List[Placement]]:
    """Commit ``candidate`` to an open sheet or a newly opened one.

    Mutates ``sheets`` and ``row_usage`` on success. Returns the committed
    placements, or None when nothing fits.
    """
    if config is None:
        config = SheetSelectionConfig()

    existing = _best_existing_sheet(candidate, sheets, config)
    if existing is not None:
        sheet, attempt = existing
        sheet.commit(attempt)
        logger.debug("Placed %s on open sheet %s", candidate.id, sheet.id)
        return attempt

    best: Optional[_NewSheetOption] = None
    for row in rows:
        usage = row_usage.get(row.id, 0)
        if usage >= row.max_instances:
            continue

        sheet = SheetInstance.from_row(row, usage + 1)
        attempt = try_place_candidate(sheet, candidate)
        if attempt is None:
            continue

        fits_all = False
        if config.prefer_single_sheet_fit:
            fits_all = can_fit_candidates_on_single_sheet(row, [candidate, *remaining])
        option = _NewSheetOption(
            row=row,
            number=usage + 1,
            attempt=attempt,
            sheet_cost=row.sheet_cost,
            waste_after=sheet.waste_after(attempt),
            fits_all_remaining=fits_all,
        )
        if best is None or _is_better_new_sheet(option, best):
            best = option

    if best is None:
        return None

    sheet = SheetInstance.from_row(best.row, best.number)
    row_usage[best.row.id] = best.number
    sheet.commit(best.attempt)
    sheets.append(sheet)
    logger.debug(
        "Opened %s for %s (cost=$%.2f fits_all=%s)",
        sheet.id, candidate.id, best.sheet_cost, best.fits_all_remaining,
    )
    return best.attempt


def can_fit_candidates_on_single_sheet(
    row: SheetInventoryRow,
    candidates: Sequence[Candidate],
) -> bool:
    """True if one fresh sheet of ``row`` takes every candidate in order."""
    scratch = SheetInstance.from_row(row, 0)
    scratch.id = "temp-sheet"
    placed: Set[str] = set()

    for candidate in candidates:
        if any(panel_id in placed for panel_id in candidate.panel_ids):
            continue
        attempt = try_place_candidate(scratch, candidate)
        if attempt is None:
            return False
        placed.update(candidate.panel_ids)
        scratch.commit(attempt)
    return True


# ─── Internal helpers ────────────────────────────────────────────────────────


def _best_existing_sheet(
    candidate: Candidate,
    sheets: Sequence[SheetInstance],
    config: SheetSelectionConfig,
):
    best = None
    best_waste = 0.0
    for sheet in sheets:
        attempt = try_place_candidate(sheet, candidate)
        if attempt is None:
            continue
        if config.existing_sheet_policy == "first_fit":
            return sheet, attempt
        waste = sheet.waste_after(attempt)
        if best is None or waste < best_waste:
            best = (sheet, attempt)
            best_waste = waste
    return best


def _is_better_new_sheet(option: _NewSheetOption, best: _NewSheetOption) -> bool:
    """Fits-everything first, then cheapest sheet, then least waste."""
    if option.fits_all_remaining != best.fits_all_remaining:
        return option.fits_all_remaining
    if option.sheet_cost != best.sheet_cost:
        return option.sheet_cost < best.sheet_cost
    return option.waste_after < best.waste_after
