"""
Rectangle placement on a single sheet instance.

First-fit anchor scan: candidate x positions are 0 plus the right edge of every
existing placement, candidate y positions are 0 plus every top edge. Rows (y)
are scanned outer, columns (x) inner, unrotated before rotated. The first
in-bounds, non-overlapping anchor wins. This is a deterministic heuristic, not
an optimal packer.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from candidates import Candidate
from materials import SheetInventoryRow, sheet_cost
from planter import PanelBlueprint, PanelType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """A panel assigned to a position on a sheet instance."""
    id: str
    candidate_id: str
    panel_id: str
    sheet_instance_id: str
    row_id: str
    name: str
    x: float
    y: float
    width: float   # as placed, after rotation
    height: float
    rotated: bool
    is_bundle: bool
    is_liner: bool
    panel_type: PanelType

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass
class SheetInstance:
    """One physical sheet opened from an inventory row during a solve."""
    id: str
    row_id: str
    name: str
    width: float
    height: float
    cost_per_sqft: float
    placements: List[Placement] = field(default_factory=list)
    used_area_in2: float = 0.0

    @classmethod
    def from_row(cls, row: SheetInventoryRow, number: int) -> "SheetInstance":
        """Instance ``number`` (1-based) of an inventory row."""
        return cls(
            id=f"{row.id}-{number}",
            row_id=row.id,
            name=row.name,
            width=row.width,
            height=row.height,
            cost_per_sqft=row.cost_per_sqft,
        )

    @property
    def area_in2(self) -> float:
        return self.width * self.height

    @property
    def sheet_cost(self) -> float:
        return sheet_cost(self.width, self.height, self.cost_per_sqft)

    def waste_after(self, placements: Sequence[Placement]) -> float:
        """Unused area (in^2) if ``placements`` were added."""
        added = sum(p.area for p in placements)
        return max(0.0, self.area_in2 - (self.used_area_in2 + added))

    def commit(self, placements: Sequence[Placement]) -> None:
        self.placements.extend(placements)
        self.used_area_in2 += sum(p.area for p in placements)


@dataclass(frozen=True)
class Fit:
    """Position found by the anchor scan."""
    x: float
    y: float
    width: float
    height: float
    rotated: bool


@dataclass(frozen=True)
class LCutLayout:
    """Long + short wall cut as one combined blank of the shared height."""
    long_panel: PanelBlueprint
    short_panel: PanelBlueprint
    height: float

    @property
    def total_length(self) -> float:
        return self.long_panel.width + self.short_panel.width


def orientations(width: float, height: float) -> List[Tuple[float, float, bool]]:
    """(width, height, rotated) options; squares are not rotated."""
    options = [(width, height, False)]
    if width != height:
        options.append((height, width, True))
    return options


def rectangles_overlap(
    x: float, y: float, width: float, height: float,
    ox: float, oy: float, owidth: float, oheight: float,
) -> bool:
    """True when the interiors intersect; shared edges do not count."""
    return not (
        x + width <= ox
        or ox + owidth <= x
        or y + height <= oy
        or oy + oheight <= y
    )


def find_placement_on_sheet(
    sheet: SheetInstance,
    width: float,
    height: float,
    extra: Sequence[Placement] = (),
) -> Optional[Fit]:
    """First-fit position for a ``width`` x ``height`` rectangle.

    Args:
        sheet: Sheet to scan.
        width, height: Requested size; the rotated size is tried second.
        extra: Simulated placements treated as already on the sheet.

    Returns:
        Fit, or None if no anchor works.
    """
    occupied = list(sheet.placements) + list(extra)
    xs = sorted({0.0} | {p.x + p.width for p in occupied})
    ys = sorted({0.0} | {p.y + p.height for p in occupied})

    for w, h, rotated in orientations(width, height):
        for y in ys:
            if y + h > sheet.height:
                continue
            for x in xs:
                if x + w > sheet.width:
                    continue
                if not any(
                    rectangles_overlap(x, y, w, h, p.x, p.y, p.width, p.height)
                    for p in occupied
                ):
                    return Fit(x=x, y=y, width=w, height=h, rotated=rotated)
    return None


def l_cut_layout(candidate: Candidate) -> Optional[LCutLayout]:
    """Combined-blank layout for an L-cut bundle, or None."""
    if not candidate.is_l_cut or len(candidate.panels) != 2:
        return None
    first, second = candidate.panels
    long_panel, short_panel = (first, second) if first.type == PanelType.LONG else (second, first)
    if long_panel.type != PanelType.LONG or short_panel.type != PanelType.SHORT:
        return None
    if long_panel.height != short_panel.height:
        return None
    return LCutLayout(long_panel=long_panel, short_panel=short_panel, height=long_panel.height)


def is_inside_sheet(sheet: SheetInstance, placement: Placement) -> bool:
    return (
        placement.x >= 0
        and placement.y >= 0
        and placement.x + placement.width <= sheet.width
        and placement.y + placement.height <= sheet.height
    )


def placements_valid_for_sheet(sheet: SheetInstance, placements: Sequence[Placement]) -> bool:
    """Bounds, mutual overlap and overlap with the sheet's existing placements."""
    if not all(is_inside_sheet(sheet, p) for p in placements):
        return False

    for i in range(len(placements)):
        for j in range(i + 1, len(placements)):
            a, b = placements[i], placements[j]
            if rectangles_overlap(a.x, a.y, a.width, a.height, b.x, b.y, b.width, b.height):
                return False

    for p in placements:
        if any(
            rectangles_overlap(p.x, p.y, p.width, p.height, e.x, e.y, e.width, e.height)
            for e in sheet.placements
        ):
            return False
    return True


def try_place_candidate(sheet: SheetInstance, candidate: Candidate) -> Optional[List[Placement]]:
    """Placements for every panel of ``candidate`` on ``sheet``, or None.

    Does not modify the sheet.
    """
    if len(candidate.panels) == 1:
        panel = candidate.panels[0]
        fit = find_placement_on_sheet(sheet, panel.width, panel.height)
        if fit is None:
            return None
        return [_make_placement(sheet, candidate, panel, fit.x, fit.y, fit.width, fit.height, fit.rotated)]

    layout = l_cut_layout(candidate)
    if layout is not None:
        attempt = _try_place_l_cut(sheet, candidate, layout)
        if attempt is not None:
            return attempt

    return _try_place_pair(sheet, candidate)


# ─── Internal helpers ────────────────────────────────────────────────────────


def _make_placement(
    sheet: SheetInstance,
    candidate: Candidate,
    panel: PanelBlueprint,
    x: float,
    y: float,
    width: float,
    height: float,
    rotated: bool,
) -> Placement:
    return Placement(
        id=f"{candidate.id}-{panel.id}",
        candidate_id=candidate.id,
        panel_id=panel.id,
        sheet_instance_id=sheet.id,
        row_id=sheet.row_id,
        name=panel.name,
        x=x,
        y=y,
        width=width,
        height=height,
        rotated=rotated,
        is_bundle=candidate.is_bundle,
        is_liner=panel.is_liner,
        panel_type=panel.type,
    )


def _try_place_l_cut(
    sheet: SheetInstance,
    candidate: Candidate,
    layout: LCutLayout,
) -> Optional[List[Placement]]:
    """Place the combined blank, then split it into long and short pieces.

    The anchor scan may hand back the other orientation of the requested
    blank, so the split is validated before it is accepted.
    """
    long_len = layout.long_panel.width
    short_len = layout.short_panel.width
    for width, height, rotated in orientations(layout.total_length, layout.height):
        anchor = find_placement_on_sheet(sheet, width, height)
        if anchor is None:
            continue

        if rotated:
            first = _make_placement(
                sheet, candidate, layout.long_panel,
                anchor.x, anchor.y, layout.height, long_len, True,
            )
            second = _make_placement(
                sheet, candidate, layout.short_panel,
                anchor.x, anchor.y + long_len, layout.height, short_len, True,
            )
        else:
            first = _make_placement(
                sheet, candidate, layout.long_panel,
                anchor.x, anchor.y, long_len, layout.height, False,
            )
            second = _make_placement(
                sheet, candidate, layout.short_panel,
                anchor.x + long_len, anchor.y, short_len, layout.height, False,
            )

        if placements_valid_for_sheet(sheet, [first, second]):
            return [first, second]
        logger.debug(
            "L-cut split rejected on %s at (%.3f, %.3f) rotated=%s",
            sheet.id, anchor.x, anchor.y, rotated,
        )
    return None


def _try_place_pair(sheet: SheetInstance, candidate: Candidate) -> Optional[List[Placement]]:
    """Place panel A, then panel B against the sheet with A added."""
    panel_a, panel_b = candidate.panels
    for width_a, height_a, rotated_a in orientations(panel_a.width, panel_a.height):
        fit_a = find_placement_on_sheet(sheet, width_a, height_a)
        if fit_a is None:
            continue
        first = _make_placement(
            sheet, candidate, panel_a,
            fit_a.x, fit_a.y, fit_a.width, fit_a.height, rotated_a != fit_a.rotated,
        )

        for width_b, height_b, rotated_b in orientations(panel_b.width, panel_b.height):
            fit_b = find_placement_on_sheet(sheet, width_b, height_b, extra=[first])
            if fit_b is None:
                continue
            second = _make_placement(
                sheet, candidate, panel_b,
                fit_b.x, fit_b.y, fit_b.width, fit_b.height, rotated_b != fit_b.rotated,
            )
            if placements_valid_for_sheet(sheet, [first, second]):
                return [first, second]
    return None

