"""
Cut candidate generation.

Builds the queue of cuts the placement engine attempts, from two sources:
  A. Singles: one candidate per panel
  B. Bundles: two panels that share an edge, cut as one blank (including the
     long + short wall "L-cut")

Each candidate carries a cost-impact estimate at the cheapest inventory rate.
The estimate only ranks candidates; final pricing happens in costing.py.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from planter import SQ_IN_PER_SQ_FT, PanelBlueprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BundleRule:
    """Two panels eligible to be cut as a single blank."""
    anchor_id: str
    partner_id: str
    label: str
    l_cut: bool = False  # long + short wall sharing a full height


BUNDLE_ADJACENCY: Tuple[BundleRule, ...] = (
    BundleRule("panel-floor", "panel-long-a", "Floor + Long A"),
    BundleRule("panel-floor", "panel-long-b", "Floor + Long B"),
    BundleRule("panel-floor", "panel-short-a", "Floor + Short A"),
    BundleRule("panel-floor", "panel-short-b", "Floor + Short B"),
    BundleRule("panel-long-a", "panel-short-a", "L-cut (Long A + Short A)", l_cut=True),
    BundleRule("panel-long-b", "panel-short-b", "L-cut (Long B + Short B)", l_cut=True),
)


@dataclass(frozen=True)
class Candidate:
    """A cut to place: one panel, or two panels cut together."""
    id: str
    name: str
    panels: Tuple[PanelBlueprint, ...]
    total_area: float           # in^2
    longest_side: float         # in
    cost_impact: float          # $ at the reference rate, net of savings
    bundle_savings: float = 0.0
    is_bundle: bool = False
    is_l_cut: bool = False

    @property
    def panel_ids(self) -> Tuple[str, ...]:
        return tuple(panel.id for panel in self.panels)


def build_candidates(
    panels: Sequence[PanelBlueprint],
    reference_rate: float,
    bundle_savings_fraction: float = 0.0,
) -> Tuple[List[Candidate], List[Candidate]]:
    """Build single and bundle candidates for a panel set.

    Args:
        panels: Panels to cut.
        reference_rate: $/sqft used for ranking (cheapest inventory rate).
        bundle_savings_fraction: Share of a bundle's estimate credited back for
            cutting the shared edge once. 0 keeps bundles at their plain area cost.

    Returns:
        (singles, bundles), both in generation order.
    """
    singles = [
        Candidate(
            id=f"candidate-{panel.id}",
            name=panel.name,
            panels=(panel,),
            total_area=panel.area,
            longest_side=panel.longest_side,
            cost_impact=panel.area / SQ_IN_PER_SQ_FT * reference_rate,
        )
        for panel in panels
    ]

    panel_map: Dict[str, PanelBlueprint] = {panel.id: panel for panel in panels}
    bundles: List[Candidate] = []
    for rule in BUNDLE_ADJACENCY:
        anchor = panel_map.get(rule.anchor_id)
        partner = panel_map.get(rule.partner_id)
        if anchor is None or partner is None:
            continue

        area_sum = anchor.area + partner.area
        impact = area_sum / SQ_IN_PER_SQ_FT * reference_rate
        savings = impact * bundle_savings_fraction
        if rule.l_cut:
            longest = max(anchor.width + partner.width, anchor.height)
        else:
            longest = max(anchor.longest_side, partner.longest_side)

        bundles.append(Candidate(
            id=f"bundle-{rule.anchor_id}-{rule.partner_id}",
            name=rule.label,
            panels=(anchor, partner),
            total_area=area_sum,
            longest_side=longest,
            cost_impact=impact - savings,
            bundle_savings=savings,
            is_bundle=True,
            is_l_cut=rule.l_cut,
        ))

    logger.debug(
        "Built %d single and %d bundle candidates at $%.2f/sqft",
        len(singles), len(bundles), reference_rate,
    )
    return singles, bundles


def candidate_sort_key(candidate: Candidate) -> Tuple[bool, float, float, float, str]:
    """L-cuts first, then cheapest, smallest, shortest, then by name."""
    return (
        not candidate.is_l_cut,
        candidate.cost_impact,
        candidate.total_area,
        candidate.longest_side,
        candidate.name,
    )


def build_candidate_queue(
    singles: Sequence[Candidate],
    bundles: Sequence[Candidate],
) -> List[Candidate]:
    """Placement order: every bundle before any single, each group by sort key."""
    return sorted(bundles, key=candidate_sort_key) + sorted(singles, key=candidate_sort_key)
