"""
Panel blueprint generation.

Expands the fabrication envelope(s) and feature flags into the list of named
rectangular panels to cut. The panel set is deterministic for a given input.
"""
import logging
from typing import List, Optional

from planter import (
    DEFAULT_LINER_HEIGHT_FRACTION,
    SQ_IN_PER_SQ_FT,
    FabricationEnvelope,
    PanelBlueprint,
    PanelType,
    PlanterInput,
    build_liner_envelope,
)

logger = logging.getLogger(__name__)


def build_panels(
    envelope: FabricationEnvelope,
    planter_input: PlanterInput,
    liner_height_fraction: float = DEFAULT_LINER_HEIGHT_FRACTION,
) -> List[PanelBlueprint]:
    """
    Create the panels for one planter.

    Args:
        envelope: Outer fabrication envelope
        planter_input: Feature flags and liner parameters
        liner_height_fraction: Liner wall height as a fraction of box height

    Returns:
        Panels in build order: floor, walls, shelf, liner
    """
    panels: List[PanelBlueprint] = []

    if planter_input.floor_enabled:
        panels.append(PanelBlueprint(
            id="panel-floor",
            name="Floor",
            width=envelope.width,
            height=envelope.length,
            type=PanelType.FLOOR,
        ))

    # Two opposite walls per side
    for suffix in ("a", "b"):
        panels.append(PanelBlueprint(
            id=f"panel-long-{suffix}",
            name=f"Long {suffix.upper()}",
            width=envelope.length,
            height=envelope.height,
            type=PanelType.LONG,
        ))
    for suffix in ("a", "b"):
        panels.append(PanelBlueprint(
            id=f"panel-short-{suffix}",
            name=f"Short {suffix.upper()}",
            width=envelope.width,
            height=envelope.height,
            type=PanelType.SHORT,
        ))

    if planter_input.shelf_enabled:
        panels.append(PanelBlueprint(
            id="panel-shelf",
            name="Shelf",
            width=envelope.width,
            height=envelope.length,
            type=PanelType.SHELF,
        ))

    liner = build_liner_envelope(planter_input, liner_height_fraction)
    if liner is not None:
        panels.extend(_liner_panels(liner))
    elif planter_input.liner_enabled:
        logger.info(
            "Liner envelope collapsed (depth=%.3f) - no liner panels generated",
            planter_input.liner_depth,
        )

    return panels


def panel_area_sqft(panels: List[PanelBlueprint], liner_only: Optional[bool] = None) -> float:
    """Total panel area in sqft, optionally filtered by liner flag."""
    total = 0.0
    for panel in panels:
        if liner_only is not None and panel.is_liner != liner_only:
            continue
        total += panel.area
    return total / SQ_IN_PER_SQ_FT


def _liner_panels(liner: FabricationEnvelope) -> List[PanelBlueprint]:
    """Bottom plus two long and two short liner walls."""
    panels = [PanelBlueprint(
        id="panel-liner-bottom",
        name="Liner Bottom",
        width=liner.width,
        height=liner.length,
        type=PanelType.LINER,
        is_liner=True,
    )]
    for suffix in ("a", "b"):
        panels.append(PanelBlueprint(
            id=f"panel-liner-long-{suffix}",
            name=f"Liner Long {suffix.upper()}",
            width=liner.length,
            height=liner.height,
            type=PanelType.LINER,
            is_liner=True,
        ))
    for suffix in ("a", "b"):
        panels.append(PanelBlueprint(
            id=f"panel-liner-short-{suffix}",
            name=f"Liner Short {suffix.upper()}",
            width=liner.width,
            height=liner.height,
            type=PanelType.LINER,
            is_liner=True,
        ))
    return panels
