"""
SVG Exporter for sheet cut plans.

Draws one SVG per opened sheet instance: the sheet outline, every placed
panel colored by panel group, and a name/size label on each panel. Units are
inches (1 user unit = 1 inch).
"""

import os
from typing import List, Tuple

import svgwrite

from costing import SheetUsage
from planter import PanelType
from planter_solver import SolverResult
from sheet_packing import Placement

# (fill, fill opacity, stroke, text) per panel group
PANEL_PALETTE = {
    "floor": ("#3b82f6", 0.25, "#3b82f6", "#0f172a"),
    "long": ("#4f46e5", 0.25, "#4f46e5", "#312e81"),
    "short": ("#06b6d4", 0.22, "#06b6d4", "#0f172a"),
    "liner": ("#22c55e", 0.28, "#10b981", "#064e3b"),
    "shelf": ("#fb7185", 0.35, "#dc2626", "#7f1d1d"),
    "other": ("#94a3b8", 0.25, "#94a3b8", "#0f172a"),
}


def panel_group(placement: Placement) -> str:
    """Palette group for a placement."""
    if placement.is_liner or placement.panel_type == PanelType.LINER:
        return "liner"
    if placement.panel_type == PanelType.SHELF:
        return "shelf"
    if placement.panel_type == PanelType.FLOOR:
        return "floor"
    if placement.panel_type == PanelType.LONG:
        return "long"
    if placement.panel_type == PanelType.SHORT:
        return "short"
    return "other"


def placement_style(placement: Placement) -> Tuple[str, float, str, str]:
    return PANEL_PALETTE.get(panel_group(placement), PANEL_PALETTE["other"])


def sheet_to_svg(
    usage: SheetUsage,
    filepath: str,
    add_labels: bool = True,
    margin: float = 2.0,  # in
) -> str:
    """
    Export one sheet instance and its placements to SVG.

    Args:
        usage: Opened sheet with placements
        filepath: Output SVG file path
        add_labels: Add panel name and size labels
        margin: Margin around the sheet (in)

    Returns:
        Path to created SVG file
    """
    canvas_width = usage.width + 2 * margin
    canvas_height = usage.height + 2 * margin

    dwg = svgwrite.Drawing(
        filepath,
        size=(f"{canvas_width}in", f"{canvas_height}in"),
        viewBox=f"0 0 {canvas_width} {canvas_height}",
    )

    dwg.defs.add(dwg.style("""
        .sheet { stroke: #94a3b8; stroke-width: 0.1; fill: #f8fafc; stroke-dasharray: 0.5 0.5; }
        .cut { stroke-width: 0.08; }
        .label { font-size: 1.2px; font-family: Arial, sans-serif; }
        .dim { font-size: 0.9px; font-family: Arial, sans-serif; fill: #475569; }
    """))

    dwg.add(dwg.rect(insert=(margin, margin), size=(usage.width, usage.height), class_="sheet"))
    dwg.add(
        dwg.text(
            f"{usage.id}  {usage.width:.2f} x {usage.height:.2f} in",
            insert=(margin, margin * 0.6),
            class_="dim",
        )
    )

    for placement in usage.placements:
        fill, fill_opacity, stroke, text_color = placement_style(placement)
        x = margin + placement.x
        y = margin + placement.y
        dwg.add(
            dwg.rect(
                insert=(x, y),
                size=(placement.width, placement.height),
                class_="cut",
                fill=fill,
                fill_opacity=fill_opacity,
                stroke=stroke,
            )
        )

        if add_labels:
            cx = x + placement.width / 2
            cy = y + placement.height / 2
            dwg.add(
                dwg.text(
                    placement.name,
                    insert=(cx, cy),
                    class_="label",
                    text_anchor="middle",
                    fill=text_color,
                )
            )
            size_label = f"{placement.width:.3f} x {placement.height:.3f}"
            if placement.rotated:
                size_label += " (rotated)"
            dwg.add(
                dwg.text(
                    size_label,
                    insert=(cx, cy + 1.4),
                    class_="dim",
                    text_anchor="middle",
                )
            )

    dwg.save()
    return filepath


def result_to_svg(
    result: SolverResult,
    output_dir: str,
    add_labels: bool = True,
) -> List[str]:
    """
    Export every opened sheet of a solve to its own SVG file.

    Args:
        result: Solver output
        output_dir: Directory to save SVG files
        add_labels: Add panel labels

    Returns:
        List of created SVG file paths, in sheet-opening order
    """
    os.makedirs(output_dir, exist_ok=True)

    paths = []
    for usage in result.sheet_usages:
        filepath = os.path.join(output_dir, f"{usage.id}.svg")
        sheet_to_svg(usage, filepath, add_labels=add_labels)
        paths.append(filepath)

    return paths
