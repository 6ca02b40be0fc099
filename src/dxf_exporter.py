"""
DXF export for sheet cut plans.

Uses ezdxf to produce one DXF per opened sheet instance, with layers:
  - SHEET (gray, ACI 8): the purchased sheet outline
  - CUT (red, ACI 1): panel outlines to cut
  - ENGRAVE (blue, ACI 5): panel labels

Units: inches by default, millimeters on request. Format: R2010.
"""
import logging
import os
from dataclasses import dataclass
from typing import List, Optional

import ezdxf
from ezdxf.enums import TextEntityAlignment

from costing import SheetUsage
from materials import INCH_TO_MM
from planter_solver import SolverResult

logger = logging.getLogger(__name__)


@dataclass
class DXFExportConfig:
    """Configuration for DXF export."""
    sheet_layer: str = "SHEET"
    cut_layer: str = "CUT"
    engrave_layer: str = "ENGRAVE"
    sheet_color: int = 8     # ACI gray
    cut_color: int = 1       # ACI red
    engrave_color: int = 5   # ACI blue
    units: str = "in"        # "in" | "mm"
    add_part_labels: bool = True
    label_height_in: float = 0.75

    @property
    def scale(self) -> float:
        """Drawing units per inch."""
        return INCH_TO_MM if self.units == "mm" else 1.0


def sheet_to_dxf(
    usage: SheetUsage,
    filepath: str,
    config: Optional[DXFExportConfig] = None,
) -> str:
    """Export one sheet instance and its placements to a DXF file.

    Args:
        usage: Opened sheet with placements.
        filepath: Output DXF file path.
        config: DXF export settings.

    Returns:
        Path to created DXF file.
    """
    if config is None:
        config = DXFExportConfig()
    if config.units not in ("in", "mm"):
        raise ValueError(f"Unsupported DXF units '{config.units}'. Expected 'in' or 'mm'.")

    doc = ezdxf.new("R2010")
    doc.units = ezdxf.units.MM if config.units == "mm" else ezdxf.units.IN
    msp = doc.modelspace()
    _setup_layers(doc, config)

    s = config.scale
    _add_rect(msp, 0, 0, usage.width * s, usage.height * s, config.sheet_layer)

    for placement in usage.placements:
        _add_rect(
            msp,
            placement.x * s,
            placement.y * s,
            placement.width * s,
            placement.height * s,
            config.cut_layer,
        )
        if config.add_part_labels:
            msp.add_text(
                placement.name,
                height=config.label_height_in * s,
                dxfattribs={"layer": config.engrave_layer},
            ).set_placement(
                ((placement.x + placement.width / 2) * s, (placement.y + placement.height / 2) * s),
                align=TextEntityAlignment.MIDDLE_CENTER,
            )

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    doc.saveas(filepath)
    logger.info("Exported DXF: %s (%d panels)", filepath, len(usage.placements))
    return filepath


def result_to_dxf(
    result: SolverResult,
    output_dir: str,
    config: Optional[DXFExportConfig] = None,
) -> List[str]:
    """Export each opened sheet to a separate DXF file.

    Args:
        result: Solver output.
        output_dir: Directory for output files.
        config: DXF export settings.

    Returns:
        List of created DXF file paths.
    """
    os.makedirs(output_dir, exist_ok=True)
    paths = []

    for usage in result.sheet_usages:
        filepath = os.path.join(output_dir, f"{usage.id}.dxf")
        sheet_to_dxf(usage, filepath, config=config)
        paths.append(filepath)

    return paths


# ─── Internal helpers ────────────────────────────────────────────────────────

def _setup_layers(doc, config: DXFExportConfig) -> None:
    """Create SHEET, CUT and ENGRAVE layers."""
    doc.layers.add(config.sheet_layer, color=config.sheet_color)
    doc.layers.add(config.cut_layer, color=config.cut_color)
    doc.layers.add(config.engrave_layer, color=config.engrave_color)


def _add_rect(msp, x: float, y: float, width: float, height: float, layer: str) -> None:
    """Add an axis-aligned rectangle as a closed LWPolyline."""
    msp.add_lwpolyline(
        [(x, y), (x + width, y), (x + width, y + height), (x, y + height)],
        close=True,
        dxfattribs={"layer": layer},
    )
