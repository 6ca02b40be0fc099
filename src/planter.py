"""
Core data structures for planter enclosure quoting.

Holds the planter parameters, the fabrication envelopes derived from them, and
the rectangular panel blueprints that get cut from sheet stock. All lengths are
inches.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

SQ_IN_PER_SQ_FT = 144.0
DEFAULT_LINER_HEIGHT_FRACTION = 0.5


class Axis(Enum):
    """Envelope axes that can receive the lip allowance."""
    LENGTH = "length"
    WIDTH = "width"
    HEIGHT = "height"


class PanelType(Enum):
    """Kinds of panels cut for a planter."""
    FLOOR = "floor"
    LONG = "long"
    SHORT = "short"
    SHELF = "shelf"
    LINER = "liner"


@dataclass
class PlanterInput:
    """
    Box geometry and feature flags for one planter.

    Attributes:
        length, width, height: Box dimensions (in)
        margin_pct: Target sale margin in percent
        thickness: Wall sheet thickness (in)
        lip: Lip allowance added to the fabrication envelope (in)
        liner_enabled: Cut an inner liner box
        liner_depth: Inset of the liner from the outer walls (in)
        liner_thickness: Liner sheet thickness (in)
        weight_plate_enabled: Add a weight plate (labor only)
        floor_enabled: Cut a floor panel
        shelf_enabled: Cut a shelf panel
    """
    length: float
    width: float
    height: float
    margin_pct: float = 50.0
    thickness: float = 0.125
    lip: float = 2.125
    liner_enabled: bool = False
    liner_depth: float = 1.0
    liner_thickness: float = 0.125
    weight_plate_enabled: bool = False
    floor_enabled: bool = True
    shelf_enabled: bool = False

    def validate_geometry(self) -> List[str]:
        """Check the inputs a quote needs.

        Returns list of issue strings (empty = ok).
        """
        issues = []
        for name in ("length", "width", "height"):
            value = getattr(self, name)
            if not math.isfinite(value):
                issues.append(f"{name.capitalize()} must be a valid number.")
            elif value <= 0:
                issues.append(f"{name.capitalize()} must be greater than zero.")
        if not math.isfinite(self.lip):
            issues.append("Lip must be a valid number.")
        elif self.lip < 0:
            issues.append("Lip must be zero or greater.")
        if not math.isfinite(self.margin_pct):
            issues.append("Margin % must be a valid number.")
        elif self.margin_pct < 0:
            issues.append("Margin % must be zero or greater.")
        if not math.isfinite(self.thickness):
            issues.append("Thickness must be a valid number.")
        elif self.thickness <= 0:
            issues.append("Thickness must be greater than zero.")
        if self.liner_enabled:
            if not math.isfinite(self.liner_depth):
                issues.append("Liner depth must be a valid number.")
            elif self.liner_depth < 0:
                issues.append("Liner depth must be zero or greater.")
            if not math.isfinite(self.liner_thickness):
                issues.append("Liner thickness must be a valid number.")
            elif self.liner_thickness <= 0:
                issues.append("Liner thickness must be greater than zero.")
        return issues


@dataclass(frozen=True)
class FabricationEnvelope:
    """Outer (or liner) box that the panels are cut to."""
    length: float
    width: float
    height: float

    @property
    def volume(self) -> float:
        return self.length * self.width * self.height

    @property
    def is_valid(self) -> bool:
        return self.length > 0 and self.width > 0 and self.height > 0


@dataclass(frozen=True)
class PanelBlueprint:
    """A single rectangular panel to cut. Ids are stable across runs."""
    id: str
    name: str
    width: float
    height: float
    type: PanelType
    is_liner: bool = False

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def longest_side(self) -> float:
        return max(self.width, self.height)


def build_fabrication_envelope(
    planter_input: PlanterInput,
    lip_axes: Tuple[Axis, ...] = (Axis.HEIGHT,),
) -> FabricationEnvelope:
    """Outer envelope: box dimensions plus the lip on each axis in ``lip_axes``.

    Which axes take the lip is a product-variant choice; the terrace planter
    only extends the height.
    """
    dims = {
        Axis.LENGTH: planter_input.length,
        Axis.WIDTH: planter_input.width,
        Axis.HEIGHT: planter_input.height,
    }
    for axis in set(lip_axes):
        dims[axis] += planter_input.lip
    return FabricationEnvelope(
        length=dims[Axis.LENGTH],
        width=dims[Axis.WIDTH],
        height=dims[Axis.HEIGHT],
    )


def build_liner_envelope(
    planter_input: PlanterInput,
    liner_height_fraction: float = DEFAULT_LINER_HEIGHT_FRACTION,
) -> Optional[FabricationEnvelope]:
    """Inner liner envelope, or None when the liner is off or collapses to nothing."""
    if not planter_input.liner_enabled:
        return None
    envelope = FabricationEnvelope(
        length=max(planter_input.length - planter_input.liner_depth, 0.0),
        width=max(planter_input.width - planter_input.liner_depth, 0.0),
        height=max(planter_input.height * liner_height_fraction, 0.0),
    )
    if not envelope.is_valid:
        return None
    return envelope
