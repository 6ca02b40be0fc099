"""
Shared test fixtures for planter quoting tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from costing import build_breakdowns
from materials import SheetInventoryRow
from planter import PlanterInput, build_fabrication_envelope
from planter_solver import SolverOptions, run_planter_solver


@pytest.fixture
def planter_input():
    """36 x 24 x 24 box, floor on, no liner/shelf."""
    return PlanterInput(length=36, width=24, height=24)


@pytest.fixture
def envelope(planter_input):
    """36 x 24 x 26.125 envelope (lip on the height)."""
    return build_fabrication_envelope(planter_input)


@pytest.fixture
def breakdowns(planter_input, envelope):
    return build_breakdowns(planter_input, envelope)


@pytest.fixture
def sheet_row():
    """One 4' x 8' row at $2.73/sqft ($87.36 per sheet)."""
    return SheetInventoryRow(
        id="sheet-4x8-2-73",
        name="4' x 8' @ $2.73",
        width=48,
        height=96,
        cost_per_sqft=2.73,
        quantity=10,
    )


@pytest.fixture
def single_sheet_inventory(sheet_row):
    return [sheet_row]


@pytest.fixture
def result(planter_input, envelope, breakdowns, single_sheet_inventory):
    """Solved minimal box: two 4' x 8' sheets, five placements."""
    return run_planter_solver(
        planter_input, envelope, breakdowns, SolverOptions(inventory=single_sheet_inventory),
    )
