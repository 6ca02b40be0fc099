"""Tests for planter_solver.py: end-to-end solve and result contract."""
import json
import logging

import pytest

from costing import build_breakdowns
from materials import SheetInventoryRow
from plan_audit import check_plan
from planter import PlanterInput, build_fabrication_envelope
from planter_solver import (
    EmptyInventoryError,
    SolverError,
    SolverOptions,
    run_planter_solver,
)


def _solve(planter_input, inventory, **kwargs):
    envelope = build_fabrication_envelope(planter_input)
    breakdowns = build_breakdowns(planter_input, envelope)
    return run_planter_solver(
        planter_input, envelope, breakdowns, SolverOptions(inventory=inventory, **kwargs),
    )


class TestMinimalBox:
    """36 x 24 x 24 box on one 4' x 8' row at $2.73/sqft."""

    def test_two_sheets_five_placements(self, planter_input, single_sheet_inventory):
        result = _solve(planter_input, single_sheet_inventory)
        assert len(result.sheet_usages) == 2
        assert len(result.placements) == 5
        assert result.is_complete
        assert result.total_material_cost == pytest.approx(174.72)

    def test_sheet_contents(self, planter_input, single_sheet_inventory):
        result = _solve(planter_input, single_sheet_inventory)
        first, second = result.sheet_usages
        assert [p.panel_id for p in first.placements] == ["panel-long-a", "panel-short-a", "panel-floor"]
        assert [p.panel_id for p in second.placements] == ["panel-long-b", "panel-short-b"]
        assert first.area_used_sqft == pytest.approx((940.5 + 627 + 864) / 144)

    def test_totals(self, planter_input, single_sheet_inventory):
        """Labor at 22572 in^3: Weld 165 + Grind 145 + Paint 135 + Assembly 215 + Saw 85 + Laser Bend 150."""
        result = _solve(planter_input, single_sheet_inventory)
        assert result.labor_cost == pytest.approx(895)
        assert result.total_fabrication_cost == pytest.approx(174.72 + 895)
        assert result.material_area_sqft == pytest.approx(3999 / 144)
        assert result.utilization_pct == pytest.approx(3999 / 9216 * 100)
        assert result.liner_area_sqft == 0
        assert result.liner_extra_cost == 0
        assert result.bundle_savings == 0

    def test_plan_is_sound(self, planter_input, single_sheet_inventory):
        result = _solve(planter_input, single_sheet_inventory)
        assert check_plan(result, single_sheet_inventory) == []

    def test_panel_ids_in_build_order(self, planter_input, single_sheet_inventory):
        result = _solve(planter_input, single_sheet_inventory)
        assert result.panel_ids == [
            "panel-floor", "panel-long-a", "panel-long-b", "panel-short-a", "panel-short-b",
        ]


class TestLiner:
    def test_collapsed_liner_adds_no_panels(self, single_sheet_inventory):
        p = PlanterInput(length=36, width=24, height=24, liner_enabled=True, liner_depth=30)
        result = _solve(p, single_sheet_inventory)
        assert len(result.panel_ids) == 5
        assert result.liner_area_sqft == 0
        assert result.liner_material_cost == 0
        # Liner labor is still charged when the feature is on.
        assert result.liner_extra_cost == pytest.approx(180)

    def test_liner_panels_placed(self):
        p = PlanterInput(length=36, width=24, height=24, liner_enabled=True, liner_depth=1.0)
        result = _solve(p, None)
        assert result.is_complete
        assert len(result.placements) == 10
        assert result.liner_area_sqft > 0
        assert result.liner_material_cost > 0
        assert check_plan(result) == []


class TestStarvedInventory:
    def test_nothing_fits(self, planter_input):
        rows = [SheetInventoryRow("tiny", "Tiny", 12, 12, 1.0, quantity=3)]
        result = _solve(planter_input, rows)
        assert result.placements == []
        assert result.sheet_usages == []
        assert result.total_material_cost == 0
        assert not result.is_complete
        assert result.unplaced_panel_ids == result.panel_ids

    def test_incomplete_plan_is_logged(self, planter_input, caplog):
        rows = [SheetInventoryRow("tiny", "Tiny", 12, 12, 1.0)]
        with caplog.at_level(logging.WARNING, logger="planter_solver"):
            _solve(planter_input, rows)
        assert "Plan incomplete" in caplog.text


class TestBundleSavings:
    def test_savings_reported(self, planter_input, single_sheet_inventory):
        result = _solve(planter_input, single_sheet_inventory, bundle_savings_fraction=0.1)
        per_l_cut = 60 * 26.125 / 144 * 2.73 * 0.1
        assert result.bundle_savings == pytest.approx(2 * per_l_cut)
        assert all(p.is_bundle for p in result.placements if p.panel_id != "panel-floor")
        # Savings rank candidates; they never discount the sheet price.
        assert result.total_material_cost == pytest.approx(174.72)


class TestOptions:
    def test_default_inventory(self, planter_input, envelope, breakdowns):
        result = run_planter_solver(planter_input, envelope, breakdowns)
        assert result.is_complete
        assert check_plan(result) == []

    def test_empty_inventory(self, planter_input, envelope, breakdowns):
        with pytest.raises(EmptyInventoryError):
            run_planter_solver(planter_input, envelope, breakdowns, SolverOptions(inventory=[]))

    def test_empty_inventory_is_solver_error(self):
        assert issubclass(EmptyInventoryError, SolverError)

    def test_manual_unknown_row(self, planter_input, single_sheet_inventory):
        with pytest.raises(ValueError):
            _solve(planter_input, single_sheet_inventory, mode="manual", manual_row_order=["nope"])

    def test_manual_order_used(self, planter_input):
        rows = [
            SheetInventoryRow("cheap", "Cheap", 48, 96, 1.0, quantity=10),
            SheetInventoryRow("pricey", "Pricey", 48, 96, 9.0, quantity=10),
        ]
        result = _solve(planter_input, rows, mode="manual", manual_row_order=["pricey"])
        assert {u.row_id for u in result.sheet_usages} == {"pricey"}

    def test_add_ons(self, planter_input, single_sheet_inventory):
        base = _solve(planter_input, single_sheet_inventory)
        extra = _solve(planter_input, single_sheet_inventory, add_on_surcharges={"Casters": 60})
        assert extra.add_on_cost == 60
        assert extra.total_fabrication_cost == pytest.approx(base.total_fabrication_cost + 60)


class TestResultContract:
    def test_deterministic(self, planter_input, single_sheet_inventory):
        a = _solve(planter_input, single_sheet_inventory).to_dict(include_timestamp=False)
        b = _solve(planter_input, single_sheet_inventory).to_dict(include_timestamp=False)
        assert a == b

    def test_to_dict_is_json(self, planter_input, single_sheet_inventory):
        payload = _solve(planter_input, single_sheet_inventory).to_dict()
        decoded = json.loads(json.dumps(payload))
        assert decoded["placements"][0]["panel_type"] == "long"
        assert decoded["solver_timestamp"]
        assert decoded["sheet_usages"][0]["placement_ids"][0] == (
            "bundle-panel-long-a-panel-short-a-panel-long-a"
        )
