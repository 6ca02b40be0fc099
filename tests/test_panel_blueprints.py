"""Tests for panel_blueprints.py."""
import logging

import pytest

from panel_blueprints import build_panels, panel_area_sqft
from planter import PanelType, PlanterInput, build_fabrication_envelope


def _ids(panels):
    return [p.id for p in panels]


class TestBuildPanels:
    def test_default_box(self, planter_input, envelope):
        panels = build_panels(envelope, planter_input)
        assert _ids(panels) == [
            "panel-floor",
            "panel-long-a",
            "panel-long-b",
            "panel-short-a",
            "panel-short-b",
        ]
        floor, long_a, _, short_a, _ = panels
        assert (floor.width, floor.height) == (24, 36)
        assert floor.type == PanelType.FLOOR
        assert (long_a.width, long_a.height) == (36, 26.125)
        assert (short_a.width, short_a.height) == (24, 26.125)

    def test_no_floor(self, envelope):
        p = PlanterInput(length=36, width=24, height=24, floor_enabled=False)
        assert "panel-floor" not in _ids(build_panels(envelope, p))

    def test_shelf_after_walls(self, envelope):
        p = PlanterInput(length=36, width=24, height=24, shelf_enabled=True)
        panels = build_panels(envelope, p)
        assert panels[-1].id == "panel-shelf"
        assert panels[-1].type == PanelType.SHELF
        assert (panels[-1].width, panels[-1].height) == (24, 36)

    def test_liner_panels(self):
        p = PlanterInput(length=36, width=24, height=24, liner_enabled=True, liner_depth=1.0)
        env = build_fabrication_envelope(p)
        panels = build_panels(env, p, 0.5)
        liner = [panel for panel in panels if panel.is_liner]
        assert _ids(liner) == [
            "panel-liner-bottom",
            "panel-liner-long-a",
            "panel-liner-long-b",
            "panel-liner-short-a",
            "panel-liner-short-b",
        ]
        assert all(panel.type == PanelType.LINER for panel in liner)
        bottom, long_a, _, short_a, _ = liner
        assert (bottom.width, bottom.height) == (23, 35)
        assert (long_a.width, long_a.height) == (35, 12)
        assert (short_a.width, short_a.height) == (23, 12)

    def test_collapsed_liner_is_logged(self, envelope, caplog):
        p = PlanterInput(length=36, width=24, height=24, liner_enabled=True, liner_depth=30)
        with caplog.at_level(logging.INFO, logger="panel_blueprints"):
            panels = build_panels(envelope, p)
        assert len(panels) == 5
        assert not any(panel.is_liner for panel in panels)
        assert "collapsed" in caplog.text

    def test_deterministic(self, planter_input, envelope):
        assert build_panels(envelope, planter_input) == build_panels(envelope, planter_input)


class TestPanelArea:
    def test_total_and_liner_only(self):
        p = PlanterInput(length=36, width=24, height=24, liner_enabled=True)
        panels = build_panels(build_fabrication_envelope(p), p)
        outer = (864 + 2 * 940.5 + 2 * 627) / 144
        liner = (23 * 35 + 2 * 35 * 12 + 2 * 23 * 12) / 144
        assert panel_area_sqft(panels, liner_only=False) == pytest.approx(outer)
        assert panel_area_sqft(panels, liner_only=True) == pytest.approx(liner)
        assert panel_area_sqft(panels) == pytest.approx(outer + liner)
