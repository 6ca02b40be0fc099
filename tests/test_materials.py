"""Tests for materials.py: sheet inventory and row ordering."""
import math

import pytest

from materials import (
    DEFAULT_SHEET_INVENTORY,
    SheetInventoryRow,
    cheapest_rate,
    create_sheet_row,
    inventory_from_records,
    order_sheet_rows,
    sheet_cost,
)


class TestSheetInventoryRow:
    def test_sheet_cost(self, sheet_row):
        assert sheet_row.area_sqft == pytest.approx(32)
        assert sheet_row.sheet_cost == pytest.approx(87.36)
        assert sheet_cost(48, 96, 2.73) == pytest.approx(87.36)

    def test_max_instances(self, sheet_row):
        assert sheet_row.max_instances == 10
        unlimited = SheetInventoryRow("u", "U", 48, 96, 1.0, quantity=0, limit_quantity=False)
        assert unlimited.max_instances == math.inf
        negative = SheetInventoryRow("n", "N", 48, 96, 1.0, quantity=-3)
        assert negative.max_instances == 0


class TestDefaultInventory:
    def test_seven_rows(self):
        assert len(DEFAULT_SHEET_INVENTORY) == 7
        first = DEFAULT_SHEET_INVENTORY[0]
        assert first.id == "sheet-4x8-2-73"
        assert (first.width, first.height, first.cost_per_sqft, first.quantity) == (48, 96, 2.73, 10)

    def test_unique_ids(self):
        ids = [row.id for row in DEFAULT_SHEET_INVENTORY]
        assert len(ids) == len(set(ids))


class TestCreateSheetRow:
    def test_generated_id(self):
        a = create_sheet_row()
        b = create_sheet_row()
        assert a.id.startswith("sheet-")
        assert a.id != b.id

    def test_explicit_id(self):
        assert create_sheet_row(id="mine", width=10).id == "mine"

    def test_from_records(self):
        rows = inventory_from_records([
            {"id": "a", "name": "A", "width": 48, "height": 96, "cost_per_sqft": 3},
            {"name": "B", "width": 60, "height": 120, "cost_per_sqft": 4, "limit_quantity": False},
        ])
        assert rows[0].id == "a"
        assert rows[1].id.startswith("sheet-")
        assert rows[1].max_instances == math.inf

    def test_from_records_unknown_field(self):
        with pytest.raises(ValueError, match="colour"):
            inventory_from_records([{"name": "A", "colour": "red"}])


class TestOrderSheetRows:
    def test_auto_cheapest_sheet_first(self):
        ordered = order_sheet_rows(DEFAULT_SHEET_INVENTORY, "auto")
        assert [row.id for row in ordered[:4]] == [
            "sheet-4x8-2-73",
            "sheet-4x8-3-45",
            "sheet-5x10-3-25",
            "sheet-4x8-5-1",
        ]

    def test_auto_tie_breaks_on_rate_then_id(self):
        rows = [
            SheetInventoryRow("b", "B", 48, 96, 2.0),
            SheetInventoryRow("a", "A", 48, 96, 2.0),
            SheetInventoryRow("c", "C", 96, 48, 2.0),
        ]
        assert [row.id for row in order_sheet_rows(rows)] == ["a", "b", "c"]

    def test_manual_without_order_keeps_inventory_order(self):
        ordered = order_sheet_rows(DEFAULT_SHEET_INVENTORY, "manual")
        assert ordered == list(DEFAULT_SHEET_INVENTORY)

    def test_manual_order(self):
        ordered = order_sheet_rows(
            DEFAULT_SHEET_INVENTORY, "manual", ["sheet-5x12-15", "sheet-4x8-2-73"],
        )
        assert [row.id for row in ordered] == ["sheet-5x12-15", "sheet-4x8-2-73"]

    def test_manual_unknown_id(self):
        with pytest.raises(ValueError, match="missing-row"):
            order_sheet_rows(DEFAULT_SHEET_INVENTORY, "manual", ["missing-row"])

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            order_sheet_rows(DEFAULT_SHEET_INVENTORY, "cheapest")


def test_cheapest_rate():
    assert cheapest_rate(DEFAULT_SHEET_INVENTORY) == pytest.approx(2.73)
