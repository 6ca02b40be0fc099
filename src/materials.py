"""
Sheet stock catalog.

Inventory rows describe the stock sheets that can be purchased for a job (size,
price per square foot, and how many are on hand). Used by sheet_selector.py when
opening new sheet instances.
"""
import math
import uuid
from dataclasses import dataclass
from typing import List, Optional, Sequence

from planter import SQ_IN_PER_SQ_FT

INCH_TO_MM = 25.4

SHEET_ORDER_MODES = ("auto", "manual")


@dataclass
class SheetInventoryRow:
    """A stock sheet type available for purchase."""

    id: str
    name: str
    width: float  # in
    height: float  # in
    cost_per_sqft: float
    quantity: int = 1
    limit_quantity: bool = True  # False = unlimited supply

    @property
    def area_sqft(self) -> float:
        return self.width * self.height / SQ_IN_PER_SQ_FT

    @property
    def sheet_cost(self) -> float:
        return sheet_cost(self.width, self.height, self.cost_per_sqft)

    @property
    def max_instances(self) -> float:
        if not self.limit_quantity:
            return math.inf
        return max(0, self.quantity)


def sheet_cost(width: float, height: float, cost_per_sqft: float) -> float:
    """Price of one whole sheet."""
    return width * height / SQ_IN_PER_SQ_FT * cost_per_sqft


# Shop default inventory (4x8, 5x10 and 5x12 sheets at the usual gauges)
DEFAULT_SHEET_INVENTORY = [
    SheetInventoryRow(
        id="sheet-4x8-2-73",
        name="4' x 8' @ $2.73",
        width=48,
        height=96,
        cost_per_sqft=2.73,
        quantity=10,
    ),
    SheetInventoryRow(
        id="sheet-4x8-3-45",
        name="4' x 8' @ $3.45",
        width=48,
        height=96,
        cost_per_sqft=3.45,
        quantity=10,
    ),
    SheetInventoryRow(
        id="sheet-4x8-5-1",
        name="4' x 8' @ $5.10",
        width=48,
        height=96,
        cost_per_sqft=5.1,
        quantity=10,
    ),
    SheetInventoryRow(
        id="sheet-4x8-9-25",
        name="4' x 8' @ $9.25",
        width=48,
        height=96,
        cost_per_sqft=9.25,
        quantity=6,
    ),
    SheetInventoryRow(
        id="sheet-4x8-20-5",
        name="4' x 8' @ $20.50",
        width=48,
        height=96,
        cost_per_sqft=20.5,
        quantity=4,
    ),
    SheetInventoryRow(
        id="sheet-5x10-3-25",
        name="5' x 10' @ $3.25",
        width=60,
        height=120,
        cost_per_sqft=3.25,
        quantity=6,
    ),
    SheetInventoryRow(
        id="sheet-5x12-15",
        name="5' x 12' @ $15.00",
        width=60,
        height=144,
        cost_per_sqft=15,
        quantity=3,
    ),
]


def create_sheet_row(
    id: Optional[str] = None,
    name: str = "Custom sheet",
    width: float = 48,
    height: float = 96,
    cost_per_sqft: float = 5,
    quantity: int = 1,
    limit_quantity: bool = True,
) -> SheetInventoryRow:
    """New inventory row with shop defaults and a generated id."""
    return SheetInventoryRow(
        id=id or f"sheet-{uuid.uuid4()}",
        name=name,
        width=width,
        height=height,
        cost_per_sqft=cost_per_sqft,
        quantity=quantity,
        limit_quantity=limit_quantity,
    )


def order_sheet_rows(
    inventory: Sequence[SheetInventoryRow],
    mode: str = "auto",
    manual_row_order: Optional[Sequence[str]] = None,
) -> List[SheetInventoryRow]:
    """Order inventory rows for sheet-instance creation.

    ``auto`` sorts cheapest whole sheet first, then by rate, then by id.
    ``manual`` keeps exactly the rows named in ``manual_row_order`` in that
    order (or the inventory order when no order is given).
    """
    if mode not in SHEET_ORDER_MODES:
        raise ValueError(
            f"Unknown sheet order mode '{mode}'. Expected 'auto' or 'manual'.",
        )

    if mode == "auto":
        return sorted(
            inventory,
            key=lambda row: (row.sheet_cost, row.cost_per_sqft, row.id),
        )

    if manual_row_order is None:
        return list(inventory)

    by_id = {row.id: row for row in inventory}
    missing = [row_id for row_id in manual_row_order if row_id not in by_id]
    if missing:
        raise ValueError(f"Unknown sheet rows in manual order: {', '.join(missing)}")
    return [by_id[row_id] for row_id in manual_row_order]


def cheapest_rate(rows: Sequence[SheetInventoryRow]) -> float:
    """Lowest cost per sqft in the inventory, used to rank candidates."""
    return min(row.cost_per_sqft for row in rows)


def inventory_from_records(records: Sequence[dict]) -> List[SheetInventoryRow]:
    """Inventory rows from JSON-style records; missing ids are generated."""
    rows = []
    for record in records:
        unknown = set(record) - set(SheetInventoryRow.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown sheet row fields: {', '.join(sorted(unknown))}")
        rows.append(create_sheet_row(**record))
    return rows
