#!/usr/bin/env python3
"""
Quote a sheet-metal planter and write a run folder with cut plans.

Usage:
    python scripts/quote_planter.py --length 36 --width 24 --height 24
    python scripts/quote_planter.py --length 48 --width 18 --height 30 --liner --shelf
    python scripts/quote_planter.py --length 36 --width 24 --height 24 \\
        --inventory shop_sheets.json --mode manual --row-order sheet-a,sheet-b
    python scripts/quote_planter.py --length 36 --width 24 --height 24 \\
        --override Weld=150 --add-on Casters=60

The inventory file is a JSON list of sheet rows
({"id", "name", "width", "height", "cost_per_sqft", "quantity", "limit_quantity"}).
The thresholds file maps a labor category to the fields to override
({"Weld": {"low_price": 130}}).
"""
import sys
import json
import argparse
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from costing import CATEGORY_ORDER, thresholds_from_records
from materials import SHEET_ORDER_MODES, inventory_from_records
from pipeline import PipelineConfig, run_quote_pipeline
from planter import PlanterInput
from planter_solver import SolverError, SolverOptions
from sheet_selector import EXISTING_SHEET_POLICIES


def _load_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def main():
    parser = argparse.ArgumentParser(
        description="Quote a planter: nest its panels on sheet stock and price the job",
    )

    # Geometry
    parser.add_argument("--length", type=float, required=True, help="Box length in inches")
    parser.add_argument("--width", type=float, required=True, help="Box width in inches")
    parser.add_argument("--height", type=float, required=True, help="Box height in inches")
    parser.add_argument(
        "--lip", type=float, default=2.125, help="Lip allowance on the height (default: 2.125)"
    )
    parser.add_argument(
        "--thickness", type=float, default=0.125, help="Wall sheet thickness (default: 0.125)"
    )
    parser.add_argument(
        "--margin", type=float, default=50.0, help="Target sale margin in percent (default: 50)"
    )

    # Features
    parser.add_argument("--no-floor", action="store_true", help="Skip the floor panel")
    parser.add_argument("--shelf", action="store_true", help="Add a shelf panel")
    parser.add_argument("--weight-plate", action="store_true", help="Add a weight plate")
    parser.add_argument("--liner", action="store_true", help="Add an inner liner box")
    parser.add_argument(
        "--liner-depth", type=float, default=1.0, help="Liner inset from the walls (default: 1.0)"
    )
    parser.add_argument(
        "--liner-height-percent", type=float, default=0.5,
        help="Liner height as a fraction of the box height (default: 0.5)",
    )
    parser.add_argument(
        "--liner-thickness", type=float, default=0.125, help="Liner sheet thickness (default: 0.125)"
    )

    # Inventory and policy
    parser.add_argument("--inventory", type=str, default=None, help="Sheet inventory JSON file")
    parser.add_argument("--thresholds", type=str, default=None, help="Labor threshold JSON file")
    parser.add_argument(
        "--mode", type=str, default="auto", choices=list(SHEET_ORDER_MODES),
        help="Sheet row ordering (default: auto)",
    )
    parser.add_argument(
        "--row-order", type=str, default=None,
        help="Comma-separated row ids for manual mode",
    )
    parser.add_argument(
        "--sheet-policy", type=str, default="least_waste", choices=list(EXISTING_SHEET_POLICIES),
        help="Open-sheet selection policy (default: least_waste)",
    )
    parser.add_argument(
        "--bundle-savings", type=float, default=0.0,
        help="Fraction of a bundle's cost credited for the shared cut (default: 0)",
    )
    parser.add_argument(
        "--override", action="append", default=[], metavar="CATEGORY=PRICE",
        help=f"Labor price override, repeatable. Categories: {', '.join(CATEGORY_ORDER)}",
    )
    parser.add_argument(
        "--add-on", action="append", default=[], metavar="LABEL=PRICE",
        help="Fixed surcharge added to the fabrication cost, repeatable (e.g. Casters=60)",
    )
    parser.add_argument("--buffer", type=float, default=0.0, help="Flat amount added to the price")
    parser.add_argument("--discount", type=float, default=0.0, help="Flat amount taken off the price")

    # Output
    parser.add_argument("--name", type=str, default="planter", help="Job name")
    parser.add_argument("--runs-dir", type=str, default="runs", help="Run folder root")
    parser.add_argument("--no-svg", action="store_true", help="Skip SVG export")
    parser.add_argument("--no-dxf", action="store_true", help="Skip DXF export")
    parser.add_argument(
        "--dxf-units", type=str, default="in", choices=["in", "mm"],
        help="DXF drawing units (default: in)",
    )
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    planter_input = PlanterInput(
        length=args.length,
        width=args.width,
        height=args.height,
        margin_pct=args.margin,
        thickness=args.thickness,
        lip=args.lip,
        liner_enabled=args.liner,
        liner_depth=args.liner_depth,
        liner_thickness=args.liner_thickness,
        weight_plate_enabled=args.weight_plate,
        floor_enabled=not args.no_floor,
        shelf_enabled=args.shelf,
    )

    try:
        inventory = None
        if args.inventory:
            inventory = inventory_from_records(_load_json(args.inventory))
        thresholds = None
        if args.thresholds:
            thresholds = thresholds_from_records(_load_json(args.thresholds))

        overrides = {}
        for item in args.override:
            category, sep, price = item.partition("=")
            if not sep or category not in CATEGORY_ORDER:
                raise ValueError(f"Bad --override '{item}'. Expected CATEGORY=PRICE.")
            overrides[category] = float(price)

        add_ons = {}
        for item in args.add_on:
            label, sep, price = item.partition("=")
            if not sep or not label.strip():
                raise ValueError(f"Bad --add-on '{item}'. Expected LABEL=PRICE.")
            add_ons[label.strip()] = float(price)

        config = PipelineConfig(
            runs_dir=args.runs_dir,
            export_svg=not args.no_svg,
            export_dxf=not args.no_dxf,
            dxf_units=args.dxf_units,
            solver_options=SolverOptions(
                inventory=inventory,
                mode=args.mode,
                manual_row_order=args.row_order.split(",") if args.row_order else None,
                liner_height_percent=args.liner_height_percent,
                existing_sheet_policy=args.sheet_policy,
                bundle_savings_fraction=args.bundle_savings,
                add_on_surcharges=add_ons,
            ),
            thresholds=thresholds,
            price_overrides=overrides,
            buffer=args.buffer,
            discount=args.discount,
        )
        result = run_quote_pipeline(planter_input, args.name, config)
    except (SolverError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1

    solved = result.solver_result
    print(f"\nRun: {result.run_id} [{result.status}]")
    print(f"Folder: {result.run_dir}")
    print(f"Panels placed: {len(solved.placements)} / {len(solved.panel_ids)}")
    for usage in solved.sheet_usages:
        names = ", ".join(p.name for p in usage.placements)
        print(f"  {usage.id}: {names}")
    if solved.unplaced_panel_ids:
        print(f"Unplaced: {', '.join(solved.unplaced_panel_ids)}")
    print(f"Material: ${solved.total_material_cost:.2f}")
    print(f"Labor: ${solved.labor_cost:.2f}")
    if solved.add_on_cost:
        print(f"Add-ons: ${solved.add_on_cost:.2f}")
    print(f"Fabrication total: ${solved.total_fabrication_cost:.2f}")
    print(f"Sale price: ${result.price_quote.final_price:.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
