from __future__ import annotations

import json
from pathlib import Path

import pytest

from materials import SheetInventoryRow
from pipeline import PipelineConfig, run_quote_pipeline
from planter import PlanterInput
from planter_solver import EmptyInventoryError, SolverOptions


def _config(tmp_path: Path, inventory, **kwargs) -> PipelineConfig:
    return PipelineConfig(
        runs_dir=str(tmp_path),
        solver_options=SolverOptions(inventory=inventory),
        **kwargs,
    )


def test_pipeline_creates_run_folder_structure(planter_input, single_sheet_inventory, tmp_path: Path):
    result = run_quote_pipeline(
        planter_input, job_name="Box Planter", config=_config(tmp_path, single_sheet_inventory)
    )

    run_dir = Path(result.run_dir)
    assert run_dir.name.endswith("_box-planter")
    assert (run_dir / "input" / "input.json").exists()
    assert (run_dir / "artifacts" / "result.json").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "metrics.json").exists()
    assert (run_dir / "summary.md").exists()
    assert (tmp_path / "latest").exists()

    manifest = json.loads((run_dir / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["run_id"] == result.run_id
    assert manifest["status"] == "pass"
    assert len(manifest["artifacts"]["svg"]) == 2
    assert len(manifest["artifacts"]["dxf"]) == 2


def test_pipeline_metrics_and_quote(planter_input, single_sheet_inventory, tmp_path: Path):
    result = run_quote_pipeline(
        planter_input, config=_config(tmp_path, single_sheet_inventory, buffer=10.0)
    )

    assert result.status == "pass"
    assert result.violations == []
    assert result.price_quote.final_price == pytest.approx((174.72 + 895) / 0.5 + 10)
    assert [r.quantity_used for r in result.row_summaries] == [2]

    metrics = json.loads(Path(result.metrics_path).read_text(encoding="utf-8"))
    assert metrics["counts"]["placements"] == 5
    assert metrics["counts"]["sheets"] == 2
    assert metrics["costs"]["material"] == pytest.approx(174.72)
    assert metrics["sheet_coverage_sqft"] == {
        "sheet-4x8-2-73-1": pytest.approx((940.5 + 627 + 864) / 144),
        "sheet-4x8-2-73-2": pytest.approx((940.5 + 627) / 144),
    }

    payload = json.loads(Path(result.result_path).read_text(encoding="utf-8"))
    assert payload["envelope"]["height"] == pytest.approx(26.125)
    assert payload["solver"]["total_material_cost"] == pytest.approx(174.72)
    assert {b["category"] for b in payload["breakdowns"]} >= {"Weld", "Liner"}

    summary = Path(result.summary_path).read_text(encoding="utf-8")
    assert "**PASS**" in summary
    assert "Sheets opened: 2" in summary


def test_pipeline_incomplete_plan(planter_input, tmp_path: Path):
    tiny = [SheetInventoryRow("tiny", "Tiny", 12, 12, 1.0)]
    result = run_quote_pipeline(planter_input, config=_config(tmp_path, tiny))
    assert result.status == "incomplete"
    assert result.svg_paths == []
    assert {v.rule_name for v in result.violations} == {"panel_unplaced"}


def test_pipeline_skips_exports(planter_input, single_sheet_inventory, tmp_path: Path):
    config = _config(tmp_path, single_sheet_inventory, export_svg=False, export_dxf=False)
    result = run_quote_pipeline(planter_input, config=config)
    assert result.svg_paths == []
    assert result.dxf_paths == []


def test_pipeline_rejects_invalid_geometry(tmp_path: Path):
    with pytest.raises(ValueError, match="Length must be greater than zero"):
        run_quote_pipeline(PlanterInput(length=0, width=10, height=10), config=PipelineConfig(runs_dir=str(tmp_path)))


def test_pipeline_empty_inventory(planter_input, tmp_path: Path):
    with pytest.raises(EmptyInventoryError):
        run_quote_pipeline(planter_input, config=_config(tmp_path, []))
