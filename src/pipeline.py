"""Single-path quote pipeline: planter input -> solve -> audit -> run artifacts."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from costing import (
    CostBreakdown,
    CostThreshold,
    PriceQuote,
    RowSummary,
    build_breakdowns,
    quote_sale_price,
    summarize_rows,
)
from dxf_exporter import DXFExportConfig, result_to_dxf
from materials import DEFAULT_SHEET_INVENTORY
from plan_audit import PlanViolation, check_plan, sheet_coverage_sqft
from planter import Axis, PlanterInput, build_fabrication_envelope
from planter_solver import SolverOptions, SolverResult, run_planter_solver
from run_protocol import (
    prepare_run_dir,
    update_latest_pointer,
    write_json,
    write_text,
)
from svg_exporter import result_to_svg

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    runs_dir: str = "runs"
    export_svg: bool = True
    export_dxf: bool = True
    dxf_units: str = "in"
    solver_options: Optional[SolverOptions] = None
    thresholds: Optional[Dict[str, CostThreshold]] = None
    price_overrides: Dict[str, float] = field(default_factory=dict)
    buffer: float = 0.0
    discount: float = 0.0


@dataclass
class PipelineResult:
    run_id: str
    run_dir: str
    input_path: str
    result_path: str
    metrics_path: str
    summary_path: str
    manifest_path: str
    status: str  # "pass" | "incomplete" | "fail"
    solver_result: SolverResult
    breakdowns: List[CostBreakdown]
    row_summaries: List[RowSummary]
    price_quote: PriceQuote
    violations: List[PlanViolation] = field(default_factory=list)
    svg_paths: List[str] = field(default_factory=list)
    dxf_paths: List[str] = field(default_factory=list)


def run_quote_pipeline(
    planter_input: PlanterInput,
    job_name: str = "planter",
    config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    """Quote one planter and write the run folder.

    Raises:
        ValueError: the planter geometry is invalid.
        EmptyInventoryError: the configured inventory is empty.
    """
    issues = planter_input.validate_geometry()
    if issues:
        raise ValueError("Invalid planter: " + " ".join(issues))

    if config is None:
        config = PipelineConfig()
    options = config.solver_options or SolverOptions()

    started = time.perf_counter()
    paths = prepare_run_dir(config.runs_dir, job_name)
    write_json(paths.input_path, {"job_name": job_name, "planter": asdict(planter_input)})

    envelope = build_fabrication_envelope(planter_input, lip_axes=(Axis.HEIGHT,))
    breakdowns = build_breakdowns(
        planter_input, envelope, config.thresholds, config.price_overrides,
    )

    logger.info(
        "Quoting %s: envelope %.3f x %.3f x %.3f in",
        job_name, envelope.length, envelope.width, envelope.height,
    )
    result = run_planter_solver(planter_input, envelope, breakdowns, options)

    inventory = DEFAULT_SHEET_INVENTORY if options.inventory is None else options.inventory
    violations = check_plan(result, inventory)
    row_summaries = summarize_rows(result.sheet_usages)
    quote = quote_sale_price(
        result.total_fabrication_cost, planter_input.margin_pct, config.buffer, config.discount,
    )
    status = _plan_status(result, violations)

    write_json(paths.result_path, {
        "envelope": asdict(envelope),
        "breakdowns": [
            {**asdict(b), "price": b.price} for b in breakdowns
        ],
        "solver": result.to_dict(),
        "row_summaries": [asdict(r) for r in row_summaries],
        "price_quote": asdict(quote),
    })

    svg_paths: List[str] = []
    if config.export_svg:
        svg_paths = result_to_svg(result, str(paths.svg_dir))

    dxf_paths: List[str] = []
    if config.export_dxf:
        dxf_paths = result_to_dxf(result, str(paths.dxf_dir), DXFExportConfig(units=config.dxf_units))

    elapsed = time.perf_counter() - started

    write_json(paths.metrics_path, {
        "run_id": paths.run_id,
        "status": status,
        "elapsed_s": round(elapsed, 3),
        "violations": [asdict(v) for v in violations],
        "costs": {
            "material": result.total_material_cost,
            "labor": result.labor_cost,
            "add_ons": result.add_on_cost,
            "fabrication": result.total_fabrication_cost,
            "final_price": quote.final_price,
        },
        "counts": {
            "panels": len(result.panel_ids),
            "placements": len(result.placements),
            "sheets": len(result.sheet_usages),
            "unplaced": len(result.unplaced_panel_ids),
            "svg_files": len(svg_paths),
            "dxf_files": len(dxf_paths),
        },
        "utilization_pct": result.utilization_pct,
        "sheet_coverage_sqft": sheet_coverage_sqft(result),
    })

    summary = _build_summary(paths.run_id, status, elapsed, result, row_summaries, quote, violations)
    write_text(paths.summary_path, summary)

    manifest = {
        "run_id": paths.run_id,
        "job_name": job_name,
        "status": status,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": asdict(config),
        "artifacts": {
            "input": str(paths.input_path),
            "result": str(paths.result_path),
            "metrics": str(paths.metrics_path),
            "summary": str(paths.summary_path),
            "svg": svg_paths,
            "dxf": dxf_paths,
        },
    }
    write_json(paths.manifest_path, manifest)
    update_latest_pointer(config.runs_dir, paths.run_dir)
    logger.info("Run %s finished with status %s in %.2fs", paths.run_id, status, elapsed)

    return PipelineResult(
        run_id=paths.run_id,
        run_dir=str(paths.run_dir),
        input_path=str(paths.input_path),
        result_path=str(paths.result_path),
        metrics_path=str(paths.metrics_path),
        summary_path=str(paths.summary_path),
        manifest_path=str(paths.manifest_path),
        status=status,
        solver_result=result,
        breakdowns=breakdowns,
        row_summaries=row_summaries,
        price_quote=quote,
        violations=violations,
        svg_paths=svg_paths,
        dxf_paths=dxf_paths,
    )


def _plan_status(result: SolverResult, violations: List[PlanViolation]) -> str:
    if any(v.severity == "error" for v in violations):
        return "fail"
    if not result.is_complete:
        return "incomplete"
    return "pass"


def _build_summary(
    run_id: str,
    status: str,
    elapsed_s: float,
    result: SolverResult,
    row_summaries: List[RowSummary],
    quote: PriceQuote,
    violations: List[PlanViolation],
) -> str:
    err = sum(1 for v in violations if v.severity == "error")
    warn = sum(1 for v in violations if v.severity == "warning")

    lines = [
        f"# Run {run_id}",
        "",
        f"- Status: **{status.upper()}**",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Panels placed: {len(result.placements)} / {len(result.panel_ids)}",
        f"- Sheets opened: {len(result.sheet_usages)}",
        f"- Utilization: {result.utilization_pct:.1f}%",
        f"- Material: ${result.total_material_cost:.2f}",
        f"- Labor: ${result.labor_cost:.2f}",
        f"- Add-ons: ${result.add_on_cost:.2f}",
        f"- Fabrication total: ${result.total_fabrication_cost:.2f}",
        f"- Sale price ({quote.margin_pct:.0f}% margin): ${quote.final_price:.2f}",
        f"- Violations: {err} errors, {warn} warnings",
        "",
        "## Sheets",
    ]

    if not row_summaries:
        lines.append("- None")
    else:
        for row in row_summaries:
            lines.append(
                f"- {row.name}: {row.quantity_used} x ${row.cost_per_sheet:.2f} "
                f"({row.utilization_pct:.1f}% used)"
            )

    lines.extend(["", "## Key Violations"])
    if not violations:
        lines.append("- None")
    else:
        for v in violations[:12]:
            lines.append(f"- [{v.severity}] {v.rule_name}: {v.message}")

    return "\n".join(lines) + "\n"
