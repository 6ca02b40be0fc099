"""Run folders for quote jobs.

Each job gets ``<runs_root>/<UTC stamp>_<slug>/`` holding ``input/input.json``,
``artifacts/`` (result JSON, SVG and DXF cut plans) and the run-level
``metrics.json``, ``summary.md`` and ``manifest.json``. ``<runs_root>/latest``
points at the most recent run: a symlink where the filesystem allows it,
otherwise a directory holding ``latest_run.txt``.
"""

from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

LATEST_NAME = "latest"
LATEST_FALLBACK_FILE = "latest_run.txt"


@dataclass
class RunPaths:
    run_id: str
    run_dir: Path
    input_dir: Path
    artifacts_dir: Path
    input_path: Path
    result_path: Path
    svg_dir: Path
    dxf_dir: Path
    manifest_path: Path
    metrics_path: Path
    summary_path: Path


def slugify(job_name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", job_name.strip().lower())
    return slug.strip("-") or "quote"


def create_run_id(job_name: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{slugify(job_name)}"


def prepare_run_dir(runs_root: str, job_name: str) -> RunPaths:
    """Create a fresh run folder.

    Jobs started within the same second get ``-2``, ``-3``, ... suffixes so a
    run never writes into another run's folder.
    """
    runs_path = Path(runs_root)
    runs_path.mkdir(parents=True, exist_ok=True)

    base_id = create_run_id(job_name)
    run_id = base_id
    suffix = 1
    while (runs_path / run_id).exists():
        suffix += 1
        run_id = f"{base_id}-{suffix}"

    run_dir = runs_path / run_id
    input_dir = run_dir / "input"
    artifacts_dir = run_dir / "artifacts"
    input_dir.mkdir(parents=True)
    artifacts_dir.mkdir(parents=True)

    return RunPaths(
        run_id=run_id,
        run_dir=run_dir,
        input_dir=input_dir,
        artifacts_dir=artifacts_dir,
        input_path=input_dir / "input.json",
        result_path=artifacts_dir / "result.json",
        svg_dir=artifacts_dir / "svg",
        dxf_dir=artifacts_dir / "dxf",
        manifest_path=run_dir / "manifest.json",
        metrics_path=run_dir / "metrics.json",
        summary_path=run_dir / "summary.md",
    )


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    """Write ``payload`` as indented JSON; enums are written by value, paths as strings."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=_json_default)


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def update_latest_pointer(runs_root: str, run_dir: Path) -> None:
    runs_path = Path(runs_root)
    latest = runs_path / LATEST_NAME

    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.is_dir():
        shutil.rmtree(latest)

    try:
        latest.symlink_to(os.path.relpath(run_dir, runs_path))
    except OSError:
        latest.mkdir(parents=True)
        write_text(latest / LATEST_FALLBACK_FILE, run_dir.name)

