"""Structured report payload generation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from segopt.utils.hash import file_sha256


def build_report_payload(results_dir: str | Path) -> dict[str, Any]:
    root = Path(results_dir)
    segments_path = root / "segments.parquet"
    table_path = root / "dp_table.parquet"
    metadata_path = root / "run_metadata.json"
    cfg_path = root / "config_resolved.yaml"
    if not segments_path.exists():
        raise FileNotFoundError(f"Missing segments file: {segments_path}")

    segments = pd.read_parquet(segments_path)
    if segments.empty:
        raise ValueError(f"Segments are empty: {segments_path}")

    metadata = {}
    if metadata_path.exists():
        metadata = json.loads(metadata_path.read_text(encoding="utf-8"))

    means = segments["mean"].to_numpy(dtype=float)
    steps = np.diff(means)
    payload = {
        "run_dir": str(root.resolve()),
        "artifacts": {
            "segments_parquet": str(segments_path.resolve()),
            "dp_table_parquet": str(table_path.resolve()) if table_path.exists() else None,
            "run_metadata_json": str(metadata_path.resolve()) if metadata_path.exists() else None,
            "config_resolved_yaml": str(cfg_path.resolve()) if cfg_path.exists() else None,
        },
        "reproducibility": {
            "input_hash": metadata.get("input_hash"),
            "observations_hash": metadata.get("observations_hash"),
            "config_hash": metadata.get("config_hash")
            or (file_sha256(cfg_path) if cfg_path.exists() else None),
            "git_commit": metadata.get("git_commit"),
            "timestamp_utc": metadata.get("timestamp_utc"),
        },
        "summary": metadata.get("summary", {}),
        "segments": {
            "count": int(segments.shape[0]),
            "changepoints": [int(s) for s in segments["start"].to_numpy()[1:]],
            "min_mean": float(means.min()),
            "max_mean": float(means.max()),
            "largest_step": float(np.abs(steps).max()) if steps.size else 0.0,
            "monotone": _monotone_label(steps),
        },
        "rows": [_coerce_scalars(row) for row in segments.to_dict(orient="records")],
    }
    return payload


def write_report_json(payload: dict[str, Any], out_path: str | Path) -> None:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def _monotone_label(steps: np.ndarray) -> str:
    if steps.size == 0:
        return "constant"
    if np.all(steps >= 0):
        return "increasing"
    if np.all(steps <= 0):
        return "decreasing"
    return "mixed"


def _coerce_scalars(values: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, (str, bool)) or value is None:
            out[key] = value
        elif isinstance(value, (int, np.integer)):
            out[key] = int(value)
        else:
            out[key] = float(value)
    return out
