"""Call boundary and file pipeline around the segmentation engines."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from segopt.core.config import ConfigError, deep_merge, dump_yaml, resolve_config
from segopt.core.provenance import collect_provenance
from segopt.core.types import STATUS_ALL_ZERO, DPTable, SegmentationResult, ValidationReport
from segopt.data.io import load_observations, write_json, write_table
from segopt.data.validators import report_to_dict, validate_observations
from segopt.fpop.isotonic import isotonic_regression_normal
from segopt.ops.backtrack import expand_means, table_segments
from segopt.stats.poisson import unconstrained_poisson
from segopt.utils.hash import file_sha256, mapping_sha256, observations_sha256

logger = logging.getLogger(__name__)


class PipelineError(RuntimeError):
    """Raised when the pipeline cannot complete."""


class DegenerateInputError(ValueError):
    """Raised when the input admits no well-defined segment mean."""


class InputValidationError(ValueError):
    """Raised when observations fail validation; carries the full report."""

    def __init__(self, report: ValidationReport):
        self.report = report
        failures = [f"[{i.code}] {i.message}" for i in report.issues if i.level == "error"]
        super().__init__("Input validation failed: " + " | ".join(failures))


def segment_series(
    values: Any,
    weights: Any = None,
    penalty: float | None = None,
    loss: str | None = None,
    constraint: str | None = None,
    config: dict[str, Any] | None = None,
) -> SegmentationResult:
    """Optimal penalized segmentation of one series.

    Explicit arguments override ``config`` (itself merged over the defaults).
    Weights default to ones.
    """

    seg_overrides = {
        key: value
        for key, value in {"loss": loss, "constraint": constraint, "penalty": penalty}.items()
        if value is not None
    }
    cfg = resolve_config(overrides=_merge_overrides(config, {"segmentation": seg_overrides}))
    seg_cfg = cfg["segmentation"]
    num_cfg = cfg["numerics"]
    loss_name = seg_cfg["loss"]
    constraint_name = seg_cfg["constraint"]
    lam = float(seg_cfg["penalty"])

    y = np.asarray(values, dtype=float)
    w = np.ones_like(y) if weights is None else np.asarray(weights, dtype=float)
    report = validate_observations(y, w, loss=loss_name, penalty=lam)
    for issue in report.issues:
        if issue.level == "warning":
            logger.warning("[%s] %s", issue.code, issue.message)
    if not report.valid:
        raise InputValidationError(report)

    logger.debug(
        "Segmenting n=%d loss=%s constraint=%s penalty=%g", y.size, loss_name, constraint_name, lam
    )
    table = _run_engine(y, w, lam, loss_name, constraint_name, num_cfg)
    if table.status == STATUS_ALL_ZERO:
        raise DegenerateInputError(f"data[i]={y[0]:g} for all i")

    segments = table_segments(table)
    fitted = expand_means(segments, y.size)
    logger.debug("Found %d segments, cost=%g", len(segments), table.cost[-1])
    return SegmentationResult(
        table=table,
        segments=segments,
        fitted=fitted,
        loss=loss_name,
        constraint=constraint_name,
        penalty=lam,
    )


def run_pipeline(
    input_path: str,
    out_dir: str,
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
    argv: list[str] | None = None,
) -> SegmentationResult:
    source = Path(input_path)
    out_root = Path(out_dir)
    out_root.mkdir(parents=True, exist_ok=True)

    resolved = resolve_config(config_path=config_path, overrides=overrides)
    dump_yaml(resolved, out_root / "config_resolved.yaml")

    columns = resolved.get("columns", {})
    values, weights = load_observations(
        source,
        value_column=columns.get("value", "value"),
        weight_column=columns.get("weight"),
    )
    logger.info("Loaded %d observations from %s", values.size, source)

    try:
        result = segment_series(values, weights, config=resolved)
    except InputValidationError as exc:
        raise PipelineError(
            f"{exc}. Run 'segopt validate {source}' for details."
        ) from exc
    except DegenerateInputError as exc:
        raise PipelineError(f"Degenerate input: {exc}") from exc

    table_df = result.table.to_frame()
    table_df.insert(0, "value", values)
    table_df.insert(1, "weight", weights)
    table_df["fitted"] = result.fitted
    table_path = out_root / "dp_table.parquet"
    segments_path = out_root / "segments.parquet"
    write_table(table_df, table_path)
    write_table(result.segments_frame(), segments_path)

    metadata = {
        **collect_provenance(argv),
        "input_hash": file_sha256(source),
        "observations_hash": observations_sha256(values, weights),
        "config_hash": mapping_sha256(resolved),
        "input_path": str(source.resolve()),
        "dp_table_path": str(table_path.resolve()),
        "segments_path": str(segments_path.resolve()),
        "validation": report_to_dict(validate_observations(values, weights, loss=result.loss, penalty=result.penalty)),
        "summary": {
            "n_observations": int(values.size),
            "n_segments": result.n_segments,
            "total_cost": result.total_cost,
            "loss": result.loss,
            "constraint": result.constraint,
            "penalty": result.penalty,
        },
    }
    write_json(metadata, out_root / "run_metadata.json")
    logger.info("Wrote %d segments to %s", result.n_segments, segments_path)
    return result


def _run_engine(
    values: np.ndarray,
    weights: np.ndarray,
    penalty: float,
    loss: str,
    constraint: str,
    numerics: dict[str, Any],
) -> DPTable:
    if loss == "normal":
        return isotonic_regression_normal(
            values,
            weights,
            penalty,
            decreasing=constraint == "decreasing",
            padding=float(numerics["range_padding"]),
        )
    if loss == "poisson":
        return unconstrained_poisson(
            values,
            weights,
            penalty,
            infinite_penalty=float(numerics["infinite_penalty"]),
            zero_penalty=float(numerics["zero_penalty"]),
        )
    raise ConfigError(f"Unsupported segmentation.loss '{loss}'")


def _merge_overrides(config: dict[str, Any] | None, extra: dict[str, Any]) -> dict[str, Any]:
    return deep_merge(config or {}, extra)
