"""Validation of observation arrays and input tables before segmentation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from segopt.core.types import ValidationIssue, ValidationReport
from segopt.data.io import load_observations


def validate_observations(
    values: np.ndarray,
    weights: np.ndarray,
    loss: str = "normal",
    penalty: float = 0.0,
) -> ValidationReport:
    y = np.asarray(values, dtype=float)
    w = np.asarray(weights, dtype=float)
    issues: list[ValidationIssue] = []

    if y.ndim != 1:
        issues.append(_error("invalid_shape", f"values must be one-dimensional, got shape {y.shape}"))
        return ValidationReport(valid=False, issues=issues, n_observations=int(y.size))
    if y.size == 0:
        issues.append(_error("empty_input", "At least one observation is required"))
    if w.shape != y.shape:
        issues.append(
            _error(
                "length_mismatch",
                f"weights length {w.size} does not match values length {y.size}",
                {"values": int(y.size), "weights": int(w.size)},
            )
        )
        return ValidationReport(valid=False, issues=issues, n_observations=int(y.size))

    n_bad_values = int((~np.isfinite(y)).sum())
    if n_bad_values:
        issues.append(
            _error("non_finite_values", f"{n_bad_values} values are NaN or infinite", {"count": n_bad_values})
        )

    n_bad_weights = int((~(np.isfinite(w) & (w > 0))).sum())
    if n_bad_weights:
        issues.append(
            _error(
                "non_positive_weights",
                f"{n_bad_weights} weights are not finite and positive",
                {"count": n_bad_weights},
            )
        )

    if loss == "poisson":
        finite = y[np.isfinite(y)]
        n_negative = int((finite < 0).sum())
        if n_negative:
            issues.append(
                _error("negative_counts", f"{n_negative} counts are negative", {"count": n_negative})
            )
        n_fractional = int((finite != np.round(finite)).sum())
        if n_fractional:
            issues.append(
                ValidationIssue(
                    level="warning",
                    code="non_integer_counts",
                    message=f"{n_fractional} counts are not integers; Poisson loss is applied as-is",
                    context={"count": n_fractional},
                )
            )
        if finite.size and n_negative == 0 and not np.any(finite != 0):
            issues.append(
                ValidationIssue(
                    level="warning",
                    code="all_zero_counts",
                    message="All counts are zero; the segment mean is undefined",
                    context={},
                )
            )

    # +inf is allowed and means a single segment.
    if np.isnan(penalty) or penalty < 0:
        issues.append(_error("invalid_penalty", f"Penalty must be non-negative, got {penalty}"))

    has_error = any(issue.level == "error" for issue in issues)
    return ValidationReport(valid=not has_error, issues=issues, n_observations=int(y.size))


def validate_input_file(
    path: str | Path,
    value_column: str = "value",
    weight_column: str | None = None,
    loss: str = "normal",
) -> ValidationReport:
    try:
        values, weights = load_observations(path, value_column=value_column, weight_column=weight_column)
    except (OSError, ValueError) as exc:
        return ValidationReport(
            valid=False,
            issues=[ValidationIssue(level="error", code="io_error", message=str(exc), context={})],
        )
    return validate_observations(values, weights, loss=loss)


def report_to_dict(report: ValidationReport) -> dict[str, Any]:
    return {
        "valid": report.valid,
        "n_observations": report.n_observations,
        "issues": [
            {
                "level": issue.level,
                "code": issue.code,
                "message": issue.message,
                "context": dict(issue.context),
            }
            for issue in report.issues
        ],
    }


def _error(code: str, message: str, context: dict[str, Any] | None = None) -> ValidationIssue:
    return ValidationIssue(level="error", code=code, message=message, context=context or {})
