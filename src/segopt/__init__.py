"""Exact penalized piecewise-constant segmentation of one-dimensional data."""

from segopt.core.pipeline import (
    DegenerateInputError,
    InputValidationError,
    PipelineError,
    run_pipeline,
    segment_series,
)
from segopt.core.types import DPTable, Segment, SegmentationResult

__all__ = [
    "DPTable",
    "DegenerateInputError",
    "InputValidationError",
    "PipelineError",
    "Segment",
    "SegmentationResult",
    "run_pipeline",
    "segment_series",
]
