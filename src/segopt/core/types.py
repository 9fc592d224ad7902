"""Core package types shared by the engines and the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

STATUS_OK = 0
STATUS_ALL_ZERO = 1

NO_PREVIOUS = -1
UNREACHED = -2


@dataclass(frozen=True)
class Segment:
    """Contiguous run of observations ``start..end`` (inclusive) sharing one mean."""

    start: int
    end: int
    mean: float

    @property
    def size(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class DPTable:
    """Parallel output arrays indexed by prefix length.

    ``intervals`` is only produced by the unconstrained count-loss engine, whose
    ``end``/``mean`` slots hold the recovered segments left-compacted.
    """

    cost: np.ndarray
    end: np.ndarray
    mean: np.ndarray
    intervals: np.ndarray | None = None
    status: int = STATUS_OK
    constant_input: bool = False

    def __len__(self) -> int:
        return int(self.cost.size)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_frame(self) -> pd.DataFrame:
        data: dict[str, Any] = {
            "cost": self.cost,
            "end": self.end,
            "mean": self.mean,
        }
        if self.intervals is not None:
            data["intervals"] = self.intervals
        return pd.DataFrame(data)


@dataclass(frozen=True)
class SegmentationResult:
    table: DPTable
    segments: list[Segment]
    fitted: np.ndarray
    loss: str
    constraint: str
    penalty: float

    @property
    def n_segments(self) -> int:
        return len(self.segments)

    @property
    def total_cost(self) -> float:
        if len(self.table) == 0:
            return 0.0
        return float(self.table.cost[-1])

    def segments_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "start": [s.start for s in self.segments],
                "end": [s.end for s in self.segments],
                "size": [s.size for s in self.segments],
                "mean": [s.mean for s in self.segments],
            }
        )


@dataclass(frozen=True)
class ValidationIssue:
    level: str
    code: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationReport:
    valid: bool
    issues: Sequence[ValidationIssue]
    n_observations: int = 0
