"""Segmentation recovery from DP output arrays."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from segopt.core.types import NO_PREVIOUS, DPTable, Segment


def backtrack(end: np.ndarray, mean: np.ndarray) -> list[Segment]:
    """Follow ``end`` backpointers from the last index to ``NO_PREVIOUS``.

    Each stop must lie strictly before the current index, so the walk takes at
    most ``len(end)`` steps; anything else raises ``ValueError``.
    """

    ends = np.asarray(end, dtype=np.int64)
    means = np.asarray(mean, dtype=float)
    if ends.size != means.size:
        raise ValueError("end and mean must have equal length")

    segments: list[Segment] = []
    i = ends.size - 1
    while i >= 0:
        prev = int(ends[i])
        if prev >= i or prev < NO_PREVIOUS:
            raise ValueError(f"Invalid backpointer end[{i}]={prev}")
        segments.append(Segment(start=prev + 1, end=i, mean=float(means[i])))
        i = prev
    segments.reverse()
    return segments


def compact_segments(end: np.ndarray, mean: np.ndarray, intervals: np.ndarray) -> list[Segment]:
    """Read segments written left-compacted, slot k holding the k-th segment."""

    segments: list[Segment] = []
    start = 0
    for k in np.flatnonzero(np.asarray(intervals) == 1):
        seg_end = int(end[k])
        segments.append(Segment(start=start, end=seg_end, mean=float(mean[k])))
        start = seg_end + 1
    return segments


def table_segments(table: DPTable) -> list[Segment]:
    n = len(table)
    if n == 0:
        return []
    if table.constant_input:
        return [Segment(start=0, end=n - 1, mean=float(table.mean[0]))]
    if table.intervals is not None:
        return compact_segments(table.end, table.mean, table.intervals)
    return backtrack(table.end, table.mean)


def expand_means(segments: Sequence[Segment], n: int) -> np.ndarray:
    fitted = np.full(n, np.nan, dtype=float)
    for seg in segments:
        fitted[seg.start : seg.end + 1] = seg.mean
    return fitted
