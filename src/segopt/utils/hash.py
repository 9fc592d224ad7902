"""Content hashes recorded in run metadata."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import numpy as np

_BLOCK = 1 << 20


def file_sha256(path: str | Path) -> str:
    """Hash of the raw input file bytes."""

    digest = hashlib.sha256()
    with Path(path).open("rb") as f:
        for block in iter(lambda: f.read(_BLOCK), b""):
            digest.update(block)
    return digest.hexdigest()


def mapping_sha256(payload: dict[str, Any]) -> str:
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def observations_sha256(values: np.ndarray, weights: np.ndarray) -> str:
    """Hash of the segmented series itself, independent of the table format.

    Values and weights are hashed as little-endian float64 after a length
    header, so a CSV and a Parquet copy of the same data agree.
    """

    y = np.ascontiguousarray(values, dtype="<f8")
    w = np.ascontiguousarray(weights, dtype="<f8")
    if y.shape != w.shape:
        raise ValueError(f"values and weights differ in shape: {y.shape} vs {w.shape}")
    digest = hashlib.sha256()
    digest.update(np.int64(y.size).astype("<i8").tobytes())
    digest.update(y.tobytes())
    digest.update(w.tobytes())
    return digest.hexdigest()
