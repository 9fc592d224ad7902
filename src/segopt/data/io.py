"""I/O helpers for observation tables and run outputs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

TABLE_SUFFIXES = {".csv", ".tsv", ".parquet", ".pq"}


class DatasetIOError(FileNotFoundError):
    """Raised when expected input files are missing."""


def read_table(path: str | Path) -> pd.DataFrame:
    p = Path(path)
    if not p.exists():
        raise DatasetIOError(f"Input table does not exist: {p}")
    suffix = p.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(p)
    if suffix == ".tsv":
        return pd.read_csv(p, sep="\t")
    if suffix in {".parquet", ".pq"}:
        return pd.read_parquet(p)
    raise ValueError(f"Unsupported table format '{suffix}'. Supported: {sorted(TABLE_SUFFIXES)}")


def observations_from_frame(
    df: pd.DataFrame,
    value_column: str = "value",
    weight_column: str | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    if value_column not in df.columns:
        raise ValueError(f"Missing value column '{value_column}'; available: {list(df.columns)}")
    values = pd.to_numeric(df[value_column], errors="coerce").to_numpy(dtype=float)
    if weight_column is None:
        return values, np.ones_like(values)
    if weight_column not in df.columns:
        raise ValueError(f"Missing weight column '{weight_column}'; available: {list(df.columns)}")
    weights = pd.to_numeric(df[weight_column], errors="coerce").to_numpy(dtype=float)
    return values, weights


def load_observations(
    path: str | Path,
    value_column: str = "value",
    weight_column: str | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    return observations_from_frame(read_table(path), value_column=value_column, weight_column=weight_column)


def write_table(df: pd.DataFrame, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(p, index=False)


def write_json(data: dict[str, Any], path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
