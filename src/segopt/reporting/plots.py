"""Figure bundle writer for report artifacts."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_segmentation(table: pd.DataFrame, out_path: str | Path) -> Path:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    idx = np.arange(len(table))
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.scatter(idx, table["value"], s=12, alpha=0.6, label="observations")
    ax.step(idx, table["fitted"], where="mid", color="black", linewidth=1.6, label="segment means")
    ax.set_xlabel("index")
    ax.set_ylabel("value")
    ax.set_title("Optimal segmentation")
    ax.legend(loc="best")
    ax.grid(alpha=0.3)
    fig.tight_layout()
    fig.savefig(p, dpi=140)
    plt.close(fig)
    return p


def plot_prefix_cost(table: pd.DataFrame, out_path: str | Path) -> Path:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(6, 4))
    cost = table["cost"].to_numpy(dtype=float)
    finite = np.isfinite(cost)
    if finite.any():
        ax.plot(np.flatnonzero(finite), cost[finite], marker=".", linewidth=1.2)
    else:
        ax.text(0.5, 0.5, "No finite prefix costs", ha="center", va="center")
    ax.set_xlabel("prefix end index")
    ax.set_ylabel("optimal penalized cost")
    ax.set_title("Prefix cost")
    ax.grid(alpha=0.3)
    fig.tight_layout()
    fig.savefig(p, dpi=140)
    plt.close(fig)
    return p


def write_report_figures(results_dir: str | Path, out_dir: str | Path) -> dict[str, str]:
    root = Path(results_dir)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    table_path = root / "dp_table.parquet"
    if not table_path.exists():
        raise FileNotFoundError(f"Missing DP table: {table_path}")
    df = pd.read_parquet(table_path)
    if df.empty:
        raise ValueError(f"Empty DP table: {table_path}")

    seg_path = plot_segmentation(df, out / "segmentation.png")
    cost_path = plot_prefix_cost(df, out / "prefix_cost.png")
    return {
        "segmentation": str(seg_path.resolve()),
        "prefix_cost": str(cost_path.resolve()),
    }
