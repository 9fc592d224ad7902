"""Implementation of `segopt run`."""

from __future__ import annotations

import argparse
import sys
from typing import Any

from segopt.core.pipeline import run_pipeline


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("run", help="Segment an observation table")
    parser.add_argument("input", help="CSV/TSV/Parquet table with one observation per row")
    parser.add_argument("--out", required=True, help="Output results folder")
    parser.add_argument("--config", default=None, help="Config YAML")
    parser.add_argument(
        "--penalty", type=float, default=None, help="Penalty per changepoint ('inf' forces a single segment)"
    )
    parser.add_argument("--loss", choices=["normal", "poisson"], default=None, help="Loss family")
    parser.add_argument(
        "--constraint",
        choices=["increasing", "decreasing", "none"],
        default=None,
        help="Constraint on consecutive segment means",
    )
    parser.add_argument("--value-column", default=None, help="Column holding observation values")
    parser.add_argument("--weight-column", default=None, help="Column holding observation weights")
    parser.set_defaults(func=cmd_run)


def cmd_run(args: argparse.Namespace) -> int:
    result = run_pipeline(
        input_path=args.input,
        out_dir=args.out,
        config_path=args.config,
        overrides=_overrides_from_args(args),
        argv=sys.argv,
    )

    print(f"Found {result.n_segments} segments (cost={result.total_cost:.6g})")
    print(f"Wrote DP table to {args.out}/dp_table.parquet")
    print(f"Wrote segments to {args.out}/segments.parquet")
    print(f"Wrote run metadata to {args.out}/run_metadata.json")
    print(f"Wrote resolved config to {args.out}/config_resolved.yaml")
    return 0


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    seg = {
        key: value
        for key, value in {
            "penalty": args.penalty,
            "loss": args.loss,
            "constraint": args.constraint,
        }.items()
        if value is not None
    }
    columns = {
        key: value
        for key, value in {"value": args.value_column, "weight": args.weight_column}.items()
        if value is not None
    }
    out: dict[str, Any] = {}
    if seg:
        out["segmentation"] = seg
    if columns:
        out["columns"] = columns
    return out
