"""Implementation of `segopt report`."""

from __future__ import annotations

import argparse
from pathlib import Path

from segopt.reporting.json import build_report_payload, write_report_json
from segopt.reporting.md import write_report_md
from segopt.reporting.plots import write_report_figures


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("report", help="Build JSON/Markdown/figure report from run outputs")
    parser.add_argument("results", help="Results directory written by `segopt run`")
    parser.add_argument("--out-json", default=None, help="Output report.json path")
    parser.add_argument("--out-md", default=None, help="Output report.md path")
    parser.add_argument("--figures-dir", default=None, help="Directory for exported figures")
    parser.add_argument("--no-figures", action="store_true", help="Skip figure export")
    parser.set_defaults(func=cmd_report)


def cmd_report(args: argparse.Namespace) -> int:
    results_dir = Path(args.results)
    out_json = Path(args.out_json) if args.out_json else results_dir / "report.json"
    out_md = Path(args.out_md) if args.out_md else results_dir / "report.md"
    figures_dir = Path(args.figures_dir) if args.figures_dir else results_dir / "figures"

    payload = build_report_payload(results_dir=results_dir)
    write_report_json(payload, out_json)
    write_report_md(payload, out_md)

    print(f"Report JSON written to {out_json}")
    print(f"Report Markdown written to {out_md}")
    if not args.no_figures:
        figure_paths = write_report_figures(results_dir=results_dir, out_dir=figures_dir)
        print(f"Figures written to {figures_dir} ({', '.join(figure_paths.keys())})")
    return 0
