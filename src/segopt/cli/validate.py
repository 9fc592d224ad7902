"""Implementation of `segopt validate`."""

from __future__ import annotations

import argparse
import json

from segopt.data.validators import report_to_dict, validate_input_file


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("validate", help="Validate an observation table")
    parser.add_argument("input", help="CSV/TSV/Parquet table with one observation per row")
    parser.add_argument("--loss", choices=["normal", "poisson"], default="normal", help="Loss family")
    parser.add_argument("--value-column", default="value", help="Column holding observation values")
    parser.add_argument("--weight-column", default=None, help="Column holding observation weights")
    parser.add_argument("--json", action="store_true", help="Print report as JSON")
    parser.set_defaults(func=cmd_validate)


def cmd_validate(args: argparse.Namespace) -> int:
    report = validate_input_file(
        args.input,
        value_column=args.value_column,
        weight_column=args.weight_column,
        loss=args.loss,
    )
    payload = report_to_dict(report)

    if args.json:
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        status = "PASS" if report.valid else "FAIL"
        print(f"Validation: {status}")
        print(f"Observations: {report.n_observations}")
        if not report.issues:
            print("No issues found")
        for issue in report.issues:
            print(f"- {issue.level.upper()} [{issue.code}] {issue.message}")

    return 0 if report.valid else 2
