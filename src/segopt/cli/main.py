"""Main CLI entrypoint."""

from __future__ import annotations

import argparse
import sys

from segopt.cli import report, run, validate
from segopt.core.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segopt", description="Exact penalized piecewise-constant segmentation"
    )
    subparsers = parser.add_subparsers(dest="command")

    run.register(subparsers)
    validate.register(subparsers)
    report.register(subparsers)

    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=getattr(args, "verbose", False))

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        print("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
