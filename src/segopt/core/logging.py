"""Logging setup for command-line entrypoints."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S")
    logging.getLogger("segopt").setLevel(level)
    # matplotlib is chatty at DEBUG.
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
