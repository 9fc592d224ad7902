"""Report builders for JSON/Markdown/figure bundles."""

from segopt.reporting.json import build_report_payload, write_report_json
from segopt.reporting.md import write_report_md
from segopt.reporting.plots import write_report_figures

__all__ = [
    "build_report_payload",
    "write_report_json",
    "write_report_md",
    "write_report_figures",
]
