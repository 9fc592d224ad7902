"""Markdown report writer."""

from __future__ import annotations

from pathlib import Path
from typing import Any


def write_report_md(payload: dict[str, Any], out_path: str | Path) -> None:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    rep = payload.get("reproducibility", {})
    summary = payload.get("summary", {})
    seg = payload.get("segments", {})
    lines = [
        "# Segmentation Report",
        "",
        "## Reproducibility",
        f"- Input hash: `{rep.get('input_hash')}`",
        f"- Observations hash: `{rep.get('observations_hash')}`",
        f"- Config hash: `{rep.get('config_hash')}`",
        f"- Git commit: `{rep.get('git_commit')}`",
        f"- Timestamp (UTC): `{rep.get('timestamp_utc')}`",
        "",
        "## Model",
        f"- loss: `{summary.get('loss')}`",
        f"- constraint: `{summary.get('constraint')}`",
        f"- penalty: `{_fmt(summary.get('penalty'))}`",
        f"- observations: `{summary.get('n_observations')}`",
        f"- total cost: `{_fmt(summary.get('total_cost'))}`",
        "",
        "## Segments",
        f"- count: `{seg.get('count')}`",
        f"- changepoints: `{seg.get('changepoints')}`",
        f"- mean range: `{_fmt(seg.get('min_mean'))}` .. `{_fmt(seg.get('max_mean'))}`",
        f"- monotone: `{seg.get('monotone')}`",
        "",
        "| start | end | size | mean |",
        "|---:|---:|---:|---:|",
    ]
    for row in payload.get("rows", []):
        lines.append(f"| {row.get('start')} | {row.get('end')} | {row.get('size')} | {_fmt(row.get('mean'))} |")
    lines.append("")
    out.write_text("\n".join(lines), encoding="utf-8")


def _fmt(v: Any) -> str:
    try:
        return f"{float(v):.6g}"
    except (TypeError, ValueError):
        return str(v)
