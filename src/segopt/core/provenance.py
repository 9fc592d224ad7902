"""Provenance block written into ``run_metadata.json``."""

from __future__ import annotations

import importlib.metadata
import re
import subprocess
from pathlib import Path
from typing import Any

from segopt.utils.time import utc_now_iso

PACKAGE = "segopt"
# Runtime stack; used when the distribution metadata is unavailable (source checkout).
RUNTIME_DEPENDENCIES = ("numpy", "pandas", "pyarrow", "scipy", "matplotlib", "PyYAML")


def installed_version(name: str) -> str | None:
    try:
        return importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        return None


def declared_dependencies() -> list[str]:
    """Names of the runtime requirements of the installed package, extras excluded."""

    try:
        requirements = importlib.metadata.requires(PACKAGE) or []
    except importlib.metadata.PackageNotFoundError:
        return list(RUNTIME_DEPENDENCIES)
    names = []
    for req in requirements:
        if "extra ==" in req:
            continue
        match = re.match(r"[A-Za-z0-9_.\-]+", req)
        if match:
            names.append(match.group(0))
    return names or list(RUNTIME_DEPENDENCIES)


def engine_versions() -> dict[str, str]:
    versions = {name: installed_version(name) or "not-installed" for name in declared_dependencies()}
    versions[PACKAGE] = installed_version(PACKAGE) or "0.0.0+local"
    return versions


def git_commit(cwd: str | Path) -> str | None:
    try:
        return subprocess.check_output(
            ["git", "rev-parse", "HEAD"],
            cwd=str(cwd),
            stderr=subprocess.DEVNULL,
            text=True,
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return None


def collect_provenance(argv: list[str] | None = None, cwd: str | Path | None = None) -> dict[str, Any]:
    return {
        "timestamp_utc": utc_now_iso(),
        "git_commit": git_commit(cwd or Path.cwd()),
        "package_versions": engine_versions(),
        "cli_invocation": " ".join(argv or []),
    }
