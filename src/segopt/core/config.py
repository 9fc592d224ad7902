"""Configuration loading and resolution."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG: dict[str, Any] = {
    "segmentation": {
        "loss": "normal",
        "constraint": "increasing",
        "penalty": 0.0,
    },
    "columns": {
        "value": "value",
        "weight": None,
    },
    "numerics": {
        "range_padding": 0.1,
        "infinite_penalty": 1e5,
        "zero_penalty": 1e-9,
    },
}

SUPPORTED_MODELS: dict[str, set[str]] = {
    "normal": {"increasing", "decreasing"},
    "poisson": {"none"},
}

# Used when neither the config file nor the overrides name a constraint.
DEFAULT_CONSTRAINTS: dict[str, str] = {
    "normal": "increasing",
    "poisson": "none",
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries and return a new dictionary."""

    out = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping at root: {p}")
    return data


def resolve_config(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve run configuration from defaults, an optional user file and overrides."""

    resolved = deepcopy(DEFAULT_CONFIG)
    layers: list[dict[str, Any]] = []
    if config_path is not None:
        layers.append(load_yaml(config_path))
    if overrides:
        layers.append(overrides)
    for layer in layers:
        resolved = deep_merge(resolved, layer)
    if not any(_sets_constraint(layer) for layer in layers):
        seg = resolved["segmentation"]
        seg["constraint"] = DEFAULT_CONSTRAINTS.get(seg.get("loss"), seg.get("constraint"))
    _validate_methods(resolved)
    _validate_numerics(resolved)
    return resolved


def dump_yaml(data: dict[str, Any], out_path: str | Path) -> None:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)


def _sets_constraint(layer: dict[str, Any]) -> bool:
    seg = layer.get("segmentation")
    return isinstance(seg, dict) and "constraint" in seg


def _validate_methods(cfg: dict[str, Any]) -> None:
    seg = cfg.get("segmentation", {})
    loss = seg.get("loss")
    if loss not in SUPPORTED_MODELS:
        raise ConfigError(f"Unsupported segmentation.loss '{loss}'. Supported: normal|poisson")

    constraint = seg.get("constraint")
    allowed = SUPPORTED_MODELS[loss]
    if constraint not in allowed:
        raise ConfigError(
            f"Unsupported segmentation.constraint '{constraint}' for loss '{loss}'. "
            f"Supported: {'|'.join(sorted(allowed))}"
        )


def _validate_numerics(cfg: dict[str, Any]) -> None:
    try:
        penalty = float(cfg["segmentation"]["penalty"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"segmentation.penalty must be a number: {exc}") from exc
    if not penalty >= 0.0:
        raise ConfigError(f"segmentation.penalty must be non-negative, got {penalty}")

    num = cfg.get("numerics", {})
    for key in ("range_padding", "infinite_penalty", "zero_penalty"):
        value = num.get(key)
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
            raise ConfigError(f"numerics.{key} must be a positive number, got {value!r}")
    if num["zero_penalty"] >= num["infinite_penalty"]:
        raise ConfigError("numerics.zero_penalty must be smaller than numerics.infinite_penalty")
