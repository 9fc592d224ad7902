import json
from pathlib import Path

import numpy as np
import pandas as pd

from segopt import run_pipeline
from segopt.core.provenance import PACKAGE, collect_provenance, declared_dependencies, engine_versions
from segopt.utils.hash import file_sha256, mapping_sha256, observations_sha256


def test_observations_hash_ignores_table_format(tmp_path: Path):
    frame = pd.DataFrame({"value": [1.0, 3.5, 2.0, 8.0], "w": [1.0, 2.0, 1.0, 0.5]})
    csv_path = tmp_path / "obs.csv"
    pq_path = tmp_path / "obs.parquet"
    frame.to_csv(csv_path, index=False)
    frame.to_parquet(pq_path, index=False)

    overrides = {"segmentation": {"penalty": 1.0}, "columns": {"weight": "w"}}
    run_pipeline(str(csv_path), str(tmp_path / "a"), overrides=overrides)
    run_pipeline(str(pq_path), str(tmp_path / "b"), overrides=overrides)
    meta_a = json.loads((tmp_path / "a" / "run_metadata.json").read_text(encoding="utf-8"))
    meta_b = json.loads((tmp_path / "b" / "run_metadata.json").read_text(encoding="utf-8"))

    assert meta_a["input_hash"] != meta_b["input_hash"]
    assert meta_a["observations_hash"] == meta_b["observations_hash"]
    assert meta_a["observations_hash"] == observations_sha256(frame["value"].to_numpy(), frame["w"].to_numpy())
    assert meta_a["input_hash"] == file_sha256(csv_path)


def test_observations_hash_separates_values_and_weights():
    y = np.array([1.0, 2.0])
    base = observations_sha256(y, np.ones(2))
    assert observations_sha256(y.astype(np.float32), np.ones(2, dtype=int)) == base
    assert observations_sha256(y, np.array([1.0, 2.0])) != base
    assert observations_sha256(y[:1], np.ones(1)) != base
    try:
        observations_sha256(y, np.ones(3))
        assert False
    except ValueError as exc:
        assert "differ in shape" in str(exc)


def test_mapping_hash_is_key_order_independent():
    assert mapping_sha256({"a": 1, "b": {"c": 2}}) == mapping_sha256({"b": {"c": 2}, "a": 1})


def test_collect_provenance(tmp_path: Path):
    prov = collect_provenance(["segopt", "run", "x.csv"], cwd=tmp_path)
    assert prov["cli_invocation"] == "segopt run x.csv"
    assert prov["git_commit"] is None
    assert prov["timestamp_utc"].endswith("Z")
    assert PACKAGE in prov["package_versions"]

    versions = engine_versions()
    for name in declared_dependencies():
        assert name in versions
    assert versions["numpy"] == np.__version__
