import subprocess
import sys
from pathlib import Path

import pandas as pd
import pytest


def _build(repo_root: Path, tmp_path: Path, nrows: int) -> Path:
    out_parquet = tmp_path / "analysis.parquet"
    cmd = [
        sys.executable,
        str(repo_root / "scripts" / "01_build_dataset.py"),
        "--nrows",
        str(nrows),
        "--out-parquet",
        str(out_parquet),
        "--audit-csv",
        str(tmp_path / "audit.csv"),
        "--missingness-csv",
        str(tmp_path / "missingness.csv"),
        "--decisions-json",
        str(tmp_path / "decisions.json"),
    ]
    subprocess.run(cmd, cwd=repo_root, check=True)
    return out_parquet


def test_eda_smoke(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]
    parquet = _build(repo_root, tmp_path, nrows=2000)
    outdir = tmp_path / "outputs"

    cmd = [
        sys.executable,
        str(repo_root / "scripts" / "02_eda.py"),
        "--in-parquet",
        str(parquet),
        "--outdir",
        str(outdir),
    ]
    subprocess.run(cmd, cwd=repo_root, check=True)

    required_paths = [
        "tables/summary_numeric.csv",
        "tables/summary_by_carrier.csv",
        "tables/summary_by_origin.csv",
        "tables/summary_by_season.csv",
        "tables/correlation_matrix.csv",
        "tables/correlations_tidy.csv",
        "figures/correlation_matrix.png",
        "logs/eda_run_metadata.json",
    ]
    for rel in required_paths:
        assert (outdir / rel).exists(), f"Missing expected EDA artifact: {rel}"

    corr = pd.read_csv(outdir / "tables" / "correlation_matrix.csv", index_col="variable")
    assert corr.loc["arr_delay", "arr_delay"] == pytest.approx(1.0)
    assert corr.loc["arr_delay", "dep_delay"] == corr.loc["dep_delay", "arr_delay"]
    # Departure delay drives arrival delay.
    assert corr.loc["arr_delay", "dep_delay"] > 0.5

    by_origin = pd.read_csv(outdir / "tables" / "summary_by_origin.csv")
    assert set(by_origin["origin"]) <= {"EWR", "JFK", "LGA"}
    assert by_origin["late_rate"].between(0, 1).all()


def test_eda_missing_input_exits(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]
    cmd = [
        sys.executable,
        str(repo_root / "scripts" / "02_eda.py"),
        "--in-parquet",
        str(tmp_path / "nope.parquet"),
        "--outdir",
        str(tmp_path / "outputs"),
    ]
    proc = subprocess.run(cmd, cwd=repo_root, capture_output=True, text=True)
    assert proc.returncode != 0
    assert "01_build_dataset.py" in proc.stderr
