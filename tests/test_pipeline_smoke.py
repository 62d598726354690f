import json
import subprocess
import sys
from pathlib import Path

import pandas as pd
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(script: str, *args: str) -> None:
    cmd = [sys.executable, str(REPO_ROOT / "scripts" / script), *args]
    subprocess.run(cmd, cwd=REPO_ROOT, check=True)


@pytest.fixture(scope="module")
def pipeline_outdir(tmp_path_factory) -> Path:
    tmp = tmp_path_factory.mktemp("pipeline")
    parquet = tmp / "analysis.parquet"
    outdir = tmp / "outputs"
    _run(
        "01_build_dataset.py",
        "--nrows",
        "20000",
        "--out-parquet",
        str(parquet),
        "--audit-csv",
        str(outdir / "tables" / "analysis_table_audit.csv"),
        "--missingness-csv",
        str(outdir / "tables" / "missingness_analysis.csv"),
        "--decisions-json",
        str(outdir / "logs" / "decisions.json"),
    )
    _run("02_eda.py", "--in-parquet", str(parquet), "--outdir", str(outdir))
    _run("03_fit_models.py", "--in-parquet", str(parquet), "--outdir", str(outdir))
    _run("04_render_report.py", "--outdir", str(outdir))
    return outdir


def test_fit_models_writes_tables(pipeline_outdir: Path):
    tables = pipeline_outdir / "tables"
    specs = pd.read_csv(tables / "model_specs.csv")
    assert specs["family"].tolist().count("linear") == 5
    assert specs["family"].tolist().count("logistic") == 4
    formulas = specs.set_index("model")["formula"]
    assert formulas["glm2_origin"] == "late ~ dep_hour + C(origin)"
    assert formulas["lm5_interaction"].endswith("dep_delay:C(origin)")

    for model in specs["model"]:
        coefs = pd.read_csv(tables / f"coefficients_{model}.csv")
        assert coefs.columns.tolist() == [
            "term",
            "estimate",
            "std_error",
            "statistic",
            "p_value",
            "conf_low",
            "conf_high",
        ]
        assert coefs["term"].iloc[0] == "Intercept"

    for model in specs.loc[specs["family"] == "logistic", "model"]:
        odds = pd.read_csv(tables / f"odds_ratios_{model}.csv")
        assert (odds["odds_ratio"] > 0).all()
        assert (odds["conf_low"] <= odds["odds_ratio"]).all()
        assert (odds["odds_ratio"] <= odds["conf_high"]).all()

    for family in ["linear", "logistic"]:
        comparison = pd.read_csv(tables / f"compare_performance_{family}.csv")
        assert comparison["nobs"].nunique() == 1
        assert comparison["bf"].iloc[0] == pytest.approx(1.0)
        lr = pd.read_csv(tables / f"lr_tests_{family}.csv")
        assert len(lr) == len(comparison) - 1


def test_linear_fit_uses_departure_delay(pipeline_outdir: Path):
    coefs = pd.read_csv(pipeline_outdir / "tables" / "coefficients_lm1_dep_delay.csv").set_index("term")
    # Arrival delay tracks departure delay almost one-for-one.
    assert 0.8 < coefs.loc["dep_delay", "estimate"] < 1.2
    origin_terms = pd.read_csv(pipeline_outdir / "tables" / "coefficients_lm3_origin.csv")["term"]
    assert {"C(origin)[T.JFK]", "C(origin)[T.LGA]"} <= set(origin_terms)

    glance = pd.read_csv(pipeline_outdir / "tables" / "glance_linear.csv")
    # Nested models on shared rows never lose explained variance.
    assert (glance["r_squared"].diff().dropna() > -1e-9).all()


def test_report_rendered(pipeline_outdir: Path):
    report = pipeline_outdir / "reports" / "regression_report.html"
    assert report.exists()
    html = report.read_text(encoding="utf-8")
    assert html.startswith("<!DOCTYPE html>")
    assert "data:image/png;base64," in html
    assert "lm5_interaction" in html
    assert "glm4_interaction" in html
    assert "Model comparison" in html

    meta = json.loads((pipeline_outdir / "logs" / "fit_models_run_metadata.json").read_text(encoding="utf-8"))
    assert set(meta["sequences"]) == {"linear", "logistic"}
    assert meta["inputs"]["nrows"] is None


def test_report_requires_model_tables(tmp_path: Path):
    cmd = [sys.executable, str(REPO_ROOT / "scripts" / "04_render_report.py"), "--outdir", str(tmp_path)]
    proc = subprocess.run(cmd, cwd=REPO_ROOT, capture_output=True, text=True)
    assert proc.returncode != 0
    assert "03_fit_models.py" in proc.stderr
