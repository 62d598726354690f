import json
import subprocess
import sys
from pathlib import Path

import pandas as pd


def test_build_dataset_smoke(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]

    out_parquet = tmp_path / "nycflights13_analysis.parquet"
    audit_csv = tmp_path / "analysis_table_audit.csv"
    missingness_csv = tmp_path / "missingness_analysis.csv"
    decisions_json = tmp_path / "decisions.json"

    cmd = [
        sys.executable,
        str(repo_root / "scripts" / "01_build_dataset.py"),
        "--nrows",
        "500",
        "--out-parquet",
        str(out_parquet),
        "--audit-csv",
        str(audit_csv),
        "--missingness-csv",
        str(missingness_csv),
        "--decisions-json",
        str(decisions_json),
    ]
    subprocess.run(cmd, cwd=repo_root, check=True)

    assert out_parquet.exists()
    df = pd.read_parquet(out_parquet)

    for col in ["arr_delay", "dep_delay", "late", "dep_hour", "season", "temp", "visib", "carrier_name", "dest_name"]:
        assert col in df.columns

    # Cancelled/diverted flights are dropped, so every row has an outcome.
    assert df["arr_delay"].isna().sum() == 0
    assert set(df["late"].dropna().unique().tolist()) <= {0, 1}
    assert ((df["arr_delay"] > 15) == (df["late"] == 1)).all()

    audit = pd.read_csv(audit_csv)
    assert int(audit.loc[0, "raw_flight_rows"]) == 500
    assert int(audit.loc[0, "analysis_rows"]) == len(df)
    assert missingness_csv.exists()

    payload = json.loads(decisions_json.read_text(encoding="utf-8"))
    assert payload["raw_rows"]["flights"] == 500
    assert [j["table"] for j in payload["joins"]] == ["weather", "planes", "airlines", "airports"]
    dropped = payload["row_filters"][0]["dropped_rows"]
    assert payload["analysis_rows"] + dropped == 500
