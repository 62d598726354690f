import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import argparse
import hashlib

import pandas as pd

from src.config import (
    ANALYSIS_FILE,
    DATASET_VERSION,
    LATE_THRESHOLD_MINUTES,
    LOGS_DIR,
    SOURCE_TABLES,
    TABLES_DIR,
)
from src.data.build import build_analysis_table
from src.data.coding import summarize_missingness
from src.data.ingest import load_source_tables
from src.utils.logging import write_json


def _sha256_df(df: pd.DataFrame) -> str:
    h = hashlib.sha256()
    h.update("||".join(df.columns.astype(str).tolist()).encode("utf-8"))
    h.update("||".join(map(str, df.dtypes.tolist())).encode("utf-8"))
    row_hashes = pd.util.hash_pandas_object(df, index=True).to_numpy()
    h.update(row_hashes.tobytes())
    return h.hexdigest()


def main() -> None:
    parser = argparse.ArgumentParser(description="Build the joined flights analysis table from nycflights13.")
    parser.add_argument("--nrows", type=int, default=None, help="Optional: use only the first N flights (for tests).")
    parser.add_argument("--out-parquet", type=Path, default=ANALYSIS_FILE, help="Output parquet path.")
    parser.add_argument(
        "--audit-csv",
        type=Path,
        default=TABLES_DIR / "analysis_table_audit.csv",
        help="Output audit CSV path.",
    )
    parser.add_argument(
        "--missingness-csv",
        type=Path,
        default=TABLES_DIR / "missingness_analysis.csv",
        help="Output missingness summary CSV path.",
    )
    parser.add_argument(
        "--decisions-json",
        type=Path,
        default=LOGS_DIR / "decisions.json",
        help="Output JSON file for join/filter decisions.",
    )
    parser.add_argument(
        "--late-threshold",
        type=float,
        default=LATE_THRESHOLD_MINUTES,
        help="Arrival delay (minutes) above which a flight counts as late.",
    )
    args = parser.parse_args()

    if args.nrows is not None and args.nrows <= 0:
        raise SystemExit("--nrows must be a positive integer.")

    try:
        tables = load_source_tables(nrows=args.nrows)
    except ImportError as exc:
        raise SystemExit(f"Bundled dataset unavailable ({exc}). Install the nycflights13 package.") from exc
    raw_rows = {name: int(len(tables[name])) for name in SOURCE_TABLES}

    analysis, decisions = build_analysis_table(tables, late_threshold=args.late_threshold)
    analysis_rows, analysis_cols = analysis.shape

    args.missingness_csv.parent.mkdir(parents=True, exist_ok=True)
    summarize_missingness(analysis).to_csv(args.missingness_csv, index=False)

    late_counts = analysis["late"].value_counts(dropna=False).to_dict()
    n_1 = int(late_counts.get(1, 0))
    n_0 = int(late_counts.get(0, 0))
    late_rate = round(n_1 / (n_0 + n_1), 6) if (n_0 + n_1) else None

    content_hash = _sha256_df(analysis)

    decisions_payload = {
        **decisions,
        "dataset_version": DATASET_VERSION,
        "source_tables": SOURCE_TABLES,
        "raw_rows": raw_rows,
        "nrows": args.nrows,
        "analysis_rows": analysis_rows,
        "analysis_cols": analysis_cols,
        "output_parquet": str(args.out_parquet),
        "missingness_csv": str(args.missingness_csv),
        "content_hash_sha256": content_hash,
    }
    write_json(args.decisions_json, decisions_payload)

    args.out_parquet.parent.mkdir(parents=True, exist_ok=True)
    analysis.to_parquet(args.out_parquet, index=False)

    args.audit_csv.parent.mkdir(parents=True, exist_ok=True)
    audit = pd.DataFrame(
        [
            {
                "raw_flight_rows": raw_rows["flights"],
                "analysis_rows": analysis_rows,
                "analysis_cols": analysis_cols,
                "late_n": n_0 + n_1,
                "late_n1": n_1,
                "late_n0": n_0,
                "late_rate": late_rate,
                "missingness_summary_csv": str(args.missingness_csv),
                "content_hash_sha256": content_hash,
                "decisions_json": str(args.decisions_json),
            }
        ]
    )
    audit.to_csv(args.audit_csv, index=False)

    print(f"Wrote {args.out_parquet}")
    print(f"Wrote {args.audit_csv}")
    print(f"Wrote {args.missingness_csv}")
    print(f"Wrote {args.decisions_json}")


if __name__ == "__main__":
    main()
