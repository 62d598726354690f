from __future__ import annotations

import argparse
import os
import sys
import tempfile
from pathlib import Path

_mpl_cache_dir = Path(tempfile.gettempdir()) / "matplotlib"
_mpl_cache_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("MPLCONFIGDIR", str(_mpl_cache_dir))

import pandas as pd
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.config import (  # noqa: E402
    ANALYSIS_FILE,
    CORRELATION_COLS,
    CORRELATION_METHOD,
    SUMMARY_NUMERIC_COLS,
)
from src.data.validate import assert_required_columns  # noqa: E402
from src.evaluation.correlation import correlation_matrix, tidy_correlations  # noqa: E402
from src.evaluation.summary import summarize_by_group, summarize_numeric  # noqa: E402
from src.reporting.figures import plot_correlation_matrix, save_figure  # noqa: E402
from src.utils.logging import run_metadata, write_json  # noqa: E402


GROUP_SUMMARIES = {
    "carrier": "carrier_name",
    "origin": None,
    "season": None,
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Summary statistics, correlations and the correlation plot.")
    parser.add_argument("--in-parquet", type=Path, default=ANALYSIS_FILE, help="Analysis table (from step 01).")
    parser.add_argument("--nrows", type=int, default=None, help="Use only the first N rows (deterministic head).")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Output directory (default: outputs/).")
    parser.add_argument("--method", choices=["pearson", "spearman"], default=CORRELATION_METHOD)
    args = parser.parse_args()

    in_path = args.in_parquet
    if not in_path.exists():
        raise SystemExit(f"Analysis table not found: {in_path}. Run scripts/01_build_dataset.py first.")

    df = pd.read_parquet(in_path)
    required = list(dict.fromkeys(SUMMARY_NUMERIC_COLS + CORRELATION_COLS + ["late"] + list(GROUP_SUMMARIES)))
    try:
        assert_required_columns(df, required)
    except ValueError as exc:
        raise SystemExit(f"Analysis table is incomplete: {exc}") from exc

    if args.nrows is not None:
        if args.nrows <= 0:
            raise SystemExit("--nrows must be a positive integer.")
        df = df.head(args.nrows).copy()

    outdir = args.outdir
    tables_dir = outdir / "tables"
    figures_dir = outdir / "figures"
    logs_dir = outdir / "logs"
    for d in [tables_dir, figures_dir, logs_dir]:
        d.mkdir(parents=True, exist_ok=True)

    summarize_numeric(df, SUMMARY_NUMERIC_COLS).to_csv(tables_dir / "summary_numeric.csv", index=False)

    for group_col, label_col in GROUP_SUMMARIES.items():
        table = summarize_by_group(df, group_col, "arr_delay", label_col=label_col, indicator_col="late")
        table.to_csv(tables_dir / f"summary_by_{group_col}.csv", index=False)

    corr = correlation_matrix(df, CORRELATION_COLS, method=args.method)
    corr.rename_axis("variable").to_csv(tables_dir / "correlation_matrix.csv")
    tidy_corr = tidy_correlations(df, CORRELATION_COLS, method=args.method)
    tidy_corr.to_csv(tables_dir / "correlations_tidy.csv", index=False)

    fig = plot_correlation_matrix(corr, title=f"{args.method.title()} correlations (n={len(df):,} flights)")
    save_figure(fig, figures_dir / "correlation_matrix.png")
    plt.close(fig)

    meta = run_metadata(
        input_parquet=str(in_path),
        nrows=args.nrows,
        n_rows_used=int(len(df)),
        outdir=str(outdir),
        correlation_method=args.method,
        correlation_cols=CORRELATION_COLS,
        notes=[
            "Correlations use pairwise-complete observations.",
            "Summaries are descriptive; cancelled and diverted flights were excluded in step 01.",
        ],
    )
    write_json(logs_dir / "eda_run_metadata.json", meta)

    print(f"Wrote EDA artifacts to {outdir}/")


if __name__ == "__main__":
    main()
