from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Dict, List

import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.config import (  # noqa: E402
    ANALYSIS_FILE,
    CONF_LEVEL,
    DATASET_VERSION,
    EXPERIMENT_NAMESPACE,
    LINEAR_MODEL_SPECS,
    LOGISTIC_MODEL_SPECS,
)
from src.evaluation.metrics import compare_performance, likelihood_ratio_tests  # noqa: E402
from src.models.fitting import fit_sequence, sequence_variables  # noqa: E402
from src.models.specs import ModelSpec  # noqa: E402
from src.models.tidy import glance_model, odds_ratio_table, tidy_model  # noqa: E402
from src.utils.logging import run_metadata, write_json  # noqa: E402


SEQUENCES = {
    "linear": LINEAR_MODEL_SPECS,
    "logistic": LOGISTIC_MODEL_SPECS,
}


def sha256_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def specs_table(specs: List[ModelSpec]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "model": s.name,
                "family": s.family,
                "formula": s.formula,
                "n_predictors": len(s.predictors),
                "n_interactions": len(s.interactions),
                "description": s.description,
            }
            for s in specs
        ]
    )


def run_sequence(
    family: str,
    specs: List[ModelSpec],
    df: pd.DataFrame,
    *,
    conf_level: float,
    out_tables: Path,
    out_models: Path,
) -> Dict[str, object]:
    """Fit one model sequence and write its tidy, glance and comparison tables."""

    results = fit_sequence(specs, df)

    tidy_rows = []
    glance_rows = []
    for spec in specs:
        res = results[spec.name]

        tidy = tidy_model(res, conf_level=conf_level)
        tidy.to_csv(out_tables / f"coefficients_{spec.name}.csv", index=False)
        tidy.insert(0, "model", spec.name)
        tidy_rows.append(tidy)

        if family == "logistic":
            odds_ratio_table(res, conf_level=conf_level).to_csv(
                out_tables / f"odds_ratios_{spec.name}.csv", index=False
            )

        glance = glance_model(res)
        glance.insert(0, "model", spec.name)
        glance_rows.append(glance)

        (out_models / f"{spec.name}_summary.txt").write_text(res.summary().as_text(), encoding="utf-8")

    pd.concat(tidy_rows, ignore_index=True).to_csv(out_tables / f"coefficients_{family}.csv", index=False)
    pd.concat(glance_rows, ignore_index=True).to_csv(out_tables / f"glance_{family}.csv", index=False)

    comparison = compare_performance(results)
    comparison.to_csv(out_tables / f"compare_performance_{family}.csv", index=False)
    likelihood_ratio_tests(results).to_csv(out_tables / f"lr_tests_{family}.csv", index=False)

    best = comparison.loc[comparison["bic"].idxmin(), "model"]
    return {
        "nobs": int(comparison["nobs"].iloc[0]),
        "variables": sequence_variables(specs),
        "formulas": {s.name: s.formula for s in specs},
        "lowest_bic_model": str(best),
        "max_log10_bf": float(comparison["log10_bf"].max()),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Fit the linear and logistic model sequences and tidy the results.")
    parser.add_argument("--in-parquet", type=Path, default=ANALYSIS_FILE, help="Analysis table (from step 01).")
    parser.add_argument("--nrows", type=int, default=None, help="Optional dev mode: head(n) rows deterministically.")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Output directory (default: outputs/).")
    parser.add_argument("--family", choices=["linear", "logistic", "both"], default="both")
    parser.add_argument("--conf-level", type=float, default=CONF_LEVEL, help="Confidence level for intervals.")
    parser.add_argument("--run-id", type=str, default=None, help="Optional run id; otherwise deterministic.")
    args = parser.parse_args()

    if args.nrows is not None and args.nrows <= 0:
        raise SystemExit("--nrows must be a positive integer.")
    if not 0.0 < args.conf_level < 1.0:
        raise SystemExit("--conf-level must be strictly between 0 and 1.")

    parquet_path = args.in_parquet
    if not parquet_path.exists():
        raise SystemExit(f"Analysis table not found: {parquet_path}. Run scripts/01_build_dataset.py first.")

    df = pd.read_parquet(parquet_path)
    if args.nrows is not None:
        df = df.head(args.nrows).copy()

    outdir = args.outdir
    out_tables = outdir / "tables"
    out_models = outdir / "models"
    out_logs = outdir / "logs"
    for d in [out_tables, out_models, out_logs]:
        d.mkdir(parents=True, exist_ok=True)

    families = ["linear", "logistic"] if args.family == "both" else [args.family]
    run_id = args.run_id or f"{EXPERIMENT_NAMESPACE}_{args.family}"

    all_specs = [s for f in families for s in SEQUENCES[f]]
    specs_table(all_specs).to_csv(out_tables / "model_specs.csv", index=False)

    sequence_meta = {}
    for family in families:
        sequence_meta[family] = run_sequence(
            family,
            SEQUENCES[family],
            df,
            conf_level=args.conf_level,
            out_tables=out_tables,
            out_models=out_models,
        )
        print(f"Fitted {len(SEQUENCES[family])} {family} models on {sequence_meta[family]['nobs']:,} rows")

    meta = run_metadata(
        dataset_version=DATASET_VERSION,
        experiment_namespace=EXPERIMENT_NAMESPACE,
        run_id=run_id,
        inputs={
            "parquet_path": str(parquet_path),
            "parquet_sha256": sha256_file(parquet_path),
            "nrows": args.nrows,
        },
        conf_level=args.conf_level,
        sequences=sequence_meta,
        scope_notes=[
            "All models in a sequence are fitted on the same complete-case rows.",
            "Bayes factors use the BIC approximation against the first model of each sequence.",
            "Coefficients describe associations in 2013 NYC departures; no causal interpretation.",
        ],
    )
    write_json(out_logs / "fit_models_run_metadata.json", meta)

    print(f"Wrote modeling artifacts to {outdir}/")


if __name__ == "__main__":
    main()
