from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.config import AIRLINES_KEY, AIRPORTS_KEY, PLANES_KEY, TABLES_DIR, WEATHER_KEYS  # noqa: E402
from src.data.ingest import load_source_tables  # noqa: E402


VALUE_COUNTS_COLUMNS = {"flights": ["carrier", "origin"], "planes": ["type", "engine"]}
LOOKUP_KEYS = {"planes": PLANES_KEY, "airlines": AIRLINES_KEY, "airports": AIRPORTS_KEY[1]}


def column_notes(table: str, column: str, s: pd.Series) -> str:
    notes = []
    if s.isna().all():
        return "all_missing"
    if s.nunique(dropna=True) == 1:
        notes.append("constant")
    if s.isna().any():
        notes.append("has_missing")
    if LOOKUP_KEYS.get(table) == column and not s.duplicated().any():
        notes.append("unique_lookup_key")
    return ";".join(notes)


def schema_table(df: pd.DataFrame, table: str) -> pd.DataFrame:
    """One row per column of a source table: type, missingness, cardinality, numeric range."""

    numeric = df.select_dtypes("number")
    out = pd.DataFrame(
        {
            "table": table,
            "column": df.columns,
            "dtype": [str(t) for t in df.dtypes],
            "n_total": len(df),
            "n_missing": df.isna().sum().to_numpy(),
            "n_unique": df.nunique(dropna=True).to_numpy(),
            "min": numeric.min().reindex(df.columns).to_numpy(),
            "max": numeric.max().reindex(df.columns).to_numpy(),
            "notes": [column_notes(table, c, df[c]) for c in df.columns],
        }
    )
    out.insert(5, "missing_rate", (out["n_missing"] / len(df)).round(6) if len(df) else np.nan)
    return out


def write_value_counts(series: pd.Series, name: str, out_dir: Path) -> None:
    counts = series.value_counts(dropna=False).rename_axis("value").reset_index(name="count")
    counts["proportion"] = (counts["count"] / len(series)).round(6)
    counts.to_csv(out_dir / f"value_counts_{name}.csv", index=False)


def key_coverage(tables: dict) -> pd.DataFrame:
    """Share of flight rows whose join key has a match in each lookup table."""

    flights = tables["flights"]
    weather = tables["weather"]
    n = len(flights)

    flight_hours = flights[WEATHER_KEYS].astype(str).agg("|".join, axis=1)
    weather_hours = set(weather[WEATHER_KEYS].astype(str).agg("|".join, axis=1))
    dest_col, faa_col = AIRPORTS_KEY

    checks = [
        ("weather", "+".join(WEATHER_KEYS), flight_hours.isin(weather_hours)),
        ("planes", PLANES_KEY, flights[PLANES_KEY].isin(set(tables["planes"][PLANES_KEY]))),
        ("airlines", AIRLINES_KEY, flights[AIRLINES_KEY].isin(set(tables["airlines"][AIRLINES_KEY]))),
        ("airports", f"{dest_col}={faa_col}", flights[dest_col].isin(set(tables["airports"][faa_col]))),
    ]
    rows = []
    for table, key, matched in checks:
        n_matched = int(matched.sum())
        rows.append(
            {
                "lookup_table": table,
                "key": key,
                "n_flights": n,
                "n_matched": n_matched,
                "match_rate": round(n_matched / n, 6) if n else np.nan,
            }
        )
    return pd.DataFrame(rows)


def main() -> None:
    parser = argparse.ArgumentParser(description="Schema audit of the raw nycflights13 source tables.")
    parser.add_argument("--nrows", type=int, default=None, help="Audit only the first N flights.")
    parser.add_argument("--tables-dir", type=Path, default=TABLES_DIR, help="Output directory for audit tables.")
    args = parser.parse_args()

    if args.nrows is not None and args.nrows <= 0:
        raise SystemExit("--nrows must be a positive integer.")

    tables = load_source_tables(nrows=args.nrows)
    out_dir = args.tables_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    schema = pd.concat([schema_table(df, name) for name, df in tables.items()], ignore_index=True)
    schema.to_csv(out_dir / "schema.csv", index=False)

    for table, cols in VALUE_COUNTS_COLUMNS.items():
        for col in cols:
            write_value_counts(tables[table][col], f"{table}_{col}", out_dir)

    key_coverage(tables).to_csv(out_dir / "join_key_coverage.csv", index=False)

    print(f"Wrote schema audit outputs to {out_dir}/")


if __name__ == "__main__":
    main()
