from __future__ import annotations

from typing import Iterable, Optional

import numpy as np
import pandas as pd

from src.data.validate import assert_required_columns


def summarize_numeric(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """One row per column: n, n_missing, mean, sd, min, quartiles, max."""

    cols = list(cols)
    assert_required_columns(df, cols)

    rows = []
    for col in cols:
        s = pd.to_numeric(df[col], errors="coerce")
        non_missing = s.dropna()
        if non_missing.empty:
            stats = dict.fromkeys(["mean", "sd", "min", "q25", "median", "q75", "max"], np.nan)
        else:
            stats = {
                "mean": float(non_missing.mean()),
                "sd": float(non_missing.std(ddof=1)) if len(non_missing) > 1 else np.nan,
                "min": float(non_missing.min()),
                "q25": float(non_missing.quantile(0.25)),
                "median": float(non_missing.median()),
                "q75": float(non_missing.quantile(0.75)),
                "max": float(non_missing.max()),
            }
        rows.append({"variable": col, "n": int(non_missing.size), "n_missing": int(s.isna().sum()), **stats})
    return pd.DataFrame(rows)


def summarize_by_group(
    df: pd.DataFrame,
    group_col: str,
    value_col: str,
    *,
    label_col: Optional[str] = None,
    indicator_col: Optional[str] = None,
) -> pd.DataFrame:
    """Per-group flight counts and the mean/median of ``value_col``.

    ``label_col`` carries a human-readable name alongside the group key (e.g.
    carrier -> carrier_name); ``indicator_col`` adds the group rate of a 0/1 column.
    """

    required = [group_col, value_col] + [c for c in (label_col, indicator_col) if c]
    assert_required_columns(df, required)

    grouped = df.groupby(group_col, sort=True, dropna=False)
    out = pd.DataFrame(
        {
            "n": grouped.size(),
            f"{value_col}_mean": grouped[value_col].mean(),
            f"{value_col}_median": grouped[value_col].median(),
        }
    )
    if indicator_col:
        out[f"{indicator_col}_rate"] = grouped[indicator_col].agg(
            lambda s: float(pd.to_numeric(s, errors="coerce").mean())
        )
    if label_col:
        out.insert(0, label_col, grouped[label_col].first())
    return out.reset_index()
