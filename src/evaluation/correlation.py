from __future__ import annotations

from itertools import combinations
from typing import Iterable

import numpy as np
import pandas as pd
from scipy import stats

from src.data.validate import assert_required_columns

METHODS = ("pearson", "spearman")


def _numeric_frame(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    cols = list(cols)
    assert_required_columns(df, cols)
    return df[cols].apply(pd.to_numeric, errors="coerce").astype(float)


def correlation_matrix(df: pd.DataFrame, cols: Iterable[str], method: str = "pearson") -> pd.DataFrame:
    """Square correlation matrix over pairwise-complete observations."""

    if method not in METHODS:
        raise ValueError(f"Unknown correlation method: {method}")
    return _numeric_frame(df, cols).corr(method=method)


def tidy_correlations(df: pd.DataFrame, cols: Iterable[str], method: str = "pearson") -> pd.DataFrame:
    """Long-form correlations: one row per unordered pair, strongest first."""

    if method not in METHODS:
        raise ValueError(f"Unknown correlation method: {method}")
    num = _numeric_frame(df, cols)
    test = stats.pearsonr if method == "pearson" else stats.spearmanr

    rows = []
    for a, b in combinations(num.columns.tolist(), 2):
        pair = num[[a, b]].dropna()
        n = len(pair)
        r = np.nan
        p_value = np.nan
        # Constant columns have no defined correlation.
        if n >= 2 and pair[a].nunique() > 1 and pair[b].nunique() > 1:
            res = test(pair[a].to_numpy(), pair[b].to_numpy())
            r, p_value = float(res[0]), float(res[1])
        rows.append({"var1": a, "var2": b, "method": method, "r": r, "n": n, "p_value": p_value})

    out = pd.DataFrame(rows, columns=["var1", "var2", "method", "r", "n", "p_value"])
    if out.empty:
        return out
    order = out["r"].abs().sort_values(ascending=False, na_position="last", kind="mergesort").index
    return out.loc[order].reset_index(drop=True)
