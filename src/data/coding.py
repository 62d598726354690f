from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd


SEASON_BY_MONTH: Dict[int, str] = {
    12: "winter",
    1: "winter",
    2: "winter",
    3: "spring",
    4: "spring",
    5: "spring",
    6: "summer",
    7: "summer",
    8: "summer",
    9: "autumn",
    10: "autumn",
    11: "autumn",
}


def recode_late(arr_delay: pd.Series, *, threshold: float) -> pd.Series:
    """Recode arrival delay (minutes) to a late-arrival indicator in {0,1,NA}.

    - arr_delay > threshold maps to 1
    - arr_delay <= threshold maps to 0 (early arrivals included)
    - NaN stays NA (cancelled or diverted flights)
    """

    delay = pd.to_numeric(arr_delay, errors="coerce")
    out = pd.Series(pd.NA, index=arr_delay.index, dtype="Int64")
    observed = delay.notna()
    out.loc[observed & (delay > threshold)] = 1
    out.loc[observed & (delay <= threshold)] = 0
    return out


def season_from_month(month: pd.Series) -> pd.Series:
    """Map calendar months to season labels.

    Raises ValueError for values outside 1..12; missing months stay missing.
    """

    m = pd.to_numeric(month, errors="coerce")
    unexpected = m.loc[m.notna() & ~m.isin(list(SEASON_BY_MONTH))].unique()
    if len(unexpected) > 0:
        raise ValueError(f"Unexpected month values: {sorted(map(str, unexpected))}")

    return m.map(lambda v: SEASON_BY_MONTH[int(v)] if pd.notna(v) else np.nan).astype(object)


def summarize_missingness(df: pd.DataFrame) -> pd.DataFrame:
    """Return per-column missingness summary in stable column order."""

    n = len(df)
    rows = []
    for col in df.columns.astype(str).tolist():
        n_missing = int(df[col].isna().sum())
        missing_rate = round(n_missing / n, 6) if n else np.nan
        rows.append({"column": col, "n": n, "n_missing": n_missing, "missing_rate": missing_rate})
    return pd.DataFrame(rows)
