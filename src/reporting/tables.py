from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

P_VALUE_COLS = ("p_value",)


def format_p_value(p: float, threshold: float = 0.001) -> str:
    if p is None or pd.isna(p):
        return ""
    if p < threshold:
        return f"<{threshold:g}"
    return f"{p:.3f}"


def format_table(df: pd.DataFrame, digits: int = 3, p_value_cols: Iterable[str] = P_VALUE_COLS) -> pd.DataFrame:
    """Display copy of a results table: floats rounded, p-values rendered as text."""

    out = df.copy()
    p_cols = [c for c in p_value_cols if c in out.columns]
    for col in out.columns:
        if col in p_cols:
            out[col] = out[col].map(format_p_value)
        elif pd.api.types.is_float_dtype(out[col]):
            out[col] = out[col].round(digits)
    return out.replace({np.nan: ""})
