import pandas as pd
import statsmodels.formula.api as smf

from .specs import ModelSpec


def fit_linear(spec: ModelSpec, data: pd.DataFrame):
    """Ordinary least squares fit of ``spec.formula``; returns statsmodels RegressionResults."""

    if spec.family != "linear":
        raise ValueError(f"fit_linear expects a linear spec; {spec.name!r} is {spec.family!r}.")
    return smf.ols(spec.formula, data=data).fit()
