import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

from .specs import ModelSpec


def fit_logistic(spec: ModelSpec, data: pd.DataFrame):
    """Binomial GLM (logit link) fit of ``spec.formula``; returns statsmodels GLMResults.

    The response must be coded 0/1. Perfect separation and non-convergence are
    reported by statsmodels and are not handled here.
    """

    if spec.family != "logistic":
        raise ValueError(f"fit_logistic expects a logistic spec; {spec.name!r} is {spec.family!r}.")
    observed = set(pd.unique(data[spec.response].dropna()).tolist())
    if not observed <= {0, 1}:
        raise ValueError(f"Response {spec.response} must be binary {{0,1}}; observed values: {sorted(observed)}")
    return smf.glm(spec.formula, data=data, family=sm.families.Binomial()).fit()
