from __future__ import annotations

import numpy as np
import pandas as pd

from src.evaluation.metrics import information_criteria

from .fitting import result_family

TIDY_COLUMNS = ["term", "estimate", "std_error", "statistic", "p_value", "conf_low", "conf_high"]


def tidy_model(result, conf_level: float = 0.95, exponentiate: bool = False) -> pd.DataFrame:
    """Row-per-term coefficient table.

    With ``exponentiate=True`` the estimate and confidence bounds are reported on
    the exponentiated scale (odds ratios for a logit link); std_error, statistic
    and p_value stay on the link scale.
    """

    if not 0.0 < conf_level < 1.0:
        raise ValueError(f"conf_level must be in (0, 1); got {conf_level}")

    ci = result.conf_int(alpha=1.0 - conf_level)
    ci = pd.DataFrame(np.asarray(ci, dtype=float), index=result.params.index, columns=["conf_low", "conf_high"])
    out = pd.DataFrame(
        {
            "term": result.params.index.astype(str),
            "estimate": np.asarray(result.params, dtype=float),
            "std_error": np.asarray(result.bse, dtype=float),
            "statistic": np.asarray(result.tvalues, dtype=float),
            "p_value": np.asarray(result.pvalues, dtype=float),
            "conf_low": ci["conf_low"].to_numpy(),
            "conf_high": ci["conf_high"].to_numpy(),
        }
    )
    if exponentiate:
        for col in ["estimate", "conf_low", "conf_high"]:
            out[col] = np.exp(out[col])
    return out[TIDY_COLUMNS].reset_index(drop=True)


def odds_ratio_table(result, conf_level: float = 0.95) -> pd.DataFrame:
    if result_family(result) != "logistic":
        raise ValueError("Odds ratios are only defined for logistic models.")
    out = tidy_model(result, conf_level=conf_level, exponentiate=True)
    return out.rename(columns={"estimate": "odds_ratio"})


def glance_model(result) -> pd.DataFrame:
    """One-row model summary (fit statistics, information criteria, sample size)."""

    aic, bic = information_criteria(result)
    if result_family(result) == "linear":
        row = {
            "r_squared": float(result.rsquared),
            "adj_r_squared": float(result.rsquared_adj),
            "sigma": float(np.sqrt(result.ssr / result.df_resid)),
            "statistic": float(result.fvalue),
            "p_value": float(result.f_pvalue),
            "df": int(round(float(result.df_model))),
            "loglik": float(result.llf),
            "aic": aic,
            "bic": bic,
            "deviance": float(result.ssr),
            "df_residual": int(round(float(result.df_resid))),
            "nobs": int(result.nobs),
        }
    else:
        row = {
            "null_deviance": float(result.null_deviance),
            "df_null": int(result.nobs) - 1,
            "loglik": float(result.llf),
            "aic": aic,
            "bic": bic,
            "deviance": float(result.deviance),
            "df_residual": int(round(float(result.df_resid))),
            "nobs": int(result.nobs),
        }
    return pd.DataFrame([row])
