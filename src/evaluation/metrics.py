from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.metrics import brier_score_loss, log_loss, mean_squared_error, roc_auc_score

from src.models.fitting import result_family


def information_criteria(result) -> Tuple[float, float]:
    """(AIC, BIC) from the log-likelihood.

    Linear models count the residual standard deviation as an estimated parameter,
    so values line up with the usual lm/logLik convention.
    """

    k = len(result.params) + (1 if result_family(result) == "linear" else 0)
    n = float(result.nobs)
    llf = float(result.llf)
    return -2.0 * llf + 2.0 * k, -2.0 * llf + k * np.log(n)


def linear_performance(result) -> Dict[str, float]:
    aic, bic = information_criteria(result)
    return {
        "aic": aic,
        "bic": bic,
        "r2": float(result.rsquared),
        "r2_adjusted": float(result.rsquared_adj),
        "rmse": float(np.sqrt(mean_squared_error(result.model.endog, result.fittedvalues))),
        "sigma": float(np.sqrt(result.ssr / result.df_resid)),
    }


def tjur_r2(y_true, y_prob) -> float:
    """Coefficient of discrimination: mean fitted probability of events minus non-events."""

    y = np.asarray(y_true, dtype=int)
    p = np.asarray(y_prob, dtype=float)
    if np.unique(y).size < 2:
        return np.nan
    return float(p[y == 1].mean() - p[y == 0].mean())


def compute_binary_metrics(y_true, y_prob) -> Dict[str, float]:
    y = np.asarray(y_true, dtype=int)
    p = np.asarray(y_prob, dtype=float)
    both_classes = np.unique(y).size >= 2
    return {
        "r2_tjur": tjur_r2(y, p),
        "rmse": float(np.sqrt(mean_squared_error(y, p))),
        "log_loss": float(log_loss(y, p, labels=[0, 1])),
        "roc_auc": float(roc_auc_score(y, p)) if both_classes else np.nan,
        "brier": float(brier_score_loss(y, p)),
        # Percentage correctly predicted: mean likelihood of the observed outcome.
        "pcp": float(np.mean(np.where(y == 1, p, 1.0 - p))),
    }


def logistic_performance(result) -> Dict[str, float]:
    aic, bic = information_criteria(result)
    y = np.asarray(result.model.endog, dtype=float)
    p = np.asarray(result.predict(), dtype=float)
    return {
        "aic": aic,
        "bic": bic,
        "r2_mcfadden": float(1.0 - result.llf / result.llnull),
        **compute_binary_metrics(y, p),
    }


def model_performance(result) -> Dict[str, float]:
    if result_family(result) == "linear":
        return linear_performance(result)
    return logistic_performance(result)


def _check_comparable(results: Mapping[str, object]) -> None:
    families = {result_family(r) for r in results.values()}
    if len(families) > 1:
        raise ValueError(f"Cannot compare models across families: {sorted(families)}")
    nobs = {int(r.nobs) for r in results.values()}
    if len(nobs) > 1:
        raise ValueError(f"Models were fitted on different numbers of observations: {sorted(nobs)}")


def compare_performance(results: Mapping[str, object], reference: Optional[str] = None) -> pd.DataFrame:
    """One row per model: performance metrics plus a BIC-approximated Bayes factor.

    ``bf`` is exp((BIC_reference - BIC_model) / 2), so the reference row is 1 and
    values above 1 favour the model over the reference. All models must come from
    the same family and be fitted on the same number of observations.
    """

    if not results:
        raise ValueError("No models to compare.")
    names = list(results)
    reference = reference or names[0]
    if reference not in results:
        raise ValueError(f"Reference model {reference!r} not among: {names}")

    _check_comparable(results)

    _, bic_ref = information_criteria(results[reference])
    rows = []
    for name in names:
        res = results[name]
        perf = model_performance(res)
        log_bf = (bic_ref - perf["bic"]) / 2.0
        # Large BIC gaps overflow to inf on the natural scale; log10_bf keeps the magnitude.
        with np.errstate(over="ignore"):
            bf = float(np.exp(log_bf))
        rows.append(
            {
                "model": name,
                "family": result_family(res),
                "nobs": int(res.nobs),
                "n_params": int(len(res.params)),
                **perf,
                "bf": bf,
                "log10_bf": float(log_bf / np.log(10.0)),
            }
        )
    return pd.DataFrame(rows)


def likelihood_ratio_tests(results: Mapping[str, object]) -> pd.DataFrame:
    """Sequential likelihood-ratio tests of each model against its predecessor."""

    _check_comparable(results)
    names = list(results)
    rows = []
    for prev_name, name in zip(names[:-1], names[1:]):
        prev, cur = results[prev_name], results[name]
        lr = 2.0 * (float(cur.llf) - float(prev.llf))
        df_diff = int(round(float(cur.df_model) - float(prev.df_model)))
        p_value = float(stats.chi2.sf(lr, df_diff)) if df_diff > 0 else np.nan
        rows.append(
            {
                "model": name,
                "compared_to": prev_name,
                "loglik": float(cur.llf),
                "loglik_previous": float(prev.llf),
                "lr_statistic": lr,
                "df_diff": df_diff,
                "p_value": p_value,
            }
        )
    return pd.DataFrame(
        rows,
        columns=["model", "compared_to", "loglik", "loglik_previous", "lr_statistic", "df_diff", "p_value"],
    )
