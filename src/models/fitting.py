from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd
from statsmodels.genmod.families import Binomial
from statsmodels.genmod.generalized_linear_model import GLM
from statsmodels.regression.linear_model import OLS

from src.data.validate import assert_required_columns

from .linear import fit_linear
from .logistic import fit_logistic
from .specs import ModelSpec


def sequence_variables(specs: Sequence[ModelSpec]) -> List[str]:
    out: List[str] = []
    for spec in specs:
        for v in spec.variables:
            if v not in out:
                out.append(v)
    return out


def model_frame(specs: Sequence[ModelSpec], data: pd.DataFrame) -> pd.DataFrame:
    """Complete-case frame over every variable used by a model sequence.

    Fitting all models of a sequence on the same rows keeps their likelihoods,
    information criteria and Bayes factors comparable.
    """

    if not specs:
        raise ValueError("Model sequence is empty.")
    cols = sequence_variables(specs)
    assert_required_columns(data, cols)

    frame = data[cols].dropna().copy()
    for c in cols:
        if pd.api.types.is_numeric_dtype(frame[c]):
            # Nullable integers (Int64) are not understood by the formula engine.
            frame[c] = frame[c].astype(float)
        else:
            frame[c] = frame[c].astype(str)
    if frame.empty:
        raise ValueError(f"No complete cases for variables: {cols}")
    return frame.reset_index(drop=True)


def result_family(result) -> str:
    """'linear' for OLS results, 'logistic' for binomial GLM results."""

    model = result.model
    if isinstance(model, OLS):
        return "linear"
    if isinstance(model, GLM) and isinstance(model.family, Binomial):
        return "logistic"
    raise ValueError(f"Unsupported model type: {type(model).__name__}")


def fit_model(spec: ModelSpec, data: pd.DataFrame):
    if spec.family == "linear":
        return fit_linear(spec, data)
    if spec.family == "logistic":
        return fit_logistic(spec, data)
    raise ValueError(f"Unknown model family: {spec.family}")


def fit_sequence(specs: Sequence[ModelSpec], data: pd.DataFrame) -> Dict[str, object]:
    """Fit each spec in order on the shared complete-case frame.

    Returns an insertion-ordered name -> results mapping.
    """

    families = {s.family for s in specs}
    if len(families) > 1:
        raise ValueError(f"A model sequence must use a single family; got {sorted(families)}")
    names = [s.name for s in specs]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate model names in sequence: {names}")

    frame = model_frame(specs, data)
    return {spec.name: fit_model(spec, frame) for spec in specs}
