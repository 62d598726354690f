from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

FAMILIES = ("linear", "logistic")


@dataclass(frozen=True)
class ModelSpec:
    """Formula-level description of one regression model.

    Predictors named in ``categorical`` are written as ``C(name)`` so the formula
    engine treatment-codes them even when the column is stored as numbers.
    """

    name: str
    family: str
    response: str
    predictors: Tuple[str, ...]
    interactions: Tuple[Tuple[str, str], ...] = ()
    categorical: Tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        if self.family not in FAMILIES:
            raise ValueError(f"Unknown model family: {self.family!r}; expected one of {FAMILIES}.")
        if not self.predictors:
            raise ValueError(f"Model {self.name!r} has no predictors.")
        if self.response in self.predictors:
            raise ValueError(f"Model {self.name!r} uses its response {self.response!r} as a predictor.")
        for a, b in self.interactions:
            missing = [v for v in (a, b) if v not in self.predictors]
            if missing:
                raise ValueError(
                    f"Interaction {a}:{b} in model {self.name!r} references non-predictor(s): {missing}"
                )

    def term(self, name: str) -> str:
        return f"C({name})" if name in self.categorical else name

    @property
    def formula(self) -> str:
        terms = [self.term(p) for p in self.predictors]
        terms += [f"{self.term(a)}:{self.term(b)}" for a, b in self.interactions]
        return f"{self.response} ~ " + " + ".join(terms)

    @property
    def variables(self) -> Tuple[str, ...]:
        """Response first, then predictors in declaration order (no duplicates)."""

        seen = [self.response]
        for v in self.predictors:
            if v not in seen:
                seen.append(v)
        return tuple(seen)
