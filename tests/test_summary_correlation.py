import numpy as np
import pandas as pd
import pytest

from src.evaluation.correlation import correlation_matrix, tidy_correlations
from src.evaluation.summary import summarize_by_group, summarize_numeric


@pytest.fixture
def frame() -> pd.DataFrame:
    rng = np.random.default_rng(7)
    n = 200
    dep = rng.normal(10, 30, size=n)
    return pd.DataFrame(
        {
            "dep_delay": dep,
            "arr_delay": dep * 1.0 + rng.normal(0, 5, size=n),
            "noise": rng.normal(size=n),
            "constant": np.ones(n),
            "carrier": np.where(np.arange(n) % 2 == 0, "UA", "AA"),
            "carrier_name": np.where(np.arange(n) % 2 == 0, "United", "American"),
            "late": pd.array((dep > 15).astype(int), dtype="Int64"),
        }
    )


def test_correlation_matrix_symmetric_unit_diagonal(frame):
    corr = correlation_matrix(frame, ["dep_delay", "arr_delay", "noise"])
    assert corr.shape == (3, 3)
    assert np.allclose(np.diag(corr.to_numpy()), 1.0)
    assert np.allclose(corr.to_numpy(), corr.to_numpy().T)
    assert corr.loc["dep_delay", "arr_delay"] > 0.9


def test_correlation_matrix_rejects_unknown_method(frame):
    with pytest.raises(ValueError):
        correlation_matrix(frame, ["dep_delay", "arr_delay"], method="kendall-ish")


def test_tidy_correlations_sorted_and_tested(frame):
    tidy = tidy_correlations(frame, ["noise", "dep_delay", "arr_delay", "constant"])
    # Four variables give six unordered pairs.
    assert len(tidy) == 6
    first = tidy.iloc[0]
    assert {first["var1"], first["var2"]} == {"dep_delay", "arr_delay"}
    assert first["p_value"] < 1e-10
    assert first["n"] == 200
    assert tidy.loc[(tidy["var1"] == "constant") | (tidy["var2"] == "constant"), "r"].isna().all()

    r = tidy["r"].dropna().abs()
    assert r.is_monotonic_decreasing


def test_tidy_correlations_spearman(frame):
    tidy = tidy_correlations(frame, ["dep_delay", "arr_delay"], method="spearman")
    assert tidy.loc[0, "method"] == "spearman"
    assert tidy.loc[0, "r"] > 0.9


def test_pairwise_complete_counts(frame):
    frame.loc[:19, "noise"] = np.nan
    tidy = tidy_correlations(frame, ["dep_delay", "noise"])
    assert tidy.loc[0, "n"] == 180


def test_summarize_numeric(frame):
    frame.loc[:4, "noise"] = np.nan
    out = summarize_numeric(frame, ["dep_delay", "noise"]).set_index("variable")
    assert out.loc["noise", "n"] == 195
    assert out.loc["noise", "n_missing"] == 5
    assert out.loc["dep_delay", "min"] <= out.loc["dep_delay", "median"] <= out.loc["dep_delay", "max"]
    assert out.loc["dep_delay", "mean"] == pytest.approx(frame["dep_delay"].mean())


def test_summarize_by_group(frame):
    out = summarize_by_group(frame, "carrier", "arr_delay", label_col="carrier_name", indicator_col="late")
    assert out["carrier"].tolist() == ["AA", "UA"]
    assert out["carrier_name"].tolist() == ["American", "United"]
    assert out["n"].tolist() == [100, 100]
    assert out["late_rate"].between(0, 1).all()


def test_summaries_require_columns(frame):
    with pytest.raises(ValueError):
        summarize_numeric(frame, ["missing_col"])
    with pytest.raises(ValueError):
        summarize_by_group(frame, "carrier", "missing_col")


def test_two_complete_pairs_give_a_correlation():
    df = pd.DataFrame({"a": [1.0, 2.0, np.nan, 4.0], "b": [3.0, 5.0, 7.0, np.nan], "c": [np.nan] * 3 + [1.0]})
    tidy = tidy_correlations(df, ["a", "b", "c"]).set_index(["var1", "var2"])
    assert tidy.loc[("a", "b"), "n"] == 2
    assert tidy.loc[("a", "b"), "r"] == pytest.approx(1.0)
    # A single shared observation leaves the pair undefined.
    assert tidy.loc[("a", "c"), "n"] == 1
    assert np.isnan(tidy.loc[("a", "c"), "r"])
