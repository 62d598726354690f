from typing import Iterable


def assert_required_columns(df, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def assert_row_count_preserved(n_before: int, n_after: int, step: str) -> None:
    if n_before != n_after:
        raise ValueError(f"Join '{step}' changed the flight row count: {n_before} -> {n_after}")
