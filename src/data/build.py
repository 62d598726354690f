from __future__ import annotations

from typing import Dict, Tuple

import pandas as pd

from src.config import (
    AIRLINES_KEY,
    AIRPORTS_KEY,
    DATA_YEAR,
    FLIGHT_COLS,
    LATE_THRESHOLD_MINUTES,
    PLANE_COLS,
    PLANES_KEY,
    SOURCE_TABLES,
    WEATHER_COLS,
    WEATHER_KEYS,
)
from .coding import recode_late, season_from_month
from .validate import assert_required_columns, assert_row_count_preserved


ANALYSIS_COLS = [
    "year",
    "month",
    "day",
    "season",
    "dep_hour",
    "time_hour",
    "carrier",
    "carrier_name",
    "flight",
    "tailnum",
    "origin",
    "dest",
    "dest_name",
    "dep_delay",
    "arr_delay",
    "late",
    "air_time",
    "distance",
    *WEATHER_COLS,
    "plane_year",
    "plane_age",
    "seats",
    "engines",
]


def _to_utc_hour(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, utc=True)


def build_analysis_table(
    tables: Dict[str, pd.DataFrame],
    *,
    late_threshold: float = LATE_THRESHOLD_MINUTES,
) -> Tuple[pd.DataFrame, dict]:
    """Join the flight records to their lookups and derive the analysis columns.

    Every join is a many-to-one left join, so the flight row count is preserved
    until the explicit missing-outcome filter at the end.
    """

    missing_tables = [t for t in SOURCE_TABLES if t not in tables]
    if missing_tables:
        raise ValueError(f"Missing source tables: {missing_tables}")

    flights = tables["flights"]
    weather = tables["weather"]
    planes = tables["planes"]
    airlines = tables["airlines"]
    airports = tables["airports"]

    assert_required_columns(flights, FLIGHT_COLS)
    assert_required_columns(weather, WEATHER_KEYS + WEATHER_COLS)
    assert_required_columns(planes, [PLANES_KEY] + PLANE_COLS)
    assert_required_columns(airlines, [AIRLINES_KEY, "name"])
    assert_required_columns(airports, [AIRPORTS_KEY[1], "name"])

    decisions: dict = {
        "late_threshold_minutes": late_threshold,
        "joins": [],
        "row_filters": [],
    }

    df = flights[FLIGHT_COLS].copy()
    df["time_hour"] = _to_utc_hour(df["time_hour"])
    n_flights = len(df)

    # Weather: one observation per origin-hour. The raw table has a handful of
    # repeated hours around daylight-saving changes; keep the first.
    wx = weather[WEATHER_KEYS + WEATHER_COLS].copy()
    wx["time_hour"] = _to_utc_hour(wx["time_hour"])
    n_wx = len(wx)
    wx = wx.drop_duplicates(subset=WEATHER_KEYS, keep="first")
    df = df.merge(wx, on=WEATHER_KEYS, how="left")
    assert_row_count_preserved(n_flights, len(df), "weather")
    decisions["joins"].append(
        {
            "table": "weather",
            "keys": list(WEATHER_KEYS),
            "duplicate_keys_dropped": n_wx - len(wx),
            "unmatched_rows": int(df["temp"].isna().sum()),
        }
    )

    pl = planes[[PLANES_KEY] + PLANE_COLS].rename(columns={"year": "plane_year"})
    df = df.merge(pl, on=PLANES_KEY, how="left")
    assert_row_count_preserved(n_flights, len(df), "planes")
    decisions["joins"].append(
        {"table": "planes", "keys": [PLANES_KEY], "unmatched_rows": int(df["seats"].isna().sum())}
    )

    al = airlines[[AIRLINES_KEY, "name"]].rename(columns={"name": "carrier_name"})
    df = df.merge(al, on=AIRLINES_KEY, how="left")
    assert_row_count_preserved(n_flights, len(df), "airlines")
    decisions["joins"].append(
        {"table": "airlines", "keys": [AIRLINES_KEY], "unmatched_rows": int(df["carrier_name"].isna().sum())}
    )

    flights_key, airports_key = AIRPORTS_KEY
    ap = airports[[airports_key, "name"]].rename(columns={airports_key: flights_key, "name": "dest_name"})
    df = df.merge(ap, on=flights_key, how="left")
    assert_row_count_preserved(n_flights, len(df), "airports")
    decisions["joins"].append(
        {
            "table": "airports",
            "keys": [f"{flights_key}={airports_key}"],
            "unmatched_rows": int(df["dest_name"].isna().sum()),
        }
    )

    # Derived columns.
    df["dep_hour"] = pd.to_numeric(df["hour"], errors="coerce")
    df["plane_age"] = DATA_YEAR - pd.to_numeric(df["plane_year"], errors="coerce")
    df["late"] = recode_late(df["arr_delay"], threshold=late_threshold)
    df["season"] = season_from_month(df["month"])

    # Cancelled and diverted flights have no arrival delay; the analysis is about arrivals.
    n_before = len(df)
    df = df.loc[df["arr_delay"].notna()].reset_index(drop=True)
    decisions["row_filters"].append(
        {
            "rule": "drop_missing_outcome",
            "column": "arr_delay",
            "dropped_rows": n_before - len(df),
        }
    )

    return df[ANALYSIS_COLS], decisions
