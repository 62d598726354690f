from typing import Dict, Optional

import pandas as pd


def load_source_tables(nrows: Optional[int] = None) -> Dict[str, pd.DataFrame]:
    """Return copies of the bundled nycflights13 tables keyed by table name.

    ``nrows`` keeps only the first N flights (deterministic head); lookup tables are
    always loaded in full so joins stay complete.
    """

    import nycflights13

    flights = nycflights13.flights
    if nrows is not None:
        flights = flights.head(nrows)

    return {
        "flights": flights.copy(),
        "weather": nycflights13.weather.copy(),
        "airports": nycflights13.airports.copy(),
        "airlines": nycflights13.airlines.copy(),
        "planes": nycflights13.planes.copy(),
    }
