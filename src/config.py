from pathlib import Path

from src.models.specs import ModelSpec

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
PROCESSED_DIR = DATA_DIR / "processed"

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
FIGURES_DIR = OUTPUTS_DIR / "figures"
TABLES_DIR = OUTPUTS_DIR / "tables"
LOGS_DIR = OUTPUTS_DIR / "logs"
REPORTS_DIR = OUTPUTS_DIR / "reports"

ANALYSIS_FILE = PROCESSED_DIR / "nycflights13_analysis.parquet"

# Dataset and experiment identifiers (used in outputs/ metadata)
DATASET_VERSION = "nycflights13_2013_v1"
EXPERIMENT_NAMESPACE = "regression_walkthrough_v1"

SOURCE_TABLES = ["flights", "weather", "airports", "airlines", "planes"]

# Join keys (flights-side column -> lookup-side column)
WEATHER_KEYS = ["origin", "time_hour"]
PLANES_KEY = "tailnum"
AIRLINES_KEY = "carrier"
AIRPORTS_KEY = ("dest", "faa")

FLIGHT_COLS = [
    "year",
    "month",
    "day",
    "dep_delay",
    "arr_delay",
    "carrier",
    "flight",
    "tailnum",
    "origin",
    "dest",
    "air_time",
    "distance",
    "hour",
    "time_hour",
]
WEATHER_COLS = ["temp", "dewp", "humid", "wind_dir", "wind_speed", "wind_gust", "precip", "pressure", "visib"]
PLANE_COLS = ["year", "seats", "engines"]

DATA_YEAR = 2013

# Arrivals more than 15 minutes behind schedule count as late (the usual on-time cutoff).
LATE_THRESHOLD_MINUTES = 15
RESPONSE_LINEAR = "arr_delay"
RESPONSE_LOGISTIC = "late"

SUMMARY_NUMERIC_COLS = [
    "dep_delay",
    "arr_delay",
    "air_time",
    "distance",
    "temp",
    "humid",
    "wind_speed",
    "precip",
    "visib",
    "plane_age",
]

CORRELATION_COLS = [
    "arr_delay",
    "dep_delay",
    "air_time",
    "distance",
    "dep_hour",
    "temp",
    "dewp",
    "humid",
    "wind_speed",
    "precip",
    "pressure",
    "visib",
]
CORRELATION_METHOD = "pearson"

CONF_LEVEL = 0.95

# Predictors fitted as treatment-coded factors (first level alphabetically is the reference).
CATEGORICAL_PREDICTORS = ("origin", "carrier", "season")

# Linear sequence: each model extends the previous one.
LINEAR_MODEL_SPECS = [
    ModelSpec(
        name="lm1_dep_delay",
        family="linear",
        response=RESPONSE_LINEAR,
        predictors=("dep_delay",),
        categorical=CATEGORICAL_PREDICTORS,
        description="Arrival delay explained by departure delay alone.",
    ),
    ModelSpec(
        name="lm2_distance",
        family="linear",
        response=RESPONSE_LINEAR,
        predictors=("dep_delay", "distance"),
        categorical=CATEGORICAL_PREDICTORS,
        description="Adds flight distance.",
    ),
    ModelSpec(
        name="lm3_origin",
        family="linear",
        response=RESPONSE_LINEAR,
        predictors=("dep_delay", "distance", "origin"),
        categorical=CATEGORICAL_PREDICTORS,
        description="Adds the origin airport as a categorical predictor.",
    ),
    ModelSpec(
        name="lm4_weather",
        family="linear",
        response=RESPONSE_LINEAR,
        predictors=("dep_delay", "distance", "origin", "wind_speed", "precip", "visib"),
        categorical=CATEGORICAL_PREDICTORS,
        description="Adds hourly weather at the origin airport.",
    ),
    ModelSpec(
        name="lm5_interaction",
        family="linear",
        response=RESPONSE_LINEAR,
        predictors=("dep_delay", "distance", "origin", "wind_speed", "precip", "visib"),
        interactions=(("dep_delay", "origin"),),
        categorical=CATEGORICAL_PREDICTORS,
        description="Lets the departure-delay slope differ by origin airport.",
    ),
]

# Logistic sequence on the binary late-arrival indicator.
LOGISTIC_MODEL_SPECS = [
    ModelSpec(
        name="glm1_dep_hour",
        family="logistic",
        response=RESPONSE_LOGISTIC,
        predictors=("dep_hour",),
        categorical=CATEGORICAL_PREDICTORS,
        description="Late arrival explained by scheduled departure hour.",
    ),
    ModelSpec(
        name="glm2_origin",
        family="logistic",
        response=RESPONSE_LOGISTIC,
        predictors=("dep_hour", "origin"),
        categorical=CATEGORICAL_PREDICTORS,
        description="Adds the origin airport.",
    ),
    ModelSpec(
        name="glm3_weather",
        family="logistic",
        response=RESPONSE_LOGISTIC,
        predictors=("dep_hour", "origin", "wind_speed", "precip", "visib"),
        categorical=CATEGORICAL_PREDICTORS,
        description="Adds hourly weather at the origin airport.",
    ),
    ModelSpec(
        name="glm4_interaction",
        family="logistic",
        response=RESPONSE_LOGISTIC,
        predictors=("dep_hour", "origin", "wind_speed", "precip", "visib"),
        interactions=(("dep_hour", "origin"),),
        categorical=CATEGORICAL_PREDICTORS,
        description="Lets the hour-of-day effect differ by origin airport.",
    ),
]
