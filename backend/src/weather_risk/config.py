import os
from pathlib import Path

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
DATA_DIR = Path(os.environ.get("WEATHER_RISK_DATA_DIR", PROJECT_ROOT / "data"))

# GLDAS 3-hourly exports, one file per source column
VARIABLE_FILES = {
    "precipitation": DATA_DIR / "Precipitation Data 2015-2025.csv",
    "wind_speed": DATA_DIR / "Wind Data 2015-2025.csv",
    "humidity": DATA_DIR / "Humidity Data 2015-2025.csv",
    "max_temp": DATA_DIR / "Temperature Data 2015-2025.csv",
    "min_temp": DATA_DIR / "Temperature Data 2015-2025.csv",
}

# Ingestion
TIME_COLUMN = "time"
SENTINEL_VALUE = -9999.0
LOAD_WORKERS = 4

# Trend analysis
MIN_TREND_SAMPLE = 10
STABLE_TREND_POINTS = 2.0

# Histogram bin count bounds
MIN_HISTOGRAM_BINS = 10
MAX_HISTOGRAM_BINS = 20
VALUES_PER_BIN = 5

# Monthly rollups: a day counts as rainy / windy above these
RAINY_DAY_MM = 0.1
WINDY_DAY_MS = 5.5

# HTTP range queries
MAX_RANGE_DAYS = 365
