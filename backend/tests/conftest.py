"""Shared test fixtures."""

from pathlib import Path

import duckdb
import pytest

from weather_risk.db.schema import create_all_tables
from weather_risk.store import TimeSeriesStore

PREAMBLE = [
    "Title:,Time Series Area-Averaged",
    "User Start Date:,2015-01-01T00:00:00Z",
    "User End Date:,2025-01-01T23:59:59Z",
    "Bounding Box:,\"-74.0,40.7,-73.9,40.8\"",
    "Fill Value (mean_GLDAS_NOAH025_3H_2_1_var):,-9999",
    "",
]

COLUMNS = {
    "precipitation": "mean_GLDAS_NOAH025_3H_2_1_Rainf_f_tavg",
    "wind_speed": "mean_GLDAS_NOAH025_3H_2_1_Wind_f_inst",
    "humidity": "mean_GLDAS_NOAH025_3H_2_1_Qair_f_inst",
    "max_temp": "mean_GLDAS_NOAH025_3H_2_1_Tair_f_inst",
    "min_temp": "mean_GLDAS_NOAH025_3H_2_1_Tair_f_inst",
}


def gldas_lines(variable_id: str, rows: list[tuple[str, object]]) -> list[str]:
    """Lines of a GLDAS export: preamble, header, then time,value rows."""
    lines = list(PREAMBLE)
    lines.append(f"time,{COLUMNS[variable_id]}")
    lines.extend(f"{t},{v}" for t, v in rows)
    return lines


@pytest.fixture
def db():
    """In-memory DuckDB with all tables created."""
    conn = duckdb.connect(":memory:")
    create_all_tables(conn)
    yield conn
    conn.close()


@pytest.fixture
def store():
    """Empty in-memory store."""
    s = TimeSeriesStore()
    yield s
    s.close()


@pytest.fixture
def write_gldas(tmp_path):
    """Factory writing a GLDAS-style CSV to tmp_path and returning its path."""
    def _write(variable_id: str, rows: list[tuple[str, object]], name: str | None = None) -> Path:
        path = tmp_path / (name or f"{variable_id}.csv")
        path.write_text("\n".join(gldas_lines(variable_id, rows)) + "\n")
        return path
    return _write


@pytest.fixture
def rain_rows() -> list[tuple[str, object]]:
    """Three days of 3-hourly precipitation rates (kg m-2 s-1).

    2024-01-01 has two readings, 2024-01-02 only a missing value,
    2024-01-03 one reading of exactly 0.
    """
    return [
        ("2024-01-01 00:00:00", 0.0001),
        ("2024-01-01 03:00:00", 0.0002),
        ("2024-01-02 00:00:00", -9999),
        ("2024-01-03 00:00:00", 0),
    ]


@pytest.fixture
def wind_rows() -> list[tuple[str, object]]:
    """Two days in January 2024 and one in February, m/s."""
    return [
        ("2024-01-05 00:00:00", 4.0),
        ("2024-01-05 03:00:00", 8.0),
        ("2024-01-06 00:00:00", 2.0),
        ("2024-02-01 00:00:00", 10.0),
    ]


@pytest.fixture
def temp_rows() -> list[tuple[str, object]]:
    """March 15 for 2015-2024, in Kelvin, warming by one degree per year."""
    rows = []
    for i, year in enumerate(range(2015, 2025)):
        rows.append((f"{year}-03-15 00:00:00", 273.15 + i))
        rows.append((f"{year}-03-15 12:00:00", 283.15 + i))
    return rows


@pytest.fixture
def loaded_store(store, write_gldas, rain_rows, wind_rows, temp_rows):
    """Store with precipitation, wind_speed, max_temp and min_temp loaded."""
    store.load_variable("precipitation", write_gldas("precipitation", rain_rows))
    store.load_variable("wind_speed", write_gldas("wind_speed", wind_rows))
    temp_path = write_gldas("max_temp", temp_rows, name="temperature.csv")
    store.load_variable("max_temp", temp_path)
    store.load_variable("min_temp", temp_path)
    return store
