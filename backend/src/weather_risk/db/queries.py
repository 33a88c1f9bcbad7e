"""Typed query functions for the in-memory time-series store."""

from __future__ import annotations

from datetime import date, datetime

import duckdb
import pandas as pd

from weather_risk.variables import SampleField

# Daily aggregate field -> fact_variable_day column
SAMPLE_COLUMNS = {
    SampleField.AVERAGE: "avg_value",
    SampleField.MIN: "min_value",
    SampleField.MAX: "max_value",
    SampleField.DERIVED_TOTAL: "derived_total",
}

_DAY_SELECT = """
    SELECT obs_date, reading_count, avg_value, min_value, max_value, derived_total, category
    FROM fact_variable_day
"""


# ---------------------------------------------------------------------------
# dim_variable_load
# ---------------------------------------------------------------------------

def upsert_variable_load(conn: duckdb.DuckDBPyConnection, row: dict) -> None:
    """Insert or replace the load status row for a variable."""
    conn.execute("""
        INSERT OR REPLACE INTO dim_variable_load (
            variable_id, source_path, status, header_line, lines_scanned,
            records_accepted, skipped_malformed, skipped_non_numeric,
            skipped_sentinel, days_loaded, first_obs_date, last_obs_date,
            error, loaded_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, [
        row["variable_id"],
        row.get("source_path"),
        row["status"],
        row.get("header_line"),
        row.get("lines_scanned", 0),
        row.get("records_accepted", 0),
        row.get("skipped_malformed", 0),
        row.get("skipped_non_numeric", 0),
        row.get("skipped_sentinel", 0),
        row.get("days_loaded", 0),
        row.get("first_obs_date"),
        row.get("last_obs_date"),
        row.get("error"),
        row.get("loaded_at", datetime.now()),
    ])


def get_variable_load(conn: duckdb.DuckDBPyConnection, variable_id: str) -> dict | None:
    """Fetch the load status row for a variable."""
    result = conn.execute(
        "SELECT * FROM dim_variable_load WHERE variable_id = ?", [variable_id]
    ).fetchdf()
    if result.empty:
        return None
    return result.iloc[0].to_dict()


def get_all_variable_loads(conn: duckdb.DuckDBPyConnection) -> list[dict]:
    result = conn.execute(
        "SELECT * FROM dim_variable_load ORDER BY variable_id"
    ).fetchdf()
    if result.empty:
        return []
    return result.to_dict("records")


# ---------------------------------------------------------------------------
# fact_reading
# ---------------------------------------------------------------------------

def replace_readings(
    conn: duckdb.DuckDBPyConnection,
    variable_id: str,
    df: pd.DataFrame,
) -> int:
    """Replace every reading of a variable with the rows of a DataFrame.

    Expected columns: obs_date, obs_time, raw_value, value (in file order).
    Returns count of rows inserted.
    """
    conn.execute("DELETE FROM fact_reading WHERE variable_id = ?", [variable_id])
    if df.empty:
        return 0

    records = df.copy()
    records["variable_id"] = variable_id
    records["seq"] = range(len(records))

    cols = ["variable_id", "obs_date", "seq", "obs_time", "raw_value", "value"]
    records = records[cols]

    conn.execute("INSERT INTO fact_reading SELECT * FROM records")
    return len(records)


def get_readings(
    conn: duckdb.DuckDBPyConnection,
    variable_id: str,
    obs_date: date,
) -> list[tuple]:
    """Return (obs_time, raw_value, value) rows for one day in file order."""
    return conn.execute("""
        SELECT obs_time, raw_value, value
        FROM fact_reading
        WHERE variable_id = ? AND obs_date = ?
        ORDER BY seq
    """, [variable_id, obs_date]).fetchall()


# ---------------------------------------------------------------------------
# fact_variable_day
# ---------------------------------------------------------------------------

def replace_daily_aggregates(
    conn: duckdb.DuckDBPyConnection,
    variable_id: str,
    df: pd.DataFrame,
) -> int:
    """Replace every daily aggregate of a variable.

    Expected columns: obs_date, reading_count, average, min, max,
                      derived_total, category
    Returns count of rows inserted.
    """
    conn.execute("DELETE FROM fact_variable_day WHERE variable_id = ?", [variable_id])
    if df.empty:
        return 0

    records = df.rename(columns={
        "average": "avg_value",
        "min": "min_value",
        "max": "max_value",
    })
    records["variable_id"] = variable_id

    cols = [
        "variable_id", "obs_date", "reading_count", "avg_value", "min_value",
        "max_value", "derived_total", "category",
    ]
    records = records[cols]

    conn.execute("INSERT INTO fact_variable_day SELECT * FROM records")
    return len(records)


def get_daily_row(
    conn: duckdb.DuckDBPyConnection,
    variable_id: str,
    obs_date: date,
) -> tuple | None:
    """Fetch one day's aggregate row, or None if the day has no data."""
    return conn.execute(
        _DAY_SELECT + " WHERE variable_id = ? AND obs_date = ?",
        [variable_id, obs_date],
    ).fetchone()


def get_daily_rows(
    conn: duckdb.DuckDBPyConnection,
    variable_id: str,
    start_date: date,
    end_date: date,
) -> list[tuple]:
    """Fetch aggregate rows for an inclusive date range, ordered by date."""
    return conn.execute(
        _DAY_SELECT + """
        WHERE variable_id = ?
          AND obs_date BETWEEN ? AND ?
        ORDER BY obs_date
        """,
        [variable_id, start_date, end_date],
    ).fetchall()


def get_daily_frame(
    conn: duckdb.DuckDBPyConnection,
    variable_id: str,
    field: SampleField,
) -> pd.DataFrame:
    """All days of a variable as (obs_date, value) for one aggregate field."""
    column = SAMPLE_COLUMNS[field]
    return conn.execute(f"""
        SELECT obs_date, {column} AS value
        FROM fact_variable_day
        WHERE variable_id = ?
          AND {column} IS NOT NULL
        ORDER BY obs_date
    """, [variable_id]).fetchdf()


def get_day_of_year_values(
    conn: duckdb.DuckDBPyConnection,
    variable_id: str,
    field: SampleField,
    month: int,
    day: int,
    start_year: int | None = None,
    end_year: int | None = None,
) -> list[tuple]:
    """Return (year, value) for one calendar day across all loaded years."""
    column = SAMPLE_COLUMNS[field]
    params: list = [variable_id, month, day]
    year_filter = ""
    if start_year is not None:
        year_filter += " AND YEAR(obs_date) >= ?"
        params.append(start_year)
    if end_year is not None:
        year_filter += " AND YEAR(obs_date) <= ?"
        params.append(end_year)

    return conn.execute(f"""
        SELECT YEAR(obs_date) AS year, {column} AS value
        FROM fact_variable_day
        WHERE variable_id = ?
          AND MONTH(obs_date) = ?
          AND DAY(obs_date) = ?
          AND {column} IS NOT NULL
          {year_filter}
        ORDER BY year
    """, params).fetchall()
