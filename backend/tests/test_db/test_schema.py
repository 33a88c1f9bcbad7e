"""Tests for DuckDB schema creation."""

from weather_risk.db.connection import get_memory_connection
from weather_risk.db.schema import create_all_tables

EXPECTED_TABLES = {"dim_variable_load", "fact_reading", "fact_variable_day"}


def _tables(conn) -> set[str]:
    tables = conn.execute(
        "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main'"
    ).fetchdf()
    return set(tables["table_name"].tolist())


def test_create_all_tables(db):
    assert _tables(db) == EXPECTED_TABLES


def test_create_tables_idempotent(db):
    """Running create_all_tables twice should not raise."""
    create_all_tables(db)
    assert _tables(db) == EXPECTED_TABLES


def test_memory_connection_has_tables():
    conn = get_memory_connection()
    try:
        assert _tables(conn) == EXPECTED_TABLES
    finally:
        conn.close()


def test_fact_variable_day_columns(db):
    cols = db.execute(
        "SELECT column_name FROM information_schema.columns "
        "WHERE table_name = 'fact_variable_day' ORDER BY ordinal_position"
    ).fetchdf()
    expected = [
        "variable_id", "obs_date", "reading_count", "avg_value", "min_value",
        "max_value", "derived_total", "category",
    ]
    assert cols["column_name"].tolist() == expected


def test_fact_reading_columns(db):
    cols = db.execute(
        "SELECT column_name FROM information_schema.columns "
        "WHERE table_name = 'fact_reading' ORDER BY ordinal_position"
    ).fetchdf()
    assert cols["column_name"].tolist() == [
        "variable_id", "obs_date", "seq", "obs_time", "raw_value", "value",
    ]
