"""DuckDB connection management."""

import duckdb

from weather_risk.db.schema import create_all_tables


def get_memory_connection() -> duckdb.DuckDBPyConnection:
    """Return an in-memory DuckDB connection with all tables created.

    Nothing is persisted; indices are rebuilt from the source files at start.
    """
    conn = duckdb.connect(":memory:")
    create_all_tables(conn)
    return conn
