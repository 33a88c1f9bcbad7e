"""DDL for the in-memory time-series store."""

import duckdb


def create_all_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Create all tables if they don't already exist.

    Fact rows are always replaced per variable inside one transaction, so the
    fact tables carry no primary key (a key deleted and re-inserted in the
    same transaction is rejected by DuckDB).
    """

    conn.execute("""
        CREATE TABLE IF NOT EXISTS dim_variable_load (
            variable_id         VARCHAR PRIMARY KEY,
            source_path         VARCHAR,
            status              VARCHAR NOT NULL,
            header_line         INTEGER,
            lines_scanned       INTEGER DEFAULT 0,
            records_accepted    INTEGER DEFAULT 0,
            skipped_malformed   INTEGER DEFAULT 0,
            skipped_non_numeric INTEGER DEFAULT 0,
            skipped_sentinel    INTEGER DEFAULT 0,
            days_loaded         INTEGER DEFAULT 0,
            first_obs_date      DATE,
            last_obs_date       DATE,
            error               VARCHAR,
            loaded_at           TIMESTAMP DEFAULT current_timestamp
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS fact_reading (
            variable_id VARCHAR NOT NULL,
            obs_date    DATE NOT NULL,
            seq         INTEGER NOT NULL,
            obs_time    VARCHAR,
            raw_value   DOUBLE NOT NULL,
            value       DOUBLE NOT NULL
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS fact_variable_day (
            variable_id   VARCHAR NOT NULL,
            obs_date      DATE NOT NULL,
            reading_count INTEGER NOT NULL,
            avg_value     DOUBLE NOT NULL,
            min_value     DOUBLE NOT NULL,
            max_value     DOUBLE NOT NULL,
            derived_total DOUBLE,
            category      VARCHAR
        )
    """)
