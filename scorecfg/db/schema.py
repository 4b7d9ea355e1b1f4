"""DuckDB schema definitions."""

import duckdb


def get_connection(path: str = ":memory:") -> duckdb.DuckDBPyConnection:
    """Get a DuckDB connection."""
    return duckdb.connect(path)


def create_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create DuckDB tables for scoring configurations and the lead field catalog."""

    conn.execute("""
        CREATE TABLE IF NOT EXISTS scoring_configurations (
            id VARCHAR PRIMARY KEY,
            name VARCHAR NOT NULL,
            description VARCHAR,
            active BOOLEAN DEFAULT false,
            created_at TIMESTAMP DEFAULT current_timestamp
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS scoring_items (
            id VARCHAR PRIMARY KEY,
            configuration_id VARCHAR NOT NULL,
            label VARCHAR NOT NULL,
            field_api_name VARCHAR,
            data_type VARCHAR NOT NULL,
            point_cap DOUBLE NOT NULL DEFAULT 0 CHECK (point_cap >= 0),
            order_index INTEGER DEFAULT 1,
            active BOOLEAN DEFAULT true,
            description VARCHAR,
            agent_question VARCHAR
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS scoring_values (
            id VARCHAR PRIMARY KEY,
            item_id VARCHAR NOT NULL,
            value_text VARCHAR,
            picklist_option_api VARCHAR,
            awarded_score DOUBLE NOT NULL DEFAULT 0 CHECK (awarded_score >= 0),
            exact_match BOOLEAN DEFAULT false,
            active BOOLEAN DEFAULT true,
            created_at TIMESTAMP DEFAULT current_timestamp
        )
    """)

    # Lead field catalog
    conn.execute("""
        CREATE TABLE IF NOT EXISTS lead_fields (
            api_name VARCHAR PRIMARY KEY,
            label VARCHAR NOT NULL,
            data_type VARCHAR NOT NULL,
            position INTEGER
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS lead_field_options (
            field_api_name VARCHAR NOT NULL,
            value VARCHAR NOT NULL,
            label VARCHAR,
            position INTEGER,
            PRIMARY KEY(field_api_name, value)
        )
    """)

    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_items_configuration ON scoring_items(configuration_id)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_values_item ON scoring_values(item_id)"
    )
