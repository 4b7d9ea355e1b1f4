"""SQL queries for scoring configuration data."""

from __future__ import annotations

import uuid
from typing import Any

import duckdb

CONFIGURATION_COLUMNS = ["id", "name", "description", "active"]
ITEM_COLUMNS = [
    "id",
    "configuration_id",
    "label",
    "field_api_name",
    "data_type",
    "point_cap",
    "order_index",
    "active",
    "description",
    "agent_question",
]
VALUE_COLUMNS = [
    "id",
    "item_id",
    "value_text",
    "picklist_option_api",
    "awarded_score",
    "exact_match",
    "active",
]


def new_id() -> str:
    """Generate a record id."""
    return uuid.uuid4().hex


class ScoringQueries:
    """SQL queries for configurations, items and values."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        self.conn = conn

    # ========== Configurations ==========

    def get_configurations(self) -> list[dict[str, Any]]:
        """Get all configurations ordered by name."""
        result = self.conn.execute(f"""
            SELECT {", ".join(CONFIGURATION_COLUMNS)}
            FROM scoring_configurations
            ORDER BY name, created_at
        """).fetchall()
        return self._to_dicts(result, CONFIGURATION_COLUMNS)

    def get_configuration(self, configuration_id: str) -> dict[str, Any] | None:
        """Get a configuration by id."""
        row = self.conn.execute(
            f"SELECT {', '.join(CONFIGURATION_COLUMNS)} FROM scoring_configurations WHERE id = ?",
            [configuration_id],
        ).fetchone()
        return self._to_dict(row, CONFIGURATION_COLUMNS) if row else None

    def insert_configuration(self, data: dict[str, Any]) -> str:
        configuration_id = new_id()
        self.conn.execute(
            """
            INSERT INTO scoring_configurations (id, name, description, active)
            VALUES (?, ?, ?, ?)
            """,
            [configuration_id, data["name"], data.get("description"), data["active"]],
        )
        return configuration_id

    def update_configuration(self, data: dict[str, Any]) -> None:
        self.conn.execute(
            """
            UPDATE scoring_configurations
            SET name = ?, description = ?, active = ?
            WHERE id = ?
            """,
            [data["name"], data.get("description"), data["active"], data["id"]],
        )

    def delete_configuration(self, configuration_id: str) -> None:
        """Delete a configuration with its items and their values."""
        self.conn.execute(
            """
            DELETE FROM scoring_values
            WHERE item_id IN (SELECT id FROM scoring_items WHERE configuration_id = ?)
            """,
            [configuration_id],
        )
        self.conn.execute(
            "DELETE FROM scoring_items WHERE configuration_id = ?", [configuration_id]
        )
        self.conn.execute(
            "DELETE FROM scoring_configurations WHERE id = ?", [configuration_id]
        )

    # ========== Items ==========

    def get_items_for_configuration(self, configuration_id: str) -> list[dict[str, Any]]:
        """Get the items of a configuration in display order."""
        result = self.conn.execute(
            f"""
            SELECT {", ".join(ITEM_COLUMNS)}
            FROM scoring_items
            WHERE configuration_id = ?
            ORDER BY order_index, label
            """,
            [configuration_id],
        ).fetchall()
        return self._to_dicts(result, ITEM_COLUMNS)

    def get_item(self, item_id: str) -> dict[str, Any] | None:
        """Get an item by id."""
        row = self.conn.execute(
            f"SELECT {', '.join(ITEM_COLUMNS)} FROM scoring_items WHERE id = ?",
            [item_id],
        ).fetchone()
        return self._to_dict(row, ITEM_COLUMNS) if row else None

    def get_next_order_index(self, configuration_id: str) -> int:
        """Next free ordering index within a configuration (starts at 1)."""
        row = self.conn.execute(
            "SELECT COALESCE(MAX(order_index), 0) + 1 FROM scoring_items WHERE configuration_id = ?",
            [configuration_id],
        ).fetchone()
        return int(row[0])

    def insert_item(self, data: dict[str, Any]) -> str:
        item_id = new_id()
        self.conn.execute(
            f"""
            INSERT INTO scoring_items ({", ".join(ITEM_COLUMNS)})
            VALUES ({", ".join("?" * len(ITEM_COLUMNS))})
            """,
            [item_id] + [data.get(column) for column in ITEM_COLUMNS[1:]],
        )
        return item_id

    def update_item(self, data: dict[str, Any]) -> None:
        # Ownership never changes, so configuration_id is not updated
        columns = ITEM_COLUMNS[2:]
        assignments = ", ".join(f"{column} = ?" for column in columns)
        self.conn.execute(
            f"UPDATE scoring_items SET {assignments} WHERE id = ?",
            [data.get(column) for column in columns] + [data["id"]],
        )

    def delete_item(self, item_id: str) -> None:
        """Delete an item and its values."""
        self.conn.execute("DELETE FROM scoring_values WHERE item_id = ?", [item_id])
        self.conn.execute("DELETE FROM scoring_items WHERE id = ?", [item_id])

    # ========== Values ==========

    def get_values_for_item(self, item_id: str) -> list[dict[str, Any]]:
        """Get the values of an item in creation order."""
        result = self.conn.execute(
            f"""
            SELECT {", ".join(VALUE_COLUMNS)}
            FROM scoring_values
            WHERE item_id = ?
            ORDER BY created_at, id
            """,
            [item_id],
        ).fetchall()
        return self._to_dicts(result, VALUE_COLUMNS)

    def get_value(self, value_id: str) -> dict[str, Any] | None:
        row = self.conn.execute(
            f"SELECT {', '.join(VALUE_COLUMNS)} FROM scoring_values WHERE id = ?",
            [value_id],
        ).fetchone()
        return self._to_dict(row, VALUE_COLUMNS) if row else None

    def insert_value(self, data: dict[str, Any]) -> str:
        value_id = new_id()
        self.conn.execute(
            f"""
            INSERT INTO scoring_values ({", ".join(VALUE_COLUMNS)})
            VALUES ({", ".join("?" * len(VALUE_COLUMNS))})
            """,
            [value_id] + [data.get(column) for column in VALUE_COLUMNS[1:]],
        )
        return value_id

    def update_value(self, data: dict[str, Any]) -> None:
        columns = VALUE_COLUMNS[2:]
        assignments = ", ".join(f"{column} = ?" for column in columns)
        self.conn.execute(
            f"UPDATE scoring_values SET {assignments} WHERE id = ?",
            [data.get(column) for column in columns] + [data["id"]],
        )

    def delete_value(self, value_id: str) -> None:
        self.conn.execute("DELETE FROM scoring_values WHERE id = ?", [value_id])

    # ========== Lead field catalog ==========

    def get_lead_fields(self) -> list[dict[str, Any]]:
        """Get all catalog fields in catalog order."""
        result = self.conn.execute("""
            SELECT api_name, label, data_type
            FROM lead_fields
            ORDER BY position, label
        """).fetchall()
        return [
            {"api_name": row[0], "label": row[1], "data_type": row[2]}
            for row in result
        ]

    def get_field_options(self, field_api_name: str) -> list[dict[str, Any]]:
        """Get the picklist options of a catalog field."""
        result = self.conn.execute(
            """
            SELECT value, label
            FROM lead_field_options
            WHERE field_api_name = ?
            ORDER BY position, value
            """,
            [field_api_name],
        ).fetchall()
        return [{"value": row[0], "label": row[1] or ""} for row in result]

    def _to_dicts(self, rows: list[tuple], columns: list[str]) -> list[dict[str, Any]]:
        return [self._to_dict(row, columns) for row in rows]

    def _to_dict(self, row: tuple, columns: list[str]) -> dict[str, Any]:
        return dict(zip(columns, row))
