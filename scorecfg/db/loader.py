"""Load the lead field catalog into DuckDB."""

from __future__ import annotations

import logging
from typing import Iterable

import duckdb

from ..models import CatalogField

logger = logging.getLogger(__name__)


class CatalogLoader:
    """Load catalog fields and their picklist options into DuckDB."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        self.conn = conn

    def load_fields(self, fields: Iterable[CatalogField]) -> int:
        """Replace the catalog with ``fields``.

        Returns:
            Number of fields loaded.
        """
        self.conn.execute("DELETE FROM lead_field_options")
        self.conn.execute("DELETE FROM lead_fields")

        count = 0
        seen: set[str] = set()
        for position, field in enumerate(fields):
            if field.api_name in seen:
                logger.debug(f"Skipping duplicate catalog field: {field.api_name}")
                continue
            seen.add(field.api_name)
            self._insert_field(field, position)
            count += 1

        logger.info(f"Loaded {count} catalog fields")
        return count

    def _insert_field(self, field: CatalogField, position: int) -> None:
        self.conn.execute(
            "INSERT INTO lead_fields (api_name, label, data_type, position) VALUES (?, ?, ?, ?)",
            [field.api_name, field.label, field.data_type.value, position],
        )
        option_values: set[str] = set()
        for option_position, option in enumerate(field.options):
            if option.value in option_values:
                continue
            option_values.add(option.value)
            self.conn.execute(
                """
                INSERT INTO lead_field_options (field_api_name, value, label, position)
                VALUES (?, ?, ?, ?)
                """,
                [field.api_name, option.value, option.label, option_position],
            )
