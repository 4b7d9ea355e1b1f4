"""In-process gateway backed by DuckDB.

Plays the server role of the gateway contract: it assigns ids, cascades
deletes and re-checks the invariants it owns before writing.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from typing import Iterable, Iterator

import duckdb

from ..db import CatalogLoader, ScoringQueries, create_schema, get_connection
from ..errors import RemoteOperationError
from ..models import (
    CatalogField,
    ItemFieldDetails,
    LeadFieldDescriptor,
    PicklistOption,
    ScoringConfiguration,
    ScoringItem,
    ScoringValue,
)

logger = logging.getLogger(__name__)


@contextmanager
def _remote(operation: str) -> Iterator[None]:
    """Translate DuckDB failures into RemoteOperationError."""
    try:
        yield
    except duckdb.Error as e:
        logger.error(f"{operation} failed: {e}")
        raise RemoteOperationError(str(e)) from e


class DuckDBConfigurationGateway:
    def __init__(self, queries: ScoringQueries):
        self._queries = queries

    async def list(self) -> list[ScoringConfiguration]:
        with _remote("list configurations"):
            rows = self._queries.get_configurations()
        return [ScoringConfiguration.model_validate(row) for row in rows]

    async def get(self, configuration_id: str) -> ScoringConfiguration | None:
        with _remote("get configuration"):
            row = self._queries.get_configuration(configuration_id)
        return ScoringConfiguration.model_validate(row) if row else None

    async def save(self, record: ScoringConfiguration) -> str:
        if not (record.name or "").strip():
            raise RemoteOperationError("Configuration name is required")
        data = record.model_dump(mode="json")
        with _remote("save configuration"):
            if record.id is None:
                return self._queries.insert_configuration(data)
            if self._queries.get_configuration(record.id) is None:
                raise RemoteOperationError(f"Configuration '{record.id}' no longer exists")
            self._queries.update_configuration(data)
            return record.id

    async def delete(self, configuration_id: str) -> None:
        with _remote("delete configuration"):
            self._queries.delete_configuration(configuration_id)


class DuckDBItemGateway:
    def __init__(self, queries: ScoringQueries):
        self._queries = queries

    async def list_by_configuration(self, configuration_id: str) -> list[ScoringItem]:
        with _remote("list items"):
            rows = self._queries.get_items_for_configuration(configuration_id)
        return [ScoringItem.model_validate(row) for row in rows]

    async def get(self, item_id: str) -> ScoringItem | None:
        with _remote("get item"):
            row = self._queries.get_item(item_id)
        return ScoringItem.model_validate(row) if row else None

    async def next_order_index(self, configuration_id: str) -> int:
        with _remote("next order index"):
            return self._queries.get_next_order_index(configuration_id)

    async def save(self, record: ScoringItem) -> str:
        if not math.isfinite(record.point_cap):
            raise RemoteOperationError("Point cap must be a finite number")
        data = record.model_dump(mode="json")
        with _remote("save item"):
            if record.id is None:
                if not record.configuration_id or (
                    self._queries.get_configuration(record.configuration_id) is None
                ):
                    raise RemoteOperationError("The item's configuration does not exist")
                return self._queries.insert_item(data)
            if self._queries.get_item(record.id) is None:
                raise RemoteOperationError(f"Item '{record.id}' no longer exists")
            self._queries.update_item(data)
            return record.id

    async def delete(self, item_id: str) -> None:
        with _remote("delete item"):
            self._queries.delete_item(item_id)


class DuckDBValueGateway:
    def __init__(self, queries: ScoringQueries):
        self._queries = queries

    async def list_by_item(self, item_id: str) -> list[ScoringValue]:
        with _remote("list values"):
            rows = self._queries.get_values_for_item(item_id)
        return [ScoringValue.model_validate(row) for row in rows]

    async def save(self, record: ScoringValue) -> str:
        data = record.model_dump(mode="json")
        with _remote("save value"):
            item = self._queries.get_item(record.item_id) if record.item_id else None
            if item is None:
                raise RemoteOperationError("The value's item does not exist")
            if not math.isfinite(record.awarded_score):
                raise RemoteOperationError("Awarded score must be a finite number")
            if record.awarded_score > item["point_cap"]:
                raise RemoteOperationError(
                    f"Awarded score {record.awarded_score:g} exceeds the item's "
                    f"point cap {item['point_cap']:g}"
                )
            if record.id is None:
                return self._queries.insert_value(data)
            if self._queries.get_value(record.id) is None:
                raise RemoteOperationError(f"Value '{record.id}' no longer exists")
            self._queries.update_value(data)
            return record.id

    async def delete(self, value_id: str) -> None:
        with _remote("delete value"):
            self._queries.delete_value(value_id)


class DuckDBCatalogGateway:
    def __init__(self, queries: ScoringQueries):
        self._queries = queries

    async def list_eligible_fields(self) -> list[LeadFieldDescriptor]:
        with _remote("list catalog fields"):
            rows = self._queries.get_lead_fields()
        return [LeadFieldDescriptor.model_validate(row) for row in rows]

    async def get_field_and_options_for_item(self, item_id: str) -> ItemFieldDetails | None:
        with _remote("get item field details"):
            item = self._queries.get_item(item_id)
            if item is None:
                return None
            options = self._queries.get_field_options(item["field_api_name"] or "")
        return ItemFieldDetails(
            data_type=item["data_type"],
            point_cap=item["point_cap"] or 0.0,
            options=[PicklistOption.model_validate(option) for option in options],
        )


class DuckDBGateway:
    """Scoring gateway over a single DuckDB connection."""

    def __init__(self, conn: duckdb.DuckDBPyConnection | None = None):
        self.conn = conn or get_connection(":memory:")
        create_schema(self.conn)

        queries = ScoringQueries(self.conn)
        self.configurations = DuckDBConfigurationGateway(queries)
        self.items = DuckDBItemGateway(queries)
        self.values = DuckDBValueGateway(queries)
        self.catalog = DuckDBCatalogGateway(queries)

    @classmethod
    def open(cls, path: str = ":memory:") -> "DuckDBGateway":
        """Open (or create) a database at ``path``."""
        return cls(get_connection(path))

    def load_catalog(self, fields: Iterable[CatalogField]) -> int:
        """Replace the lead field catalog."""
        return CatalogLoader(self.conn).load_fields(fields)

    def close(self) -> None:
        self.conn.close()
