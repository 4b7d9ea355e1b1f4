"""Gateway contract and the DuckDB reference implementation."""

from .duckdb_gateway import DuckDBGateway
from .protocol import (
    CatalogGateway,
    ConfigurationGateway,
    ItemGateway,
    ScoringGateway,
    ValueGateway,
)

__all__ = [
    "CatalogGateway",
    "ConfigurationGateway",
    "DuckDBGateway",
    "ItemGateway",
    "ScoringGateway",
    "ValueGateway",
]
