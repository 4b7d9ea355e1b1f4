"""DuckDB data layer backing the reference gateway."""

from .loader import CatalogLoader
from .queries import ScoringQueries
from .schema import create_schema, get_connection

__all__ = [
    "create_schema",
    "get_connection",
    "CatalogLoader",
    "ScoringQueries",
]
