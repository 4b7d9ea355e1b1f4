"""Configuration models for scorecfg."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..models import CatalogField, EntityKind


class RefreshSettings(BaseModel):
    """Cache refresh rules."""

    fan_out: dict[EntityKind, list[EntityKind]] = Field(
        default_factory=dict,
        description="Extra scopes to refresh after a scope is invalidated",
    )


class ScorecfgSettings(BaseModel):
    """Global settings."""

    database: str = Field(default=":memory:", description="DuckDB database path")
    log_level: str = Field(default="INFO")
    generic_error_message: str = Field(
        default="The operation could not be completed.",
        description="Shown when a failure carries no server message",
    )


class ScorecfgConfig(BaseModel):
    """Root configuration model."""

    version: int = Field(default=1)
    settings: ScorecfgSettings = Field(default_factory=ScorecfgSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
    catalog: list[CatalogField] = Field(
        default_factory=list,
        description="Lead fields offered for binding to scoring items",
    )
