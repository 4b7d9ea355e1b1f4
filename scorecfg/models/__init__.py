"""Pydantic models for scoring configuration records."""

from .base import EntityKind, FieldDataType
from .catalog import CatalogField, ItemFieldDetails, LeadFieldDescriptor, PicklistOption
from .scoring import ScoringConfiguration, ScoringItem, ScoringValue

__all__ = [
    "EntityKind",
    "FieldDataType",
    "CatalogField",
    "ItemFieldDetails",
    "LeadFieldDescriptor",
    "PicklistOption",
    "ScoringConfiguration",
    "ScoringItem",
    "ScoringValue",
]
