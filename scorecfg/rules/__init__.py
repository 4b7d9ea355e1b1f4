"""Scoring rules: value constraints, catalog resolution and label shortening."""

from .catalog import FieldCatalogResolver
from .constraints import (
    CHECKBOX_OPTIONS,
    VALUELESS_TYPES,
    AvailableOptions,
    ValidationCode,
    ValidationResult,
    available_options,
    can_add_value,
    is_value_eligible_type,
    validate_item,
    validate_value,
)
from .labels import LABEL_MAX_LENGTH, shorten_label

__all__ = [
    "CHECKBOX_OPTIONS",
    "LABEL_MAX_LENGTH",
    "VALUELESS_TYPES",
    "AvailableOptions",
    "FieldCatalogResolver",
    "ValidationCode",
    "ValidationResult",
    "available_options",
    "can_add_value",
    "is_value_eligible_type",
    "shorten_label",
    "validate_item",
    "validate_value",
]
