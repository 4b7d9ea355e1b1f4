"""Base enumerations shared by scoring records."""

from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """Kinds of scoring records managed by the editor."""

    CONFIGURATION = "configuration"
    ITEM = "item"
    VALUE = "value"


# Catalog-native type names mapped onto the scoring data types
_TYPE_ALIASES = {
    "boolean": "CHECKBOX",
    "double": "NUMBER",
    "currency": "NUMBER",
    "percent": "NUMBER",
    "integer": "NUMBER",
    "int": "NUMBER",
    "long": "NUMBER",
    "string": "TEXT",
    "textarea": "TEXT",
    "url": "TEXT",
    "datetime": "DATE",
    "multipicklist": "PICKLIST",
}


class FieldDataType(str, Enum):
    """Data type of the lead field an item is bound to."""

    TEXT = "TEXT"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    DATE = "DATE"
    NUMBER = "NUMBER"
    PICKLIST = "PICKLIST"
    CHECKBOX = "CHECKBOX"

    @classmethod
    def from_str(cls, value: str | None) -> "FieldDataType":
        """Parse a data type name, handling case and catalog aliases.

        Unknown or empty names fall back to TEXT.
        """
        if not value:
            return cls.TEXT
        normalized = value.strip().lower()
        alias = _TYPE_ALIASES.get(normalized)
        if alias:
            return cls(alias)
        try:
            return cls(normalized.upper())
        except ValueError:
            return cls.TEXT

    @property
    def display_name(self) -> str:
        """Human-readable name used in list columns."""
        return self.value.capitalize()
