"""Lead field catalog models (read-only, supplied by the catalog collaborator)."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .base import FieldDataType


class PicklistOption(BaseModel):
    """A selectable option of a picklist field."""

    value: str = Field(..., description="Option API name")
    label: str = Field(default="")

    @property
    def display_label(self) -> str:
        return self.label or self.value


class LeadFieldDescriptor(BaseModel):
    """A lead field that may be bound to a scoring item."""

    api_name: str = Field(..., description="Field API name")
    label: str = Field(..., description="Field label")
    data_type: FieldDataType = Field(default=FieldDataType.TEXT)

    @field_validator("data_type", mode="before")
    @classmethod
    def _parse_data_type(cls, value):
        if isinstance(value, FieldDataType):
            return value
        return FieldDataType.from_str(value)


class CatalogField(LeadFieldDescriptor):
    """Catalog field together with its picklist options."""

    options: list[PicklistOption] = Field(default_factory=list)

    def descriptor(self) -> LeadFieldDescriptor:
        return LeadFieldDescriptor(
            api_name=self.api_name,
            label=self.label,
            data_type=self.data_type,
        )


class ItemFieldDetails(BaseModel):
    """Data type, point cap and options of the field behind an item."""

    data_type: FieldDataType = Field(default=FieldDataType.TEXT)
    point_cap: float = Field(default=0.0)
    options: list[PicklistOption] = Field(default_factory=list)
