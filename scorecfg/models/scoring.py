"""Scoring configuration records: configurations, items and values."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .base import FieldDataType


class ScoringConfiguration(BaseModel):
    """Top-level named scoring profile."""

    id: str | None = Field(default=None, description="Record id (None until saved)")
    name: str = Field(default="", description="Display name")
    description: str | None = Field(default=None)
    active: bool = Field(default=False)


class ScoringItem(BaseModel):
    """A scored lead field belonging to one configuration.

    Items of type TEXT, EMAIL, PHONE or DATE never own values: they award
    the full point cap whenever the bound field is not empty.
    """

    id: str | None = Field(default=None)
    configuration_id: str | None = Field(default=None, description="Owning configuration")
    label: str = Field(default="", description="Display label")
    field_api_name: str = Field(default="", description="Bound lead field API name")
    data_type: FieldDataType = Field(default=FieldDataType.TEXT)
    point_cap: float = Field(default=0.0, description="Maximum points (PMP)")
    order_index: int = Field(default=1)
    active: bool = Field(default=True)
    description: str = Field(default="")
    agent_question: str = Field(default="", description="Question shown to agents")

    @field_validator("data_type", mode="before")
    @classmethod
    def _parse_data_type(cls, value):
        if isinstance(value, FieldDataType):
            return value
        return FieldDataType.from_str(value)


class ScoringValue(BaseModel):
    """A discrete scoring rule belonging to one item."""

    id: str | None = Field(default=None)
    item_id: str | None = Field(default=None, description="Owning item")
    value_text: str = Field(default="")
    picklist_option_api: str | None = Field(
        default=None,
        description="Picklist option API name (picklist items only)",
    )
    awarded_score: float = Field(default=0.0)
    exact_match: bool = Field(default=False)
    active: bool = Field(default=True)

    @property
    def display_label(self) -> str:
        """Label used when asking to confirm a delete."""
        return self.value_text or self.picklist_option_api or "Value"
