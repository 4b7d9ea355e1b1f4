"""Value and item constraint checks.

Pure functions with no I/O. They decide which new values an item may still
receive and validate records before they are submitted to the gateway.
Violations are returned as ``ValidationResult`` values, never raised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence

from ..models import FieldDataType, PicklistOption, ScoringItem, ScoringValue

# Data types that never own value records
VALUELESS_TYPES = frozenset({
    FieldDataType.TEXT,
    FieldDataType.EMAIL,
    FieldDataType.PHONE,
    FieldDataType.DATE,
})

CHECKBOX_OPTIONS: tuple[PicklistOption, ...] = (
    PicklistOption(value="TRUE", label="True"),
    PicklistOption(value="FALSE", label="False"),
)


class ValidationCode(str, Enum):
    """Outcome of a validation check."""

    OK = "ok"
    SCORE_EXCEEDS_CAP = "score_exceeds_cap"
    NEGATIVE_SCORE = "negative_score"
    NON_FINITE_NUMBER = "non_finite_number"
    TYPE_FORBIDS_VALUES = "type_forbids_values"
    MISSING_PICKLIST_SELECTION = "missing_picklist_selection"
    MISSING_CHECKBOX_SELECTION = "missing_checkbox_selection"
    MISSING_NUMERIC_VALUE = "missing_numeric_value"
    OPTION_ALREADY_CONFIGURED = "option_already_configured"
    NO_OPTIONS_AVAILABLE = "no_options_available"
    NEGATIVE_POINT_CAP = "negative_point_cap"
    MISSING_LABEL = "missing_label"
    MISSING_FIELD = "missing_field"


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a record.

    ``value`` carries the normalized record when the check passed.
    """

    code: ValidationCode
    message: str = ""
    value: ScoringValue | ScoringItem | None = None

    @property
    def ok(self) -> bool:
        return self.code is ValidationCode.OK


@dataclass(frozen=True)
class AvailableOptions:
    """Options still free for a new value.

    ``unrestricted`` is set for NUMBER items, whose values are free-form.
    """

    options: tuple[PicklistOption, ...] = field(default_factory=tuple)
    unrestricted: bool = False

    def __len__(self) -> int:
        return len(self.options)

    def __iter__(self):
        return iter(self.options)

    @property
    def exhausted(self) -> bool:
        return not self.unrestricted and not self.options

    def first(self) -> PicklistOption | None:
        return self.options[0] if self.options else None

    def values(self) -> list[str]:
        return [option.value for option in self.options]


def is_value_eligible_type(data_type: FieldDataType) -> bool:
    """Return False for data types that never permit value records."""
    return FieldDataType.from_str(data_type) not in VALUELESS_TYPES


def available_options(
    data_type: FieldDataType,
    existing_values: Iterable[ScoringValue],
    catalog_options: Iterable[PicklistOption] = (),
) -> AvailableOptions:
    """Compute the options a new value may still target."""
    data_type = FieldDataType.from_str(data_type)
    existing = list(existing_values)

    if data_type is FieldDataType.PICKLIST:
        configured = {v.picklist_option_api for v in existing if v.picklist_option_api}
        return AvailableOptions(
            options=tuple(o for o in catalog_options if o.value not in configured)
        )
    if data_type is FieldDataType.CHECKBOX:
        configured = {(v.value_text or "").upper() for v in existing}
        return AvailableOptions(
            options=tuple(o for o in CHECKBOX_OPTIONS if o.value not in configured)
        )
    if data_type is FieldDataType.NUMBER:
        return AvailableOptions(unrestricted=True)
    return AvailableOptions()


def can_add_value(
    data_type: FieldDataType,
    existing_values: Iterable[ScoringValue],
    catalog_options: Iterable[PicklistOption] = (),
) -> bool:
    """Whether a new value may be created for an item."""
    if not is_value_eligible_type(data_type):
        return False
    return not available_options(data_type, existing_values, catalog_options).exhausted


def _is_number(text: str | None) -> bool:
    if text is None or not str(text).strip():
        return False
    try:
        return math.isfinite(float(text))
    except ValueError:
        return False


def _format_points(points: float) -> str:
    return f"{points:g}"


def validate_value(
    candidate: ScoringValue,
    parent_item: ScoringItem,
    existing_values: Sequence[ScoringValue] = (),
    catalog_options: Sequence[PicklistOption] = (),
) -> ValidationResult:
    """Validate a value before it is submitted.

    On success the result carries a normalized copy of ``candidate``.
    """
    data_type = parent_item.data_type
    siblings = [v for v in existing_values if candidate.id is None or v.id != candidate.id]

    if not math.isfinite(candidate.awarded_score):
        return ValidationResult(
            ValidationCode.NON_FINITE_NUMBER, "The awarded score must be a finite number."
        )
    if not math.isfinite(parent_item.point_cap):
        return ValidationResult(
            ValidationCode.NON_FINITE_NUMBER, "The item's point cap is not a finite number."
        )
    if candidate.awarded_score > parent_item.point_cap:
        return ValidationResult(
            ValidationCode.SCORE_EXCEEDS_CAP,
            f"The awarded score ({_format_points(candidate.awarded_score)}) cannot exceed "
            f"the item's point cap ({_format_points(parent_item.point_cap)}).",
        )
    if candidate.awarded_score < 0:
        return ValidationResult(
            ValidationCode.NEGATIVE_SCORE, "The awarded score must be zero or greater."
        )
    if not is_value_eligible_type(data_type):
        return ValidationResult(
            ValidationCode.TYPE_FORBIDS_VALUES,
            "This field type does not accept values. Its score is the point cap "
            "whenever the field is not empty.",
        )

    updates: dict = {"item_id": candidate.item_id or parent_item.id}

    if data_type is FieldDataType.PICKLIST:
        option_api = candidate.picklist_option_api
        if not option_api:
            return ValidationResult(
                ValidationCode.MISSING_PICKLIST_SELECTION, "Select a picklist value."
            )
        if any(v.picklist_option_api == option_api for v in siblings):
            return ValidationResult(
                ValidationCode.OPTION_ALREADY_CONFIGURED,
                f"The option '{option_api}' already has a value.",
            )
        known = {o.value for o in catalog_options}
        if known and option_api not in known:
            return ValidationResult(
                ValidationCode.MISSING_PICKLIST_SELECTION,
                f"'{option_api}' is not an option of this field.",
            )
        if not candidate.value_text:
            match = next((o for o in catalog_options if o.value == option_api), None)
            updates["value_text"] = match.display_label if match else option_api

    elif data_type is FieldDataType.CHECKBOX:
        text = (candidate.value_text or "").strip().upper()
        if not text:
            return ValidationResult(
                ValidationCode.MISSING_CHECKBOX_SELECTION, "Select True or False."
            )
        if text not in {o.value for o in CHECKBOX_OPTIONS}:
            return ValidationResult(
                ValidationCode.MISSING_CHECKBOX_SELECTION, "A checkbox value must be True or False."
            )
        if any((v.value_text or "").upper() == text for v in siblings):
            return ValidationResult(
                ValidationCode.OPTION_ALREADY_CONFIGURED,
                f"The value '{text}' is already configured.",
            )
        updates["value_text"] = text
        updates["exact_match"] = True
        updates["picklist_option_api"] = None

    elif data_type is FieldDataType.NUMBER:
        if not _is_number(candidate.value_text):
            return ValidationResult(
                ValidationCode.MISSING_NUMERIC_VALUE, "Enter a numeric value."
            )
        updates["picklist_option_api"] = None

    return ValidationResult(ValidationCode.OK, value=candidate.model_copy(update=updates))


def validate_item(item: ScoringItem) -> ValidationResult:
    """Validate an item before it is submitted."""
    if not (item.label or "").strip():
        return ValidationResult(ValidationCode.MISSING_LABEL, "Enter a label.")
    if not item.field_api_name:
        return ValidationResult(ValidationCode.MISSING_FIELD, "Select a lead field.")
    if not math.isfinite(item.point_cap):
        return ValidationResult(
            ValidationCode.NON_FINITE_NUMBER, "The point cap must be a finite number."
        )
    if item.point_cap < 0:
        return ValidationResult(
            ValidationCode.NEGATIVE_POINT_CAP,
            "The point cap must be greater than or equal to 0.",
        )
    return ValidationResult(ValidationCode.OK, value=item)
