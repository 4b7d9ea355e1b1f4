"""Row actions offered by the list views."""

from __future__ import annotations

from enum import Enum

from ..models import ScoringConfiguration, ScoringItem, ScoringValue
from ..rules import is_value_eligible_type


class ActionKind(str, Enum):
    EDIT = "edit"
    VIEW_ITEMS = "view_items"
    VALUES = "values"
    DELETE = "delete"


def row_actions(record: ScoringConfiguration | ScoringItem | ScoringValue) -> list[ActionKind]:
    """Actions available for a list row, computed from the record alone."""
    if isinstance(record, ScoringConfiguration):
        return [ActionKind.EDIT, ActionKind.VIEW_ITEMS, ActionKind.DELETE]
    if isinstance(record, ScoringItem):
        actions = [ActionKind.EDIT]
        if is_value_eligible_type(record.data_type):
            actions.append(ActionKind.VALUES)
        actions.append(ActionKind.DELETE)
        return actions
    if isinstance(record, ScoringValue):
        return [ActionKind.EDIT, ActionKind.DELETE]
    raise TypeError(f"No row actions for {type(record).__name__}")
