"""Events raised by the orchestrator towards the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from ..models import EntityKind


@dataclass(frozen=True)
class ConfigurationSaved:
    configuration_id: str


@dataclass(frozen=True)
class ItemSaved:
    item_id: str


@dataclass(frozen=True)
class ValueSaved:
    value_id: str


@dataclass(frozen=True)
class NavigationCancelled:
    pass


@dataclass(frozen=True)
class DeleteRequested:
    kind: EntityKind
    record_id: str
    label: str


@dataclass(frozen=True)
class DeleteConfirmed:
    kind: EntityKind
    record_id: str


CoreEvent = Union[
    ConfigurationSaved,
    ItemSaved,
    ValueSaved,
    NavigationCancelled,
    DeleteRequested,
    DeleteConfirmed,
]

EventListener = Callable[[CoreEvent], None]
