"""Editor state: navigation, refresh coordination and orchestration."""

from .actions import ActionKind, row_actions
from .events import (
    ConfigurationSaved,
    CoreEvent,
    DeleteConfirmed,
    DeleteRequested,
    ItemSaved,
    NavigationCancelled,
    ValueSaved,
)
from .navigation import NavigationContext, NavigationState, Screen, transition
from .orchestrator import (
    ConfigurationOrchestrator,
    OperationResult,
    OperationStatus,
    PendingDelete,
)
from .refresh import CachedList, RefreshCoordinator

__all__ = [
    "ActionKind",
    "CachedList",
    "ConfigurationOrchestrator",
    "ConfigurationSaved",
    "CoreEvent",
    "DeleteConfirmed",
    "DeleteRequested",
    "ItemSaved",
    "NavigationCancelled",
    "NavigationContext",
    "NavigationState",
    "OperationResult",
    "OperationStatus",
    "PendingDelete",
    "RefreshCoordinator",
    "Screen",
    "ValueSaved",
    "row_actions",
    "transition",
]
