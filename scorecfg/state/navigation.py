"""Navigation state machine for the scoring configuration editor.

The editor presents one of five screens. Navigation is a pure function
``transition(state, intent) -> state`` over an immutable ``NavigationState``;
the orchestrator decides when a transition is committed.

Screens and the main edges::

    CLOSED --new/edit--> CONFIGURATION --saved(new)--> ITEM_LIST
    CLOSED --view items--> ITEM_LIST
    ITEM_LIST --new/edit item--> ITEM_DETAIL --saved--> ITEM_LIST
    ITEM_LIST --open values--> VALUE_LIST --saved--> ITEM_LIST

``Back`` pops the stack, or closes the editor when the stack is empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from ..errors import NavigationError
from ..models import EntityKind


class Screen(str, Enum):
    """Editing contexts the editor can present."""

    CLOSED = "closed"
    CONFIGURATION = "configuration"
    ITEM_LIST = "item_list"
    ITEM_DETAIL = "item_detail"
    VALUE_LIST = "value_list"


@dataclass(frozen=True)
class NavigationContext:
    """Ids passed to the active screen."""

    configuration_id: str | None = None
    item_id: str | None = None

    def narrowed(self) -> "NavigationContext":
        """Keep only the configuration id."""
        return NavigationContext(configuration_id=self.configuration_id)


@dataclass(frozen=True)
class NavigationState:
    screen: Screen = Screen.CLOSED
    stack: tuple[Screen, ...] = ()
    context: NavigationContext = field(default_factory=NavigationContext)

    @property
    def is_open(self) -> bool:
        return self.screen is not Screen.CLOSED

    @property
    def can_go_back(self) -> bool:
        """Back is offered only with a non-empty stack, never on the item list."""
        return bool(self.stack) and self.screen is not Screen.ITEM_LIST


CLOSED = NavigationState()


# ----- Intents -----

@dataclass(frozen=True)
class NewConfiguration:
    pass


@dataclass(frozen=True)
class EditConfiguration:
    configuration_id: str


@dataclass(frozen=True)
class ViewItems:
    configuration_id: str


@dataclass(frozen=True)
class NewItem:
    pass


@dataclass(frozen=True)
class EditItem:
    item_id: str


@dataclass(frozen=True)
class OpenValues:
    item_id: str


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class SaveCompleted:
    """A record was saved on the current screen."""

    kind: EntityKind
    record_id: str | None = None
    created: bool = False


Intent = Union[
    NewConfiguration,
    EditConfiguration,
    ViewItems,
    NewItem,
    EditItem,
    OpenValues,
    Back,
    Close,
    SaveCompleted,
]


def _require(state: NavigationState, intent: Intent, *screens: Screen) -> None:
    if state.screen not in screens:
        raise NavigationError(
            f"{type(intent).__name__} is not valid on screen {state.screen.value}"
        )


def _return_to_item_list(state: NavigationState) -> NavigationState:
    """Return from a screen opened on top of the item list."""
    stack = state.stack
    if stack and stack[-1] is Screen.ITEM_LIST:
        stack = stack[:-1]
    return NavigationState(Screen.ITEM_LIST, stack, state.context.narrowed())


def transition(state: NavigationState, intent: Intent) -> NavigationState:
    """Compute the navigation state that follows ``intent``.

    Raises:
        NavigationError: If ``intent`` is not valid on the current screen.
    """
    match intent:
        case NewConfiguration():
            _require(state, intent, Screen.CLOSED)
            return NavigationState(Screen.CONFIGURATION)

        case EditConfiguration(configuration_id=configuration_id):
            _require(state, intent, Screen.CLOSED)
            return NavigationState(
                Screen.CONFIGURATION,
                context=NavigationContext(configuration_id=configuration_id),
            )

        case ViewItems(configuration_id=configuration_id):
            _require(state, intent, Screen.CLOSED)
            return NavigationState(
                Screen.ITEM_LIST,
                context=NavigationContext(configuration_id=configuration_id),
            )

        case NewItem():
            _require(state, intent, Screen.ITEM_LIST)
            return NavigationState(
                Screen.ITEM_DETAIL,
                state.stack + (Screen.ITEM_LIST,),
                replace(state.context, item_id=None),
            )

        case EditItem(item_id=item_id) | OpenValues(item_id=item_id):
            _require(state, intent, Screen.ITEM_LIST)
            target = Screen.ITEM_DETAIL if isinstance(intent, EditItem) else Screen.VALUE_LIST
            return NavigationState(
                target,
                state.stack + (Screen.ITEM_LIST,),
                replace(state.context, item_id=item_id),
            )

        case SaveCompleted(kind=EntityKind.CONFIGURATION, record_id=record_id, created=created):
            _require(state, intent, Screen.CONFIGURATION)
            if created:
                # Forward replace: landing on the item list of the new configuration
                return NavigationState(
                    Screen.ITEM_LIST,
                    context=NavigationContext(configuration_id=record_id),
                )
            return CLOSED

        case SaveCompleted(kind=EntityKind.ITEM):
            _require(state, intent, Screen.ITEM_DETAIL)
            return _return_to_item_list(state)

        case SaveCompleted(kind=EntityKind.VALUE):
            _require(state, intent, Screen.VALUE_LIST)
            return _return_to_item_list(state)

        case Back():
            if not state.stack:
                return CLOSED
            previous = state.stack[-1]
            context = state.context
            if previous is Screen.ITEM_LIST:
                context = context.narrowed()
            return NavigationState(previous, state.stack[:-1], context)

        case Close():
            return CLOSED

    raise NavigationError(f"Unknown intent: {intent!r}")
