"""Orchestrates navigation, validation and refresh for the scoring editor."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..config import ScorecfgConfig, ScorecfgSettings
from ..errors import NavigationError, NotFoundError, RemoteOperationError, ScorecfgError
from ..gateway import ScoringGateway
from ..models import (
    EntityKind,
    FieldDataType,
    ItemFieldDetails,
    LeadFieldDescriptor,
    ScoringConfiguration,
    ScoringItem,
    ScoringValue,
)
from ..notify import LoggingNotifier, Notification, NotificationLevel, Notifier
from ..rules import (
    AvailableOptions,
    FieldCatalogResolver,
    ValidationCode,
    ValidationResult,
    available_options,
    is_value_eligible_type,
    validate_item,
    validate_value,
)
from .events import (
    ConfigurationSaved,
    CoreEvent,
    DeleteConfirmed,
    DeleteRequested,
    EventListener,
    ItemSaved,
    NavigationCancelled,
    ValueSaved,
)
from .navigation import (
    CLOSED,
    Back,
    Close,
    EditConfiguration,
    EditItem,
    Intent,
    NavigationState,
    NewConfiguration,
    NewItem,
    OpenValues,
    SaveCompleted,
    Screen,
    ViewItems,
    transition,
)
from .refresh import RefreshCoordinator

logger = logging.getLogger(__name__)

NavigationListener = Callable[[NavigationState], None]


class OperationStatus(str, Enum):
    SUCCESS = "success"
    INVALID = "invalid"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    BUSY = "busy"
    IGNORED = "ignored"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of an orchestrator operation."""

    status: OperationStatus
    record_id: str | None = None
    validation: ValidationResult | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.SUCCESS


@dataclass(frozen=True)
class PendingDelete:
    kind: EntityKind
    record_id: str
    label: str


_IGNORED = OperationResult(OperationStatus.IGNORED)
_BUSY = OperationResult(OperationStatus.BUSY)


def _exclusive(method):
    """Reject the call while another operation is outstanding."""

    @functools.wraps(method)
    async def wrapper(self: "ConfigurationOrchestrator", *args, **kwargs):
        if self._busy:
            logger.warning(f"{method.__name__} rejected: another operation is in progress")
            return _BUSY
        self._busy = True
        try:
            return await method(self, *args, **kwargs)
        finally:
            self._busy = False

    return wrapper


class ConfigurationOrchestrator:
    """Drives the configuration, item and value editing screens.

    Every mutation is awaited in full, then the affected cached lists are
    re-fetched, and only then is the navigation transition committed.
    """

    def __init__(
        self,
        gateway: ScoringGateway,
        notifier: Notifier | None = None,
        settings: ScorecfgSettings | None = None,
        refresh: RefreshCoordinator | None = None,
    ):
        self._gateway = gateway
        self._notifier = notifier or LoggingNotifier()
        self._settings = settings or ScorecfgSettings()
        self._refresh = refresh or RefreshCoordinator(gateway)

        self._state: NavigationState = CLOSED
        self._busy = False
        self._event_listeners: list[EventListener] = []
        self._navigation_listeners: list[NavigationListener] = []
        self._pending_delete: PendingDelete | None = None
        self._catalog: FieldCatalogResolver | None = None

        # Records shown by the active screen
        self._configuration: ScoringConfiguration | None = None
        self._item: ScoringItem | None = None
        self._value_parent: ScoringItem | None = None
        self._item_details: ItemFieldDetails | None = None
        self._value_form: ScoringValue | None = None

    @classmethod
    def from_config(
        cls,
        gateway: ScoringGateway,
        config: ScorecfgConfig,
        notifier: Notifier | None = None,
    ) -> "ConfigurationOrchestrator":
        """Build an orchestrator using the settings and refresh rules of ``config``."""
        return cls(
            gateway,
            notifier=notifier,
            settings=config.settings,
            refresh=RefreshCoordinator(gateway, config.refresh.fan_out),
        )

    # ========== Accessors ==========

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def screen(self) -> Screen:
        return self._state.screen

    @property
    def can_go_back(self) -> bool:
        return self._state.can_go_back

    @property
    def busy(self) -> bool:
        """True while a gateway operation is outstanding."""
        return self._busy

    @property
    def refresh(self) -> RefreshCoordinator:
        return self._refresh

    @property
    def pending_delete(self) -> PendingDelete | None:
        return self._pending_delete

    @property
    def current_configuration(self) -> ScoringConfiguration | None:
        return self._configuration

    @property
    def current_item(self) -> ScoringItem | None:
        return self._item

    @property
    def value_parent(self) -> ScoringItem | None:
        """Item whose values are listed, with server-side type and cap."""
        return self._value_parent

    @property
    def item_details(self) -> ItemFieldDetails | None:
        return self._item_details

    @property
    def value_form(self) -> ScoringValue | None:
        return self._value_form

    @property
    def catalog_fields(self) -> list[LeadFieldDescriptor]:
        return self._catalog.fields if self._catalog else []

    def subscribe(self, listener: EventListener) -> None:
        self._event_listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._event_listeners:
            self._event_listeners.remove(listener)

    def attach(self, listener: NavigationListener) -> None:
        """Register a callback for committed navigation changes."""
        self._navigation_listeners.append(listener)

    # ========== Session ==========

    @_exclusive
    async def load(self) -> OperationResult:
        """Fetch the configuration list."""
        try:
            await self._refresh.invalidate(EntityKind.CONFIGURATION)
        except RemoteOperationError as e:
            return self._failed("Could not load configurations", e)
        return OperationResult(OperationStatus.SUCCESS)

    # ========== Configurations ==========

    def new_configuration(self) -> OperationResult:
        if self._busy:
            return _BUSY
        next_state = self._dispatch(NewConfiguration())
        if next_state is None:
            return _IGNORED
        self._configuration = ScoringConfiguration()
        self._commit(next_state)
        return OperationResult(OperationStatus.SUCCESS)

    @_exclusive
    async def edit_configuration(self, configuration_id: str) -> OperationResult:
        next_state = self._dispatch(EditConfiguration(configuration_id))
        if next_state is None:
            return _IGNORED

        try:
            record = await self._gateway.configurations.get(configuration_id)
        except RemoteOperationError as e:
            return self._failed("Could not load the configuration", e)
        if record is None:
            return await self._not_found(
                NotFoundError("Configuration", configuration_id), EntityKind.CONFIGURATION
            )

        self._configuration = record
        self._commit(next_state)
        return OperationResult(OperationStatus.SUCCESS, record_id=configuration_id)

    @_exclusive
    async def view_items(self, configuration_id: str) -> OperationResult:
        """Open the item list of an existing configuration."""
        next_state = self._dispatch(ViewItems(configuration_id))
        if next_state is None:
            return _IGNORED

        try:
            await self._refresh.bind(EntityKind.ITEM, configuration_id)
        except RemoteOperationError as e:
            return self._failed("Could not load the items", e)

        self._commit(next_state)
        return OperationResult(OperationStatus.SUCCESS, record_id=configuration_id)

    @_exclusive
    async def save_configuration(
        self, record: ScoringConfiguration | None = None
    ) -> OperationResult:
        if not self._on(Screen.CONFIGURATION, "save_configuration"):
            return _IGNORED
        record = record or self._configuration
        if record is None:
            return _IGNORED

        # A configuration opened without an id is being created
        created = self._state.context.configuration_id is None
        if not created and record.id is None:
            record = record.model_copy(update={"id": self._state.context.configuration_id})

        try:
            record_id = await self._gateway.configurations.save(record) or record.id
        except RemoteOperationError as e:
            return self._failed("Could not save the configuration", e)

        next_state = transition(
            self._state, SaveCompleted(EntityKind.CONFIGURATION, record_id, created)
        )
        try:
            await self._refresh.invalidate(EntityKind.CONFIGURATION)
            if next_state.screen is Screen.ITEM_LIST:
                await self._refresh.bind(EntityKind.ITEM, record_id)
        except RemoteOperationError as e:
            return self._failed("Could not refresh the configurations", e, record_id)

        self._configuration = None
        self._commit(next_state)
        self._success("Saved", "Configuration saved")
        self._emit(ConfigurationSaved(record_id))
        return OperationResult(OperationStatus.SUCCESS, record_id=record_id)

    # ========== Items ==========

    @_exclusive
    async def new_item(self) -> OperationResult:
        next_state = self._dispatch(NewItem())
        if next_state is None:
            return _IGNORED

        configuration_id = self._state.context.configuration_id
        try:
            order_index = await self._gateway.items.next_order_index(configuration_id) or 1
        except RemoteOperationError as e:
            logger.warning(f"Could not fetch next order index, using 1: {e.message}")
            order_index = 1

        await self._ensure_catalog()
        self._item = ScoringItem(configuration_id=configuration_id, order_index=order_index)
        self._commit(next_state)
        return OperationResult(OperationStatus.SUCCESS)

    @_exclusive
    async def edit_item(self, item_id: str) -> OperationResult:
        next_state = self._dispatch(EditItem(item_id))
        if next_state is None:
            return _IGNORED

        try:
            item = await self._gateway.items.get(item_id)
        except RemoteOperationError as e:
            return self._failed("Could not load the item", e)
        if item is None:
            return await self._not_found(NotFoundError("Item", item_id), EntityKind.ITEM)

        await self._ensure_catalog()
        self._item = item
        self._commit(next_state)
        return OperationResult(OperationStatus.SUCCESS, record_id=item_id)

    def select_catalog_field(self, api_name: str | None) -> ScoringItem | None:
        """Bind the item being edited to a catalog field."""
        if not self._on(Screen.ITEM_DETAIL, "select_catalog_field") or self._item is None:
            return None
        if self._catalog is not None:
            self._item = self._catalog.apply_selection(self._item, api_name)
        return self._item

    @_exclusive
    async def save_item(self, record: ScoringItem | None = None) -> OperationResult:
        if not self._on(Screen.ITEM_DETAIL, "save_item"):
            return _IGNORED
        record = record or self._item
        if record is None:
            return _IGNORED

        context = self._state.context
        updates = {}
        if record.configuration_id is None:
            updates["configuration_id"] = context.configuration_id
        if record.id is None and context.item_id is not None:
            updates["id"] = context.item_id
        if updates:
            record = record.model_copy(update=updates)

        validation = validate_item(record)
        if not validation.ok:
            self._item = record
            return OperationResult(
                OperationStatus.INVALID, validation=validation, message=validation.message
            )

        try:
            record_id = await self._gateway.items.save(record) or record.id
        except RemoteOperationError as e:
            self._item = record
            return self._failed("Could not save the item", e)

        next_state = transition(
            self._state, SaveCompleted(EntityKind.ITEM, record_id, record.id is None)
        )
        try:
            await self._refresh.invalidate(EntityKind.ITEM)
        except RemoteOperationError as e:
            return self._failed("Could not refresh the items", e, record_id)

        self._item = None
        self._commit(next_state)
        self._success("Saved", "Item saved")
        self._emit(ItemSaved(record_id))
        return OperationResult(OperationStatus.SUCCESS, record_id=record_id)

    # ========== Values ==========

    @_exclusive
    async def open_values(self, item_id: str) -> OperationResult:
        next_state = self._dispatch(OpenValues(item_id))
        if next_state is None:
            return _IGNORED

        try:
            item = self._refresh.items.find(item_id) or await self._gateway.items.get(item_id)
        except RemoteOperationError as e:
            return self._failed("Could not load the item", e)
        if item is None:
            return await self._not_found(NotFoundError("Item", item_id), EntityKind.ITEM)

        if not is_value_eligible_type(item.data_type):
            return self._values_forbidden()

        try:
            details = await self._gateway.catalog.get_field_and_options_for_item(item_id)
            if details is None:
                return await self._not_found(NotFoundError("Item", item_id), EntityKind.ITEM)
            await self._refresh.bind(EntityKind.VALUE, item_id)
        except RemoteOperationError as e:
            return self._failed("Could not load the values", e)

        self._item_details = details
        self._value_parent = item.model_copy(
            update={"data_type": details.data_type, "point_cap": details.point_cap}
        )
        self._value_form = None
        self._commit(next_state)
        return OperationResult(OperationStatus.SUCCESS, record_id=item_id)

    def value_options(self) -> AvailableOptions:
        """Options a new value of the listed item may still target."""
        if self._value_parent is None:
            return AvailableOptions()
        return available_options(
            self._value_parent.data_type,
            self._refresh.values.data,
            self._item_details.options if self._item_details else (),
        )

    @property
    def can_add_value(self) -> bool:
        if self._value_parent is None or not is_value_eligible_type(self._value_parent.data_type):
            return False
        return not self.value_options().exhausted

    def open_value_form(self, value_id: str | None = None) -> OperationResult:
        """Open the value form for a new value, or for ``value_id``."""
        if self._busy:
            return _BUSY
        if not self._on(Screen.VALUE_LIST, "open_value_form") or self._value_parent is None:
            return _IGNORED
        parent = self._value_parent

        if value_id is not None:
            value = self._refresh.values.find(value_id)
            if value is None:
                error = NotFoundError("Value", value_id)
                self._notify("Error", error.message, NotificationLevel.ERROR)
                return OperationResult(OperationStatus.NOT_FOUND, message=error.message)
            self._value_form = value
            return OperationResult(OperationStatus.SUCCESS, record_id=value_id)

        if not is_value_eligible_type(parent.data_type):
            return self._values_forbidden()

        options = self.value_options()
        if options.exhausted:
            validation = ValidationResult(
                ValidationCode.NO_OPTIONS_AVAILABLE, "Every option already has a value."
            )
            return OperationResult(
                OperationStatus.INVALID, validation=validation, message=validation.message
            )

        draft = ScoringValue(item_id=parent.id)
        first = options.first()
        if first is not None and parent.data_type is FieldDataType.CHECKBOX:
            draft = draft.model_copy(update={"value_text": first.value})
        elif first is not None and parent.data_type is FieldDataType.PICKLIST:
            draft = draft.model_copy(update={"picklist_option_api": first.value})
        self._value_form = draft
        return OperationResult(OperationStatus.SUCCESS)

    def close_value_form(self) -> None:
        self._value_form = None

    @_exclusive
    async def save_value(self, candidate: ScoringValue | None = None) -> OperationResult:
        if not self._on(Screen.VALUE_LIST, "save_value") or self._value_parent is None:
            return _IGNORED
        candidate = candidate or self._value_form
        if candidate is None:
            return _IGNORED

        validation = validate_value(
            candidate,
            self._value_parent,
            self._refresh.values.data,
            self._item_details.options if self._item_details else (),
        )
        if not validation.ok:
            self._value_form = candidate
            return OperationResult(
                OperationStatus.INVALID, validation=validation, message=validation.message
            )

        record: ScoringValue = validation.value
        try:
            record_id = await self._gateway.values.save(record) or record.id
        except RemoteOperationError as e:
            self._value_form = record
            return self._failed("Could not save the value", e)

        next_state = transition(
            self._state, SaveCompleted(EntityKind.VALUE, record_id, record.id is None)
        )
        try:
            await self._refresh.invalidate_many([EntityKind.VALUE, EntityKind.ITEM])
        except RemoteOperationError as e:
            return self._failed("Could not refresh the values", e, record_id)

        self._value_form = None
        self._commit(next_state)
        self._success("Saved", "Value saved")
        self._emit(ValueSaved(record_id))
        return OperationResult(OperationStatus.SUCCESS, record_id=record_id)

    # ========== Back / close ==========

    @_exclusive
    async def back(self) -> OperationResult:
        """Return to the previous screen, or close when there is none."""
        return await self._leave(Back())

    @_exclusive
    async def close(self) -> OperationResult:
        return await self._leave(Close())

    async def _leave(self, intent: Intent) -> OperationResult:
        next_state = transition(self._state, intent)
        if next_state.screen is Screen.CLOSED:
            try:
                await self._refresh.invalidate(EntityKind.CONFIGURATION)
            except RemoteOperationError as e:
                self._report(e)
            self._reset_screens()
        elif self._state.screen is Screen.ITEM_DETAIL:
            self._item = None
        elif self._state.screen is Screen.VALUE_LIST:
            self._value_form = None

        self._commit(next_state)
        self._emit(NavigationCancelled())
        return OperationResult(OperationStatus.SUCCESS)

    # ========== Deletes ==========

    def request_delete(
        self, kind: EntityKind, record_id: str, label: str | None = None
    ) -> OperationResult:
        """Ask for confirmation before deleting a record."""
        if self._busy:
            return _BUSY
        label = label or self._default_label(kind, record_id)
        self._pending_delete = PendingDelete(kind, record_id, label)
        self._emit(DeleteRequested(kind, record_id, label))
        return OperationResult(OperationStatus.SUCCESS, record_id=record_id)

    def cancel_delete(self) -> None:
        self._pending_delete = None

    @_exclusive
    async def confirm_delete(self) -> OperationResult:
        pending = self._pending_delete
        if pending is None:
            return _IGNORED

        try:
            match pending.kind:
                case EntityKind.CONFIGURATION:
                    await self._gateway.configurations.delete(pending.record_id)
                case EntityKind.ITEM:
                    await self._gateway.items.delete(pending.record_id)
                case EntityKind.VALUE:
                    await self._gateway.values.delete(pending.record_id)
        except RemoteOperationError as e:
            return self._failed(f"Could not delete {pending.label}", e)

        self._pending_delete = None
        logger.info(f"Deleted {pending.kind.value} {pending.record_id}")

        if pending.kind is EntityKind.ITEM and self._refresh.values.key == pending.record_id:
            self._refresh.unbind(EntityKind.VALUE)

        result = OperationResult(OperationStatus.SUCCESS, record_id=pending.record_id)
        try:
            await self._refresh.invalidate(pending.kind)
        except RemoteOperationError as e:
            result = self._failed("Could not refresh after delete", e, pending.record_id)

        if (
            pending.kind is EntityKind.CONFIGURATION
            and self._state.context.configuration_id == pending.record_id
        ):
            self._reset_screens()
            self._commit(CLOSED)

        self._success("Deleted", f"{pending.label} deleted")
        self._emit(DeleteConfirmed(pending.kind, pending.record_id))
        return result

    # ========== Internals ==========

    def _dispatch(self, intent: Intent) -> NavigationState | None:
        try:
            return transition(self._state, intent)
        except NavigationError as e:
            logger.warning(f"Ignoring intent: {e}")
            return None

    def _on(self, screen: Screen, operation: str) -> bool:
        if self._state.screen is not screen:
            logger.warning(f"Ignoring {operation} on screen {self._state.screen.value}")
            return False
        return True

    def _commit(self, state: NavigationState) -> None:
        previous = self._state
        self._state = state
        logger.info(
            f"Navigation {previous.screen.value} -> {state.screen.value} "
            f"(stack={[s.value for s in state.stack]})"
        )
        for listener in list(self._navigation_listeners):
            listener(state)

    def _reset_screens(self) -> None:
        self._pending_delete = None
        self._configuration = None
        self._item = None
        self._value_parent = None
        self._item_details = None
        self._value_form = None
        self._refresh.unbind(EntityKind.ITEM)
        self._refresh.unbind(EntityKind.VALUE)

    async def _ensure_catalog(self) -> None:
        """Fetch the lead field catalog once per session."""
        if self._catalog is not None:
            return
        try:
            fields = await self._gateway.catalog.list_eligible_fields()
        except RemoteOperationError as e:
            self._notify(
                "Error",
                e.message or "Could not load the lead fields",
                NotificationLevel.ERROR,
            )
            return
        self._catalog = FieldCatalogResolver(fields)

    async def _not_found(self, error: NotFoundError, scope: EntityKind) -> OperationResult:
        """Report a stale id and refresh the list it was opened from."""
        logger.warning(error.message)
        self._notify("Error", error.message, NotificationLevel.ERROR)
        try:
            await self._refresh.invalidate(scope)
        except RemoteOperationError as e:
            self._report(e)
        return OperationResult(OperationStatus.NOT_FOUND, message=error.message)

    def _values_forbidden(self) -> OperationResult:
        validation = ValidationResult(
            ValidationCode.TYPE_FORBIDS_VALUES,
            "Values cannot be defined for this field type. Its score is the point "
            "cap whenever the field is not empty.",
        )
        self._notify("Not allowed", validation.message, NotificationLevel.WARNING)
        return OperationResult(
            OperationStatus.INVALID, validation=validation, message=validation.message
        )

    def _default_label(self, kind: EntityKind, record_id: str) -> str:
        record = self._refresh.handle(kind).find(record_id)
        if isinstance(record, ScoringConfiguration) and record.name:
            return record.name
        if isinstance(record, ScoringItem) and record.label:
            return record.label
        if isinstance(record, ScoringValue):
            return record.display_label
        return kind.value.capitalize()

    def _failed(
        self, title: str, error: ScorecfgError, record_id: str | None = None
    ) -> OperationResult:
        message = self._report(error, title)
        return OperationResult(OperationStatus.FAILED, record_id=record_id, message=message)

    def _report(self, error: ScorecfgError, title: str = "Error") -> str:
        message = error.message or self._settings.generic_error_message
        logger.error(f"{title}: {message}")
        self._notify(title, message, NotificationLevel.ERROR)
        return message

    def _success(self, title: str, message: str) -> None:
        self._notify(title, message, NotificationLevel.SUCCESS)

    def _notify(self, title: str, message: str, level: NotificationLevel) -> None:
        self._notifier.notify(Notification(title, message, level))

    def _emit(self, event: CoreEvent) -> None:
        for listener in list(self._event_listeners):
            listener(event)
