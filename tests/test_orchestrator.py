"""Tests for ConfigurationOrchestrator."""

import asyncio
from unittest.mock import AsyncMock

from scorecfg.errors import RemoteOperationError
from scorecfg.models import EntityKind, FieldDataType, ScoringConfiguration, ScoringItem, ScoringValue
from scorecfg.notify import NotificationLevel
from scorecfg.rules import ValidationCode
from scorecfg.state import (
    ConfigurationOrchestrator,
    ConfigurationSaved,
    DeleteConfirmed,
    DeleteRequested,
    ItemSaved,
    NavigationCancelled,
    OperationStatus,
    Screen,
    ValueSaved,
)

run = asyncio.run


def _record_events(orchestrator):
    events = []
    orchestrator.subscribe(events.append)
    return events


def _open_values(orchestrator, configuration_id, item_id):
    assert run(orchestrator.view_items(configuration_id)).ok
    result = run(orchestrator.open_values(item_id))
    assert result.ok, result
    return result


class TestConfigurations:
    def test_create_forwards_to_item_list(self, orchestrator, notifier):
        events = _record_events(orchestrator)

        assert orchestrator.new_configuration().ok
        assert orchestrator.screen is Screen.CONFIGURATION

        result = run(orchestrator.save_configuration(ScoringConfiguration(name="Q1 Leads")))

        assert result.ok
        assert orchestrator.screen is Screen.ITEM_LIST
        assert orchestrator.state.stack == ()
        assert orchestrator.state.context.configuration_id == result.record_id
        assert not orchestrator.can_go_back
        assert orchestrator.refresh.items.key == result.record_id
        assert [c.name for c in orchestrator.refresh.configurations.data] == ["Q1 Leads"]
        assert events == [ConfigurationSaved(result.record_id)]
        assert notifier.of_level(NotificationLevel.SUCCESS)

    def test_edit_save_closes_and_refreshes(self, orchestrator, configuration_id):
        run(orchestrator.load())
        assert run(orchestrator.edit_configuration(configuration_id)).ok
        assert orchestrator.current_configuration.name == "Q1 Leads"

        edited = orchestrator.current_configuration.model_copy(update={"name": "Q1 Hot Leads"})
        result = run(orchestrator.save_configuration(edited))

        assert result.ok
        assert orchestrator.screen is Screen.CLOSED
        assert orchestrator.current_configuration is None
        assert orchestrator.refresh.configurations.find(configuration_id).name == "Q1 Hot Leads"

    def test_edit_unknown_configuration(self, orchestrator, notifier):
        result = run(orchestrator.edit_configuration("missing"))

        assert result.status is OperationStatus.NOT_FOUND
        assert orchestrator.screen is Screen.CLOSED
        assert notifier.of_level(NotificationLevel.ERROR)[0].message == (
            "Configuration with id 'missing' not found"
        )
        assert orchestrator.refresh.configurations.loaded

    def test_remote_error_keeps_screen(self, orchestrator, gateway, notifier):
        gateway.configurations.save = AsyncMock(side_effect=RemoteOperationError("Duplicate name"))
        orchestrator.new_configuration()

        result = run(orchestrator.save_configuration(ScoringConfiguration(name="Q1 Leads")))

        assert result.status is OperationStatus.FAILED
        assert result.message == "Duplicate name"
        assert orchestrator.screen is Screen.CONFIGURATION
        assert notifier.of_level(NotificationLevel.ERROR)[-1].message == "Duplicate name"

    def test_remote_error_without_message_uses_fallback(self, orchestrator, gateway):
        gateway.configurations.save = AsyncMock(side_effect=RemoteOperationError(""))
        orchestrator.new_configuration()

        result = run(orchestrator.save_configuration(ScoringConfiguration(name="Q1 Leads")))

        assert result.message == "The operation could not be completed."

    def test_server_rejects_blank_name(self, orchestrator):
        orchestrator.new_configuration()
        result = run(orchestrator.save_configuration(ScoringConfiguration(name="")))
        assert result.status is OperationStatus.FAILED
        assert orchestrator.screen is Screen.CONFIGURATION

    def test_intent_on_wrong_screen_is_ignored(self, orchestrator):
        assert run(orchestrator.save_item(ScoringItem(label="x"))).status is OperationStatus.IGNORED
        assert run(orchestrator.new_item()).status is OperationStatus.IGNORED
        assert orchestrator.screen is Screen.CLOSED


class TestItems:
    def test_new_item_from_catalog(self, orchestrator, configuration_id, make_item):
        make_item(order_index=3)
        events = _record_events(orchestrator)
        run(orchestrator.view_items(configuration_id))

        assert run(orchestrator.new_item()).ok
        assert orchestrator.screen is Screen.ITEM_DETAIL
        assert orchestrator.current_item.order_index == 4
        assert [f.api_name for f in orchestrator.catalog_fields][:2] == ["AnnualRevenue", "Industry"]

        draft = orchestrator.select_catalog_field("AnnualRevenue")
        assert draft.label == "Annual Revenue"
        assert draft.data_type is FieldDataType.NUMBER

        result = run(orchestrator.save_item(draft.model_copy(update={"point_cap": 25})))

        assert result.ok
        assert orchestrator.screen is Screen.ITEM_LIST
        assert orchestrator.state.stack == ()
        saved = orchestrator.refresh.items.find(result.record_id)
        assert saved.configuration_id == configuration_id
        assert saved.point_cap == 25
        assert events == [ItemSaved(result.record_id)]

    def test_next_order_index_failure_defaults_to_one(self, orchestrator, gateway, configuration_id):
        gateway.items.next_order_index = AsyncMock(side_effect=RemoteOperationError("offline"))
        run(orchestrator.view_items(configuration_id))

        assert run(orchestrator.new_item()).ok
        assert orchestrator.current_item.order_index == 1

    def test_invalid_item_stays_on_form(self, orchestrator, configuration_id):
        run(orchestrator.view_items(configuration_id))
        run(orchestrator.new_item())

        missing_field = run(orchestrator.save_item(ScoringItem(label="Revenue")))
        negative_cap = run(
            orchestrator.save_item(ScoringItem(label="Revenue", field_api_name="AnnualRevenue", point_cap=-2))
        )

        assert missing_field.validation.code is ValidationCode.MISSING_FIELD
        assert negative_cap.status is OperationStatus.INVALID
        assert negative_cap.validation.code is ValidationCode.NEGATIVE_POINT_CAP
        assert orchestrator.screen is Screen.ITEM_DETAIL

    def test_edit_unknown_item(self, orchestrator, notifier, configuration_id):
        run(orchestrator.view_items(configuration_id))

        result = run(orchestrator.edit_item("missing"))

        assert result.status is OperationStatus.NOT_FOUND
        assert orchestrator.screen is Screen.ITEM_LIST
        assert "Item with id 'missing' not found" in notifier.notifications[-1].message

    def test_refresh_failure_blocks_navigation(self, orchestrator, gateway, configuration_id, make_item):
        item_id = make_item()
        run(orchestrator.view_items(configuration_id))
        run(orchestrator.edit_item(item_id))
        gateway.items.list_by_configuration = AsyncMock(side_effect=RemoteOperationError("timeout"))

        result = run(orchestrator.save_item(orchestrator.current_item.model_copy(update={"label": "New"})))

        assert result.status is OperationStatus.FAILED
        assert result.record_id == item_id
        assert orchestrator.screen is Screen.ITEM_DETAIL

    def test_back_returns_to_list_then_closes(self, orchestrator, configuration_id):
        events = _record_events(orchestrator)
        run(orchestrator.view_items(configuration_id))
        run(orchestrator.new_item())

        run(orchestrator.back())
        assert orchestrator.screen is Screen.ITEM_LIST
        assert orchestrator.current_item is None

        run(orchestrator.back())
        assert orchestrator.screen is Screen.CLOSED
        assert orchestrator.state.context.configuration_id is None
        assert orchestrator.refresh.items.key is None
        assert events == [NavigationCancelled(), NavigationCancelled()]


class TestValues:
    def test_number_score_cap(self, orchestrator, configuration_id, make_item):
        item_id = make_item(data_type="NUMBER", point_cap=10)
        events = _record_events(orchestrator)
        _open_values(orchestrator, configuration_id, item_id)
        assert orchestrator.can_add_value

        too_high = run(orchestrator.save_value(ScoringValue(value_text="100", awarded_score=15)))
        assert too_high.status is OperationStatus.INVALID
        assert too_high.validation.code is ValidationCode.SCORE_EXCEEDS_CAP
        assert orchestrator.screen is Screen.VALUE_LIST

        at_cap = run(orchestrator.save_value(ScoringValue(value_text="100", awarded_score=10)))
        assert at_cap.ok
        assert orchestrator.screen is Screen.ITEM_LIST
        assert orchestrator.refresh.values.find(at_cap.record_id).item_id == item_id
        assert events == [ValueSaved(at_cap.record_id)]

    def test_checkbox_options(self, orchestrator, configuration_id, make_item):
        item_id = make_item(data_type="CHECKBOX", field_api_name="HasBudget__c", point_cap=5)
        _open_values(orchestrator, configuration_id, item_id)

        assert orchestrator.open_value_form().ok
        assert orchestrator.value_form.value_text == "TRUE"
        assert run(orchestrator.save_value()).ok

        run(orchestrator.open_values(item_id))
        orchestrator.open_value_form()
        assert orchestrator.value_form.value_text == "FALSE"

        duplicate = run(orchestrator.save_value(ScoringValue(value_text="true", awarded_score=2)))
        assert duplicate.validation.code is ValidationCode.OPTION_ALREADY_CONFIGURED

        assert run(orchestrator.save_value(ScoringValue(value_text="False", awarded_score=1))).ok

        run(orchestrator.open_values(item_id))
        assert not orchestrator.can_add_value
        exhausted = orchestrator.open_value_form()
        assert exhausted.validation.code is ValidationCode.NO_OPTIONS_AVAILABLE
        assert {v.value_text for v in orchestrator.refresh.values.data} == {"TRUE", "FALSE"}
        assert all(v.exact_match for v in orchestrator.refresh.values.data)

    def test_picklist_preselects_and_edits(self, orchestrator, configuration_id, make_item):
        item_id = make_item(data_type="PICKLIST", field_api_name="Industry", point_cap=8)
        _open_values(orchestrator, configuration_id, item_id)

        orchestrator.open_value_form()
        assert orchestrator.value_form.picklist_option_api == "Tech"
        saved = run(orchestrator.save_value(orchestrator.value_form.model_copy(update={"awarded_score": 4})))
        assert orchestrator.refresh.values.find(saved.record_id).value_text == "Technology"

        run(orchestrator.open_values(item_id))
        assert [o.value for o in orchestrator.value_options()] == ["Retail", "Energy"]
        assert orchestrator.open_value_form(saved.record_id).ok
        edited = run(orchestrator.save_value(orchestrator.value_form.model_copy(update={"awarded_score": 6})))

        assert edited.ok
        assert edited.record_id == saved.record_id
        assert orchestrator.refresh.values.find(saved.record_id).awarded_score == 6

    def test_valueless_item_cannot_open_values(self, orchestrator, notifier, configuration_id, make_item):
        item_id = make_item(data_type="EMAIL", field_api_name="Email")
        run(orchestrator.view_items(configuration_id))

        result = run(orchestrator.open_values(item_id))

        assert result.validation.code is ValidationCode.TYPE_FORBIDS_VALUES
        assert orchestrator.screen is Screen.ITEM_LIST
        assert notifier.of_level(NotificationLevel.WARNING)

    def test_stale_item_refreshes_list(self, orchestrator, gateway, configuration_id, make_item):
        item_id = make_item()
        run(orchestrator.view_items(configuration_id))
        run(gateway.items.delete(item_id))

        result = run(orchestrator.open_values(item_id))

        assert result.status is OperationStatus.NOT_FOUND
        assert orchestrator.screen is Screen.ITEM_LIST
        assert orchestrator.refresh.items.data == ()


    def test_save_after_exhaustion_is_rejected(self, orchestrator, gateway, configuration_id, make_item):
        item_id = make_item(data_type="CHECKBOX", field_api_name="HasBudget__c", point_cap=5)
        _open_values(orchestrator, configuration_id, item_id)
        assert run(orchestrator.save_value(ScoringValue(value_text="TRUE", awarded_score=5))).ok
        run(orchestrator.open_values(item_id))
        assert run(orchestrator.save_value(ScoringValue(value_text="FALSE", awarded_score=0))).ok
        run(orchestrator.open_values(item_id))

        result = run(orchestrator.save_value(ScoringValue(value_text="maybe", awarded_score=1)))

        assert result.status is OperationStatus.INVALID
        assert result.validation.code is ValidationCode.MISSING_CHECKBOX_SELECTION
        assert orchestrator.screen is Screen.VALUE_LIST
        stored = run(gateway.values.list_by_item(item_id))
        assert sorted(v.value_text for v in stored) == ["FALSE", "TRUE"]

    def test_picklist_option_outside_catalog(self, orchestrator, configuration_id, make_item):
        item_id = make_item(data_type="PICKLIST", field_api_name="Industry", point_cap=8)
        _open_values(orchestrator, configuration_id, item_id)

        result = run(orchestrator.save_value(ScoringValue(picklist_option_api="Mining", awarded_score=1)))

        assert result.validation.code is ValidationCode.MISSING_PICKLIST_SELECTION
        assert orchestrator.refresh.values.data == ()

    def test_non_finite_score(self, orchestrator, configuration_id, make_item):
        item_id = make_item(data_type="NUMBER", point_cap=10)
        _open_values(orchestrator, configuration_id, item_id)

        result = run(orchestrator.save_value(ScoringValue(value_text="1", awarded_score=float("nan"))))

        assert result.validation.code is ValidationCode.NON_FINITE_NUMBER
        assert orchestrator.screen is Screen.VALUE_LIST


class TestBusyGuard:
    def test_second_operation_is_rejected(self, orchestrator, gateway):
        async def scenario():
            release = asyncio.Event()
            original_save = gateway.configurations.save

            async def slow_save(record):
                await release.wait()
                return await original_save(record)

            gateway.configurations.save = slow_save
            orchestrator.new_configuration()
            first = asyncio.create_task(
                orchestrator.save_configuration(ScoringConfiguration(name="Q1 Leads"))
            )
            await asyncio.sleep(0)
            busy = orchestrator.busy
            second = await orchestrator.close()
            rejected_sync = orchestrator.request_delete(EntityKind.CONFIGURATION, "c1")
            release.set()
            return busy, await first, second, rejected_sync

        busy, first, second, rejected_sync = run(scenario())

        assert busy
        assert second.status is OperationStatus.BUSY
        assert rejected_sync.status is OperationStatus.BUSY
        assert first.ok
        assert orchestrator.screen is Screen.ITEM_LIST
        assert not orchestrator.busy


class TestDeletes:
    def test_delete_configuration(self, orchestrator, configuration_id):
        events = _record_events(orchestrator)
        run(orchestrator.load())

        assert orchestrator.request_delete(EntityKind.CONFIGURATION, configuration_id).ok
        assert orchestrator.pending_delete.label == "Q1 Leads"

        result = run(orchestrator.confirm_delete())

        assert result.ok
        assert orchestrator.pending_delete is None
        assert orchestrator.refresh.configurations.data == ()
        assert events == [
            DeleteRequested(EntityKind.CONFIGURATION, configuration_id, "Q1 Leads"),
            DeleteConfirmed(EntityKind.CONFIGURATION, configuration_id),
        ]

    def test_cancel_delete(self, orchestrator, configuration_id):
        orchestrator.request_delete(EntityKind.CONFIGURATION, configuration_id, "Q1")
        orchestrator.cancel_delete()
        assert orchestrator.pending_delete is None
        assert run(orchestrator.confirm_delete()).status is OperationStatus.IGNORED

    def test_closing_drops_pending_delete(self, orchestrator, configuration_id):
        run(orchestrator.view_items(configuration_id))
        orchestrator.request_delete(EntityKind.CONFIGURATION, configuration_id, "Q1 Leads")

        run(orchestrator.close())

        assert orchestrator.pending_delete is None
        assert run(orchestrator.confirm_delete()).status is OperationStatus.IGNORED
        assert run(orchestrator.load()).ok
        assert orchestrator.refresh.configurations.find(configuration_id) is not None

    def test_delete_item_unbinds_its_values(self, orchestrator, configuration_id, make_item):
        item_id = make_item(label="Revenue")
        _open_values(orchestrator, configuration_id, item_id)
        run(orchestrator.back())
        assert orchestrator.refresh.values.key == item_id

        orchestrator.request_delete(EntityKind.ITEM, item_id)
        assert orchestrator.pending_delete.label == "Revenue"
        assert run(orchestrator.confirm_delete()).ok

        assert orchestrator.refresh.items.data == ()
        assert orchestrator.refresh.values.key is None
        assert orchestrator.screen is Screen.ITEM_LIST

    def test_failed_delete_keeps_pending(self, orchestrator, gateway, notifier, configuration_id, make_item):
        item_id = make_item()
        _open_values(orchestrator, configuration_id, item_id)
        value = ScoringValue(value_text="7", awarded_score=1)
        run(orchestrator.save_value(value))
        run(orchestrator.open_values(item_id))
        value_id = orchestrator.refresh.values.data[0].id
        gateway.values.delete = AsyncMock(side_effect=RemoteOperationError(""))

        orchestrator.request_delete(EntityKind.VALUE, value_id)
        assert orchestrator.pending_delete.label == "7"
        result = run(orchestrator.confirm_delete())

        assert result.status is OperationStatus.FAILED
        assert orchestrator.pending_delete is not None
        assert notifier.notifications[-1].message == "The operation could not be completed."


class TestFromConfig:
    def test_uses_settings_and_fan_out(self, gateway, notifier):
        from scorecfg.config import ScorecfgConfig

        config = ScorecfgConfig.model_validate({
            "settings": {"generic_error_message": "Nope."},
            "refresh": {"fan_out": {"item": ["configuration"]}},
        })
        orchestrator = ConfigurationOrchestrator.from_config(gateway, config, notifier)

        assert orchestrator.refresh.fan_out_for(EntityKind.ITEM) == (EntityKind.CONFIGURATION,)

        gateway.configurations.save = AsyncMock(side_effect=RemoteOperationError(""))
        orchestrator.new_configuration()
        result = run(orchestrator.save_configuration(ScoringConfiguration(name="X")))
        assert result.message == "Nope."

    def test_navigation_listener(self, orchestrator):
        screens = []
        orchestrator.attach(lambda state: screens.append(state.screen))

        orchestrator.new_configuration()
        run(orchestrator.close())

        assert screens == [Screen.CONFIGURATION, Screen.CLOSED]
