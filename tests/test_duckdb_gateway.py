"""Tests for the DuckDB gateway."""

import asyncio

import pytest

from scorecfg.errors import RemoteOperationError
from scorecfg.models import FieldDataType, ScoringConfiguration, ScoringItem, ScoringValue


class TestConfigurations:
    def test_insert_and_update(self, gateway):
        configuration_id = asyncio.run(
            gateway.configurations.save(ScoringConfiguration(name="Q1 Leads", active=True))
        )
        record = asyncio.run(gateway.configurations.get(configuration_id))
        assert record.name == "Q1 Leads"
        assert record.active is True

        asyncio.run(gateway.configurations.save(record.model_copy(update={"name": "Q2 Leads"})))
        names = [c.name for c in asyncio.run(gateway.configurations.list())]
        assert names == ["Q2 Leads"]

    def test_name_required(self, gateway):
        with pytest.raises(RemoteOperationError, match="name is required"):
            asyncio.run(gateway.configurations.save(ScoringConfiguration(name=" ")))

    def test_update_of_missing_record(self, gateway):
        with pytest.raises(RemoteOperationError, match="no longer exists"):
            asyncio.run(
                gateway.configurations.save(ScoringConfiguration(id="gone", name="X"))
            )

    def test_get_unknown(self, gateway):
        assert asyncio.run(gateway.configurations.get("missing")) is None

    def test_delete_cascades(self, gateway, configuration_id, make_item):
        item_id = make_item()
        asyncio.run(gateway.values.save(ScoringValue(item_id=item_id, value_text="5", awarded_score=3)))

        asyncio.run(gateway.configurations.delete(configuration_id))

        assert asyncio.run(gateway.items.get(item_id)) is None
        assert asyncio.run(gateway.values.list_by_item(item_id)) == []


class TestItems:
    def test_next_order_index(self, gateway, configuration_id, make_item):
        assert asyncio.run(gateway.items.next_order_index(configuration_id)) == 1
        make_item(order_index=4)
        assert asyncio.run(gateway.items.next_order_index(configuration_id)) == 5

    def test_items_are_ordered(self, gateway, configuration_id, make_item):
        make_item(label="Second", order_index=2)
        make_item(label="First", order_index=1)
        items = asyncio.run(gateway.items.list_by_configuration(configuration_id))
        assert [i.label for i in items] == ["First", "Second"]

    def test_requires_existing_configuration(self, gateway):
        item = ScoringItem(configuration_id="nope", label="X", field_api_name="F")
        with pytest.raises(RemoteOperationError):
            asyncio.run(gateway.items.save(item))

    def test_negative_cap_rejected_by_store(self, gateway, configuration_id):
        item = ScoringItem(
            configuration_id=configuration_id, label="X", field_api_name="F", point_cap=-1
        )
        with pytest.raises(RemoteOperationError):
            asyncio.run(gateway.items.save(item))

    def test_non_finite_cap_rejected(self, gateway, configuration_id):
        item = ScoringItem(
            configuration_id=configuration_id, label="X", field_api_name="F", point_cap=float("inf")
        )
        with pytest.raises(RemoteOperationError, match="finite"):
            asyncio.run(gateway.items.save(item))

    def test_update_keeps_owner(self, gateway, configuration_id, make_item):
        item_id = make_item()
        item = asyncio.run(gateway.items.get(item_id))
        asyncio.run(gateway.items.save(item.model_copy(update={"label": "Renamed", "point_cap": 20})))

        stored = asyncio.run(gateway.items.get(item_id))
        assert stored.label == "Renamed"
        assert stored.point_cap == 20
        assert stored.configuration_id == configuration_id
        assert stored.data_type is FieldDataType.NUMBER


class TestValues:
    def test_score_over_cap_rejected(self, gateway, make_item):
        item_id = make_item(point_cap=10)
        with pytest.raises(RemoteOperationError, match="exceeds"):
            asyncio.run(
                gateway.values.save(ScoringValue(item_id=item_id, value_text="1", awarded_score=11))
            )

    def test_non_finite_score_rejected(self, gateway, make_item):
        item_id = make_item(point_cap=10)
        with pytest.raises(RemoteOperationError, match="finite"):
            asyncio.run(
                gateway.values.save(ScoringValue(item_id=item_id, value_text="1", awarded_score=float("nan")))
            )

    def test_requires_existing_item(self, gateway):
        with pytest.raises(RemoteOperationError):
            asyncio.run(gateway.values.save(ScoringValue(item_id="nope", awarded_score=1)))

    def test_update_and_delete(self, gateway, make_item):
        item_id = make_item()
        value_id = asyncio.run(
            gateway.values.save(ScoringValue(item_id=item_id, value_text="5", awarded_score=2))
        )
        value = asyncio.run(gateway.values.list_by_item(item_id))[0]
        asyncio.run(gateway.values.save(value.model_copy(update={"awarded_score": 7.5})))

        values = asyncio.run(gateway.values.list_by_item(item_id))
        assert [(v.id, v.awarded_score) for v in values] == [(value_id, 7.5)]

        asyncio.run(gateway.values.delete(value_id))
        assert asyncio.run(gateway.values.list_by_item(item_id)) == []

    def test_item_delete_cascades(self, gateway, make_item):
        item_id = make_item()
        asyncio.run(gateway.values.save(ScoringValue(item_id=item_id, value_text="1", awarded_score=1)))
        asyncio.run(gateway.items.delete(item_id))
        assert asyncio.run(gateway.values.list_by_item(item_id)) == []


class TestCatalog:
    def test_eligible_fields_in_catalog_order(self, gateway):
        fields = asyncio.run(gateway.catalog.list_eligible_fields())
        assert [f.api_name for f in fields] == ["AnnualRevenue", "Industry", "HasBudget__c", "Email"]
        assert fields[0].data_type is FieldDataType.NUMBER
        assert fields[2].data_type is FieldDataType.CHECKBOX

    def test_field_and_options_for_item(self, gateway, make_item):
        item_id = make_item(data_type="PICKLIST", field_api_name="Industry", point_cap=8)
        details = asyncio.run(gateway.catalog.get_field_and_options_for_item(item_id))
        assert details.data_type is FieldDataType.PICKLIST
        assert details.point_cap == 8
        assert [o.value for o in details.options] == ["Tech", "Retail", "Energy"]
        assert details.options[2].display_label == "Energy"

    def test_unknown_item(self, gateway):
        assert asyncio.run(gateway.catalog.get_field_and_options_for_item("nope")) is None

    def test_reload_replaces_catalog(self, gateway):
        assert gateway.load_catalog([]) == 0
        assert asyncio.run(gateway.catalog.list_eligible_fields()) == []
