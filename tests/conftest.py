"""
Shared pytest fixtures for scorecfg tests.

Provides an in-memory DuckDB gateway seeded with a small lead field
catalog, a notifier that records what it is told, and an orchestrator
wired to both.
"""

import asyncio

import pytest

from scorecfg.gateway import DuckDBGateway
from scorecfg.models import CatalogField, PicklistOption, ScoringConfiguration, ScoringItem
from scorecfg.notify import Notification, NotificationLevel
from scorecfg.state import ConfigurationOrchestrator

CATALOG = [
    CatalogField(api_name="AnnualRevenue", label="Annual Revenue (USD)", data_type="currency"),
    CatalogField(
        api_name="Industry",
        label="Industry",
        data_type="picklist",
        options=[
            PicklistOption(value="Tech", label="Technology"),
            PicklistOption(value="Retail", label="Retail"),
            PicklistOption(value="Energy"),
        ],
    ),
    CatalogField(api_name="HasBudget__c", label="Has Budget", data_type="boolean"),
    CatalogField(api_name="Email", label="Email", data_type="email"),
]


class RecordingNotifier:
    """Notifier that keeps every notification."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def of_level(self, level: NotificationLevel) -> list[Notification]:
        return [n for n in self.notifications if n.level is level]


@pytest.fixture
def gateway():
    """In-memory gateway with the test catalog loaded."""
    gw = DuckDBGateway()
    gw.load_catalog(CATALOG)
    yield gw
    gw.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def orchestrator(gateway, notifier):
    return ConfigurationOrchestrator(gateway, notifier=notifier)


@pytest.fixture
def configuration_id(gateway):
    """Id of a saved configuration named 'Q1 Leads'."""
    return asyncio.run(gateway.configurations.save(ScoringConfiguration(name="Q1 Leads")))


@pytest.fixture
def make_item(gateway, configuration_id):
    """Factory saving an item under ``configuration_id``."""

    def _make(data_type="NUMBER", point_cap=10.0, field_api_name="AnnualRevenue", **kwargs):
        item = ScoringItem(
            configuration_id=configuration_id,
            label=kwargs.pop("label", f"{data_type.title()} item"),
            field_api_name=field_api_name,
            data_type=data_type,
            point_cap=point_cap,
            **kwargs,
        )
        return asyncio.run(gateway.items.save(item))

    return _make
