"""Remote data gateway contract.

Every call is a coroutine. Failures raise ``RemoteOperationError`` carrying
a human-readable message.
"""

from __future__ import annotations

from typing import Protocol

from ..models import (
    ItemFieldDetails,
    LeadFieldDescriptor,
    ScoringConfiguration,
    ScoringItem,
    ScoringValue,
)


class ConfigurationGateway(Protocol):
    async def list(self) -> list[ScoringConfiguration]: ...

    async def get(self, configuration_id: str) -> ScoringConfiguration | None: ...

    async def save(self, record: ScoringConfiguration) -> str: ...

    async def delete(self, configuration_id: str) -> None:
        """Delete a configuration; items and values cascade server-side."""
        ...


class ItemGateway(Protocol):
    async def list_by_configuration(self, configuration_id: str) -> list[ScoringItem]: ...

    async def get(self, item_id: str) -> ScoringItem | None: ...

    async def next_order_index(self, configuration_id: str) -> int: ...

    async def save(self, record: ScoringItem) -> str: ...

    async def delete(self, item_id: str) -> None:
        """Delete an item; its values cascade server-side."""
        ...


class ValueGateway(Protocol):
    async def list_by_item(self, item_id: str) -> list[ScoringValue]: ...

    async def save(self, record: ScoringValue) -> str: ...

    async def delete(self, value_id: str) -> None: ...


class CatalogGateway(Protocol):
    async def list_eligible_fields(self) -> list[LeadFieldDescriptor]: ...

    async def get_field_and_options_for_item(self, item_id: str) -> ItemFieldDetails | None: ...


class ScoringGateway(Protocol):
    """Entity gateways grouped the way the orchestrator consumes them."""

    configurations: ConfigurationGateway
    items: ItemGateway
    values: ValueGateway
    catalog: CatalogGateway
