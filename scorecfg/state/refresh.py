"""Cached list views and the invalidation protocol.

The coordinator owns one ``CachedList`` per scope: the configuration list,
the item list of one configuration and the value list of one item. Other
components read the handles and request invalidation; only the coordinator
replaces cached data.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Generic, Iterable, Mapping, TypeVar

from ..gateway import ScoringGateway
from ..models import EntityKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[str | None], Awaitable[list[Any]]]
Listener = Callable[["CachedList"], None]


class CachedList(Generic[T]):
    """Last fetched result of one list view.

    Listeners are notified only after fresh data has replaced the cache.
    """

    def __init__(self, scope: EntityKind, fetch: Fetcher, keyed: bool = True):
        self.scope = scope
        self._fetch = fetch
        self._keyed = keyed
        self._key: str | None = None
        self._data: tuple[T, ...] = ()
        self._version = 0
        self._loaded = False
        self._listeners: list[Listener] = []

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def data(self) -> tuple[T, ...]:
        return self._data

    @property
    def version(self) -> int:
        """Incremented on every replacement."""
        return self._version

    @property
    def loaded(self) -> bool:
        return self._loaded

    def attach(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def detach(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def find(self, record_id: str | None) -> T | None:
        """Find a cached record by id."""
        if record_id is None:
            return None
        return next((r for r in self._data if getattr(r, "id", None) == record_id), None)

    async def _refresh(self) -> tuple[T, ...]:
        if self._keyed and self._key is None:
            rows: list[T] = []
        else:
            rows = await self._fetch(self._key)
        self._replace(tuple(rows))
        return self._data

    def _rekey(self, key: str | None) -> None:
        if key != self._key:
            self._key = key
            self._loaded = False

    def _replace(self, rows: tuple[T, ...]) -> None:
        self._data = rows
        self._version += 1
        self._loaded = True
        logger.debug(f"{self.scope.value} cache v{self._version}: {len(rows)} rows (key={self._key})")
        for listener in list(self._listeners):
            listener(self)


class RefreshCoordinator:
    """Owns the cached list views and sequences their invalidation."""

    def __init__(
        self,
        gateway: ScoringGateway,
        fan_out: Mapping[EntityKind, Iterable[EntityKind]] | None = None,
    ):
        self._lists: dict[EntityKind, CachedList] = {
            EntityKind.CONFIGURATION: CachedList(
                EntityKind.CONFIGURATION,
                lambda _key: gateway.configurations.list(),
                keyed=False,
            ),
            EntityKind.ITEM: CachedList(
                EntityKind.ITEM,
                lambda key: gateway.items.list_by_configuration(key),
            ),
            EntityKind.VALUE: CachedList(
                EntityKind.VALUE,
                lambda key: gateway.values.list_by_item(key),
            ),
        }
        self._fan_out: dict[EntityKind, tuple[EntityKind, ...]] = {
            scope: tuple(targets) for scope, targets in (fan_out or {}).items()
        }

    def handle(self, scope: EntityKind) -> CachedList:
        """Read-only access to the cached list of ``scope``."""
        return self._lists[scope]

    @property
    def configurations(self) -> CachedList:
        return self._lists[EntityKind.CONFIGURATION]

    @property
    def items(self) -> CachedList:
        return self._lists[EntityKind.ITEM]

    @property
    def values(self) -> CachedList:
        return self._lists[EntityKind.VALUE]

    def fan_out_for(self, scope: EntityKind) -> tuple[EntityKind, ...]:
        return self._fan_out.get(scope, ())

    async def bind(self, scope: EntityKind, key: str | None) -> tuple:
        """Point a keyed list at ``key`` and fetch it."""
        cached = self._lists[scope]
        cached._rekey(key)
        return await cached._refresh()

    def unbind(self, scope: EntityKind) -> None:
        """Drop the key and data of a keyed list without fetching."""
        cached = self._lists[scope]
        cached._rekey(None)
        cached._replace(())

    async def invalidate(self, scope: EntityKind) -> None:
        """Re-fetch ``scope`` and any declared fan-out scopes.

        Returns once every affected cache holds fresh data.
        """
        await self.invalidate_many([scope])

    async def invalidate_many(self, scopes: Iterable[EntityKind]) -> None:
        ordered: list[EntityKind] = []
        for scope in scopes:
            for target in (scope, *self.fan_out_for(scope)):
                if target not in ordered:
                    ordered.append(target)

        for target in ordered:
            logger.debug(f"Invalidating {target.value} cache")
            await self._lists[target]._refresh()
