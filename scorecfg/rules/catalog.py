"""Resolve lead fields picked from the catalog."""

from __future__ import annotations

import logging
from typing import Iterable

from ..models import LeadFieldDescriptor, ScoringItem
from .labels import shorten_label

logger = logging.getLogger(__name__)


class FieldCatalogResolver:
    """Lookup over the catalog fields fetched for the session."""

    def __init__(self, fields: Iterable[LeadFieldDescriptor] = ()):
        self._fields: dict[str, LeadFieldDescriptor] = {}
        for descriptor in fields:
            # First occurrence wins, matching a linear search over the list
            self._fields.setdefault(descriptor.api_name, descriptor)

    @property
    def fields(self) -> list[LeadFieldDescriptor]:
        return list(self._fields.values())

    def resolve(self, api_name: str | None) -> LeadFieldDescriptor | None:
        """Return the descriptor for ``api_name``, or None if not in the catalog."""
        if not api_name:
            return None
        return self._fields.get(api_name)

    def apply_selection(self, item: ScoringItem, api_name: str | None) -> ScoringItem:
        """Bind ``item`` to the selected catalog field.

        Returns a copy with the field API name, its data type and the
        shortened catalog label. Unknown selections leave the item unchanged.
        """
        descriptor = self.resolve(api_name)
        if descriptor is None:
            logger.debug(f"Catalog field not found: {api_name!r}")
            return item

        return item.model_copy(
            update={
                "field_api_name": descriptor.api_name,
                "data_type": descriptor.data_type,
                "label": shorten_label(descriptor.label),
            }
        )
