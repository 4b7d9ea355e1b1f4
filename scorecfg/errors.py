"""Exceptions raised across the scoring configuration core.

Local rule violations are not exceptions: they are returned as
``ValidationResult`` values (see ``scorecfg.rules.constraints``).
"""

from __future__ import annotations


class ScorecfgError(Exception):
    """Base exception for scorecfg."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class RemoteOperationError(ScorecfgError):
    """A gateway call failed. ``message`` is the server-supplied text."""


class NotFoundError(ScorecfgError):
    """A record could not be loaded by id (stale or deleted)."""

    def __init__(self, resource: str = "Record", resource_id: str | None = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(message)


class NavigationError(ScorecfgError):
    """An intent that is not valid on the current screen."""
