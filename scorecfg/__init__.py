"""scorecfg - lead scoring configuration editor core."""

from .errors import NavigationError, NotFoundError, RemoteOperationError, ScorecfgError
from .gateway import DuckDBGateway
from .state import ConfigurationOrchestrator, OperationStatus, Screen

__version__ = "0.1.0"

__all__ = [
    "ConfigurationOrchestrator",
    "DuckDBGateway",
    "NavigationError",
    "NotFoundError",
    "OperationStatus",
    "RemoteOperationError",
    "ScorecfgError",
    "Screen",
]
