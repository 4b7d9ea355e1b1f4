"""Locate and read ``scorecfg.yaml``."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import ScorecfgConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Reads scorecfg configuration for a project.

    The project directory is searched first, then ``~/.scorecfg``. A missing
    or unreadable file yields the default configuration.
    """

    CONFIG_FILENAME = "scorecfg.yaml"
    USER_CONFIG_DIR = Path.home() / ".scorecfg"

    def __init__(self, project_path: Path | None = None):
        self._project_path = project_path or Path.cwd()

    def candidates(self) -> list[Path]:
        return [
            self._project_path / self.CONFIG_FILENAME,
            self.USER_CONFIG_DIR / self.CONFIG_FILENAME,
        ]

    def get_config_path(self) -> Path | None:
        return next((path for path in self.candidates() if path.is_file()), None)

    def load(self) -> ScorecfgConfig:
        config_path = self.get_config_path()
        if config_path is None:
            logger.debug("No scorecfg.yaml found, using defaults")
            return ScorecfgConfig()

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
            config = ScorecfgConfig.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.warning(f"Ignoring invalid config {config_path}: {e}")
            return ScorecfgConfig()

        logger.info(
            f"Loaded config from {config_path} "
            f"({len(config.catalog)} catalog fields, "
            f"{len(config.refresh.fan_out)} fan-out rules)"
        )
        return config


def load_config(project_path: Path | str | None = None) -> ScorecfgConfig:
    """Load configuration for ``project_path`` (current directory if None)."""
    return ConfigLoader(Path(project_path) if project_path else None).load()
