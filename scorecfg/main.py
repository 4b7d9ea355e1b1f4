"""Entry point for scorecfg."""

import asyncio
import logging
import sys
from pathlib import Path

from .config.loader import load_config
from .gateway import DuckDBGateway, ScoringGateway
from .state import ConfigurationOrchestrator


async def render_tree(orchestrator: ConfigurationOrchestrator, gateway: ScoringGateway) -> list[str]:
    """Render configurations with their items and values as indented lines."""
    await orchestrator.load()

    lines = []
    for configuration in orchestrator.refresh.configurations.data:
        status = "active" if configuration.active else "inactive"
        lines.append(f"{configuration.name} [{status}]")
        for item in await gateway.items.list_by_configuration(configuration.id):
            lines.append(
                f"  {item.order_index}. {item.label} "
                f"({item.data_type.display_name}, cap {item.point_cap:g})"
            )
            for value in await gateway.values.list_by_item(item.id):
                match = " exact" if value.exact_match else ""
                lines.append(f"    - {value.display_label}: {value.awarded_score:g}{match}")
    return lines


def main():
    """Print the scoring configurations stored for a project."""
    if len(sys.argv) > 1:
        project_path = Path(sys.argv[1]).resolve()
    else:
        project_path = Path.home() / ".scorecfg"
        project_path.mkdir(parents=True, exist_ok=True)

    config = load_config(project_path)
    logging.basicConfig(
        level=config.settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    database = config.settings.database
    if database != ":memory:" and not Path(database).is_absolute():
        database = str(project_path / database)

    gateway = DuckDBGateway.open(database)
    try:
        if config.catalog:
            gateway.load_catalog(config.catalog)
        orchestrator = ConfigurationOrchestrator.from_config(gateway, config)
        lines = asyncio.run(render_tree(orchestrator, gateway))
    finally:
        gateway.close()

    if not lines:
        print("No scoring configurations.")
    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
