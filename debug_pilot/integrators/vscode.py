"""VS Code integrator.

Adds a "Listen for ..." launch configuration for the PHP Debug extension
to ``.vscode/launch.json``, merging into an existing file.
"""

from pathlib import Path
from typing import Any

from debug_pilot.config.schemas import DEFAULT_CLIENT_PORT
from debug_pilot.drivers.base import DebuggerDriver
from debug_pilot.integrators import register_integrator
from debug_pilot.integrators.base import (
    IdeIntegrator,
    display_name,
    load_json_config,
    write_json_config,
)

LAUNCH_VERSION = "0.2.0"


@register_integrator("vscode")
class VsCodeIntegrator(IdeIntegrator):
    """Integrator for Visual Studio Code.

    Files:
    .vscode/
    └── launch.json     # "Listen for {Driver}" configuration
    """

    @property
    def name(self) -> str:
        return "vscode"

    def is_detected(self, project_path: Path) -> bool:
        return (project_path / ".vscode").is_dir()

    def get_launch_path(self, project_path: Path) -> Path:
        return project_path / ".vscode" / "launch.json"

    def generate_config(self, driver: DebuggerDriver, project_path: Path) -> None:
        launch_path = self.get_launch_path(project_path)
        entry = self.build_launch_configuration(driver)

        existing = load_json_config(launch_path)
        if existing is None or not isinstance(existing.get("configurations"), list):
            data = {"version": LAUNCH_VERSION, "configurations": [entry]}
        else:
            data = merge_launch_configuration(existing, entry)

        write_json_config(launch_path, data)

    def build_launch_configuration(self, driver: DebuggerDriver) -> dict[str, Any]:
        return {
            "name": f"Listen for {display_name(driver)}",
            "type": "php",
            "request": "launch",
            "port": DEFAULT_CLIENT_PORT,
            "pathMappings": {"/var/www/html": "${workspaceFolder}"},
            "hostname": "0.0.0.0",
            "xdebugSettings": {
                "max_data": 65535,
                "show_hidden": 1,
                "max_children": 100,
            },
        }


def merge_launch_configuration(launch: dict[str, Any], entry: dict[str, Any]) -> dict[str, Any]:
    """Replace the configuration with the same name, or append ``entry``.

    Other configurations and top-level keys are kept as they are.
    """
    configurations = list(launch["configurations"])
    for i, config in enumerate(configurations):
        if isinstance(config, dict) and config.get("name") == entry["name"]:
            configurations[i] = entry
            break
    else:
        configurations.append(entry)

    return {**launch, "configurations": configurations}
