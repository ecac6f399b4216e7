"""Sublime Text integrator.

Stores Xdebug client settings under ``settings.xdebug`` in the project's
``*.sublime-project`` file, creating one named after the project
directory when none exists.
"""

from pathlib import Path
from typing import Any

from debug_pilot.config.schemas import DEFAULT_CLIENT_PORT
from debug_pilot.drivers.base import DebuggerDriver
from debug_pilot.integrators import register_integrator
from debug_pilot.integrators.base import IdeIntegrator, load_json_config, write_json_config

PROJECT_SUFFIX = ".sublime-project"


@register_integrator("sublime")
class SublimeIntegrator(IdeIntegrator):
    """Integrator for Sublime Text with the Xdebug Client package."""

    @property
    def name(self) -> str:
        return "sublime"

    def is_detected(self, project_path: Path) -> bool:
        return self.find_project_file(project_path) is not None

    def find_project_file(self, project_path: Path) -> Path | None:
        """Return the first ``*.sublime-project`` file in the project root."""
        matches = sorted(project_path.glob(f"*{PROJECT_SUFFIX}"))
        return matches[0] if matches else None

    def generate_config(self, driver: DebuggerDriver, project_path: Path) -> None:
        project_file = self.find_project_file(project_path)
        if project_file is None:
            project_file = project_path / f"{project_path.resolve().name}{PROJECT_SUFFIX}"

        data = load_json_config(project_file) or {"folders": [{"path": "."}]}
        settings = data.get("settings")
        if not isinstance(settings, dict):
            settings = {}
        data["settings"] = {**settings, "xdebug": self.build_xdebug_settings(driver)}

        write_json_config(project_file, data)

    def build_xdebug_settings(self, driver: DebuggerDriver) -> dict[str, Any]:
        return {
            "url": "http://localhost",
            "ide_key": "sublime.xdebug",
            "port": DEFAULT_CLIENT_PORT,
            "super_globals": True,
            "close_on_stop": True,
            "debug": True,
            "debugger_engine": driver.name,
            "path_mapping": {},
        }
