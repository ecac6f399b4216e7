"""Registry of debugger drivers and IDE integrators.

Drivers and integrators are registered once at startup and then looked
up by name. Registration order is preserved for listing and detection.
"""

from __future__ import annotations

import logging
from pathlib import Path

from debug_pilot.drivers import create_drivers
from debug_pilot.drivers.base import DebuggerDriver
from debug_pilot.integrators import create_integrators
from debug_pilot.integrators.base import IdeIntegrator
from debug_pilot.utils.environment import EnvironmentDetector

logger = logging.getLogger(__name__)


class UnknownDriverError(ValueError):
    """No driver or integrator is registered under the requested name."""

    def __init__(self, kind: str, name: str, available: list[str]):
        self.name = name
        self.available = available
        listed = ", ".join(available) or "none"
        super().__init__(f'{kind} "{name}" is not registered. Available: [{listed}]')


class DriverManager:
    """Resolves debugger drivers and IDE integrators by name."""

    def __init__(self) -> None:
        self._debuggers: dict[str, DebuggerDriver] = {}
        self._integrators: dict[str, IdeIntegrator] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def register_debugger(self, driver: DebuggerDriver) -> DriverManager:
        """Register a debugger driver under its name."""
        self._debuggers[driver.name] = driver
        logger.debug("Registered debugger driver: %s", driver.name)
        return self

    def register_integrator(self, integrator: IdeIntegrator) -> DriverManager:
        """Register an IDE integrator under its name."""
        self._integrators[integrator.name] = integrator
        logger.debug("Registered IDE integrator: %s", integrator.name)
        return self

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_debugger(self, name: str) -> DebuggerDriver:
        """Resolve a debugger driver by name.

        Raises:
            UnknownDriverError: If no driver with the name is registered
        """
        if name not in self._debuggers:
            raise UnknownDriverError("Debugger driver", name, list(self._debuggers))
        return self._debuggers[name]

    def resolve_integrator(self, name: str) -> IdeIntegrator:
        """Resolve an IDE integrator by name.

        Raises:
            UnknownDriverError: If no integrator with the name is registered
        """
        if name not in self._integrators:
            raise UnknownDriverError("IDE integrator", name, list(self._integrators))
        return self._integrators[name]

    # =========================================================================
    # Discovery
    # =========================================================================

    def get_available_debuggers(self) -> list[DebuggerDriver]:
        return list(self._debuggers.values())

    def get_available_integrators(self) -> list[IdeIntegrator]:
        return list(self._integrators.values())

    def get_installed_debuggers(self) -> list[DebuggerDriver]:
        """Return drivers whose extension is loaded or at least present in php.ini."""
        return [d for d in self._debuggers.values() if d.is_installed() or d.has_ini_directive()]

    def detect_ide(self, project_path: Path) -> IdeIntegrator | None:
        """Return the first registered integrator that recognizes the project."""
        for integrator in self._integrators.values():
            if integrator.is_detected(project_path):
                logger.info("Detected IDE: %s", integrator.name)
                return integrator
        return None


def create_driver_manager(env: EnvironmentDetector) -> DriverManager:
    """Create a DriverManager with every built-in driver and integrator registered."""
    manager = DriverManager()
    for driver in create_drivers(env):
        manager.register_debugger(driver)
    for integrator in create_integrators():
        manager.register_integrator(integrator)
    return manager
