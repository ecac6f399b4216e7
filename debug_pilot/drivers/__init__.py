"""Debugger drivers for Debug Pilot.

This module provides the driver registration system and discovery
mechanism. All extension-specific logic is encapsulated within drivers
that implement the DebuggerDriver interface.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from debug_pilot.drivers.base import PhpExtensionDriver
    from debug_pilot.utils.environment import EnvironmentDetector

_DRIVERS: dict[str, type[PhpExtensionDriver]] = {}
_LOADED = False

# Known driver modules, in registration order
_DRIVER_MODULES = [
    "debug_pilot.drivers.xdebug",
    "debug_pilot.drivers.pcov",
]


def register_driver(
    name: str,
) -> Callable[[type[PhpExtensionDriver]], type[PhpExtensionDriver]]:
    """Decorator for driver registration.

    Usage:
        @register_driver("xdebug")
        class XdebugDriver(PhpExtensionDriver):
            ...
    """

    def decorator(cls: type[PhpExtensionDriver]) -> type[PhpExtensionDriver]:
        _DRIVERS[name] = cls
        return cls

    return decorator


def _load_drivers() -> None:
    """Load all driver modules to trigger registration."""
    global _LOADED
    if _LOADED:
        return

    for module_name in _DRIVER_MODULES:
        importlib.import_module(module_name)

    _LOADED = True


def list_drivers() -> list[str]:
    """List all registered driver names."""
    _load_drivers()
    return list(_DRIVERS.keys())


def create_drivers(env: EnvironmentDetector) -> list[PhpExtensionDriver]:
    """Instantiate every registered driver against one environment.

    Args:
        env: Environment detector shared by the drivers

    Returns:
        Driver instances in registration order
    """
    _load_drivers()
    return [cls(env) for cls in _DRIVERS.values()]
