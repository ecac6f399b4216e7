"""IDE integrators for Debug Pilot.

This module provides the integrator registration system. Each integrator
writes the debug configuration one IDE needs to accept connections from
a debugger extension.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from debug_pilot.integrators.base import IdeIntegrator

_INTEGRATORS: dict[str, type[IdeIntegrator]] = {}
_LOADED = False

# Known integrator modules, in detection order
_INTEGRATOR_MODULES = [
    "debug_pilot.integrators.vscode",
    "debug_pilot.integrators.phpstorm",
    "debug_pilot.integrators.sublime",
]


def register_integrator(
    name: str,
) -> Callable[[type[IdeIntegrator]], type[IdeIntegrator]]:
    """Decorator for integrator registration.

    Usage:
        @register_integrator("vscode")
        class VsCodeIntegrator(IdeIntegrator):
            ...
    """

    def decorator(cls: type[IdeIntegrator]) -> type[IdeIntegrator]:
        _INTEGRATORS[name] = cls
        return cls

    return decorator


def _load_integrators() -> None:
    """Load all integrator modules to trigger registration."""
    global _LOADED
    if _LOADED:
        return

    for module_name in _INTEGRATOR_MODULES:
        importlib.import_module(module_name)

    _LOADED = True


def list_integrators() -> list[str]:
    """List all registered integrator names."""
    _load_integrators()
    return list(_INTEGRATORS.keys())


def create_integrators() -> list[IdeIntegrator]:
    """Instantiate every registered integrator, in registration order."""
    _load_integrators()
    return [cls() for cls in _INTEGRATORS.values()]
