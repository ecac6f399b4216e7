"""Tests for debug_pilot.core.manager module."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from debug_pilot.core.manager import DriverManager, UnknownDriverError, create_driver_manager
from debug_pilot.drivers.base import DebuggerDriver
from debug_pilot.integrators.base import IdeIntegrator


def make_driver(name: str, installed: bool = False, directive: bool = False) -> MagicMock:
    driver = MagicMock(spec=DebuggerDriver)
    driver.name = name
    driver.is_installed.return_value = installed
    driver.has_ini_directive.return_value = directive
    return driver


def make_integrator(name: str, detected: bool = False) -> MagicMock:
    integrator = MagicMock(spec=IdeIntegrator)
    integrator.name = name
    integrator.is_detected.return_value = detected
    return integrator


class TestRegistration:
    """Tests for registering and resolving drivers."""

    def test_resolve_debugger(self):
        xdebug = make_driver("xdebug")
        manager = DriverManager().register_debugger(xdebug)
        assert manager.resolve_debugger("xdebug") is xdebug

    def test_resolve_unknown_debugger(self):
        manager = DriverManager().register_debugger(make_driver("xdebug")).register_debugger(make_driver("pcov"))

        with pytest.raises(UnknownDriverError) as exc_info:
            manager.resolve_debugger("phpdbg")

        assert str(exc_info.value) == 'Debugger driver "phpdbg" is not registered. Available: [xdebug, pcov]'
        assert exc_info.value.available == ["xdebug", "pcov"]

    def test_reregister_replaces(self):
        first = make_driver("xdebug")
        second = make_driver("xdebug")
        manager = DriverManager().register_debugger(first).register_debugger(second)
        assert manager.resolve_debugger("xdebug") is second
        assert len(manager.get_available_debuggers()) == 1

    def test_resolve_integrator(self):
        vscode = make_integrator("vscode")
        manager = DriverManager().register_integrator(vscode)
        assert manager.resolve_integrator("vscode") is vscode

    def test_resolve_unknown_integrator(self):
        with pytest.raises(UnknownDriverError, match=r'IDE integrator "vscode" is not registered. Available: \[none\]'):
            DriverManager().resolve_integrator("vscode")

    def test_available_preserves_order(self):
        manager = DriverManager()
        for name in ("xdebug", "pcov"):
            manager.register_debugger(make_driver(name))
        assert [d.name for d in manager.get_available_debuggers()] == ["xdebug", "pcov"]
        assert manager.get_available_integrators() == []


class TestDiscovery:
    """Tests for installed-driver and IDE discovery."""

    def test_installed_debuggers(self):
        loaded = make_driver("xdebug", installed=True)
        disabled = make_driver("pcov", directive=True)
        absent = make_driver("phpdbg")
        manager = DriverManager()
        for driver in (loaded, disabled, absent):
            manager.register_debugger(driver)

        assert manager.get_installed_debuggers() == [loaded, disabled]

    def test_detect_ide_first_match(self, temp_dir: Path):
        manager = DriverManager()
        manager.register_integrator(make_integrator("vscode"))
        phpstorm = make_integrator("phpstorm", detected=True)
        manager.register_integrator(phpstorm)
        manager.register_integrator(make_integrator("other", detected=True))

        assert manager.detect_ide(temp_dir) is phpstorm

    def test_detect_ide_none(self, temp_dir: Path):
        manager = DriverManager().register_integrator(make_integrator("vscode"))
        assert manager.detect_ide(temp_dir) is None


class TestCreateDriverManager:
    """Tests for create_driver_manager."""

    def test_registers_builtin_drivers(self, fake_env):
        manager = create_driver_manager(fake_env)
        assert manager.resolve_debugger("xdebug").name == "xdebug"
        assert manager.resolve_debugger("pcov").name == "pcov"

    def test_registers_builtin_integrators(self, fake_env):
        manager = create_driver_manager(fake_env)
        names = {i.name for i in manager.get_available_integrators()}
        assert names >= {"vscode", "phpstorm", "sublime"}
