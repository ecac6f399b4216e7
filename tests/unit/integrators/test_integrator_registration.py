"""Tests for integrator registration."""

from debug_pilot.integrators import create_integrators, list_integrators
from debug_pilot.integrators.base import IdeIntegrator


class TestIntegratorRegistry:
    """Tests for the integrator registry."""

    def test_builtin_integrators_registered(self):
        assert set(list_integrators()) >= {"vscode", "phpstorm", "sublime"}

    def test_create_integrators(self):
        integrators = create_integrators()
        assert {i.name for i in integrators} >= {"vscode", "phpstorm", "sublime"}
        assert all(isinstance(i, IdeIntegrator) for i in integrators)
