"""Extension readiness flow.

Decides whether a driver's extension is usable, needs enabling, or needs
installing, and drives the advisor and installer accordingly. User
interaction goes through two callbacks so the flow stays independent of
the terminal.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from debug_pilot.core.advisor import InstallationAdvisor
from debug_pilot.core.installer import ExtensionInstaller
from debug_pilot.drivers.base import DebuggerDriver

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]
ConfirmCallback = Callable[[str, bool], bool]


@dataclass(frozen=True)
class ExtensionReadyResult:
    """Outcome of one readiness check."""

    success: bool
    requires_restart: bool = False
    message: str = ""

    @classmethod
    def ready(cls, requires_restart: bool = False, message: str = "") -> "ExtensionReadyResult":
        return cls(success=True, requires_restart=requires_restart, message=message)

    @classmethod
    def failure(cls, message: str) -> "ExtensionReadyResult":
        return cls(success=False, requires_restart=False, message=message)


class ExtensionInstallationService:
    """Makes an extension ready to use: installed and enabled."""

    def __init__(self, installer: ExtensionInstaller, advisor: InstallationAdvisor):
        self._installer = installer
        self._advisor = advisor

    def ensure_extension_ready(
        self,
        driver: DebuggerDriver,
        output: OutputCallback,
        confirm: ConfirmCallback,
    ) -> ExtensionReadyResult:
        """Ensure the driver's extension is installed and enabled.

        The states are checked in order, and the first that applies decides
        the outcome:

        1. Loaded by PHP: ready, nothing to do.
        2. Directive present in php.ini: offer to enable it.
        3. Absent and auto-install unavailable: print instructions, fail.
        4. Absent and auto-install available: offer to install it.

        Args:
            driver: Driver of the extension to prepare
            output: Receives lines of progress and instructions
            confirm: Asks a yes/no question, given the prompt and its default

        Returns:
            ExtensionReadyResult; this method does not raise
        """
        name = driver.name

        if driver.is_installed():
            return ExtensionReadyResult.ready()

        if driver.has_ini_directive():
            return self._enable(driver, output, confirm)

        if not self._installer.can_auto_install():
            command = self._advisor.get_install_command(name)
            instructions = self._advisor.get_install_instructions(name)

            output(f"The '{name}' extension is not installed.")
            output("")
            output(instructions)
            output("")
            output(f"Suggested command: {command}")
            output("")
            output("After installing, re-run this command.")
            return ExtensionReadyResult.failure(f"Cannot proceed without installing {name}.")

        return self._install(driver, output, confirm)

    def _enable(
        self, driver: DebuggerDriver, output: OutputCallback, confirm: ConfirmCallback
    ) -> ExtensionReadyResult:
        name = driver.name
        if not confirm(f"The '{name}' extension is disabled. Would you like to enable it now?", True):
            return ExtensionReadyResult.failure(f"Cannot proceed without enabling {name}.")

        try:
            driver.set_enabled(True)
        except Exception as e:
            logger.debug("Enabling %s failed", name, exc_info=True)
            return ExtensionReadyResult.failure(f"Failed to enable {name}: {e}")

        output(f"✓ {name} enabled.")
        return ExtensionReadyResult.ready(requires_restart=True)

    def _install(
        self, driver: DebuggerDriver, output: OutputCallback, confirm: ConfirmCallback
    ) -> ExtensionReadyResult:
        name = driver.name
        prompt = f"The '{name}' extension is not installed. Would you like to install it now?"
        if not confirm(prompt, True):
            return ExtensionReadyResult.failure(f"Cannot proceed without installing {name}.")

        output(f"Installing {name}...")
        result = self._installer.install(name, output)

        if not result.success:
            output("✗ Installation failed.")
            if result.error_output:
                output(result.error_output)
            return ExtensionReadyResult.failure(f"Failed to install {name}.")

        output(f"✓ {name} installed successfully.")
        return ExtensionReadyResult.ready(requires_restart=True)
