"""Extension installer.

Runs the command suggested by the InstallationAdvisor as a subprocess,
streaming stdout line by line to a callback. There is no timeout: the
call blocks until the command exits.
"""

import logging
import subprocess
import tempfile
from collections.abc import Callable
from dataclasses import dataclass

from debug_pilot.core.advisor import InstallationAdvisor
from debug_pilot.utils.environment import OS_WINDOWS, EnvironmentDetector

logger = logging.getLogger("debug_pilot.installer")

# Exit code reported when auto-install is refused ("command cannot execute")
EXIT_NOT_EXECUTABLE = 126


@dataclass(frozen=True)
class InstallResult:
    """Result of one install command execution."""

    success: bool
    output: str = ""
    error_output: str = ""
    exit_code: int = 0

    @classmethod
    def succeeded(cls, output: str = "") -> "InstallResult":
        return cls(success=True, output=output, error_output="", exit_code=0)

    @classmethod
    def failed(cls, error_output: str, exit_code: int = 1) -> "InstallResult":
        return cls(success=False, output="", error_output=error_output, exit_code=exit_code)


class ExtensionInstaller:
    """Installs PHP extensions with the OS-appropriate command."""

    def __init__(self, env: EnvironmentDetector, advisor: InstallationAdvisor):
        self._env = env
        self._advisor = advisor

    def can_auto_install(self) -> bool:
        """Check whether installing without manual steps is possible.

        Docker containers other than official PHP images, and Windows,
        need manual installation.
        """
        if self._env.is_docker() and not self._env.is_official_php_docker_image():
            return False
        return self._env.get_os() != OS_WINDOWS

    def install(
        self,
        extension_name: str,
        on_output: Callable[[str], None] | None = None,
    ) -> InstallResult:
        """Run the install command for an extension.

        Args:
            extension_name: e.g. "xdebug", "pcov"
            on_output: Called with each stdout line as it is produced

        Returns:
            InstallResult describing the command's outcome
        """
        if not self.can_auto_install():
            return InstallResult.failed(
                "Auto-install is not supported in this environment (Docker or Windows). "
                "Please follow the manual instructions.",
                EXIT_NOT_EXECUTABLE,
            )

        command = self._advisor.get_install_command(extension_name.lower())
        return self._execute(command, on_output)

    def _execute(self, command: str, on_output: Callable[[str], None] | None) -> InstallResult:
        logger.info("Running install command: %s", command)

        # stderr goes to a temporary file so a chatty command cannot block on a full pipe
        with tempfile.TemporaryFile(mode="w+", errors="replace") as stderr_file:
            try:
                process = subprocess.Popen(
                    command,
                    shell=True,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    text=True,
                    errors="replace",
                )
            except OSError as e:
                logger.error("Failed to start install command: %s", e)
                return InstallResult.failed(f"Failed to execute: {command} ({e})")

            stdout_lines = []
            assert process.stdout is not None
            with process.stdout:
                for line in process.stdout:
                    stdout_lines.append(line)
                    if on_output is not None:
                        on_output(line.rstrip("\r\n"))

            exit_code = process.wait()
            stderr_file.seek(0)
            stderr = stderr_file.read()

        stdout = "".join(stdout_lines)
        if exit_code != 0:
            logger.error("Install command failed with exit code %d", exit_code)
            return InstallResult.failed(stderr if stderr else stdout, exit_code)

        logger.info("Install command completed successfully")
        return InstallResult.succeeded(stdout)
