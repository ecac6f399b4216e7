"""OS-specific installation commands and instructions for PHP extensions.

The advisor only produces text; running a command is the installer's job.
"""

import logging
import shutil

from debug_pilot.utils.environment import OS_MACOS, OS_WINDOWS, EnvironmentDetector

logger = logging.getLogger(__name__)

# Checked in order; the first one on PATH wins
_LINUX_PACKAGE_MANAGERS = ("apt", "dnf", "yum")

XDEBUG_WIZARD_URL = "https://xdebug.org/wizard"


class InstallationAdvisor:
    """Suggests how to install an extension in the detected environment."""

    def __init__(self, env: EnvironmentDetector):
        self._env = env

    def get_install_command(self, extension_name: str) -> str:
        """Get the shell command that installs an extension.

        Args:
            extension_name: e.g. "xdebug", "pcov"
        """
        ext = extension_name.lower()

        if self._env.is_docker():
            return f"pecl install {ext} && docker-php-ext-enable {ext}"

        os_name = self._env.get_os()
        if os_name == OS_MACOS:
            return f"pecl install {ext}"
        if os_name == OS_WINDOWS:
            return self._windows_command(ext)
        return self._linux_command(ext)

    def get_dockerfile_command(self, extension_name: str) -> str:
        """Get the Dockerfile ``RUN`` line that installs an extension."""
        ext = extension_name.lower()
        return f"RUN pecl install {ext} && docker-php-ext-enable {ext}"

    def get_install_instructions(self, extension_name: str) -> str:
        """Get multi-line, human-readable installation instructions."""
        ext = extension_name.lower()

        if self._env.is_docker():
            environment = "Docker"
            command = self.get_dockerfile_command(ext)
        else:
            environment = {OS_MACOS: "macOS", OS_WINDOWS: "Windows"}.get(self._env.get_os(), "Linux")
            command = self.get_install_command(ext)

        php_version = self._env.get_php_version() or "unknown"

        lines = [
            f"The '{ext}' extension is not installed.",
            "",
            f"Detected environment: {environment} (PHP {php_version})",
            "",
            "Install it with:",
            f"  {command}",
            "",
            "After installing, restart your PHP process or web server.",
        ]
        return "\n".join(lines)

    def detect_linux_package_manager(self) -> str:
        """Return the first available Linux package manager, or "pecl"."""
        for manager in _LINUX_PACKAGE_MANAGERS:
            if shutil.which(manager):
                logger.debug("Detected package manager: %s", manager)
                return manager
        return "pecl"

    def _linux_command(self, ext: str) -> str:
        manager = self.detect_linux_package_manager()
        if manager == "apt":
            return f"sudo apt install -y php-{ext}"
        if manager in ("dnf", "yum"):
            return f"sudo {manager} install -y php-pecl-{ext}"
        return f"pecl install {ext}"

    def _windows_command(self, ext: str) -> str:
        if ext == "xdebug":
            return f"Download the correct DLL from {XDEBUG_WIZARD_URL} and add it to php.ini"
        return f"pecl install {ext}"
