"""Operating system, Docker and PHP runtime detection.

The detector is the only place that looks at the host: drivers, the
installation advisor and the CLI receive an instance and never probe the
environment themselves. PHP facts (loaded php.ini, version, loaded
modules, runtime ini values) come from the ``php`` executable.
"""

from __future__ import annotations

import ipaddress
import logging
import os
import platform
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from debug_pilot.utils.ini_editor import has_line, is_line_enabled

logger = logging.getLogger(__name__)

OperatingSystem = Literal["macos", "linux", "windows"]

OS_MACOS: OperatingSystem = "macos"
OS_LINUX: OperatingSystem = "linux"
OS_WINDOWS: OperatingSystem = "windows"

DOCKER_ENV_FILE = Path("/.dockerenv")
INIT_CGROUP_FILE = Path("/proc/1/cgroup")
ROUTE_TABLE_FILE = Path("/proc/net/route")
DOCKER_PHP_HELPERS = (
    Path("/usr/local/bin/docker-php-ext-enable"),
    Path("/usr/local/bin/pecl"),
)
DEFAULT_DOCKER_GATEWAY = "172.17.0.1"

# Prints the loaded php.ini on the first line, scanned conf.d files after it
_INI_PROBE = "echo php_ini_loaded_file() ?: '', PHP_EOL, php_ini_scanned_files() ?: '';"
_INI_NAME_RE = re.compile(r"^[A-Za-z0-9_.]+$")


@dataclass(frozen=True)
class PhpIniFiles:
    """The ini files reported by the PHP runtime."""

    loaded_file: str | None = None
    scanned_files: list[str] = field(default_factory=list)


def parse_ini_probe(output: str) -> PhpIniFiles:
    """Parse the output of the php.ini probe script.

    Args:
        output: Raw stdout of the probe

    Returns:
        PhpIniFiles with the loaded file and the scanned conf.d files
    """
    loaded, _, scanned = output.partition("\n")
    loaded = loaded.strip()
    files = [f.strip() for f in scanned.split(",") if f.strip()]
    return PhpIniFiles(loaded_file=loaded or None, scanned_files=files)


def parse_php_modules(output: str) -> set[str]:
    """Parse ``php -m`` output into a set of lowercase module names."""
    modules = set()
    for line in output.splitlines():
        line = line.strip()
        if not line or line.startswith("["):
            continue
        modules.add(line.lower())
    return modules


def decode_route_gateway(hex_gateway: str) -> str:
    """Decode a little-endian hex gateway field from /proc/net/route.

    Example:
        "010011AC" -> "172.17.0.1"

    Raises:
        ValueError: If the field is not an 8-digit hex value
    """
    if len(hex_gateway) != 8:
        raise ValueError(f"Invalid gateway field: {hex_gateway!r}")
    return str(ipaddress.IPv4Address(int.from_bytes(bytes.fromhex(hex_gateway), "little")))


class EnvironmentDetector:
    """Read-only inspection of the host OS, container and PHP install.

    Runtime probes are cached for the lifetime of the detector: like PHP's
    own ``extension_loaded()``, results reflect the state at startup and
    do not change when the extension is installed or enabled mid-run.
    """

    def __init__(self, php_binary: str = "php"):
        """Initialize the detector.

        Args:
            php_binary: PHP executable used for runtime probes
        """
        self.php_binary = php_binary
        self._ini_files: PhpIniFiles | None = None
        self._modules: set[str] | None = None
        self._php_version: str | None = None

    # =========================================================================
    # Operating System
    # =========================================================================

    def get_os(self) -> OperatingSystem:
        """Get the current operating system.

        Returns:
            One of: "macos", "linux", "windows" (unknown systems are linux)
        """
        system = platform.system().lower()
        if system == "darwin":
            return OS_MACOS
        elif system == "windows":
            return OS_WINDOWS
        else:
            return OS_LINUX

    # =========================================================================
    # Docker
    # =========================================================================

    def is_docker(self) -> bool:
        """Check whether the process runs inside a Docker container."""
        if DOCKER_ENV_FILE.exists():
            return True

        try:
            cgroup = INIT_CGROUP_FILE.read_text()
        except OSError:
            return False

        return "docker" in cgroup or "kubepods" in cgroup

    def is_official_php_docker_image(self) -> bool:
        """Check whether the container is based on an official PHP image.

        Official images ship ``docker-php-ext-enable`` and ``pecl``, which
        makes installing extensions at runtime safe.
        """
        if not self.is_docker():
            return False
        return any(path.is_file() and os.access(path, os.X_OK) for path in DOCKER_PHP_HELPERS)

    # =========================================================================
    # PHP Runtime
    # =========================================================================

    def is_php_available(self) -> bool:
        """Check whether the PHP executable can be run."""
        return self.get_php_version() is not None

    def get_php_version(self) -> str | None:
        """Get the PHP version string (e.g. "8.3.4"), or None without PHP."""
        if self._php_version is None:
            output = self._run_php(["-r", "echo PHP_VERSION;"])
            self._php_version = output.strip() if output else None
        return self._php_version

    def is_extension_loaded(self, name: str) -> bool:
        """Check whether a PHP extension is loaded by the runtime."""
        if self._modules is None:
            output = self._run_php(["-m"])
            self._modules = parse_php_modules(output) if output else set()
        return name.lower() in self._modules

    def get_ini_value(self, name: str) -> str | None:
        """Get the runtime value of an ini setting via ``ini_get()``.

        Args:
            name: Setting name (e.g. "pcov.enabled")

        Returns:
            The value as PHP prints it, or None if PHP cannot be queried
        """
        if not _INI_NAME_RE.match(name):
            raise ValueError(f"Invalid ini setting name: {name!r}")
        output = self._run_php(["-r", f"echo ini_get('{name}');"])
        return output.strip() if output is not None else None

    def _ini(self) -> PhpIniFiles:
        if self._ini_files is None:
            output = self._run_php(["-r", _INI_PROBE])
            self._ini_files = parse_ini_probe(output) if output else PhpIniFiles()
        return self._ini_files

    def _run_php(self, args: list[str]) -> str | None:
        """Run the PHP executable and return stdout, or None on failure."""
        cmd = [self.php_binary] + args
        logger.debug("Running PHP probe: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace", check=False
            )
        except OSError as e:
            logger.debug("PHP executable %s is not available: %s", self.php_binary, e)
            return None

        if result.returncode != 0:
            logger.debug("PHP probe failed (exit %d): %s", result.returncode, result.stderr.strip())
            return None
        return result.stdout

    # =========================================================================
    # php.ini Location
    # =========================================================================

    def find_php_ini_path(self) -> str | None:
        """Locate the php.ini file the runtime uses.

        The runtime-reported file wins. Otherwise well-known locations for
        the current OS are tried in order.

        Returns:
            Path to php.ini, or None if no candidate exists
        """
        loaded = self._ini().loaded_file
        if loaded:
            return loaded

        for candidate in self._ini_candidates():
            if candidate.is_file():
                logger.debug("Using fallback php.ini at %s", candidate)
                return str(candidate)

        return None

    def _ini_candidates(self) -> list[Path]:
        version = self.get_php_version()
        major_minor = ".".join(version.split(".")[:2]) if version else None
        os_name = self.get_os()

        if os_name == OS_MACOS:
            if major_minor is None:
                return []
            return [
                Path(f"/opt/homebrew/etc/php/{major_minor}/php.ini"),
                Path(f"/usr/local/etc/php/{major_minor}/php.ini"),
            ]
        if os_name == OS_WINDOWS:
            return [Path("C:\\php\\php.ini"), Path("C:\\xampp\\php\\php.ini")]

        candidates = []
        if major_minor is not None:
            candidates += [
                Path(f"/etc/php/{major_minor}/cli/php.ini"),
                Path(f"/etc/php/{major_minor}/apache2/php.ini"),
            ]
        candidates += [
            Path("/etc/php.ini"),
            Path("/usr/local/etc/php/php.ini"),  # official Docker images
        ]
        return candidates

    # =========================================================================
    # Additional ini files (conf.d)
    # =========================================================================

    def get_additional_ini_files(self) -> list[str]:
        """Get the additional ini files the runtime scans (conf.d)."""
        return [f for f in self._ini().scanned_files if Path(f).is_file()]

    def find_pattern_in_additional_ini(self, pattern: str) -> str | None:
        """Find the first conf.d file with a line matching ``pattern``.

        Commented lines count as matches.
        """
        return self._scan_additional_ini(pattern, has_line)

    def find_enabled_pattern_in_additional_ini(self, pattern: str) -> str | None:
        """Find the first conf.d file with an uncommented line matching ``pattern``."""
        return self._scan_additional_ini(pattern, is_line_enabled)

    def _scan_additional_ini(self, pattern, matcher) -> str | None:
        for ini_file in self.get_additional_ini_files():
            try:
                content = Path(ini_file).read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.debug("Skipping unreadable ini file %s: %s", ini_file, e)
                continue
            if matcher(content, pattern):
                return ini_file
        return None

    # =========================================================================
    # Client Host
    # =========================================================================

    def get_client_host(self) -> str:
        """Determine the host a debugger running here should connect back to.

        Outside Docker this is ``localhost``. Inside Docker on Linux it is
        the container's default gateway; elsewhere Docker Desktop provides
        ``host.docker.internal``.
        """
        if not self.is_docker():
            return "localhost"

        if self.get_os() == OS_LINUX:
            return self._get_docker_gateway_ip()
        return "host.docker.internal"

    def _get_docker_gateway_ip(self) -> str:
        try:
            lines = ROUTE_TABLE_FILE.read_text().splitlines()
        except OSError:
            return DEFAULT_DOCKER_GATEWAY

        for line in lines:
            fields = line.split()
            if len(fields) > 2 and fields[1] == "00000000":
                try:
                    return decode_route_gateway(fields[2])
                except ValueError:
                    logger.debug("Unparseable gateway in route table: %s", fields[2])
                    return DEFAULT_DOCKER_GATEWAY

        return DEFAULT_DOCKER_GATEWAY

    # =========================================================================
    # Summary
    # =========================================================================

    def get_environment_info(self) -> dict[str, str]:
        """Get a summary of the detected environment for display."""
        return {
            "os": self.get_os(),
            "php_version": self.get_php_version() or "(not found)",
            "docker": "yes" if self.is_docker() else "no",
            "php_ini": self.find_php_ini_path() or "(not found)",
            "additional_ini_files": str(len(self.get_additional_ini_files())),
            "client_host": self.get_client_host(),
        }
