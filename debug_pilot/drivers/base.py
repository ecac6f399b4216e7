"""Debugger driver contract and the php.ini handling shared by drivers.

A driver owns one PHP extension: its identity, the regex matching its
load directive, and the marker-delimited block of settings it writes to
php.ini. Drivers keep no state of their own; everything lives in the file.
"""

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from debug_pilot.config.schemas import DebugSettings
from debug_pilot.utils import ini_editor
from debug_pilot.utils.environment import EnvironmentDetector
from debug_pilot.utils.markers import find_block, strip_block

logger = logging.getLogger(__name__)

PASS_MARK = "✓"
FAIL_MARK = "✗"
WARN_MARK = "⚠"
INFO_MARK = "ℹ"


# =============================================================================
# Errors
# =============================================================================


class PhpIniError(Exception):
    """Error locating, reading or writing php.ini."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = path
        super().__init__(message)


class PhpIniNotFoundError(PhpIniError):
    """No php.ini path could be resolved."""

    def __init__(self) -> None:
        super().__init__("Could not auto-detect php.ini path. Please specify it manually.")


class PhpIniNotWritableError(PhpIniError):
    """php.ini exists (or was named) but cannot be written."""

    def __init__(self, path: Path | str):
        super().__init__(
            f'Cannot write to php.ini at "{path}". Check file permissions or run with sudo.',
            path,
        )


class PhpIniReadError(PhpIniError):
    """Reading php.ini failed."""

    def __init__(self, path: Path | str):
        super().__init__(f'Failed to read php.ini at "{path}".', path)


class PhpIniWriteError(PhpIniError):
    """Writing php.ini failed."""

    def __init__(self, path: Path | str):
        super().__init__(f'Failed to write to php.ini at "{path}".', path)


# =============================================================================
# Value Objects
# =============================================================================


@dataclass(frozen=True)
class ExtensionSpec:
    """Identity of a PHP extension as seen in php.ini.

    - name: Extension name, also the driver's registry key
    - directive_pattern: Regex matching the load directive on one line
    - block_start / block_end: Marker lines around the driver's settings block
    - directive_prefix: "extension=" or "zend_extension="
    """

    name: str
    directive_pattern: str
    block_start: str
    block_end: str
    directive_prefix: str = "extension="

    @property
    def directive(self) -> str:
        """The load directive appended when no existing line is found."""
        return f"{self.directive_prefix}{self.name}"


@dataclass(frozen=True)
class HealthCheckResult:
    """Result of a driver health check."""

    passed: bool
    messages: list[str] = field(default_factory=list)
    driver_name: str = ""

    @classmethod
    def ok(cls, driver_name: str, messages: list[str] | None = None) -> "HealthCheckResult":
        return cls(passed=True, messages=messages or [], driver_name=driver_name)

    @classmethod
    def fail(cls, driver_name: str, messages: list[str] | None = None) -> "HealthCheckResult":
        return cls(passed=False, messages=messages or [], driver_name=driver_name)


# =============================================================================
# php.ini I/O
# =============================================================================


def read_ini(path: Path) -> str:
    """Read php.ini content, keeping line endings and undecodable bytes.

    Raises:
        PhpIniReadError: If the file cannot be read
    """
    try:
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        raise PhpIniReadError(path) from e


def write_ini(path: Path, content: str) -> None:
    """Overwrite php.ini with ``content`` in a single write.

    Raises:
        PhpIniWriteError: If the file cannot be written
    """
    try:
        with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(content)
    except OSError as e:
        logger.error("Cannot write %s: %s", path, e)
        raise PhpIniWriteError(path) from e


def ensure_writable(path: Path) -> None:
    """Raise PhpIniNotWritableError unless ``path`` is a writable file."""
    if not path.is_file() or not os.access(path, os.W_OK):
        raise PhpIniNotWritableError(path)


def configure_via_block(
    ini_path: Path,
    strip_existing: Callable[[str], str],
    build_block: Callable[[], str],
    preprocess: Callable[[str], str] | None = None,
) -> bool:
    """Replace a driver's settings block in php.ini.

    Reads the file, applies ``preprocess`` (if any), removes the previous
    block with ``strip_existing`` and writes the result with the block from
    ``build_block`` appended. The file is written once.

    Args:
        ini_path: php.ini to update
        strip_existing: Removes the driver's previous block from content
        build_block: Builds the fresh block text
        preprocess: Optional transform applied before stripping

    Returns:
        True once the file has been written

    Raises:
        PhpIniNotWritableError: If the file is not writable
        PhpIniReadError: If reading fails
        PhpIniWriteError: If writing fails
    """
    ensure_writable(ini_path)

    content = read_ini(ini_path)
    if preprocess is not None:
        content = preprocess(content)

    cleaned = strip_existing(content)
    write_ini(ini_path, cleaned + build_block())

    logger.info("Wrote configuration block to %s", ini_path)
    return True


# =============================================================================
# Driver Contract
# =============================================================================


class DebuggerDriver(ABC):
    """Abstract base class for debugger drivers (e.g. Xdebug, Pcov).

    Each driver detects, enables, configures and verifies one PHP
    extension.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier of the driver (e.g. "xdebug")."""
        ...

    @abstractmethod
    def is_installed(self) -> bool:
        """Check whether the PHP runtime has the extension loaded."""
        ...

    @abstractmethod
    def has_ini_directive(self) -> bool:
        """Check whether php.ini has the load directive, commented or not.

        A directive signals that the extension is present on the system even
        when this PHP process does not load it.
        """
        ...

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check whether php.ini has the load directive uncommented."""
        ...

    @abstractmethod
    def set_enabled(self, enabled: bool) -> bool:
        """Enable or disable the extension by editing php.ini.

        Returns:
            True once the change has been written
        """
        ...

    @abstractmethod
    def configure(self, settings: DebugSettings) -> bool:
        """Write the driver's settings block to php.ini.

        Returns:
            True once the block has been written
        """
        ...

    @abstractmethod
    def verify(self) -> HealthCheckResult:
        """Run a health check of the extension's configuration."""
        ...

    def is_configured(self) -> bool:
        """Check whether php.ini contains this driver's settings block.

        Default implementation returns False. Override for drivers that
        write a settings block.
        """
        return False

    def additional_ini_file(self) -> str | None:
        """Find a conf.d file that carries the load directive.

        Default implementation returns None.
        """
        return None


class PhpExtensionDriver(DebuggerDriver):
    """Driver behavior shared by extensions loaded through php.ini.

    Subclasses supply an ExtensionSpec and implement ``configure`` and
    ``verify``; ``configure`` is expected to go through
    :func:`configure_via_block`.
    """

    def __init__(self, env: EnvironmentDetector, spec: ExtensionSpec):
        self._env = env
        self._spec = spec

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def spec(self) -> ExtensionSpec:
        return self._spec

    def is_installed(self) -> bool:
        return self._env.is_extension_loaded(self._spec.name)

    def has_ini_directive(self) -> bool:
        content = self._read_detected_ini()
        if content is None:
            return False
        return ini_editor.has_line(content, self._spec.directive_pattern)

    def is_enabled(self) -> bool:
        content = self._read_detected_ini()
        if content is None:
            return False
        return ini_editor.is_line_enabled(content, self._spec.directive_pattern)

    def is_configured(self) -> bool:
        """Check whether php.ini contains this driver's settings block."""
        content = self._read_detected_ini()
        if content is None:
            return False
        return find_block(content, self._spec.block_start, self._spec.block_end) is not None

    def additional_ini_file(self) -> str | None:
        """Find a conf.d file that carries the load directive."""
        return self._env.find_pattern_in_additional_ini(self._spec.directive_pattern)

    def set_enabled(self, enabled: bool) -> bool:
        ini_path_str = self._env.find_php_ini_path()
        if ini_path_str is None:
            raise PhpIniNotFoundError()

        ini_path = Path(ini_path_str)
        ensure_writable(ini_path)
        content = read_ini(ini_path)

        pattern = self._spec.directive_pattern
        if enabled:
            if ini_editor.has_line(content, pattern):
                content = ini_editor.uncomment_line(content, pattern)
            else:
                content = ini_editor.append_line(content, self._spec.directive)
        else:
            content = ini_editor.comment_line(content, pattern)

        write_ini(ini_path, content)
        logger.info("%s %s in %s", "Enabled" if enabled else "Disabled", self.name, ini_path)
        return True

    def resolve_ini_path(self, configured_path: str) -> Path:
        """Resolve the php.ini to write: the configured path, else auto-detected.

        Raises:
            PhpIniNotFoundError: If no path is configured and none is detected
        """
        if configured_path:
            return Path(configured_path)

        detected = self._env.find_php_ini_path()
        if detected is None:
            raise PhpIniNotFoundError()
        return Path(detected)

    def strip_block(self, content: str) -> str:
        """Remove this driver's settings block from php.ini content."""
        return strip_block(content, self._spec.block_start, self._spec.block_end)

    def _read_detected_ini(self) -> str | None:
        ini_path = self._env.find_php_ini_path()
        if ini_path is None or not Path(ini_path).is_file():
            return None
        try:
            return read_ini(Path(ini_path))
        except PhpIniReadError:
            return None
