"""Abstract base class for IDE integrators."""

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from debug_pilot.drivers.base import DebuggerDriver

logger = logging.getLogger(__name__)

# Whole-line // comments, which VS Code and Sublime accept in their JSON files
_LINE_COMMENT_RE = re.compile(r"^\s*//.*$", re.MULTILINE)


class IdeIntegrator(ABC):
    """Abstract base class for IDE integrators (e.g. VS Code, PhpStorm).

    An integrator recognizes its IDE in a project and writes the debug
    configuration files the IDE needs to talk to a driver's extension.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier of the IDE (e.g. "vscode")."""
        ...

    @abstractmethod
    def is_detected(self, project_path: Path) -> bool:
        """Check whether the project is set up for this IDE.

        Args:
            project_path: Path to the project root

        Returns:
            True if the IDE's project files are present
        """
        ...

    @abstractmethod
    def generate_config(self, driver: DebuggerDriver, project_path: Path) -> None:
        """Write the IDE debug configuration for ``driver``.

        Args:
            driver: The active debugger driver
            project_path: Path to the project root

        Raises:
            OSError: If the configuration cannot be written
        """
        ...


def load_json_config(path: Path) -> dict[str, Any] | None:
    """Load an IDE JSON settings file, tolerating ``//`` comment lines.

    Returns:
        The decoded object, or None if the file is missing, unreadable or
        does not hold a JSON object
    """
    if not path.is_file():
        return None

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None

    try:
        data = json.loads(_LINE_COMMENT_RE.sub("", raw))
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed JSON in %s", path)
        return None

    return data if isinstance(data, dict) else None


def write_json_config(path: Path, data: dict[str, Any]) -> None:
    """Write an IDE JSON settings file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=4, ensure_ascii=False)
        f.write("\n")
    logger.info("Wrote %s", path)


def display_name(driver: DebuggerDriver) -> str:
    """Capitalized driver name used in configuration labels ("Xdebug")."""
    return driver.name[:1].upper() + driver.name[1:]
