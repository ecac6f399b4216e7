"""Shared fixtures for Debug Pilot tests."""

import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from debug_pilot.utils.environment import EnvironmentDetector

SAMPLE_PHP_INI = """\
[PHP]
; Sample php.ini used by the tests
memory_limit = 128M
display_errors = On
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory."""
    path = Path(tempfile.mkdtemp(prefix="debug_pilot_test_"))
    yield path
    if path.exists():
        shutil.rmtree(path)


@pytest.fixture
def php_ini(temp_dir: Path) -> Path:
    """A writable php.ini with a few unrelated directives."""
    path = temp_dir / "php.ini"
    path.write_text(SAMPLE_PHP_INI)
    return path


@pytest.fixture
def fake_env(php_ini: Path) -> MagicMock:
    """Environment detector stub pointing at the temporary php.ini.

    Nothing is loaded, the host is not a container and PHP reports no
    runtime ini values.
    """
    env = MagicMock(spec=EnvironmentDetector)
    env.find_php_ini_path.return_value = str(php_ini)
    env.is_extension_loaded.return_value = False
    env.is_docker.return_value = False
    env.is_official_php_docker_image.return_value = False
    env.get_os.return_value = "linux"
    env.get_client_host.return_value = "localhost"
    env.get_ini_value.return_value = None
    env.get_php_version.return_value = "8.3.4"
    env.find_pattern_in_additional_ini.return_value = None
    env.find_enabled_pattern_in_additional_ini.return_value = None
    env.get_additional_ini_files.return_value = []
    return env


@pytest.fixture
def sample_php_ini() -> str:
    """Content the php_ini fixture starts with."""
    return SAMPLE_PHP_INI
