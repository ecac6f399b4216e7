"""Tests for debug_pilot.core.installer module."""

import sys
from unittest.mock import MagicMock, patch

import pytest

from debug_pilot.core.advisor import InstallationAdvisor
from debug_pilot.core.installer import EXIT_NOT_EXECUTABLE, ExtensionInstaller, InstallResult

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell commands")


@pytest.fixture
def advisor() -> MagicMock:
    return MagicMock(spec=InstallationAdvisor)


@pytest.fixture
def installer(fake_env, advisor) -> ExtensionInstaller:
    return ExtensionInstaller(fake_env, advisor)


class TestInstallResult:
    """Tests for InstallResult helpers."""

    def test_succeeded(self):
        result = InstallResult.succeeded("done")
        assert result.success is True
        assert result.output == "done"
        assert result.exit_code == 0

    def test_failed(self):
        result = InstallResult.failed("boom", 2)
        assert result.success is False
        assert result.error_output == "boom"
        assert result.exit_code == 2


class TestCanAutoInstall:
    """Tests for can_auto_install."""

    def test_linux(self, installer):
        assert installer.can_auto_install() is True

    def test_windows(self, installer, fake_env):
        fake_env.get_os.return_value = "windows"
        assert installer.can_auto_install() is False

    def test_unofficial_docker(self, installer, fake_env):
        fake_env.is_docker.return_value = True
        fake_env.is_official_php_docker_image.return_value = False
        assert installer.can_auto_install() is False

    def test_official_docker(self, installer, fake_env):
        fake_env.is_docker.return_value = True
        fake_env.is_official_php_docker_image.return_value = True
        assert installer.can_auto_install() is True


class TestInstall:
    """Tests for install."""

    def test_refused_without_auto_install(self, installer, fake_env, advisor):
        fake_env.get_os.return_value = "windows"

        result = installer.install("xdebug")

        assert result.success is False
        assert result.exit_code == EXIT_NOT_EXECUTABLE == 126
        advisor.get_install_command.assert_not_called()

    def test_lowercases_name(self, installer, advisor):
        with patch.object(installer, "_execute", return_value=InstallResult.succeeded()) as execute:
            advisor.get_install_command.return_value = "true"
            installer.install("Xdebug")
        advisor.get_install_command.assert_called_once_with("xdebug")
        execute.assert_called_once()

    @posix_only
    def test_streams_stdout(self, installer, advisor):
        advisor.get_install_command.return_value = "echo first; echo second"
        lines = []

        result = installer.install("pcov", lines.append)

        assert result.success is True
        assert lines == ["first", "second"]
        assert result.output == "first\nsecond\n"

    @posix_only
    def test_failure_reports_stderr(self, installer, advisor):
        advisor.get_install_command.return_value = "echo hello; echo oops 1>&2; exit 3"
        lines = []

        result = installer.install("pcov", lines.append)

        assert result.success is False
        assert result.exit_code == 3
        assert result.error_output.strip() == "oops"
        assert lines == ["hello"]

    @posix_only
    def test_failure_without_stderr_reports_stdout(self, installer, advisor):
        advisor.get_install_command.return_value = "echo only-stdout; exit 1"

        result = installer.install("pcov")

        assert result.success is False
        assert result.error_output.strip() == "only-stdout"

    def test_spawn_error(self, installer, advisor):
        advisor.get_install_command.return_value = "pecl install pcov"
        with patch("debug_pilot.core.installer.subprocess.Popen", side_effect=OSError("no shell")):
            result = installer.install("pcov")
        assert result.success is False
        assert "no shell" in result.error_output

    @posix_only
    def test_undecodable_output_is_replaced(self, installer, advisor):
        """Non-UTF-8 bytes from the command do not raise."""
        advisor.get_install_command.return_value = "printf 'caf\\351 ok\\n'; printf 'bad\\351\\n' 1>&2"
        lines = []

        result = installer.install("pcov", lines.append)

        assert result.success is True
        assert lines == ["caf\ufffd ok"]
        assert result.output == "caf\ufffd ok\n"

    @posix_only
    def test_undecodable_stderr_is_replaced(self, installer, advisor):
        advisor.get_install_command.return_value = "printf 'bad\\351\\n' 1>&2; exit 2"

        result = installer.install("pcov")

        assert result.success is False
        assert result.error_output == "bad\ufffd\n"
