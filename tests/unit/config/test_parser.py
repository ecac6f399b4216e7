"""Tests for debug_pilot.config.parser module."""

from pathlib import Path

import pytest

from debug_pilot.config.parser import (
    SETTINGS_FILENAME,
    ConfigError,
    find_settings_file,
    load_settings,
    load_yaml,
)


class TestLoadYaml:
    """Tests for load_yaml function."""

    def test_load_valid_yaml(self, temp_dir: Path):
        """Test loading valid YAML file."""
        path = temp_dir / "test.yaml"
        path.write_text("client_port: 9000\nide_key: VSCODE\n")

        result = load_yaml(path)

        assert result == {"client_port": 9000, "ide_key": "VSCODE"}

    def test_load_empty_yaml(self, temp_dir: Path):
        """Test loading empty YAML file returns empty dict."""
        path = temp_dir / "empty.yaml"
        path.write_text("")

        assert load_yaml(path) == {}

    def test_load_nonexistent_file(self, temp_dir: Path):
        """Test loading nonexistent file raises ConfigError."""
        path = temp_dir / "missing.yaml"

        with pytest.raises(ConfigError, match="File not found") as exc_info:
            load_yaml(path)
        assert exc_info.value.path == path

    def test_load_invalid_yaml(self, temp_dir: Path):
        """Test loading invalid YAML raises ConfigError."""
        path = temp_dir / "invalid.yaml"
        path.write_text("client_port: [9000\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_yaml(path)

    def test_load_non_mapping(self, temp_dir: Path):
        """A top-level list is rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="Expected a mapping"):
            load_yaml(path)


class TestLoadSettings:
    """Tests for load_settings function."""

    def test_load_settings(self, temp_dir: Path):
        path = temp_dir / SETTINGS_FILENAME
        path.write_text("client_host: 10.0.0.5\nclient_port: 9000\nxdebug_mode: debug,develop\n")

        settings = load_settings(path)

        assert settings.client_host == "10.0.0.5"
        assert settings.client_port == 9000
        assert settings.xdebug_mode == "debug,develop"
        assert settings.ide_key == "PHPSTORM"

    def test_invalid_settings(self, temp_dir: Path):
        """Validation errors are reported as ConfigError."""
        path = temp_dir / SETTINGS_FILENAME
        path.write_text("client_port: 99999\n")

        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(path)


class TestFindSettingsFile:
    """Tests for find_settings_file function."""

    def test_found(self, temp_dir: Path):
        path = temp_dir / SETTINGS_FILENAME
        path.write_text("{}\n")
        assert find_settings_file(temp_dir) == path

    def test_not_found(self, temp_dir: Path):
        assert find_settings_file(temp_dir) is None
