"""Tests for patchchain.core.install_state module."""

import json

import pytest

from patchchain.core.install_state import LocalConfigStore


class TestLocalConfigStore:
    """Test LocalConfigStore."""

    @pytest.fixture
    def config_path(self, temp_dir):
        return temp_dir / "launcher.json"

    def test_reads_installed_version(self, config_path):
        """The installed version comes from version_client."""
        config_path.write_text(json.dumps({"version_client": "v7", "username": "x"}))
        assert LocalConfigStore(config_path).load_installed_version() == "v7"

    def test_whitespace_trimmed(self, config_path):
        """Surrounding whitespace is ignored."""
        config_path.write_text(json.dumps({"version_client": " 7.pwr \n"}))
        assert LocalConfigStore(config_path).load_installed_version() == "7.pwr"

    def test_missing_file(self, config_path):
        """No config file means no installed version."""
        assert LocalConfigStore(config_path).load_installed_version() is None

    def test_missing_key(self, config_path):
        """A config without version_client has no installed version."""
        config_path.write_text(json.dumps({"username": "x"}))
        assert LocalConfigStore(config_path).load_installed_version() is None

    @pytest.mark.parametrize("value", ["", "   ", None, 7, ["v7"]])
    def test_unusable_values(self, config_path, value):
        """Empty or non-string versions are treated as unknown."""
        config_path.write_text(json.dumps({"version_client": value}))
        assert LocalConfigStore(config_path).load_installed_version() is None

    def test_malformed_json(self, config_path):
        """Corrupt config files do not raise."""
        config_path.write_text("{not json")
        assert LocalConfigStore(config_path).load_installed_version() is None

    def test_non_object_json(self, config_path):
        """A JSON document that is not an object is ignored."""
        config_path.write_text(json.dumps(["v7"]))
        assert LocalConfigStore(config_path).load_installed_version() is None

    def test_read_only(self, config_path):
        """Loading never rewrites the file."""
        original = json.dumps({"version_client": "v7"})
        config_path.write_text(original)
        LocalConfigStore(config_path).load_installed_version()
        assert config_path.read_text() == original
