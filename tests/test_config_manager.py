"""
Tests for YAML configuration discovery and merging
"""

import pytest
import yaml

from recipeflow.core.config_manager import LOCAL_CONFIG_FILE, ConfigManager


class TestConfigManager:

    def setup_method(self):
        self.manager = ConfigManager()

    def test_package_default(self):
        config = self.manager.load_package_default_config()
        assert config["server"] == {"url": "", "modpack_slug": ""}
        assert config["upload"]["timeout"] == 300
        assert config["upload"]["chunk_size"] == 1048576
        assert config["upload"]["icon_chunk_size"] == 5242880
        assert config["upload"]["items_chunk_size"] == 2097152
        assert config["upload"]["compression"] is True

    def test_deep_merge(self):
        default = {"server": {"url": "", "modpack_slug": ""}, "upload": {"timeout": 300}}
        user = {"server": {"url": "https://x.example.com"}, "extra": 1}

        merged = self.manager.deep_merge(default, user)

        assert merged == {
            "server": {"url": "https://x.example.com", "modpack_slug": ""},
            "upload": {"timeout": 300},
            "extra": 1,
        }
        assert default["server"]["url"] == ""

    def test_explicit_config_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(yaml.safe_dump({"upload": {"timeout": 10}}))

        config = self.manager.discover_and_load_config(str(path))

        assert config["upload"]["timeout"] == 10
        assert config["upload"]["compression"] is True

    def test_explicit_config_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            self.manager.discover_and_load_config(str(tmp_path / "nope.yaml"))

    def test_local_config_discovered(self, tmp_path, monkeypatch):
        (tmp_path / LOCAL_CONFIG_FILE).write_text("server:\n  modpack_slug: local-pack\n")
        monkeypatch.chdir(tmp_path)

        config = self.manager.discover_and_load_config(None)

        assert config["server"]["modpack_slug"] == "local-pack"
        assert config["server"]["url"] == ""

    def test_falls_back_to_package_default(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert self.manager.discover_and_load_config(None) == self.manager.load_package_default_config()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert self.manager.load_config(str(path)) == {}
