"""Tests for the YAML configuration store."""

from unittest.mock import patch

import pytest
import yaml

from smallsync.config import Config, find_config_file
from smallsync.exceptions import SmallSyncConfigError, SmallSyncPersistenceError
from smallsync.models import RemoteCredentials


class TestConfigLoad:
    """Tests for loading and first-run initialization."""

    def test_first_load_creates_file(self, tmp_path):
        """Test a missing config file is created with the webdav default."""
        path = tmp_path / "sub" / "config.yaml"

        config = Config(path).load()

        assert path.exists()
        assert yaml.safe_load(path.read_text()) == {"remote": {"type": "webdav"}}
        assert config.remote_type == "webdav"
        assert not config.is_configured()

    def test_load_existing_file(self, tmp_path):
        """Test values are read from an existing file."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "remote:\n"
            "  type: webdav\n"
            "  webdav:\n"
            "    serverPath: https://dav.example.com\n"
            "    username: alice\n"
            "    password: secret\n"
            "entry:\n"
            "  notes:\n"
            "    local: /tmp/notes.md\n"
            "    remote: /notes.md\n"
        )

        config = Config(path).load()

        assert config.get("remote.webdav.username") == "alice"
        assert config.is_configured()
        assert config.get_credentials() == RemoteCredentials(
            "https://dav.example.com", "alice", "secret", "webdav"
        )
        assert config.get_entries() == {
            "notes": {"local": "/tmp/notes.md", "remote": "/notes.md"}
        }

    def test_empty_file_is_empty_config(self, tmp_path):
        """Test an empty YAML file loads as an empty document."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = Config(path).load()

        assert config.get_entries() == {}
        assert config.remote_type == "webdav"

    def test_invalid_yaml_raises(self, tmp_path):
        """Test a broken YAML file raises a config error."""
        path = tmp_path / "config.yaml"
        path.write_text("remote: [unclosed\n")

        with pytest.raises(SmallSyncConfigError, match="Invalid config file"):
            Config(path).load()

    def test_non_mapping_raises(self, tmp_path):
        """Test a YAML list at the top level is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(SmallSyncConfigError, match="expected a mapping"):
            Config(path).load()

    def test_yaml_keys_become_strings(self, tmp_path):
        """Test entry names YAML would parse as bool or int stay strings."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "entry:\n"
            "  1:\n"
            "    local: a\n"
            "    remote: b\n"
            "  yes:\n"
            "    local: c\n"
            "    remote: d\n"
        )

        config = Config(path).load()

        assert list(config.get_entries()) == ["1", "true"]

    def test_env_var_sets_path(self, tmp_path, monkeypatch):
        """Test SMALLSYNC_CONFIG chooses the config file."""
        path = tmp_path / "env.yaml"
        monkeypatch.setenv("SMALLSYNC_CONFIG", str(path))

        config = Config()

        assert config.config_path == path

    def test_cannot_create_directory_is_fatal(self, tmp_path):
        """Test failing to create the config directory raises a config error."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not directory")

        with pytest.raises(SmallSyncConfigError, match="Cannot create config"):
            Config(blocker / "config.yaml").load()


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_first_existing_wins(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (second / "config.yaml").write_text("{}")

        assert find_config_file([first, second]) == second / "config.yaml"

    def test_none_found(self, tmp_path):
        assert find_config_file([tmp_path]) is None

    def test_default_location_used_when_nothing_found(self, tmp_path, monkeypatch):
        """Test the file is created in the default config directory."""
        monkeypatch.delenv("SMALLSYNC_CONFIG", raising=False)
        with patch("smallsync.config.find_config_file", return_value=None), patch(
            "smallsync.config.default_config_dir", return_value=tmp_path / "home"
        ):
            config = Config().load()

        assert config.config_path == tmp_path / "home" / "config.yaml"
        assert config.config_path.exists()


class TestConfigGetSet:
    """Tests for dotted get/set and saving."""

    def test_set_creates_sections(self, tmp_path):
        config = Config(tmp_path / "config.yaml").load()

        config.set("remote.webdav.serverPath", "https://dav")

        assert config.get("remote.webdav") == {"serverPath": "https://dav"}
        assert config.get("remote.type") == "webdav"

    def test_get_missing_returns_default(self, tmp_path):
        config = Config(tmp_path / "config.yaml").load()

        assert config.get("remote.webdav.username") is None
        assert config.get("remote.type.nested", "x") == "x"
        assert config.get_string("remote.webdav.username") == ""

    def test_save_round_trip(self, tmp_path):
        """Test saved credentials and entries are read back."""
        path = tmp_path / "config.yaml"
        config = Config(path).load()
        config.set_credentials(RemoteCredentials("https://dav", "bob", "pw"))
        config.set_entry("docs", "/home/bob/doc.txt", "/doc.txt")
        config.save()

        reloaded = Config(path).load()

        assert reloaded.get_credentials().username == "bob"
        assert reloaded.get_entries()["docs"] == {
            "local": "/home/bob/doc.txt",
            "remote": "/doc.txt",
        }

    def test_entry_names_with_dots(self, tmp_path):
        """Test an entry name containing dots is stored as one key."""
        path = tmp_path / "config.yaml"
        config = Config(path).load()
        config.set_entry("my.notes", "a", "b")
        config.save()

        assert "my.notes" in Config(path).load().get_entries()

    def test_save_failure_raises_persistence_error(self, tmp_path):
        """Test an unwritable config file raises a persistence error."""
        config = Config(tmp_path / "config.yaml").load()
        config.config_path = tmp_path / "missing-dir" / "config.yaml"

        with pytest.raises(SmallSyncPersistenceError, match="Cannot write"):
            config.save()
