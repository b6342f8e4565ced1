"""Configuration management for SmallSync.

The configuration is a YAML document holding the remote server settings
and the sync entries::

    remote:
      type: webdav
      webdav:
        serverPath: https://dav.example.com/remote.php/webdav
        username: alice
        password: secret
    entry:
      notes:
        local: /home/alice/notes.md
        remote: /sync/notes.md
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import SmallSyncConfigError, SmallSyncPersistenceError
from .models import RemoteCredentials

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"
CONFIG_ENV_VAR = "SMALLSYNC_CONFIG"
DEFAULT_REMOTE_TYPE = "webdav"

REMOTE_TYPE_KEY = "remote.type"
SERVER_PATH_KEY = "remote.webdav.serverPath"
USERNAME_KEY = "remote.webdav.username"
PASSWORD_KEY = "remote.webdav.password"
ENTRY_KEY = "entry"


def default_config_dir() -> Path:
    """Return ``~/.config/smallsync``, or the working directory without a home."""
    try:
        return Path.home() / ".config" / "smallsync"
    except RuntimeError:
        logger.warning("Cannot determine home directory, using current directory")
        return Path(".")


def find_config_file(search_dirs: Optional[list[Path]] = None) -> Optional[Path]:
    """Return the first existing config file in the search directories."""
    if search_dirs is None:
        search_dirs = [default_config_dir(), Path(".")]
    for directory in search_dirs:
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


class Config:
    """YAML-backed configuration store.

    Values are addressed with dotted keys (``remote.webdav.username``).
    Changes are kept in memory until :meth:`save` is called.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize the configuration store.

        Args:
            config_path: Explicit config file location. When omitted the
                ``SMALLSYNC_CONFIG`` environment variable and then the default
                search directories are used.
        """
        if config_path is None and os.environ.get(CONFIG_ENV_VAR):
            config_path = Path(os.environ[CONFIG_ENV_VAR])
        self.config_path: Optional[Path] = config_path
        self._data: dict[str, Any] = {}

    def load(self) -> "Config":
        """Read the config file, creating it on first use.

        Returns:
            The config itself, for chaining

        Raises:
            SmallSyncConfigError: If the file cannot be created or parsed
        """
        if self.config_path is None:
            self.config_path = find_config_file()

        if self.config_path is None or not self.config_path.exists():
            self._initialize()
            return self

        try:
            raw = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise SmallSyncConfigError(
                f"Invalid config file {self.config_path}: {e}"
            ) from e
        except OSError as e:
            raise SmallSyncConfigError(
                f"Cannot read config file {self.config_path}: {e}"
            ) from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise SmallSyncConfigError(
                f"Invalid config file {self.config_path}: expected a mapping"
            )
        self._data = _stringify_keys(raw)
        logger.debug("Loaded config from %s", self.config_path)
        return self

    def _initialize(self) -> None:
        if self.config_path is None:
            self.config_path = default_config_dir() / CONFIG_FILE_NAME
        logger.info("Initializing config file at %s", self.config_path)

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SmallSyncConfigError(
                f"Cannot create config directory {self.config_path.parent}: {e}"
            ) from e

        self._data = {}
        self.set(REMOTE_TYPE_KEY, DEFAULT_REMOTE_TYPE)
        try:
            self.save()
        except SmallSyncPersistenceError as e:
            raise SmallSyncConfigError(str(e)) from e

    def save(self) -> None:
        """Write the configuration to disk.

        Raises:
            SmallSyncPersistenceError: If the file cannot be written
        """
        if self.config_path is None:
            raise SmallSyncPersistenceError("Config file location is not set")
        try:
            self.config_path.write_text(
                yaml.safe_dump(self._data, default_flow_style=False, sort_keys=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise SmallSyncPersistenceError(
                f"Cannot write config file {self.config_path}: {e}"
            ) from e
        logger.debug("Saved config to %s", self.config_path)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dotted key, creating intermediate sections."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def get_string(self, key: str) -> str:
        value = self.get(key)
        return "" if value is None else str(value)

    # =========================
    # Remote server
    # =========================

    @property
    def remote_type(self) -> str:
        return self.get_string(REMOTE_TYPE_KEY) or DEFAULT_REMOTE_TYPE

    def get_credentials(self) -> RemoteCredentials:
        return RemoteCredentials(
            endpoint=self.get_string(SERVER_PATH_KEY),
            username=self.get_string(USERNAME_KEY),
            password=self.get_string(PASSWORD_KEY),
            remote_type=self.remote_type,
        )

    def set_credentials(self, credentials: RemoteCredentials) -> None:
        self.set(REMOTE_TYPE_KEY, credentials.remote_type)
        self.set(SERVER_PATH_KEY, credentials.endpoint)
        self.set(USERNAME_KEY, credentials.username)
        self.set(PASSWORD_KEY, credentials.password)

    def is_configured(self) -> bool:
        """Check whether a server path has been set."""
        return bool(self.get_string(SERVER_PATH_KEY))

    # =========================
    # Entries
    # =========================

    def get_entries(self) -> dict[str, dict[str, Any]]:
        """Return the raw ``entry`` section, in document order."""
        section = self.get(ENTRY_KEY)
        if not isinstance(section, dict):
            return {}
        return dict(section)

    def set_entry(self, name: str, local: str, remote: str) -> None:
        section = self.get(ENTRY_KEY)
        if not isinstance(section, dict):
            section = {}
            self._data[ENTRY_KEY] = section
        section[name] = {"local": local, "remote": remote}


def _stringify_keys(data: dict) -> dict[str, Any]:
    """Coerce YAML mapping keys to strings (``yes`` or ``1`` as entry names)."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(key, bool):
            key = "true" if key else "false"
        if isinstance(value, dict):
            value = _stringify_keys(value)
        result[str(key)] = value
    return result
