"""Exceptions raised by SmallSync."""


class SmallSyncError(Exception):
    """Base exception for all SmallSync errors."""


class SmallSyncConfigError(SmallSyncError):
    """Configuration file cannot be created, read or is invalid."""


class SmallSyncPersistenceError(SmallSyncConfigError):
    """Configuration changes could not be written to disk."""


class SmallSyncConnectError(SmallSyncError):
    """Remote server cannot be reached."""


class SmallSyncAuthenticationError(SmallSyncConnectError):
    """Remote server rejected the credentials."""


class SmallSyncNotFoundError(SmallSyncError):
    """Requested remote or local path does not exist."""


class SmallSyncTransportError(SmallSyncError):
    """Reading or writing file contents failed mid-transfer."""
