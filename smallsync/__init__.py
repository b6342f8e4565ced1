"""SmallSync - sync single files with a WebDAV server."""

from .config import Config
from .confirm import (
    AssumeYesConfirmationGate,
    ConsoleConfirmationGate,
    ScriptedConfirmationGate,
)
from .engine import TransferEngine
from .exceptions import (
    SmallSyncAuthenticationError,
    SmallSyncConfigError,
    SmallSyncConnectError,
    SmallSyncError,
    SmallSyncNotFoundError,
    SmallSyncPersistenceError,
    SmallSyncTransportError,
)
from .models import (
    BatchResult,
    Entry,
    RemoteCredentials,
    RemoteMetadata,
    TransferDirection,
    TransferOutcome,
    TransferStatus,
)
from .registry import EntryRegistry
from .webdav import WebDAVClient, WebDAVStore

__all__ = [
    "Config",
    "EntryRegistry",
    "TransferEngine",
    "WebDAVClient",
    "WebDAVStore",
    "AssumeYesConfirmationGate",
    "ConsoleConfirmationGate",
    "ScriptedConfirmationGate",
    "BatchResult",
    "Entry",
    "RemoteCredentials",
    "RemoteMetadata",
    "TransferDirection",
    "TransferOutcome",
    "TransferStatus",
    "SmallSyncError",
    "SmallSyncAuthenticationError",
    "SmallSyncConfigError",
    "SmallSyncConnectError",
    "SmallSyncNotFoundError",
    "SmallSyncPersistenceError",
    "SmallSyncTransportError",
]
