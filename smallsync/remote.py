"""Remote file store abstraction used by the transfer engine."""

from typing import Protocol

from .exceptions import SmallSyncConfigError
from .models import RemoteCredentials, RemoteMetadata


class RemoteSession(Protocol):
    """A connected session against a remote file store."""

    def stat(self, path: str) -> RemoteMetadata:
        """Return metadata for ``path``.

        Raises:
            SmallSyncNotFoundError: If the path does not exist
            SmallSyncConnectError: If the server cannot be reached
        """
        ...

    def read(self, path: str) -> bytes:
        """Return the full contents of ``path``.

        Raises:
            SmallSyncNotFoundError: If the path does not exist
            SmallSyncTransportError: If the download fails
        """
        ...

    def write(self, path: str, data: bytes) -> None:
        """Replace the contents of ``path`` with ``data``.

        Raises:
            SmallSyncTransportError: If the upload fails
        """
        ...

    def close(self) -> None: ...


class RemoteStore(Protocol):
    """Factory for remote sessions.

    Connections are stateless to establish, so callers may connect once per
    entry or reuse one session for a whole batch.
    """

    def connect(self, credentials: RemoteCredentials) -> RemoteSession:
        """Open a session.

        Raises:
            SmallSyncConnectError: If the server cannot be reached or
                rejects the credentials
        """
        ...


def create_remote_store(remote_type: str, timeout: float = 30.0) -> RemoteStore:
    """Return the remote store for the configured ``remote.type``.

    Raises:
        SmallSyncConfigError: If the remote type is not supported
    """
    if remote_type == "webdav":
        from .webdav import WebDAVStore

        return WebDAVStore(timeout=timeout)
    raise SmallSyncConfigError(f"Unsupported remote type: {remote_type}")
