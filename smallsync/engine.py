"""Transfer engine: moves whole files between local paths and the remote store."""

import logging
import os
from pathlib import Path
from typing import Optional

from .confirm import ConfirmationGate
from .exceptions import SmallSyncConnectError, SmallSyncError
from .models import (
    BatchResult,
    Entry,
    RemoteCredentials,
    TransferDirection,
    TransferOutcome,
    TransferStatus,
)
from .output import OutputFormatter
from .registry import EntryRegistry
from .remote import RemoteSession, RemoteStore
from .utils import local_path, write_file_atomic

logger = logging.getLogger(__name__)

CONNECT_ERROR = "connect error"
REMOTE_NOT_FOUND = "remote file not exist"
LOCAL_NOT_FOUND = "local file not exist"
USER_ABORTED = "user aborted"


class TransferEngine:
    """Uploads and downloads registry entries one at a time.

    Every per-entry error is turned into a :class:`TransferOutcome`; nothing
    raised by the remote store or local file I/O stops a batch.
    """

    def __init__(
        self,
        registry: EntryRegistry,
        store: RemoteStore,
        credentials: RemoteCredentials,
        gate: ConfirmationGate,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize the transfer engine.

        Args:
            registry: Entries to transfer
            store: Remote store used to open one session per entry
            credentials: Credentials for every remote connection
            gate: Asked once per entry before the overwriting write
            output: Output formatter for progress and outcomes
        """
        self.registry = registry
        self.store = store
        self.credentials = credentials
        self.gate = gate
        self.output = output or OutputFormatter()

    def upload(self, entry_name: str = "") -> BatchResult:
        return self.run_batch(TransferDirection.UPLOAD, entry_name)

    def download(self, entry_name: str = "") -> BatchResult:
        return self.run_batch(TransferDirection.DOWNLOAD, entry_name)

    def run_batch(
        self, direction: TransferDirection, entry_name: str = ""
    ) -> BatchResult:
        """Transfer every entry, or only the one named ``entry_name``.

        ``total`` in the result is the registry size at batch start, also
        when filtering by name (an unknown name gives ``0/<registry size>``).
        """
        entries = self.registry.all()
        total = len(self.registry)
        if entry_name:
            if entry_name not in self.registry:
                logger.debug("No entry named %s", entry_name)
            entries = [entry for entry in entries if entry.name == entry_name]

        outcomes = []
        for entry in entries:
            outcomes.append(self.transfer(entry, direction))

        result = BatchResult.from_outcomes(total, outcomes)
        logger.debug(
            "%s batch finished: %d/%d",
            direction.value,
            result.succeeded,
            result.total,
        )
        return result

    def transfer(self, entry: Entry, direction: TransferDirection) -> TransferOutcome:
        """Transfer a single entry and report its outcome."""
        if direction is TransferDirection.UPLOAD:
            self.output.info(f"upload {entry.local_path} ==> {entry.remote_path}")
            outcome = self.upload_entry(entry)
        else:
            self.output.info(f"download {entry.remote_path} ==> {entry.local_path}")
            outcome = self.download_entry(entry)
        self._report(outcome)
        return outcome

    def download_entry(self, entry: Entry) -> TransferOutcome:
        """Download one entry, overwriting the local file.

        Order: connect, remote stat, confirmation, read and local write.
        """
        direction = TransferDirection.DOWNLOAD
        try:
            session = self.store.connect(self.credentials)
        except SmallSyncConnectError as e:
            logger.debug("Connect failed for %s: %s", entry.name, e)
            return self._failed(entry, direction, CONNECT_ERROR)

        try:
            try:
                meta = session.stat(entry.remote_path)
            except SmallSyncError as e:
                logger.debug("Stat %s failed: %s", entry.remote_path, e)
                return self._failed(entry, direction, REMOTE_NOT_FOUND)
            if meta.is_dir:
                logger.debug("%s is a collection", entry.remote_path)
                return self._failed(entry, direction, REMOTE_NOT_FOUND)

            if not self.gate.confirm(
                f"will overwrite local file [{entry.local_path}], are you OK? [Y]"
            ):
                return self._skipped(entry, direction)

            try:
                data = session.read(entry.remote_path)
            except SmallSyncError as e:
                return self._failed(entry, direction, f"download failed: {e}")

            try:
                write_file_atomic(local_path(entry.local_path), data)
            except OSError as e:
                return self._failed(entry, direction, f"cannot write local file: {e}")
        finally:
            self._close(session)

        logger.debug("Downloaded %d bytes to %s", len(data), entry.local_path)
        return TransferOutcome(entry.name, direction, TransferStatus.SUCCESS)

    def upload_entry(self, entry: Entry) -> TransferOutcome:
        """Upload one entry, overwriting the remote file.

        Order: local check, confirmation, connect, read and remote write.
        No connection is attempted when the local file is missing.
        """
        direction = TransferDirection.UPLOAD
        path = local_path(entry.local_path)
        if not _is_readable_file(path):
            return self._failed(entry, direction, LOCAL_NOT_FOUND)

        if not self.gate.confirm(
            f"will overwrite the file [{entry.remote_path}] on remote server, "
            "are you OK? [Y]"
        ):
            return self._skipped(entry, direction)

        try:
            session = self.store.connect(self.credentials)
        except SmallSyncConnectError as e:
            logger.debug("Connect failed for %s: %s", entry.name, e)
            return self._failed(entry, direction, CONNECT_ERROR)

        try:
            try:
                data = path.read_bytes()
            except OSError as e:
                return self._failed(entry, direction, f"cannot read local file: {e}")

            try:
                session.write(entry.remote_path, data)
            except SmallSyncError as e:
                return self._failed(entry, direction, f"upload failed: {e}")
        finally:
            self._close(session)

        logger.debug("Uploaded %d bytes to %s", len(data), entry.remote_path)
        return TransferOutcome(entry.name, direction, TransferStatus.SUCCESS)

    @staticmethod
    def _close(session: RemoteSession) -> None:
        try:
            session.close()
        except SmallSyncError as e:
            logger.debug("Closing remote session failed: %s", e)

    @staticmethod
    def _failed(
        entry: Entry, direction: TransferDirection, reason: str
    ) -> TransferOutcome:
        return TransferOutcome(entry.name, direction, TransferStatus.FAILED, reason)

    @staticmethod
    def _skipped(entry: Entry, direction: TransferDirection) -> TransferOutcome:
        return TransferOutcome(
            entry.name, direction, TransferStatus.SKIPPED, USER_ABORTED
        )

    def _report(self, outcome: TransferOutcome) -> None:
        label = f"{outcome.direction.value} [{outcome.entry_name}]"
        if outcome.status is TransferStatus.SUCCESS:
            self.output.success(f"✓ {label} done")
        elif outcome.status is TransferStatus.SKIPPED:
            self.output.warning(f"{label} skipped: User aborted.")
        else:
            self.output.error(f"{label} failed: {outcome.reason}")
        logger.debug("%s -> %s (%s)", label, outcome.status.value, outcome.reason)


def _is_readable_file(path: Path) -> bool:
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except OSError as e:
        logger.debug("Cannot check %s: %s", path, e)
        return False
