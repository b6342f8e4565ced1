"""Data models for sync entries and transfer results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .utils import format_size


@dataclass(frozen=True)
class Entry:
    """A named pair of one local file and one remote file."""

    name: str
    local_path: str
    remote_path: str

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "local": self.local_path,
            "remote": self.remote_path,
        }


@dataclass(frozen=True)
class RemoteCredentials:
    """Credentials shared by every connection to the remote server."""

    endpoint: str
    username: str
    password: str = field(repr=False)
    remote_type: str = "webdav"


@dataclass(frozen=True)
class RemoteMetadata:
    """Metadata returned when stat-ing a remote path."""

    path: str
    size: Optional[int] = None
    modified: Optional[datetime] = None
    etag: Optional[str] = None
    is_dir: bool = False

    def __str__(self) -> str:
        kind = "dir" if self.is_dir else "file"
        modified = self.modified.isoformat() if self.modified else "-"
        size = format_size(self.size) if self.size is not None else "-"
        return f"{self.path} ({kind}, size={size}, modified={modified})"


class TransferDirection(str, Enum):
    """Direction of a transfer."""

    UPLOAD = "upload"
    DOWNLOAD = "download"

    @property
    def past_tense(self) -> str:
        """Verb used in the batch summary line (``uploaded 1/2.``)."""
        return f"{self.value}ed"


class TransferStatus(str, Enum):
    """Terminal state of a single entry transfer."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TransferOutcome:
    """Result of transferring one entry."""

    entry_name: str
    direction: TransferDirection
    status: TransferStatus
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is TransferStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry": self.entry_name,
            "direction": self.direction.value,
            "status": self.status.value,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class BatchResult:
    """Aggregated outcome of a batch run.

    ``total`` is the size of the registry at batch start, even when the
    batch was filtered down to a single entry name.
    """

    total: int
    succeeded: int
    outcomes: tuple[TransferOutcome, ...] = ()

    @classmethod
    def from_outcomes(
        cls, total: int, outcomes: list[TransferOutcome]
    ) -> "BatchResult":
        succeeded = sum(1 for outcome in outcomes if outcome.succeeded)
        return cls(total=total, succeeded=succeeded, outcomes=tuple(outcomes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
