"""Sync plans and their outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class SyncDirection(str, Enum):
    """Which side is the source of truth."""

    PULL = "pull"
    """Remote store to local directory"""

    PUSH = "push"
    """Local directory to remote store"""


@dataclass
class SyncPlan:
    """Everything a sync will do, computed before any mutation.

    The dry-run preview and the real run both read from the same plan.
    """

    direction: SyncDirection
    """Pull or push"""

    transfers: list[Any]
    """Remote resources to download (pull) or LocalFiles to upload (push)"""

    deletions: list[Any] = field(default_factory=list)
    """LocalFiles (pull) or remote resources (push) to delete in mirror mode"""

    delete_keys: list[str] = field(default_factory=list)
    """Display names of the deletions, in the same order"""

    mirror: bool = False
    """Whether mirror deletions were planned"""


@dataclass
class BatchResult:
    """Outcome of one phase (downloads, uploads or deletions)."""

    processed: int = 0
    """Items that succeeded"""

    failed: int = 0
    """Items that failed after all attempts"""

    errors: list[str] = field(default_factory=list)
    """One "<handle>: <message>" entry per failure, in processing order"""

    def record_success(self) -> None:
        self.processed += 1

    def record_failure(self, handle: str, error: Exception) -> None:
        self.failed += 1
        self.errors.append(f"{handle}: {error}")


@dataclass
class SyncReport:
    """Aggregated outcome of a pull or push."""

    resource_name: str
    """Resource type that was synced"""

    plan: SyncPlan
    """The executed (or previewed) plan"""

    dry_run: bool = False
    """True when nothing was executed"""

    location: Optional[str] = None
    """Local directory that was synced"""

    transferred: BatchResult = field(default_factory=BatchResult)
    """Downloads (pull) or uploads (push)"""

    deleted: BatchResult = field(default_factory=BatchResult)
    """Mirror deletions"""

    @property
    def failed(self) -> int:
        """Total failures across phases."""
        return self.transferred.failed + self.deleted.failed

    @property
    def errors(self) -> list[str]:
        """All error messages; for push, deletion errors come first."""
        if self.plan.direction == SyncDirection.PUSH:
            return self.deleted.errors + self.transferred.errors
        return self.transferred.errors + self.deleted.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert the report to a dictionary for JSON output."""
        transfer_key = (
            "downloaded" if self.plan.direction == SyncDirection.PULL else "uploaded"
        )
        return {
            "resource": self.resource_name,
            "direction": self.plan.direction.value,
            "dry_run": self.dry_run,
            "location": self.location,
            "planned": {
                "transfers": len(self.plan.transfers),
                "deletions": len(self.plan.deletions),
                "delete_list": list(self.plan.delete_keys),
            },
            transfer_key: self.transferred.processed,
            "deleted": self.deleted.processed,
            "failed": self.failed,
            "errors": self.errors,
        }
