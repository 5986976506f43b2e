"""Sync engine for shopsync - pull, push and mirror store resources."""

from .differ import find_prune_candidates
from .dry_run import DryRunPlanner, PlanCounts
from .engine import PullOptions, PushOptions, SyncEngine
from .operations import SyncOperations
from .plan import BatchResult, SyncDirection, SyncPlan, SyncReport
from .retry import (
    DEFAULT_RETRY_CONFIG,
    NO_DELAY_RETRY_CONFIG,
    RetryConfig,
    exponential_backoff,
    with_retry,
)
from .scanner import (
    META_EXTENSION,
    LocalFile,
    collect_local_files,
    metadata_path,
    read_metadata,
    write_metadata,
)

__all__ = [
    "SyncEngine",
    "PullOptions",
    "PushOptions",
    "SyncOperations",
    "SyncDirection",
    "SyncPlan",
    "SyncReport",
    "BatchResult",
    "DryRunPlanner",
    "PlanCounts",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "NO_DELAY_RETRY_CONFIG",
    "exponential_backoff",
    "with_retry",
    "LocalFile",
    "META_EXTENSION",
    "collect_local_files",
    "metadata_path",
    "read_metadata",
    "write_metadata",
    "find_prune_candidates",
]
