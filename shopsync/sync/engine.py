"""Core sync engine for pulling and pushing store resources."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from ..auth import Credentials
from ..exceptions import SyncError
from ..output import OutputFormatter
from ..resources.base import Resource, ResourceAdapter
from .differ import find_prune_candidates
from .dry_run import DryRunPlanner, PlanCounts
from .operations import SyncOperations
from .plan import BatchResult, SyncDirection, SyncPlan, SyncReport
from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, with_retry
from .scanner import LocalFile, collect_local_files

logger = logging.getLogger(__name__)


@dataclass
class PullOptions:
    """Options for pulling remote resources into a local directory."""

    output: Path
    """Root output directory (resources go to <output>/<resource_name>)"""

    credentials: Credentials
    """Store credentials"""

    max_items: Optional[int] = None
    """Only pull the first N remote resources (for testing against a store)"""

    dry_run: bool = False
    """Only show what would be done"""

    mirror: bool = False
    """Delete local files that no longer exist remotely"""


@dataclass
class PushOptions:
    """Options for pushing local files to the store."""

    input: Path
    """Root input directory (resources come from <input>/<resource_name>)"""

    credentials: Credentials
    """Store credentials"""

    dry_run: bool = False
    """Only show what would be done"""

    mirror: bool = False
    """Delete remote resources that have no local file"""


class SyncEngine:
    """Orchestrates pull and push for one resource adapter.

    Every remote call runs sequentially. Each download, upload or delete is
    one retried unit; a unit that exhausts its attempts is recorded in the
    batch result and the remaining items keep going.
    """

    def __init__(
        self,
        adapter: ResourceAdapter,
        output: Optional[OutputFormatter] = None,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize sync engine.

        Args:
            adapter: Resource adapter for the synced type
            output: Output formatter for displaying progress/status
            retry_config: Attempt budget and backoff for each unit of work
            sleep: Function used to wait between attempts
        """
        self.adapter = adapter
        self.output = output or OutputFormatter()
        self.retry_config = retry_config
        self.sleep = sleep
        self.operations = SyncOperations(adapter)

    # =========================
    # Pull
    # =========================

    def pull(self, options: PullOptions) -> SyncReport:
        """Download remote resources into the local directory.

        Args:
            options: Pull options

        Returns:
            Report of what was (or, in dry-run mode, would be) done

        Raises:
            ShopifyAPIError: If the remote list cannot be fetched
            SyncError: If the output directory cannot be created
        """
        name = self.adapter.resource_name
        planner = DryRunPlanner(options.dry_run, self.output)
        planner.log_header(f"Pull {name}{' (Mirror Mode)' if options.mirror else ''}")
        self.adapter.prepare(options.credentials)

        target = self.adapter.local_path(options.output)
        planner.log_action("pull", f"{name} to: {target}")

        resources = self._list_remote(options.credentials)
        if options.max_items and options.max_items > 0:
            resources = resources[: options.max_items]
            self.output.info(f"Limited to first {len(resources)} {name} for testing")
        else:
            self.output.info(f"Found {len(resources)} remote {name} to sync")

        to_delete: list[LocalFile] = []
        if options.mirror:
            remote_handles = [self.adapter.handle_of(r) for r in resources]
            to_delete = find_prune_candidates(
                remote_handles, self._scan_local(target), lambda f: f.handle
            )
            if to_delete:
                self.output.info(
                    f"Mirror mode: {len(to_delete)} local file(s) will be deleted"
                )

        plan = SyncPlan(
            direction=SyncDirection.PULL,
            transfers=resources,
            deletions=to_delete,
            delete_keys=[self.adapter.display_key(f.handle) for f in to_delete],
            mirror=options.mirror,
        )
        report = SyncReport(
            resource_name=name, plan=plan, dry_run=options.dry_run, location=str(target)
        )
        planner.log_summary(
            PlanCounts(
                item_type=self.adapter.display_name,
                items_to_sync=len(plan.transfers),
                items_to_delete=len(plan.deletions) if options.mirror else None,
                delete_list=plan.delete_keys,
            )
        )

        if not planner.should_execute():
            return report

        self._ensure_directory(target)

        if plan.deletions:
            report.deleted = self._delete_local_files(plan.deletions)

        if plan.transfers:
            report.transferred = self._download_resources(
                options.credentials, plan.transfers, target
            )
        else:
            self.output.info(f"No {name} to sync")

        self._display_summary(report, f"Successfully pulled {name} to {target}")
        return report

    # =========================
    # Push
    # =========================

    def push(self, options: PushOptions) -> SyncReport:
        """Upload local files to the store.

        In mirror mode, remote resources without a local file are deleted
        before any upload starts.

        Args:
            options: Push options

        Returns:
            Report of what was (or, in dry-run mode, would be) done

        Raises:
            ShopifyAPIError: If the remote list cannot be fetched
        """
        name = self.adapter.resource_name
        planner = DryRunPlanner(options.dry_run, self.output)
        planner.log_header(f"Push {name}{' (Mirror Mode)' if options.mirror else ''}")
        self.adapter.prepare(options.credentials)

        source = self.adapter.local_path(options.input)
        planner.log_action("push", f"local {name} from {source}")

        if not source.is_dir():
            self.output.warning(f"Local directory does not exist: {source}")
        local_files = self._scan_local(source)

        remote = self._list_remote(options.credentials)

        to_delete: list[Resource] = []
        if options.mirror:
            to_delete = find_prune_candidates(
                [f.handle for f in local_files], remote, self.adapter.handle_of
            )
            if to_delete:
                self.output.info(
                    f"Mirror mode: {len(to_delete)} remote {name} will be deleted"
                )

        self.output.info(f"Found {len(local_files)} local {name} to upload")

        plan = SyncPlan(
            direction=SyncDirection.PUSH,
            transfers=local_files,
            deletions=to_delete,
            delete_keys=[
                self.adapter.display_key(self.adapter.handle_of(r)) for r in to_delete
            ],
            mirror=options.mirror,
        )
        report = SyncReport(
            resource_name=name, plan=plan, dry_run=options.dry_run, location=str(source)
        )
        planner.log_summary(
            PlanCounts(
                item_type=self.adapter.display_name,
                items_to_upload=len(plan.transfers),
                items_to_delete=len(plan.deletions) if options.mirror else None,
                delete_list=plan.delete_keys,
            )
        )

        if not planner.should_execute():
            return report

        # Stale remote resources go first so replacements cannot collide with them
        if plan.deletions:
            report.deleted = self._delete_remote_resources(
                options.credentials, plan.deletions
            )

        if plan.transfers:
            report.transferred = self._upload_files(
                options.credentials, plan.transfers
            )
        else:
            self.output.info(f"No {name} to upload")

        self._display_summary(report, f"Successfully pushed {name}")
        return report

    # =========================
    # Planning helpers
    # =========================

    def _list_remote(self, credentials: Credentials) -> list[Resource]:
        """Fetch the remote list; failure here aborts the whole operation."""
        start = time.time()
        resources = with_retry(
            lambda: self.adapter.list_remote(credentials),
            self.retry_config,
            self.sleep,
            description=f"listing remote {self.adapter.resource_name}",
        )
        logger.debug(
            "Listed %d remote %s in %.2fs",
            len(resources),
            self.adapter.resource_name,
            time.time() - start,
        )
        return resources

    def _scan_local(self, directory: Path) -> list[LocalFile]:
        return collect_local_files(
            directory,
            self.adapter.file_extension,
            recursive=self.adapter.recursive,
            subdirectories=self.adapter.subdirectories,
        )

    def _ensure_directory(self, directory: Path) -> None:
        """Create the output directory; failure is fatal for the batch."""
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SyncError(f"Cannot create output directory {directory}: {e}") from e

    # =========================
    # Execution
    # =========================

    @contextmanager
    def _progress(
        self, description: str, total: int
    ) -> Iterator[Optional[Callable[[], None]]]:
        """Show a progress bar for a phase; yields its ``advance`` callback.

        Yields None when no bar is shown (quiet or JSON output).
        """
        if self.output.quiet or self.output.json_output:
            yield None
            return

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self.output.console,
            transient=True,
        ) as progress:
            task = progress.add_task(description, total=total)
            yield lambda: progress.update(task, advance=1)

    def _run_batch(
        self,
        items: list[Any],
        handle_of: Callable[[Any], str],
        verb: str,
        unit: Callable[[Any], Any],
        retried: bool = True,
    ) -> BatchResult:
        """Run one unit of work per item, isolating failures.

        Args:
            items: Items to process, in order
            handle_of: Maps an item to its handle for messages
            verb: Progress verb ("Downloading")
            unit: Work for one item
            retried: Wrap each unit in the retry policy

        Returns:
            Batch result for the phase
        """
        result = BatchResult()
        total = len(items)

        with self._progress(f"{verb} {self.adapter.resource_name}...", total) as advance:
            for index, item in enumerate(items, start=1):
                handle = handle_of(item)
                key = self.adapter.display_key(handle)
                logger.debug("(%d/%d): %s %s", index, total, verb, key)
                if advance is None:
                    self.output.progress_line(index, total, f"{verb} {key}")
                try:
                    if retried:
                        with_retry(
                            partial(unit, item),
                            self.retry_config,
                            self.sleep,
                            description=f"{verb.lower()} {key}",
                        )
                    else:
                        unit(item)
                    result.record_success()
                except Exception as e:
                    self.output.warning(f"Failed {verb.lower()} {handle}: {e}")
                    result.record_failure(handle, e)
                if advance is not None:
                    advance()

        return result

    def _download_resources(
        self, credentials: Credentials, resources: list[Resource], directory: Path
    ) -> BatchResult:
        return self._run_batch(
            resources,
            self.adapter.handle_of,
            "Downloading",
            lambda resource: self.operations.download(credentials, resource, directory),
        )

    def _upload_files(
        self, credentials: Credentials, files: list[LocalFile]
    ) -> BatchResult:
        return self._run_batch(
            files,
            lambda f: f.handle,
            "Uploading",
            lambda local_file: self.operations.upload(credentials, local_file),
        )

    def _delete_remote_resources(
        self, credentials: Credentials, resources: list[Resource]
    ) -> BatchResult:
        return self._run_batch(
            resources,
            self.adapter.handle_of,
            "Deleting",
            lambda resource: self.operations.delete_remote(credentials, resource),
        )

    def _delete_local_files(self, files: list[LocalFile]) -> BatchResult:
        # Local I/O is not retried
        result = self._run_batch(
            files,
            lambda f: f.handle,
            "Deleting local",
            self.operations.delete_local,
            retried=False,
        )
        if result.processed:
            self.output.info(f"Deleted {result.processed} local file(s)")
        return result

    # =========================
    # Reporting
    # =========================

    def _display_summary(self, report: SyncReport, headline: str) -> None:
        """Display the one-line summary and every per-item error."""
        summary = [headline]
        verb = "Downloaded" if report.plan.direction == SyncDirection.PULL else "Uploaded"
        if report.transferred.processed > 0:
            summary.append(f"{verb}: {report.transferred.processed}")
        if report.deleted.processed > 0:
            summary.append(f"Deleted: {report.deleted.processed}")
        if report.failed > 0:
            summary.append(f"Failed: {report.failed}")

        self.output.print("")
        self.output.success(" | ".join(summary))

        if report.errors:
            direction = report.plan.direction.value
            self.output.warning(f"Errors encountered during {direction}:")
            for error in report.errors:
                self.output.warning(f"  - {error}")
