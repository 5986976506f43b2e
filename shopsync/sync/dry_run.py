"""Dry-run planning: preview a sync plan and gate its execution."""

from dataclasses import dataclass, field
from typing import Optional

from ..output import OutputFormatter


@dataclass
class PlanCounts:
    """Numbers shown in a sync plan preview."""

    item_type: str
    """Capitalized resource name (e.g., "Pages")"""

    items_to_sync: Optional[int] = None
    """Remote items that a pull would download"""

    items_to_upload: Optional[int] = None
    """Local items that a push would upload"""

    items_to_delete: Optional[int] = None
    """Items mirror mode would delete (None when not mirroring)"""

    delete_list: list[str] = field(default_factory=list)
    """Display keys of the items to delete, in plan order"""


class DryRunPlanner:
    """Renders the plan preview and decides whether mutations may run.

    Both modes render the same summary from the same counts, so a dry run
    always shows what the real run would do.
    """

    def __init__(self, dry_run: bool, output: Optional[OutputFormatter] = None):
        """Initialize the planner.

        Args:
            dry_run: If True, nothing may be mutated
            output: Output formatter for the preview
        """
        self.dry_run = dry_run
        self.output = output or OutputFormatter()

    def log_header(self, operation: str) -> None:
        """Print the dry-run banner for an operation."""
        if not self.dry_run:
            return
        self.output.print("")
        self.output.info("=== DRY RUN MODE ===")
        self.output.info(f"Operation: {operation}")
        self.output.info("No changes will be made to the store or local files")
        self.output.print("")

    def log_action(self, verb: str, description: str) -> None:
        """Print what is about to happen ("Would pull ..." in dry-run mode)."""
        if self.dry_run:
            self.output.info(f"Would {verb} {description}")
        else:
            self.output.info(f"{verb.capitalize()}ing {description}")

    def render_summary(self, counts: PlanCounts) -> list[str]:
        """Build the preview lines for a plan.

        Args:
            counts: Plan numbers

        Returns:
            Lines in display order
        """
        lines: list[str] = []
        if counts.items_to_sync is not None:
            lines.append(f"{counts.item_type} to sync: {counts.items_to_sync}")
        if counts.items_to_upload is not None:
            lines.append(f"{counts.item_type} to upload: {counts.items_to_upload}")
        if counts.items_to_delete is not None:
            lines.append(f"{counts.item_type} to delete: {counts.items_to_delete}")
            lines.extend(f"  - {key}" for key in counts.delete_list)
        return lines

    def log_summary(self, counts: PlanCounts) -> None:
        """Print the plan preview, in dry-run and real mode alike."""
        title = "DRY RUN SUMMARY:" if self.dry_run else "Sync plan:"
        self.output.info(title)
        for line in self.render_summary(counts):
            self.output.info(line)
        if self.dry_run:
            self.output.print("")
            self.output.info(
                "To apply these changes, run the same command without --dry-run"
            )

    def should_execute(self) -> bool:
        """Return False in dry-run mode; callers must then stop before mutating."""
        return not self.dry_run
