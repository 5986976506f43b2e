"""Terminal output formatting for the CLI and the sync engine."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Formats user-facing output with rich, or as JSON.

    In quiet mode only errors are printed. In JSON mode human-readable
    messages go to stderr so that stdout carries a single JSON document.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
            console: Console to print to (defaults to stdout)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def _text_console(self) -> Console:
        return self.err_console if self.json_output else self.console

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if not self.quiet:
            self._text_console().print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if not self.quiet:
            self._text_console().print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if not self.quiet:
            self._text_console().print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        """Print a warning in yellow."""
        if not self.quiet:
            self._text_console().print(
                f"Warning: {message}", style="yellow", markup=False
            )

    def error(self, message: str) -> None:
        """Print an error in red; shown even in quiet mode."""
        self.err_console.print(f"Error: {message}", style="bold red", markup=False)

    def progress_line(self, current: int, total: int, item: str) -> None:
        """Print a per-item progress line such as ``(2/5): Uploading a.json``."""
        if not self.quiet:
            self._text_console().print(f"({current}/{total}): {item}", markup=False)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a two-column summary table."""
        if self.quiet:
            return
        table = Table(title=title, show_header=False, box=None)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for key, value in items:
            table.add_row(key, value)
        self._text_console().print(table)

    def output_json(self, data: Any) -> None:
        """Write data as a JSON document to stdout."""
        self.console.print_json(json.dumps(data, default=str))
