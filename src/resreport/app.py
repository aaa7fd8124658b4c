"""resreport - command line entry point and interactive report viewer."""

import argparse
import logging
import sys
from collections.abc import Sequence
from enum import Enum

from rich.console import Console
from rich.logging import RichHandler
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from resreport.models import MetricsRecord
from resreport.monitor import ReportSnapshot, ResourceMonitor
from resreport.render import (
    TIMESTAMP_FORMAT,
    UNITS_NOTE,
    format_amount,
    host_summary,
    render_html,
    render_json,
    render_text,
    status_text,
)
from resreport.source import DockerStatsSource

logger = logging.getLogger(__name__)


class SortKey(Enum):
    """Sort keys for the record table."""

    SOURCE = "source"
    CPU = "cpu"
    MEM = "mem"
    NAME = "name"


class ReportHeader(Static):
    """Header widget showing host facts and when the snapshot was taken."""

    DEFAULT_CSS = """
    ReportHeader {
        height: auto;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, snapshot: ReportSnapshot, *args, **kwargs) -> None:
        """Initialize ReportHeader."""
        super().__init__(*args, **kwargs)
        self._report = snapshot

    def on_mount(self) -> None:
        """Render the header text once mounted."""
        self.update(self.summary())

    def summary(self) -> str:
        """Get the header text."""
        snapshot = self._report
        lines = [
            host_summary(snapshot.host),
            f"Generated: {snapshot.generated_at.strftime(TIMESTAMP_FORMAT)}",
            f"Services: {len(snapshot.records)}",
            UNITS_NOTE,
        ]
        if not snapshot.source_available:
            lines.append("[yellow]Warning: Could not get Docker stats[/yellow]")
        return "\n".join(lines)


class RecordTable(Container):
    """Container for the record data table."""

    DEFAULT_CSS = """
    RecordTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, records: list[MetricsRecord], *args, **kwargs) -> None:
        """Initialize RecordTable."""
        super().__init__(*args, **kwargs)
        self._records = list(records)
        self._sort_key: SortKey = SortKey.SOURCE
        self._sort_reverse: bool = False

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, redraw the rows and return the key."""
        keys = list(SortKey)
        current_index = keys.index(self._sort_key)
        self._sort_key = keys[(current_index + 1) % len(keys)]
        # Loads read largest first
        self._sort_reverse = self._sort_key in (SortKey.CPU, SortKey.MEM)
        self._fill_rows()
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the record table."""
        yield DataTable(id="record-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#record-table", DataTable)
        table.cursor_type = "row"

        table.add_column("SERVICE", key="service")
        table.add_column("CPU%", key="cpu", width=8)
        table.add_column("MEM USED", key="mem_used", width=12)
        table.add_column("MEM TOTAL", key="mem_total", width=12)
        table.add_column("NET RX", key="rx", width=10)
        table.add_column("NET TX", key="tx", width=10)
        table.add_column("STATUS", key="status", width=8)

        self._fill_rows()

    def sorted_records(self) -> list[MetricsRecord]:
        """Records in the current sort order."""
        if self._sort_key is SortKey.SOURCE:
            return list(self._records)
        key_func = {
            SortKey.CPU: lambda r: r.cpu_percent,
            SortKey.MEM: lambda r: r.memory_used,
            SortKey.NAME: lambda r: r.service.lower(),
        }
        return sorted(self._records, key=key_func[self._sort_key], reverse=self._sort_reverse)

    def _fill_rows(self) -> None:
        """Replace the table rows with the records in current order."""
        table = self.query_one("#record-table", DataTable)
        table.clear()
        # Duplicate service names are legal, so rows are keyed by position
        for index, record in enumerate(self.sorted_records()):
            table.add_row(
                record.service,
                f"{record.cpu_percent:5.1f}",
                format_amount(record.memory_used),
                format_amount(record.memory_total),
                format_amount(record.network_rx),
                format_amount(record.network_tx),
                status_text(record),
                key=str(index),
            )


class ReportApp(App):
    """Interactive view of a single resource snapshot."""

    TITLE = "resreport"
    SUB_TITLE = "Resource Usage Report"

    CSS = """
    Screen {
        layout: vertical;
    }

    #report-header {
        dock: top;
        height: auto;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, snapshot: ReportSnapshot) -> None:
        """Initialize the ReportApp."""
        super().__init__()
        self._report = snapshot

    @property
    def snapshot(self) -> ReportSnapshot:
        """The snapshot on display."""
        return self._report

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield ReportHeader(self._report, id="report-header")
        yield RecordTable(self._report.records)
        yield Footer()

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        record_table = self.query_one(RecordTable)
        new_sort_key = record_table.cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="resreport",
        description="Resource usage report for running Docker containers.",
        epilog=(
            "examples:\n"
            "  resreport\n"
            "  resreport --json web\n"
            "  resreport --html -o report.html"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "services",
        nargs="*",
        metavar="SERVICE",
        help="only report containers whose name contains one of these strings",
    )
    formats = parser.add_mutually_exclusive_group()
    formats.add_argument(
        "--format",
        "-f",
        choices=("text", "json", "html", "tui"),
        default="text",
        help="output format (default: text)",
    )
    formats.add_argument("--json", dest="format", action="store_const", const="json", help="same as --format json")
    formats.add_argument("--html", dest="format", action="store_const", const="html", help="same as --format html")
    formats.add_argument("--tui", dest="format", action="store_const", const="tui", help="open the interactive viewer")
    parser.add_argument("--output", "-o", metavar="FILE", help="write the report to FILE instead of stdout")
    parser.add_argument("--docker", default="docker", metavar="PATH", help="docker executable (default: docker)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="give up on docker stats after SECONDS (default: wait)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="enable debug logging")
    return parser


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr so reports on stdout stay parseable."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def write_report(snapshot: ReportSnapshot, fmt: str, output: str | None = None) -> None:
    """Render `snapshot` in `fmt` to stdout or to the `output` file."""
    if fmt == "text":
        if output is None:
            render_text(snapshot)
            return
        with open(output, "w", encoding="utf-8") as f:
            render_text(snapshot, Console(file=f, no_color=True, width=120))
        return

    body = render_json(snapshot) if fmt == "json" else render_html(snapshot)
    if output is None:
        sys.stdout.write(body + "\n")
    else:
        with open(output, "w", encoding="utf-8") as f:
            f.write(body + "\n")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the resreport command."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    services = [name for name in args.services if name]
    source = DockerStatsSource(args.docker, timeout=args.timeout)
    snapshot = ResourceMonitor(source, services).collect()

    if args.format == "tui":
        ReportApp(snapshot).run()
        return 0

    try:
        write_report(snapshot, args.format, args.output)
    except OSError as e:
        logger.error("Could not write report to %s: %s", args.output, e)
        return 1
    if args.output:
        logger.info("Report written to %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
