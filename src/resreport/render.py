"""Report renderers: text, JSON and HTML."""

import html
import json

from rich.console import Console
from rich.table import Table
from rich.text import Text

from resreport.models import MetricsRecord, Status
from resreport.monitor import HostInfo, ReportSnapshot

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

STATUS_STYLES = {
    Status.HIGH: "red",
    Status.NORMAL: "yellow",
    Status.LOW: "green",
}


# Values keep whatever unit docker printed (MiB, GiB, kB ...), so cells carry none
UNITS_NOTE = "Memory and network values are in the units reported by docker stats."

GIB = 1024**3


def format_amount(value: float) -> str:
    """Format a memory or network magnitude without a unit."""
    return f"{value:.1f}"


def status_label(record: MetricsRecord) -> str:
    """Status text for a record, empty if it was never classified."""
    return record.status.value if record.status else ""


def status_text(record: MetricsRecord) -> Text:
    """Status as rich Text coloured by tier."""
    return Text(status_label(record), style=STATUS_STYLES.get(record.status, ""))


def host_summary(host: HostInfo) -> str:
    """One-line description of the host."""
    return f"Host: {host.hostname} ({host.cpu_count} CPUs, {host.memory_total / GIB:.1f} GiB RAM)"


def render_text(snapshot: ReportSnapshot, console: Console | None = None) -> None:
    """Print a columnar report with tier-coloured status to `console`."""
    console = console or Console()

    console.print()
    console.print("=== RESOURCE USAGE REPORT ===", style="bold cyan")
    console.print(host_summary(snapshot.host), highlight=False)
    console.print()

    if not snapshot.source_available:
        console.print("Warning: Could not get Docker stats", style="yellow")

    table = Table(box=None, header_style="bold", pad_edge=False)
    table.add_column("SERVICE", no_wrap=True)
    table.add_column("CPU%", justify="right")
    table.add_column("MEM USED", justify="right")
    table.add_column("MEM TOTAL", justify="right")
    table.add_column("NET RX", justify="right")
    table.add_column("NET TX", justify="right")
    table.add_column("STATUS")

    for m in snapshot.records:
        table.add_row(
            m.service,
            f"{m.cpu_percent:.1f}%",
            format_amount(m.memory_used),
            format_amount(m.memory_total),
            format_amount(m.network_rx),
            format_amount(m.network_tx),
            status_text(m),
        )

    console.print(table)
    console.print(UNITS_NOTE, highlight=False)
    console.print()
    console.print(
        f"Report generated at: {snapshot.generated_at.strftime(TIMESTAMP_FORMAT)}",
        highlight=False,
    )


def render_json(snapshot: ReportSnapshot) -> str:
    """Serialize the record set as an indented JSON array."""
    return json.dumps([record.to_dict() for record in snapshot.records], indent=2)


HTML_HEAD = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Resource Usage Report</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; }
        table { border-collapse: collapse; width: 100%; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
        th { background-color: #4CAF50; color: white; }
        tr:nth-child(even) { background-color: #f2f2f2; }
        .high { color: red; }
        .normal { color: orange; }
        .low { color: green; }
        .warning { color: #b8860b; }
    </style>
</head>
<body>
"""

HTML_TABLE_HEADER = """    <table>
        <tr>
            <th>Service</th>
            <th>CPU%</th>
            <th>MEM Used</th>
            <th>MEM Total</th>
            <th>NET RX</th>
            <th>NET TX</th>
            <th>Status</th>
        </tr>
"""

HTML_ROW = """        <tr>
            <td>{service}</td>
            <td>{cpu:.1f}%</td>
            <td>{mem_used:.1f}</td>
            <td>{mem_total:.1f}</td>
            <td>{rx:.1f}</td>
            <td>{tx:.1f}</td>
            <td class="{css}">{status}</td>
        </tr>
"""

HTML_TAIL = """    </table>
</body>
</html>
"""


def render_html(snapshot: ReportSnapshot) -> str:
    """Render the report as a standalone HTML document."""
    parts = [
        HTML_HEAD,
        "    <h1>Resource Usage Report</h1>\n",
        f"    <p>Generated: {snapshot.generated_at.strftime(TIMESTAMP_FORMAT)}</p>\n",
        f"    <p>{html.escape(host_summary(snapshot.host))}</p>\n",
        f"    <p>{html.escape(UNITS_NOTE)}</p>\n",
    ]
    if not snapshot.source_available:
        parts.append('    <p class="warning">Warning: Could not get Docker stats</p>\n')

    parts.append(HTML_TABLE_HEADER)
    for m in snapshot.records:
        label = status_label(m)
        parts.append(
            HTML_ROW.format(
                service=html.escape(m.service),
                cpu=m.cpu_percent,
                mem_used=m.memory_used,
                mem_total=m.memory_total,
                rx=m.network_rx,
                tx=m.network_tx,
                css=label.lower(),
                status=html.escape(label),
            )
        )
    parts.append(HTML_TAIL)
    return "".join(parts)
