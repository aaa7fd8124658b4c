"""Tests for the resreport application and command line."""

import json
from datetime import datetime

import pytest

from resreport import app as app_module
from resreport.app import RecordTable, ReportApp, ReportHeader, SortKey, build_parser, main
from resreport.models import MetricsRecord, Status
from resreport.monitor import HostInfo, ReportSnapshot
from resreport.render import UNITS_NOTE
from resreport.source import RawStats

HOST = HostInfo(hostname="box", cpu_count=4, memory_total=8 * 1024**3)

RECORDS = [
    MetricsRecord("web-1", 20.0, 300.0, 1024.0, status=Status.LOW),
    MetricsRecord("api", 90.0, 100.0, 1024.0, status=Status.HIGH),
    MetricsRecord("cache", 60.0, 500.0, 1024.0, status=Status.NORMAL),
]


def make_snapshot(available: bool = True) -> ReportSnapshot:
    return ReportSnapshot(
        records=list(RECORDS) if available else [],
        generated_at=datetime(2024, 1, 1, 12, 0, 0),
        source_available=available,
        host=HOST,
    )


class FakeDockerSource:
    """Replacement for DockerStatsSource used by main()."""

    lines = [
        "web-1|12.50%|512MiB / 1024MiB|1.2kB / 3.4kB",
        "db-1|95.00%|2GiB / 4GiB|0B / 0B",
    ]
    available = True

    def __init__(self, docker_bin="docker", timeout=None) -> None:
        self.docker_bin = docker_bin
        self.timeout = timeout

    def fetch(self) -> RawStats:
        return RawStats(lines=list(self.lines), available=self.available)


@pytest.fixture
def fake_docker(monkeypatch):
    """Patch the CLI's docker source."""
    monkeypatch.setattr(app_module, "DockerStatsSource", FakeDockerSource)
    monkeypatch.setattr(FakeDockerSource, "available", True)
    return FakeDockerSource


class TestSortKey:
    """Tests for SortKey enum."""

    def test_sort_key_values(self):
        """Test SortKey enum has expected values in cycle order."""
        assert [k.value for k in SortKey] == ["source", "cpu", "mem", "name"]


class TestParser:
    """Tests for command line parsing."""

    def test_defaults(self):
        """Test no arguments means a text report of all services."""
        args = build_parser().parse_args([])

        assert args.format == "text"
        assert args.services == []
        assert args.output is None
        assert args.docker == "docker"
        assert args.timeout is None

    def test_format_shortcuts(self):
        """Test --json, --html and --tui set the format."""
        parser = build_parser()

        assert parser.parse_args(["--json"]).format == "json"
        assert parser.parse_args(["--html"]).format == "html"
        assert parser.parse_args(["--tui"]).format == "tui"
        assert parser.parse_args(["-f", "html"]).format == "html"

    def test_services(self):
        """Test positional arguments become service filters."""
        args = build_parser().parse_args(["--json", "web", "cache"])

        assert args.services == ["web", "cache"]

    def test_formats_are_exclusive(self):
        """Test two formats at once are rejected."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--json", "--html"])


class TestMain:
    """Tests for main()."""

    def test_json_output(self, fake_docker, capsys):
        """Test --json prints the filtered records."""
        assert main(["--json", "web"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert [item["service"] for item in data] == ["web-1"]
        assert data[0]["status"] == "LOW"

    def test_text_output(self, fake_docker, capsys):
        """Test the default text report."""
        assert main([]) == 0

        out = capsys.readouterr().out
        assert "RESOURCE USAGE REPORT" in out
        assert "web-1" in out
        assert "db-1" in out
        assert "HIGH" in out

    def test_html_to_file(self, fake_docker, tmp_path):
        """Test -o writes the HTML report to a file."""
        target = tmp_path / "report.html"

        assert main(["--html", "-o", str(target)]) == 0

        page = target.read_text(encoding="utf-8")
        assert "<td>db-1</td>" in page
        assert '<td class="high">HIGH</td>' in page

    def test_text_to_file(self, fake_docker, tmp_path):
        """Test -o writes an uncoloured text report."""
        target = tmp_path / "report.txt"

        assert main(["-o", str(target)]) == 0

        content = target.read_text(encoding="utf-8")
        assert "web-1" in content
        assert "\x1b[" not in content

    def test_unavailable_source(self, fake_docker, monkeypatch, capsys):
        """Test a failing source still produces an empty report and exit 0."""
        monkeypatch.setattr(FakeDockerSource, "available", False)

        assert main(["--json"]) == 0

        assert json.loads(capsys.readouterr().out) == []

    def test_unwritable_output(self, fake_docker, tmp_path):
        """Test a write failure exits non-zero."""
        target = tmp_path / "missing-dir" / "report.json"

        assert main(["--json", "-o", str(target)]) == 1


@pytest.mark.asyncio
async def test_app_creation():
    """Test ReportApp can be instantiated."""
    app = ReportApp(make_snapshot())
    assert app.title == "resreport"
    assert app.sub_title == "Resource Usage Report"
    assert len(app.snapshot.records) == 3


@pytest.mark.asyncio
async def test_app_compose():
    """Test ReportApp composes header and table."""
    app = ReportApp(make_snapshot())
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#report-header") is not None
        table = pilot.app.query_one("#record-table")
        assert table.row_count == 3


@pytest.mark.asyncio
async def test_header_summary():
    """Test the header lists host and warning text."""
    app = ReportApp(make_snapshot(available=False))
    async with app.run_test() as pilot:
        header = pilot.app.query_one(ReportHeader)
        summary = header.summary()
        assert "Host: box (4 CPUs" in summary
        assert "Services: 0" in summary
        assert "Could not get Docker stats" in summary


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Test that 'q' binding triggers quit."""
    app = ReportApp(make_snapshot())
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert pilot.app._exit


@pytest.mark.asyncio
async def test_app_sort_binding():
    """Test that F6 binding cycles sort key."""
    app = ReportApp(make_snapshot())
    async with app.run_test() as pilot:
        record_table = pilot.app.query_one(RecordTable)
        assert record_table.sort_key == SortKey.SOURCE

        await pilot.press("f6")

        assert record_table.sort_key == SortKey.CPU


@pytest.mark.asyncio
async def test_record_table_sorting():
    """Test each sort key orders the records."""
    app = ReportApp(make_snapshot())
    async with app.run_test() as pilot:
        record_table = pilot.app.query_one(RecordTable)

        assert [r.service for r in record_table.sorted_records()] == ["web-1", "api", "cache"]

        record_table.cycle_sort()
        assert [r.service for r in record_table.sorted_records()] == ["api", "cache", "web-1"]

        record_table.cycle_sort()
        assert [r.service for r in record_table.sorted_records()] == ["cache", "web-1", "api"]

        record_table.cycle_sort()
        assert [r.service for r in record_table.sorted_records()] == ["api", "cache", "web-1"]

        record_table.cycle_sort()
        assert record_table.sort_key == SortKey.SOURCE
        assert pilot.app.query_one("#record-table").row_count == 3


@pytest.mark.asyncio
async def test_record_table_cells_carry_no_unit():
    """Test memory and network cells show bare source magnitudes."""
    app = ReportApp(make_snapshot())
    async with app.run_test() as pilot:
        row = pilot.app.query_one("#record-table").get_row_at(0)
        assert row[0] == "web-1"
        assert row[2] == "300.0"
        assert row[3] == "1024.0"
        assert UNITS_NOTE in pilot.app.query_one(ReportHeader).summary()
