"""Snapshot pipeline for resreport."""

import logging
import socket
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import psutil

from resreport.classifier import classify_and_filter
from resreport.models import MetricsRecord
from resreport.parser import parse_output
from resreport.source import DockerStatsSource, StatsSource

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class HostInfo:
    """Static facts about the host the report was taken on."""

    hostname: str
    cpu_count: int
    memory_total: int  # Bytes


@dataclass(slots=True)
class ReportSnapshot:
    """Everything a renderer needs for one report."""

    records: list[MetricsRecord]
    generated_at: datetime
    source_available: bool
    host: HostInfo


def collect_host_info() -> HostInfo:
    """Collect host CPU and memory totals using psutil."""
    try:
        memory_total = psutil.virtual_memory().total
    except (OSError, RuntimeError):
        memory_total = 0
    return HostInfo(
        hostname=socket.gethostname(),
        cpu_count=psutil.cpu_count(logical=True) or 1,
        memory_total=memory_total,
    )


class ResourceMonitor:
    """
    One-shot resource collector.

    Fetches a single sample from the stats source, parses it, filters it by
    service name and classifies each record. Nothing is retained between
    calls to `collect`.
    """

    def __init__(
        self,
        source: StatsSource | None = None,
        service_filters: Sequence[str] = (),
    ) -> None:
        """
        Initialize the ResourceMonitor.

        Args:
            source: Stats source to sample. Defaults to the docker CLI.
            service_filters: Substrings a service name must contain to be
                reported. Empty reports every service.
        """
        self._source = source if source is not None else DockerStatsSource()
        self._service_filters = list(service_filters)

    @property
    def service_filters(self) -> list[str]:
        """Get the active service filters."""
        return list(self._service_filters)

    def collect_records(self) -> tuple[list[MetricsRecord], bool]:
        """Run the fetch, parse, filter and classify pipeline."""
        lines, available = self._source.fetch()
        if not available:
            return [], False

        records = classify_and_filter(parse_output(lines), self._service_filters)
        logger.info("Collected %d record(s) from %d line(s)", len(records), len(lines))
        return records, True

    def collect(self) -> ReportSnapshot:
        """Collect a full report snapshot."""
        records, available = self.collect_records()
        return ReportSnapshot(
            records=records,
            generated_at=datetime.now(),
            source_available=available,
            host=collect_host_info(),
        )


def collect_metrics(
    service_filters: Sequence[str] = (),
    source: StatsSource | None = None,
) -> list[MetricsRecord]:
    """Return the classified records for the matching services."""
    records, _ = ResourceMonitor(source, service_filters).collect_records()
    return records
