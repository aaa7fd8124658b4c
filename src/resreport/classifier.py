"""Service-name filtering and CPU load classification."""

from collections.abc import Iterable, Sequence
from dataclasses import replace

from resreport.models import MetricsRecord, Status

HIGH_CPU_THRESHOLD = 80.0
NORMAL_CPU_THRESHOLD = 50.0


def classify(cpu_percent: float) -> Status:
    """Map a single CPU sample to its load tier."""
    if cpu_percent > HIGH_CPU_THRESHOLD:
        return Status.HIGH
    if cpu_percent > NORMAL_CPU_THRESHOLD:
        return Status.NORMAL
    return Status.LOW


def matches(service: str, service_filters: Sequence[str]) -> bool:
    """Check whether `service` contains any filter (case-sensitive)."""
    if not service_filters:
        return True
    return any(name in service for name in service_filters)


def classify_and_filter(
    records: Iterable[MetricsRecord],
    service_filters: Sequence[str] = (),
) -> list[MetricsRecord]:
    """
    Keep records whose service matches a filter and stamp their status.

    Input order is preserved; records are neither sorted nor deduplicated.
    An empty filter list keeps every record.
    """
    return [
        replace(record, status=classify(record.cpu_percent))
        for record in records
        if matches(record.service, service_filters)
    ]
