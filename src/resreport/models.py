"""Data models for resreport."""

from dataclasses import dataclass
from enum import Enum


class Status(Enum):
    """Load tier derived from a record's CPU percentage."""

    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"


@dataclass(slots=True, frozen=True)
class MetricsRecord:
    """Immutable resource observation for one running service."""

    service: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_used: float  # Source units, not normalized
    memory_total: float
    network_rx: float = 0.0
    network_tx: float = 0.0
    status: Status | None = None  # Stamped by the classifier

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-ready mapping of the record."""
        return {
            "service": self.service,
            "cpu_percent": self.cpu_percent,
            "memory_used": self.memory_used,
            "memory_total": self.memory_total,
            "network_rx": self.network_rx,
            "network_tx": self.network_tx,
            "status": self.status.value if self.status else None,
        }
