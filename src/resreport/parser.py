"""Parser for `docker stats` text lines.

Each line carries four delimiter-separated fields:

    <container>|<cpu%>|<mem used> / <mem total>|<net rx> / <net tx>

Numeric sub-fields are extracted with regular expressions. Extraction is
split in two steps so a malformed field never fails the whole line:
`extract_floats` returns the parsed numbers or None, and `or_default`
replaces None with the field's default. Units are read past but ignored;
values in MiB and GiB are not converted to a common unit.
"""

import logging
import re
from collections.abc import Iterable
from typing import TypeVar

from resreport.models import MetricsRecord
from resreport.source import DELIMITER

logger = logging.getLogger(__name__)

T = TypeVar("T")

FIELD_COUNT = 4

# Digits and dots, so ".5" and "12." read whole; "1.2.3" fails in float()
_NUMBER = r"([\d.]+)"
CPU_RE = re.compile(_NUMBER + r"%")
# "<number><unit> / <number><unit>", the unit being any run of non-"/" characters
PAIR_RE = re.compile(_NUMBER + r"[^/\d]*/\s*" + _NUMBER)

ZERO_PAIR = (0.0, 0.0)


def extract_floats(pattern: re.Pattern[str], text: str | None) -> tuple[float, ...] | None:
    """
    Return the numeric groups of the first match of `pattern` in `text`.

    Returns None when there is no match or a group cannot be read as a float.
    """
    if not text:
        return None
    match = pattern.search(text)
    if match is None:
        return None
    try:
        return tuple(float(group) for group in match.groups())
    except ValueError:
        return None


def or_default(parsed: T | None, default: T) -> T:
    """Return `parsed`, or `default` when parsing failed."""
    return default if parsed is None else parsed


def parse_cpu(field: str | None) -> float:
    """Parse a CPU percentage such as '12.5%'. Unparseable input gives 0.0."""
    parsed = extract_floats(CPU_RE, field)
    return or_default(parsed, (0.0,))[0]


def parse_pair(field: str | None) -> tuple[float, float]:
    """Parse a 'used / total' style pair. Unparseable input gives (0.0, 0.0)."""
    parsed = extract_floats(PAIR_RE, field)
    used, total = or_default(parsed, ZERO_PAIR)
    return used, total


def split_fields(raw: str) -> list[str]:
    """Split a raw stats line on the field delimiter."""
    return raw.split(DELIMITER)


def parse_line(raw: str) -> MetricsRecord:
    """
    Parse one raw stats line into an unclassified MetricsRecord.

    Args:
        raw: A line with at least four delimiter-separated fields.

    Raises:
        ValueError: If the line has fewer than four fields. `parse_output`
            drops such lines before they get here.
    """
    parts = split_fields(raw)
    if len(parts) < FIELD_COUNT:
        raise ValueError(f"expected {FIELD_COUNT} fields, got {len(parts)}: {raw!r}")

    memory_used, memory_total = parse_pair(parts[2])
    network_rx, network_tx = parse_pair(parts[3])

    return MetricsRecord(
        service=parts[0],
        cpu_percent=parse_cpu(parts[1]),
        memory_used=memory_used,
        memory_total=memory_total,
        network_rx=network_rx,
        network_tx=network_tx,
    )


def is_parseable(raw: str) -> bool:
    """Check that a line is non-blank, has enough fields and names a service."""
    if not raw.strip():
        return False
    parts = split_fields(raw)
    return len(parts) >= FIELD_COUNT and parts[0] != ""


def parse_output(lines: str | Iterable[str]) -> list[MetricsRecord]:
    """
    Parse raw stats output into records, preserving line order.

    Blank lines, lines with fewer than four fields and lines without an
    identifier are skipped.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    records: list[MetricsRecord] = []
    for raw in lines:
        if not is_parseable(raw):
            if raw.strip():
                logger.debug("Skipping malformed stats line: %r", raw)
            continue
        records.append(parse_line(raw))
    return records
