"""Stats source adapter: runs `docker stats` once and returns its raw lines."""

import logging
import subprocess
from typing import NamedTuple, Protocol

logger = logging.getLogger(__name__)

DELIMITER = "|"
STATS_FORMAT = DELIMITER.join(
    ["{{.Container}}", "{{.CPUPerc}}", "{{.MemUsage}}", "{{.NetIO}}"]
)


class RawStats(NamedTuple):
    """Raw output of one stats invocation."""

    lines: list[str]
    available: bool


UNAVAILABLE = RawStats(lines=[], available=False)


class StatsSource(Protocol):
    """Anything that can produce one raw stats sample."""

    def fetch(self) -> RawStats: ...


class DockerStatsSource:
    """
    Stats source backed by the docker CLI.

    Spawns exactly one `docker stats --no-stream` process per fetch and reads
    its stdout fully before returning. Failures are reported through
    `RawStats.available` rather than raised, so callers can still produce an
    (empty) report.
    """

    def __init__(self, docker_bin: str = "docker", timeout: float | None = None) -> None:
        """
        Initialize the DockerStatsSource.

        Args:
            docker_bin: Name or path of the docker executable.
            timeout: Seconds to wait for the command. None waits indefinitely.
        """
        self._docker_bin = docker_bin
        self._timeout = timeout

    @property
    def command(self) -> list[str]:
        """The argument vector passed to subprocess."""
        return [self._docker_bin, "stats", "--no-stream", "--format", STATS_FORMAT]

    def fetch(self) -> RawStats:
        """Run the stats command and return its output lines."""
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._timeout,
            )
        except FileNotFoundError:
            logger.warning("Could not get Docker stats: %s not found", self._docker_bin)
            return UNAVAILABLE
        except subprocess.CalledProcessError as e:
            logger.warning("Could not get Docker stats: exit status %d", e.returncode)
            logger.debug("docker stderr: %s", (e.stderr or "").strip())
            return UNAVAILABLE
        except subprocess.TimeoutExpired:
            logger.warning("Could not get Docker stats: timed out after %ss", self._timeout)
            return UNAVAILABLE
        except OSError as e:
            logger.warning("Could not get Docker stats: %s", e)
            return UNAVAILABLE

        if result.stderr:
            logger.debug("docker stderr: %s", result.stderr.strip())

        lines = result.stdout.splitlines()
        logger.debug("Read %d line(s) from docker stats", len(lines))
        return RawStats(lines=lines, available=True)


def fetch_raw_stats(docker_bin: str = "docker", timeout: float | None = None) -> RawStats:
    """Fetch one sample from the default docker stats source."""
    return DockerStatsSource(docker_bin, timeout=timeout).fetch()
