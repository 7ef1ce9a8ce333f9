"""Aggregate CPU utilization sampling from /proc/stat."""

import logging
from pathlib import Path

from kanagawa.config import PROC_STAT_PATH
from kanagawa.models import CpuSnapshot

logger = logging.getLogger(__name__)

# user nice system idle iowait irq softirq steal
_REQUIRED_FIELDS = 8


class UtilizationSampler:
    """
    Reads cumulative idle and total ticks for all CPUs combined.

    An unreadable or malformed statistics file yields a zero snapshot, which
    utilization() turns into 0.0 instead of a bogus delta.
    """

    def __init__(self, stat_path: Path = PROC_STAT_PATH) -> None:
        self._stat_path = Path(stat_path)

    @property
    def stat_path(self) -> Path:
        return self._stat_path

    def sample(self) -> CpuSnapshot:
        """Return the current aggregate tick counters."""
        try:
            with self._stat_path.open() as fp:
                line = fp.readline()
        except (OSError, ValueError) as exc:
            logger.debug("Cannot read %s: %s", self._stat_path, exc)
            return CpuSnapshot(idle_ticks=0, total_ticks=0)

        fields = line.split()[1 : 1 + _REQUIRED_FIELDS]
        try:
            user, nice, system, idle, iowait, irq, softirq, steal = (int(f) for f in fields)
        except ValueError:
            logger.debug("Malformed cpu line in %s: %r", self._stat_path, line)
            return CpuSnapshot(idle_ticks=0, total_ticks=0)

        return CpuSnapshot(
            idle_ticks=idle + iowait,
            total_ticks=user + nice + system + idle + iowait + irq + softirq + steal,
        )


def utilization(prev: CpuSnapshot, curr: CpuSnapshot) -> float:
    """
    Percentage of time spent busy between two snapshots.

    Returns 0.0 when no ticks elapsed. The result is not clamped, so a
    counter reset between the snapshots can produce values outside 0-100.
    """
    total_delta = curr.total_ticks - prev.total_ticks
    if total_delta == 0:
        return 0.0
    idle_delta = curr.idle_ticks - prev.idle_ticks
    return 100.0 * (total_delta - idle_delta) / total_delta
