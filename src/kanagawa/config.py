"""Policy knobs and paths for the kanagawa engine."""

from dataclasses import dataclass
from pathlib import Path

SAMPLE_INTERVAL = 5.0  # Seconds between ticks
HIGH_LOAD_THRESHOLD = 40.0  # Percent busy, exclusive
HIGH_LOAD_PERCENTILE = 0.75  # Minimum bound under high load
LOW_LOAD_PERCENTILE = 0.50  # Maximum bound under low load
MAX_TABLE_SIZE = 100  # Sanity cap on parsed frequency tokens

PROC_STAT_PATH = Path("/proc/stat")
CPUFREQ_ROOT = Path("/sys/devices/system/cpu/cpufreq")


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """
    Runtime configuration of the control loop.

    Defaults reproduce the stock engine: 5 second ticks, a 40% threshold,
    75th percentile floor under load and 50th percentile ceiling otherwise.
    """

    interval: float = SAMPLE_INTERVAL
    threshold: float = HIGH_LOAD_THRESHOLD
    high_load_percentile: float = HIGH_LOAD_PERCENTILE
    low_load_percentile: float = LOW_LOAD_PERCENTILE
    stat_path: Path = PROC_STAT_PATH
    cpufreq_root: Path = CPUFREQ_ROOT

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")
        if not 0.0 <= self.threshold <= 100.0:
            raise ValueError(f"threshold must be within 0-100, got {self.threshold}")
        for name in ("high_load_percentile", "low_load_percentile"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
