"""Data models for kanagawa."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(slots=True, frozen=True)
class CpuSnapshot:
    """Immutable point-in-time reading of cumulative CPU ticks."""

    idle_ticks: int  # idle + iowait
    total_ticks: int  # all eight reported categories


@dataclass(slots=True, frozen=True)
class ScalingDomain:
    """One cpufreq policy directory."""

    name: str  # 'policy0', 'policy4', etc.
    path: Path


class Profile(Enum):
    """Operating profiles applied to every scaling domain."""

    HIGH_LOAD = "high"
    LOW_LOAD = "low"


class Bound(Enum):
    """Absolute ends of a frequency table."""

    ABSOLUTE_MAX = "max"
    ABSOLUTE_MIN = "min"


@dataclass(slots=True, frozen=True)
class Percentile:
    """Rank position within a sorted frequency table, in (0, 1]."""

    rank: float

    def __post_init__(self) -> None:
        if not 0.0 < self.rank <= 1.0:
            raise ValueError(f"percentile must be in (0, 1], got {self.rank}")


ResolveMode = Bound | Percentile


@dataclass(slots=True, frozen=True)
class DomainUpdate:
    """Boundary values written to one domain, in write order."""

    domain: str
    profile: Profile
    writes: tuple[tuple[str, int], ...]  # (control file name, kHz)

    @property
    def min_freq(self) -> int:
        """Get the value written to scaling_min_freq."""
        return self._written("scaling_min_freq")

    @property
    def max_freq(self) -> int:
        """Get the value written to scaling_max_freq."""
        return self._written("scaling_max_freq")

    def _written(self, name: str) -> int:
        return next(value for control, value in self.writes if control == name)


@dataclass(slots=True, frozen=True)
class TickReport:
    """Outcome of one control-loop iteration."""

    previous: CpuSnapshot
    current: CpuSnapshot
    utilization: float
    profile: Profile
    updates: list[DomainUpdate] = field(default_factory=list)
