"""Profile application across all cpufreq scaling domains."""

import logging
import os
from pathlib import Path

from kanagawa.config import CPUFREQ_ROOT, HIGH_LOAD_PERCENTILE, LOW_LOAD_PERCENTILE
from kanagawa.frequency import UNRESOLVED, FrequencyTableResolver
from kanagawa.models import Bound, DomainUpdate, Percentile, Profile, ScalingDomain

logger = logging.getLogger(__name__)

DOMAIN_PREFIX = "policy"
SCALING_MIN_FREQ = "scaling_min_freq"
SCALING_MAX_FREQ = "scaling_max_freq"


def classify(usage: float, threshold: float) -> Profile:
    """Select a profile; a value exactly on the threshold is LOW_LOAD."""
    return Profile.HIGH_LOAD if usage > threshold else Profile.LOW_LOAD


def discover_domains(cpufreq_root: Path) -> list[ScalingDomain]:
    """List policy directories under the cpufreq root, or [] if it is missing."""
    root = Path(cpufreq_root)
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        logger.debug("Cannot list %s: %s", root, exc)
        return []
    return [
        ScalingDomain(name=entry.name, path=entry)
        for entry in entries
        if entry.name.startswith(DOMAIN_PREFIX)
    ]


def write_control(path: Path, value: int) -> bool:
    """Best-effort write of a decimal control value. Never creates the file."""
    try:
        fd = os.open(path, os.O_WRONLY | os.O_TRUNC)
        try:
            os.write(fd, str(value).encode())
        finally:
            os.close(fd)
    except OSError as exc:
        logger.debug("Write %s=%d failed: %s", path, value, exc)
        return False
    return True


class ProfileApplier:
    """
    Writes profile boundaries into every scaling domain.

    Each profile widens the window on one side before narrowing the other,
    so the kernel never sees a minimum above the maximum:

    * HIGH_LOAD: max = absolute max, then min = high-load percentile
    * LOW_LOAD: min = absolute min, then max = low-load percentile
    """

    def __init__(
        self,
        cpufreq_root: Path = CPUFREQ_ROOT,
        resolver: FrequencyTableResolver | None = None,
        high_load_percentile: float = HIGH_LOAD_PERCENTILE,
        low_load_percentile: float = LOW_LOAD_PERCENTILE,
    ) -> None:
        self._cpufreq_root = Path(cpufreq_root)
        self._resolver = resolver or FrequencyTableResolver()
        self._high_load = Percentile(high_load_percentile)
        self._low_load = Percentile(low_load_percentile)

    @property
    def cpufreq_root(self) -> Path:
        return self._cpufreq_root

    def apply(self, profile: Profile) -> list[DomainUpdate]:
        """Apply a profile to all domains and report what was attempted."""
        updates: list[DomainUpdate] = []
        for domain in discover_domains(self._cpufreq_root):
            update = self._apply_domain(domain, profile)
            if update is not None:
                updates.append(update)
        return updates

    def _apply_domain(self, domain: ScalingDomain, profile: Profile) -> DomainUpdate | None:
        absolute_max = self._resolver.resolve(domain.path, Bound.ABSOLUTE_MAX)
        absolute_min = self._resolver.resolve(domain.path, Bound.ABSOLUTE_MIN)
        if absolute_max == UNRESOLVED or absolute_min == UNRESOLVED:
            logger.debug("Skipping %s: frequency table unavailable", domain.name)
            return None

        if profile is Profile.HIGH_LOAD:
            target = self._resolver.resolve(domain.path, self._high_load)
            writes = ((SCALING_MAX_FREQ, absolute_max), (SCALING_MIN_FREQ, target))
        else:
            target = self._resolver.resolve(domain.path, self._low_load)
            writes = ((SCALING_MIN_FREQ, absolute_min), (SCALING_MAX_FREQ, target))

        for name, value in writes:
            write_control(domain.path / name, value)

        return DomainUpdate(domain=domain.name, profile=profile, writes=writes)
