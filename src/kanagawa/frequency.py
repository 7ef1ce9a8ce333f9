"""Frequency table analysis for cpufreq scaling domains."""

import logging
import math
import re
from pathlib import Path

from kanagawa.config import MAX_TABLE_SIZE
from kanagawa.models import Bound, Percentile, ResolveMode

logger = logging.getLogger(__name__)

AVAILABLE_FREQUENCIES = "scaling_available_frequencies"
CPUINFO_MAX_FREQ = "cpuinfo_max_freq"

# Returned when a domain's table cannot be used
UNRESOLVED = 0

_LEADING_INT = re.compile(r"[+-]?\d+")


def parse_frequency(token: str) -> int:
    """Parse leading digits of a token, or 0 when there are none."""
    match = _LEADING_INT.match(token.strip())
    return int(match.group()) if match else 0


def read_int(path: Path) -> int | None:
    """Read a single integer control value, or None when unavailable."""
    try:
        return parse_frequency(path.read_text())
    except (OSError, ValueError):
        return None


class FrequencyTableResolver:
    """
    Picks target frequencies out of a domain's hardware frequency table.

    Tables are re-read on every call; nothing is cached between ticks.
    """

    def __init__(self, max_table_size: int = MAX_TABLE_SIZE) -> None:
        self._max_table_size = max_table_size

    def read_table(self, domain_path: Path) -> list[int] | None:
        """
        Return the sorted frequency table for a domain.

        Returns None when the list cannot be read and an empty list when it
        holds no tokens.
        """
        path = Path(domain_path) / AVAILABLE_FREQUENCIES
        try:
            raw = path.read_text()
        except (OSError, ValueError) as exc:
            logger.debug("No frequency table at %s: %s", path, exc)
            return None

        tokens = raw.split()[: self._max_table_size]
        return sorted(parse_frequency(token) for token in tokens)

    def resolve(self, domain_path: Path, mode: ResolveMode) -> int:
        """
        Resolve a frequency for the domain, or UNRESOLVED (0).

        Only ABSOLUTE_MAX may fall back to cpuinfo_max_freq when the table
        is unreadable. Percentile ranks are floored, never rounded up.
        """
        table = self.read_table(domain_path)

        if table is None:
            if mode is Bound.ABSOLUTE_MAX:
                fallback = read_int(Path(domain_path) / CPUINFO_MAX_FREQ)
                return fallback if fallback is not None else UNRESOLVED
            return UNRESOLVED

        if not table:
            return UNRESOLVED

        if mode is Bound.ABSOLUTE_MAX:
            return table[-1]
        if mode is Bound.ABSOLUTE_MIN:
            return table[0]
        if isinstance(mode, Percentile):
            index = min(math.floor(len(table) * mode.rank), len(table) - 1)
            return table[index]

        raise TypeError(f"unsupported resolve mode: {mode!r}")
