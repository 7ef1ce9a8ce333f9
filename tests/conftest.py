"""Shared fixtures building fake /proc/stat and cpufreq trees."""

from pathlib import Path

import pytest


def write_stat(path: Path, user=0, nice=0, system=0, idle=0, iowait=0, irq=0, softirq=0, steal=0):
    """Write a /proc/stat lookalike with the given aggregate counters."""
    path.write_text(
        f"cpu  {user} {nice} {system} {idle} {iowait} {irq} {softirq} {steal} 0 0\n"
        f"cpu0 {user} {nice} {system} {idle} {iowait} {irq} {softirq} {steal} 0 0\n"
        "intr 12345\n"
    )


def make_domain(
    root: Path,
    name: str,
    table: list[int] | None = None,
    cpuinfo_max: int | None = None,
    current: tuple[int, int] = (0, 0),
) -> Path:
    """Create a policy directory with writable min/max control files."""
    domain = root / name
    domain.mkdir(parents=True)
    if table is not None:
        (domain / "scaling_available_frequencies").write_text(
            " ".join(str(freq) for freq in table) + " \n"
        )
    if cpuinfo_max is not None:
        (domain / "cpuinfo_max_freq").write_text(f"{cpuinfo_max}\n")
    (domain / "scaling_min_freq").write_text(str(current[0]))
    (domain / "scaling_max_freq").write_text(str(current[1]))
    return domain


@pytest.fixture
def stat_path(tmp_path: Path) -> Path:
    path = tmp_path / "stat"
    write_stat(path)
    return path


@pytest.fixture
def cpufreq_root(tmp_path: Path) -> Path:
    root = tmp_path / "cpufreq"
    root.mkdir()
    return root
