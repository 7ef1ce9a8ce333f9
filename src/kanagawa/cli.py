"""Command-line entry point for the kanagawa engine."""

import argparse
import logging
import signal
import sys
from pathlib import Path

from kanagawa.config import (
    CPUFREQ_ROOT,
    HIGH_LOAD_THRESHOLD,
    PROC_STAT_PATH,
    SAMPLE_INTERVAL,
    EngineConfig,
)
from kanagawa.engine import ControlLoop
from kanagawa.models import TickReport

STARTUP_MESSAGE = "Kanagawa Engine (Standard) Started."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kanagawa",
        description="Switch every cpufreq policy between a high-load and a low-load profile.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=SAMPLE_INTERVAL,
        help="seconds between samples (default: %(default)s)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=HIGH_LOAD_THRESHOLD,
        help="utilization above which the high-load profile is used (default: %(default)s)",
    )
    parser.add_argument(
        "--stat-path",
        type=Path,
        default=PROC_STAT_PATH,
        help="kernel CPU statistics file (default: %(default)s)",
    )
    parser.add_argument(
        "--cpufreq-root",
        type=Path,
        default=CPUFREQ_ROOT,
        help="directory holding the policyN domains (default: %(default)s)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="run a single tick and exit")
    mode.add_argument("--dashboard", action="store_true", help="show the live dashboard")
    parser.add_argument("-v", "--verbose", action="store_true", help="log each tick to stderr")
    return parser


def format_report(report: TickReport) -> str:
    """One-line summary of a tick."""
    domains = ", ".join(
        f"{u.domain}={u.min_freq}-{u.max_freq}" for u in report.updates
    )
    return f"{report.utilization:.1f}% {report.profile.name} [{domains}]"


def main(argv: list[str] | None = None) -> int:
    """Entry point for the kanagawa engine."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        config = EngineConfig(
            interval=args.interval,
            threshold=args.threshold,
            stat_path=args.stat_path,
            cpufreq_root=args.cpufreq_root,
        )
    except ValueError as exc:
        parser.error(str(exc))

    loop = ControlLoop(config)

    if args.dashboard:
        from kanagawa.dashboard import KanagawaApp

        KanagawaApp(loop).run()
        return 0

    previous = loop.baseline()
    print(STARTUP_MESSAGE, flush=True)

    if args.once:
        loop.run(on_tick=lambda report: print(format_report(report)), max_ticks=1, previous=previous)
        return 0

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, lambda *_: loop.stop())
    loop.run(previous=previous)
    return 0


if __name__ == "__main__":
    sys.exit(main())
