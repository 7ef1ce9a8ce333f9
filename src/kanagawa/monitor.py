"""Background engine runner feeding the kanagawa dashboard."""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from queue import Queue

import psutil

from kanagawa.engine import ControlLoop
from kanagawa.frequency import read_int
from kanagawa.models import TickReport
from kanagawa.profile import discover_domains

logger = logging.getLogger(__name__)

SCALING_CUR_FREQ = "scaling_cur_freq"


@dataclass(slots=True)
class EngineSnapshot:
    """One tick of the engine plus the system state around it."""

    report: TickReport
    cpu_percent_per_core: list[float]
    current_freqs: dict[str, int | None]  # domain name -> kHz


class EngineMonitor:
    """
    Runs a ControlLoop in a daemon thread and pushes EngineSnapshots to a Queue.

    Ticks stay strictly sequential; the thread only moves them off the UI's
    event loop.
    """

    def __init__(self, update_queue: Queue[EngineSnapshot], loop: ControlLoop) -> None:
        """
        Initialize the EngineMonitor.

        Args:
            update_queue: Thread-safe queue to push updates to.
            loop: Control loop whose interval, sampler and applier are used.
        """
        self._queue = update_queue
        self._loop = loop
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._usage_history: deque[float] = deque(maxlen=60)
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent(percpu=True)

    @property
    def loop(self) -> ControlLoop:
        return self._loop

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the engine thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._tick_loop,
            daemon=True,
            name="EngineMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the engine thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _tick_loop(self) -> None:
        """Main loop running in the background thread."""
        previous = self._loop.baseline()
        while not self._stop_event.wait(timeout=self._loop.config.interval):
            try:
                report = self._loop.tick(previous)
            except Exception:
                logger.exception("Engine tick failed")
                continue
            previous = report.current
            self._queue.put(self._collect_snapshot(report))

    def _collect_snapshot(self, report: TickReport) -> EngineSnapshot:
        """Wrap a tick report with per-core load and current frequencies."""
        self._usage_history.append(report.utilization)
        current_freqs = {
            domain.name: read_int(domain.path / SCALING_CUR_FREQ)
            for domain in discover_domains(self._loop.applier.cpufreq_root)
        }
        return EngineSnapshot(
            report=report,
            cpu_percent_per_core=psutil.cpu_percent(percpu=True),
            current_freqs=current_freqs,
        )

    def get_usage_history(self) -> list[float]:
        """Get the aggregate utilization history for sparkline rendering."""
        return list(self._usage_history)
