"""Fixed-interval control loop driving the kanagawa engine."""

import logging
import threading
from collections.abc import Callable

from kanagawa.config import EngineConfig
from kanagawa.frequency import FrequencyTableResolver
from kanagawa.models import CpuSnapshot, TickReport
from kanagawa.profile import ProfileApplier, classify
from kanagawa.sampler import UtilizationSampler, utilization

logger = logging.getLogger(__name__)


class ControlLoop:
    """
    Samples utilization every interval and applies the matching profile.

    The previous snapshot is never stored on the instance: tick() takes it
    and returns the next one inside its TickReport, and run() threads it
    from one iteration to the next.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        sampler: UtilizationSampler | None = None,
        applier: ProfileApplier | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._sampler = sampler or UtilizationSampler(self._config.stat_path)
        self._applier = applier or ProfileApplier(
            self._config.cpufreq_root,
            FrequencyTableResolver(),
            high_load_percentile=self._config.high_load_percentile,
            low_load_percentile=self._config.low_load_percentile,
        )
        self._stop_event = threading.Event()
        self._paused = False

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def applier(self) -> ProfileApplier:
        return self._applier

    @property
    def paused(self) -> bool:
        """Whether ticks skip writing profiles."""
        return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        self._paused = value

    @property
    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def baseline(self) -> CpuSnapshot:
        """Take the initial snapshot the first tick is measured against."""
        return self._sampler.sample()

    def tick(self, previous: CpuSnapshot) -> TickReport:
        """Run one iteration against the previous snapshot."""
        current = self._sampler.sample()
        if current.total_ticks == 0:
            # Unreadable sample: keep measuring from the last good counters
            logger.debug("No CPU counters this tick, keeping previous snapshot")
            current = previous
        usage = utilization(previous, current)
        profile = classify(usage, self._config.threshold)

        updates = [] if self._paused else self._applier.apply(profile)
        logger.debug(
            "Utilization %.1f%% -> %s (%d domains updated%s)",
            usage,
            profile.name,
            len(updates),
            ", paused" if self._paused else "",
        )
        return TickReport(
            previous=previous,
            current=current,
            utilization=usage,
            profile=profile,
            updates=updates,
        )

    def run(
        self,
        on_tick: Callable[[TickReport], None] | None = None,
        max_ticks: int | None = None,
        previous: CpuSnapshot | None = None,
    ) -> None:
        """
        Loop until stop() is called or max_ticks iterations have run.

        Args:
            on_tick: Called with each TickReport.
            max_ticks: Iteration limit; None runs until stopped.
            previous: Baseline snapshot; sampled now when omitted.
        """
        if previous is None:
            previous = self.baseline()
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            # Wait for the interval or until stop is requested
            if self._stop_event.wait(timeout=self._config.interval):
                break
            report = self.tick(previous)
            previous = report.current
            ticks += 1
            if on_tick is not None:
                on_tick(report)

    def stop(self) -> None:
        """Request the loop to end at its next wake-up."""
        self._stop_event.set()
