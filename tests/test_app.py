"""Tests for the kanagawa dashboard."""

import pytest
from conftest import make_domain

from kanagawa.config import EngineConfig
from kanagawa.dashboard import DomainTable, HeaderStats, KanagawaApp, format_khz
from kanagawa.engine import ControlLoop
from kanagawa.models import CpuSnapshot, DomainUpdate, Profile, TickReport
from kanagawa.monitor import EngineSnapshot


@pytest.fixture
def loop(stat_path, cpufreq_root):
    make_domain(cpufreq_root, "policy0", table=[100, 200, 300, 400])
    return ControlLoop(EngineConfig(interval=0.1, stat_path=stat_path, cpufreq_root=cpufreq_root))


def make_snapshot(updates: list[DomainUpdate]) -> EngineSnapshot:
    report = TickReport(
        previous=CpuSnapshot(0, 0),
        current=CpuSnapshot(45, 100),
        utilization=55.0,
        profile=Profile.HIGH_LOAD,
        updates=updates,
    )
    return EngineSnapshot(
        report=report,
        cpu_percent_per_core=[10.0, 90.0],
        current_freqs={"policy0": 400, "policy4": None},
    )


def test_format_khz_megahertz():
    assert format_khz(800000) == "800MHz"


def test_format_khz_gigahertz():
    assert format_khz(1800000) == "1.80GHz"


def test_format_khz_unknown():
    assert format_khz(None) == ""


@pytest.mark.asyncio
async def test_app_creation(loop):
    """Test KanagawaApp can be instantiated."""
    app = KanagawaApp(loop)
    assert app.title == "kanagawa"
    assert app._monitor is not None
    assert app._update_queue is not None


@pytest.mark.asyncio
async def test_app_compose(loop):
    """Test KanagawaApp composes correctly."""
    app = KanagawaApp(loop)
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#header-stats") is not None
        assert pilot.app.query_one("#domain-table") is not None
        assert pilot.app.query_one("#usage-history") is not None


@pytest.mark.asyncio
async def test_app_quit_binding(loop):
    """Test that 'q' binding stops the engine and quits."""
    app = KanagawaApp(loop)
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert pilot.app._exit
        assert not pilot.app._monitor.is_running


@pytest.mark.asyncio
async def test_app_pause_binding(loop):
    """Test that 'p' toggles profile application."""
    app = KanagawaApp(loop)
    async with app.run_test() as pilot:
        await pilot.press("p")
        assert loop.paused

        await pilot.press("p")
        assert not loop.paused


@pytest.mark.asyncio
async def test_domain_table_update(loop):
    """Test DomainTable tracks written and skipped domains."""
    app = KanagawaApp(loop)
    async with app.run_test() as pilot:
        table = pilot.app.query_one(DomainTable)
        update = DomainUpdate(
            domain="policy0",
            profile=Profile.HIGH_LOAD,
            writes=(("scaling_max_freq", 400), ("scaling_min_freq", 400)),
        )

        table.update_domains([update], {"policy0": 400, "policy4": None})
        assert table._current_domains == {"policy0", "policy4"}

        table.update_domains([update], {"policy0": 400})
        assert table._current_domains == {"policy0"}


@pytest.mark.asyncio
async def test_header_stats_update(loop):
    """Test that header stats can be updated."""
    app = KanagawaApp(loop)
    async with app.run_test() as pilot:
        header = pilot.app.query_one("#header-stats", HeaderStats)

        header.update_stats(make_snapshot([]), paused=True)

        assert header._cpu_percents == [10.0, 90.0]
        assert header._utilization == 55.0
        assert header._profile is Profile.HIGH_LOAD
        assert header._paused


@pytest.mark.asyncio
async def test_app_receives_ticks_from_engine(loop):
    """Test that the app receives ticks from the background engine."""
    app = KanagawaApp(loop)
    async with app.run_test() as pilot:
        await pilot.pause(1.5)

        assert app._monitor.is_running
        table = pilot.app.query_one(DomainTable)
        assert "policy0" in table._current_domains


@pytest.mark.asyncio
async def test_app_keeps_engine_separate_from_event_loop(loop):
    """Test the engine attribute leaves Textual's own event loop alone."""
    app = KanagawaApp(loop)
    async with app.run_test() as pilot:
        header = pilot.app.query_one("#header-stats", HeaderStats)

        assert pilot.app._engine is loop
        assert header._threshold == loop.config.threshold
