"""kanagawa - Live Textual dashboard for the engine."""

from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Sparkline, Static

from kanagawa.engine import ControlLoop
from kanagawa.models import DomainUpdate, Profile
from kanagawa.monitor import EngineMonitor, EngineSnapshot


def format_khz(value: int | None) -> str:
    """Format a kHz value as MHz/GHz text."""
    if value is None:
        return ""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f}GHz"
    return f"{value / 1000:.0f}MHz"


class HeaderStats(Static):
    """Header widget showing per-core load and the engine's decision."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, threshold: float = 40.0, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._threshold = threshold
        self._cpu_percents: list[float] = []
        self._utilization: float | None = None
        self._profile: Profile | None = None
        self._paused: bool = False

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_engine_info(), id="engine-info"),
        )

    def update_stats(self, snapshot: EngineSnapshot, paused: bool = False) -> None:
        """Update the statistics from an engine snapshot."""
        self._cpu_percents = snapshot.cpu_percent_per_core
        self._utilization = snapshot.report.utilization
        self._profile = snapshot.report.profile
        self._paused = paused
        self._refresh_display()

    def set_paused(self, paused: bool) -> None:
        self._paused = paused
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            self.query_one("#cpu-info", Static).update(self._get_cpu_info())
            self.query_one("#engine-info", Static).update(self._get_engine_info())
        except Exception:
            pass  # Widget not mounted yet

    def _get_cpu_info(self) -> str:
        """Get per-core load bars."""
        if not self._cpu_percents:
            return "Loading CPU info..."
        lines = []
        for i, usage in enumerate(self._cpu_percents):
            bar_len = min(int(usage / 5), 20)
            bar = "[green]█[/green]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)
            lines.append(f"CPU{i:<2} \\[{bar}] {usage:5.1f}%")
        return "\n".join(lines)

    def _get_engine_info(self) -> str:
        """Get aggregate utilization and selected profile."""
        if self._utilization is None or self._profile is None:
            return "Waiting for first tick..."
        colour = "red" if self._profile is Profile.HIGH_LOAD else "cyan"
        state = "[yellow]PAUSED[/yellow]" if self._paused else "[green]applying[/green]"
        return (
            f"Utilization: {self._utilization:5.1f}% (threshold {self._threshold:g}%)\n"
            f"Profile: [{colour}]{self._profile.name}[/{colour}]\n"
            f"Engine: {state}"
        )


class DomainTable(Container):
    """Container for the scaling domain table."""

    DEFAULT_CSS = """
    DomainTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize DomainTable."""
        super().__init__(*args, **kwargs)
        self._current_domains: set[str] = set()

    def compose(self) -> ComposeResult:
        """Compose the domain table."""
        yield DataTable(id="domain-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#domain-table", DataTable)
        table.cursor_type = "row"

        table.add_column("DOMAIN", key="domain", width=10)
        table.add_column("PROFILE", key="profile", width=10)
        table.add_column("MIN", key="min", width=10)
        table.add_column("MAX", key="max", width=10)
        table.add_column("CUR", key="cur", width=10)

    def update_domains(
        self,
        updates: list[DomainUpdate],
        current_freqs: dict[str, int | None],
    ) -> None:
        """
        Update the table with the domains written this tick.

        Domains skipped this tick still show their current frequency.
        """
        table = self.query_one("#domain-table", DataTable)
        by_name = {update.domain: update for update in updates}
        new_domains = set(current_freqs) | set(by_name)

        for name in self._current_domains - new_domains:
            try:
                table.remove_row(name)
            except Exception:
                pass  # Row may not exist

        for name in sorted(new_domains):
            update = by_name.get(name)
            cells = {
                "domain": name,
                "profile": update.profile.name if update else "-",
                "min": format_khz(update.min_freq) if update else "-",
                "max": format_khz(update.max_freq) if update else "-",
                "cur": format_khz(current_freqs.get(name)),
            }
            try:
                if name in self._current_domains:
                    for column, value in cells.items():
                        table.update_cell(name, column, value)
                else:
                    table.add_row(*cells.values(), key=name)
            except Exception:
                pass  # Row may have been removed

        self._current_domains = new_domains


class KanagawaApp(App):
    """Main kanagawa dashboard application."""

    TITLE = "kanagawa"
    SUB_TITLE = "CPU Frequency Profile Engine"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #engine-info {
        width: 1fr;
        padding-left: 2;
    }

    #usage-history {
        height: 3;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("p", "pause", "Pause/Resume"),
    ]

    def __init__(self, loop: ControlLoop | None = None) -> None:
        """Initialize the KanagawaApp."""
        super().__init__()
        self._engine = loop or ControlLoop()
        self._update_queue: Queue[EngineSnapshot] = Queue()
        self._monitor = EngineMonitor(self._update_queue, self._engine)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats", threshold=self._engine.config.threshold)
        yield Sparkline([], summary_function=max, id="usage-history")
        yield DomainTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the engine when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Check the queue for engine ticks and refresh the UI."""
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self._update_ui(snapshot)

    def _update_ui(self, snapshot: EngineSnapshot) -> None:
        """Update the UI with the latest engine snapshot."""
        try:
            header = self.query_one("#header-stats", HeaderStats)
            header.update_stats(snapshot, paused=self._engine.paused)
            self.query_one("#usage-history", Sparkline).data = self._monitor.get_usage_history()
            self.query_one(DomainTable).update_domains(
                snapshot.report.updates, snapshot.current_freqs
            )
        except Exception:
            pass  # Screen may be closing

    def action_pause(self) -> None:
        """Toggle whether ticks write profiles."""
        self._engine.paused = not self._engine.paused
        self.query_one("#header-stats", HeaderStats).set_paused(self._engine.paused)
        self.notify("Engine paused" if self._engine.paused else "Engine resumed")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
