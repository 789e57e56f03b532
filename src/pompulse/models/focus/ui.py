"""Live countdown and summary views for the terminal."""

from __future__ import annotations

import math
from dataclasses import dataclass

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from pompulse.utils.ui.console import get_console

from .cycling import Phase

BAR_WIDTH = 50
REFRESH_PER_SECOND = 10


@dataclass(frozen=True)
class TimerFrame:
    """Everything needed to draw one countdown frame."""

    phase: Phase
    remaining_seconds: int
    total_seconds: int
    completed_in_cycle: int
    intervals_before_long_break: int
    total_completed: int
    sound_enabled: bool | None


@dataclass(frozen=True)
class SummaryView:
    """Data shown by the static summary panel."""

    total_completed: int
    completed_in_cycle: int
    intervals_before_long_break: int
    focus_minutes: float
    sound_enabled: bool | None

    @property
    def total_focus_minutes(self) -> int:
        return round(self.total_completed * self.focus_minutes)


def format_time(seconds: int) -> str:
    """Format seconds as zero-padded MM:SS."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def elapsed_fraction(remaining_seconds: int, total_seconds: int) -> float:
    """Fraction of the phase already elapsed, clamped to [0, 1]."""
    if total_seconds <= 0:
        return 0.0
    fraction = (total_seconds - remaining_seconds) / total_seconds
    return min(1.0, max(0.0, fraction))


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    """Fixed-width bar with floor(width * fraction) filled cells."""
    filled = min(width, max(0, math.floor(width * fraction)))
    return "█" * filled + "░" * (width - filled)


def sound_label(sound_enabled: bool | None) -> Text:
    if sound_enabled:
        return Text("ON 🔔", style="green")
    return Text("OFF 🔕", style="red")


class TimerDisplay:
    """Redraws the countdown frame in place.

    Use as a context manager around the session loop; outside of it,
    ``draw`` falls back to printing the frame once.
    """

    def __init__(
        self,
        console: Console | None = None,
        refresh_per_second: int = REFRESH_PER_SECOND,
    ):
        self.console = console or get_console()
        self.refresh_per_second = refresh_per_second
        self._live: Live | None = None

    def __enter__(self) -> TimerDisplay:
        self.console.clear()
        # Redraws are driven by the session tick, not a refresh thread
        self._live = Live(
            Text(""),
            console=self.console,
            refresh_per_second=self.refresh_per_second,
            auto_refresh=False,
        )
        self._live.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def build_frame(self, frame: TimerFrame) -> Group:
        """Create the renderable for one countdown frame."""
        color = frame.phase.color
        fraction = elapsed_fraction(frame.remaining_seconds, frame.total_seconds)

        remaining = Text("Time Remaining: ")
        remaining.append(format_time(frame.remaining_seconds), style="bold white")

        sound = Text("Sound: ")
        sound.append_text(sound_label(frame.sound_enabled))

        return Group(
            Text("🍅 PomPulse", style="bold yellow"),
            Text(""),
            Text(frame.phase.label, style=f"bold {color}"),
            Text(""),
            remaining,
            Text(""),
            Text(progress_bar(fraction), style=color),
            Text(""),
            Text(
                f"Pomodoro {frame.completed_in_cycle + 1}/"
                f"{frame.intervals_before_long_break}"
            ),
            Text(f"Total Completed: {frame.total_completed}"),
            sound,
        )

    def draw(self, frame: TimerFrame) -> None:
        """Replace the previous frame with this one."""
        renderable = self.build_frame(frame)
        if self._live is None:
            self.console.print(renderable)
            return
        self._live.update(renderable, refresh=True)

    def announce(self, message: str, style: str = "bold") -> None:
        """Print a line above the live frame."""
        self.console.print(Text(message, style=style))


def render_summary(view: SummaryView) -> Panel:
    """Build the static summary panel."""
    body = Text()
    body.append("Total Pomodoros Completed: ", style="cyan")
    body.append(f"{view.total_completed}\n", style="green")
    body.append("Current Streak: ", style="cyan")
    body.append(
        f"{view.completed_in_cycle}/{view.intervals_before_long_break}\n",
        style="green",
    )
    body.append("Total Focus Time: ", style="cyan")
    body.append(f"{view.total_focus_minutes} minutes\n", style="green")
    body.append("Sound Notifications: ", style="cyan")
    body.append_text(sound_label(view.sound_enabled))

    return Panel(
        body,
        title="[bold yellow]Summary[/bold yellow]",
        border_style="yellow",
        padding=(1, 2),
    )


def show_summary(view: SummaryView, console: Console | None = None) -> None:
    """Print the summary panel once."""
    console = console or get_console()
    console.print()
    console.print(render_summary(view))
    console.print()
