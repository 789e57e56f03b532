"""Pomodoro phase sequencing."""

from dataclasses import dataclass
from enum import Enum


class Phase(str, Enum):
    """A timed interval of the Pomodoro cycle."""

    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def color(self) -> str:
        return _COLORS[self]


_LABELS = {
    Phase.FOCUS: "POMODORO",
    Phase.SHORT_BREAK: "SHORT BREAK",
    Phase.LONG_BREAK: "LONG BREAK",
}

_COLORS = {
    Phase.FOCUS: "green",
    Phase.SHORT_BREAK: "blue",
    Phase.LONG_BREAK: "magenta",
}


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for Pomodoro cycling."""

    focus_minutes: float = 25
    short_break_minutes: float = 5
    long_break_minutes: float = 15
    intervals_before_long_break: int = 4
    tick_seconds: float = 0.1  # 10 Hz redraw
    transition_pause_seconds: float = 2.0

    def __post_init__(self):
        durations = (self.focus_minutes, self.short_break_minutes, self.long_break_minutes)
        if any(minutes <= 0 for minutes in durations):
            raise ValueError("Phase durations must be positive")
        if self.intervals_before_long_break < 1:
            raise ValueError("intervals_before_long_break must be at least 1")
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        if self.transition_pause_seconds < 0:
            raise ValueError("transition_pause_seconds cannot be negative")

    def duration_for(self, phase: Phase) -> int:
        """Get duration in whole seconds for a phase."""
        if phase is Phase.FOCUS:
            minutes = self.focus_minutes
        elif phase is Phase.SHORT_BREAK:
            minutes = self.short_break_minutes
        else:
            minutes = self.long_break_minutes
        return max(1, round(minutes * 60))


@dataclass
class CycleState:
    """Current position in the Pomodoro cycle."""

    phase: Phase = Phase.FOCUS
    completed_in_cycle: int = 0

    def complete_phase(self, config: SessionConfig) -> Phase:
        """Apply the end-of-phase transition and return the new phase."""
        if self.phase is Phase.FOCUS:
            self.completed_in_cycle += 1
            if self.completed_in_cycle >= config.intervals_before_long_break:
                self.phase = Phase.LONG_BREAK
                self.completed_in_cycle = 0
            else:
                self.phase = Phase.SHORT_BREAK
        else:
            self.phase = Phase.FOCUS
        return self.phase
