"""Pomodoro session state machine.

A session alternates focus and break phases until it is cancelled. Remaining
time is always derived from the phase's start instant on a monotonic clock,
so time spent drawing frames or playing cues never accumulates as drift.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from pompulse.exceptions import PlaybackError
from pompulse.models.stats import CURRENT_STREAK, TOTAL_POMODOROS
from pompulse.services.notifier import Cue, Notifier
from pompulse.services.settings_store import SettingsStore
from pompulse.utils.clock import Clock, MonotonicClock
from pompulse.utils.logger import get_logger

from .cycling import CycleState, Phase, SessionConfig
from .ui import SummaryView, TimerDisplay, TimerFrame

SessionStatus = Literal["running", "cancelled"]


@dataclass(frozen=True)
class SessionResult:
    """Outcome of one ``run``."""

    status: SessionStatus
    completed_focus_phases: int
    total_completed: int
    completed_in_cycle: int


class PomodoroSession:
    """Drives phases, counters, cues and the live display."""

    def __init__(
        self,
        store: SettingsStore,
        notifier: Notifier,
        display: TimerDisplay,
        config: SessionConfig | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.display = display
        self.config = config or SessionConfig()
        self.clock = clock or MonotonicClock()

        stats = store.load()
        self.total_completed = stats.total_pomodoros
        self.sound_enabled = stats.sound_enabled

        # Always a fresh cycle; currentStreak is written but never read back
        self.cycle = CycleState()
        self.status: SessionStatus = "running"
        self.completed_this_run = 0
        self.phase_start = 0.0
        self.phase_duration = self.config.duration_for(self.cycle.phase)

    @property
    def cancelled(self) -> bool:
        return self.status == "cancelled"

    def cancel(self) -> None:
        """Move to the terminal cancelled state.

        Safe to call from a signal handler; the loop notices within one tick.
        """
        self.status = "cancelled"

    def remaining_seconds(self, now: float | None = None) -> int:
        """Whole seconds left in the current phase, rounded up."""
        if now is None:
            now = self.clock.monotonic()
        elapsed = now - self.phase_start
        return max(0, math.ceil(self.phase_duration - elapsed))

    def frame(self, remaining: int) -> TimerFrame:
        return TimerFrame(
            phase=self.cycle.phase,
            remaining_seconds=remaining,
            total_seconds=self.phase_duration,
            completed_in_cycle=self.cycle.completed_in_cycle,
            intervals_before_long_break=self.config.intervals_before_long_break,
            total_completed=self.total_completed,
            sound_enabled=self.sound_enabled,
        )

    def summary_view(self) -> SummaryView:
        return SummaryView(
            total_completed=self.total_completed,
            completed_in_cycle=self.cycle.completed_in_cycle,
            intervals_before_long_break=self.config.intervals_before_long_break,
            focus_minutes=self.config.focus_minutes,
            sound_enabled=self.sound_enabled,
        )

    def result(self) -> SessionResult:
        return SessionResult(
            status=self.status,
            completed_focus_phases=self.completed_this_run,
            total_completed=self.total_completed,
            completed_in_cycle=self.cycle.completed_in_cycle,
        )

    def run(self) -> SessionResult:
        """Run phases until cancelled.

        Cancellation is not an error: the in-progress phase is discarded and
        the result reports only phases that completed.
        """
        logger = get_logger()
        logger.info("session started (total=%d)", self.total_completed)
        self.store.set(CURRENT_STREAK, self.cycle.completed_in_cycle)

        with self.display:
            while not self.cancelled:
                if not self._countdown():
                    break
                self._finish_phase()
                if not self._wait(self.config.transition_pause_seconds):
                    break

        logger.info(
            "session cancelled during %s (completed=%d, total=%d)",
            self.cycle.phase.value,
            self.completed_this_run,
            self.total_completed,
        )
        return self.result()

    def _countdown(self) -> bool:
        """Count the current phase down to zero. False if cancelled."""
        self.phase_start = self.clock.monotonic()
        self.phase_duration = self.config.duration_for(self.cycle.phase)
        get_logger().info(
            "phase started: %s (%ds)", self.cycle.phase.value, self.phase_duration
        )

        while not self.cancelled:
            remaining = self.remaining_seconds()
            self.display.draw(self.frame(remaining))
            if remaining <= 0:
                return True
            self._sleep(self.config.tick_seconds)
        return False

    def _finish_phase(self) -> None:
        ended = self.cycle.phase
        next_phase = self.cycle.complete_phase(self.config)

        if ended is Phase.FOCUS:
            self.total_completed += 1
            self.completed_this_run += 1
            # Counters are durable before the cue fires
            self.store.set(TOTAL_POMODOROS, self.total_completed)
            self.store.set(CURRENT_STREAK, self.cycle.completed_in_cycle)
            self._play(Cue.FOCUS_END)
            self.display.announce(
                "🎉 Pomodoro completed! Time for a break!", "bold green"
            )
            if next_phase is Phase.LONG_BREAK:
                self.display.announce("Starting long break...", "bold magenta")
            else:
                self.display.announce("Starting short break...", "bold blue")
        else:
            self._play(Cue.BREAK_END)
            self.display.announce(
                "Break completed! Starting next pomodoro...", "bold yellow"
            )

        get_logger().info(
            "phase ended: %s -> %s (in cycle=%d, total=%d)",
            ended.value,
            next_phase.value,
            self.cycle.completed_in_cycle,
            self.total_completed,
        )

    def _play(self, cue: Cue) -> None:
        if self.sound_enabled is not True:
            return
        try:
            self.notifier.play(cue)
        except PlaybackError as e:
            get_logger().warning("cue %s failed: %s", cue.value, e)
            self.display.announce(
                "Error playing sound. You can disable sounds with `pp sound`",
                "red",
            )

    def _wait(self, seconds: float) -> bool:
        """Pause between phases in tick-sized steps. False if cancelled."""
        end = self.clock.monotonic() + seconds
        while not self.cancelled:
            left = end - self.clock.monotonic()
            if left <= 0:
                return True
            self._sleep(min(left, self.config.tick_seconds))
        return False

    def _sleep(self, seconds: float) -> None:
        try:
            self.clock.sleep(seconds)
        except KeyboardInterrupt:
            self.cancel()
