"""Focus mode - Pomodoro session state machine and live display."""

from .cycling import CycleState, Phase, SessionConfig
from .session import PomodoroSession, SessionResult
from .ui import (
    SummaryView,
    TimerDisplay,
    TimerFrame,
    render_summary,
    show_summary,
)

__all__ = [
    "CycleState",
    "Phase",
    "SessionConfig",
    "PomodoroSession",
    "SessionResult",
    "SummaryView",
    "TimerDisplay",
    "TimerFrame",
    "render_summary",
    "show_summary",
]
