"""PomPulse - a Pomodoro timer for your terminal."""

__version__ = "1.0.0"
