"""Shared test fixtures and doubles.

Keeps tests away from the real platform directories and provides in-memory
collaborators for the session state machine.
"""

from __future__ import annotations

import logging
import logging.handlers
from io import StringIO
from unittest.mock import patch

import pytest
from rich.console import Console

from pompulse.exceptions import PlaybackError
from pompulse.models.stats import PersistentStats, TOTAL_POMODOROS
from pompulse.services.notifier import Cue, Notifier, PermissionResult
from pompulse.services.settings_store import MemorySettingsStore, get_settings_store


# ---------------------------------------------------------------------------
# Doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` is called.

    ``interrupt_at`` raises KeyboardInterrupt from the first sleep at or past
    that instant, the way Ctrl-C surfaces from ``time.sleep``.
    """

    def __init__(self, start: float = 1000.0, interrupt_at: float | None = None):
        self.start = start
        self.now = start
        self.interrupt_at = interrupt_at
        self.sleeps: list[float] = []
        self.on_sleep = None

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if self.interrupt_at is not None and self.now >= self.interrupt_at:
            raise KeyboardInterrupt
        self.now += max(0.0, seconds)
        if self.on_sleep is not None:
            self.on_sleep(self)


class RecordingNotifier(Notifier):
    """Records played cues and the persisted total at the time of each cue."""

    def __init__(
        self,
        store=None,
        fail: bool = False,
        needs_consent: bool = False,
        permission: PermissionResult = PermissionResult.GRANTED,
        permission_error: Exception | None = None,
    ):
        self.store = store
        self.fail = fail
        self.needs_consent = needs_consent
        self.permission = permission
        self.permission_error = permission_error
        self.played: list[Cue] = []
        self.totals_at_play: list[int] = []
        self.permission_calls = 0

    def play(self, cue: Cue) -> None:
        if self.store is not None:
            self.totals_at_play.append(self.store.get(TOTAL_POMODOROS))
        if self.fail:
            raise PlaybackError("no audio device")
        self.played.append(cue)

    def request_permission(self) -> PermissionResult:
        self.permission_calls += 1
        if self.permission_error is not None:
            raise self.permission_error
        return self.permission


class RecordingDisplay:
    """Stands in for TimerDisplay and keeps every frame and announcement."""

    def __init__(self):
        self.frames = []
        self.messages: list[str] = []
        self.entered = 0
        self.exited = 0

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited += 1

    def draw(self, frame) -> None:
        self.frames.append(frame)

    def announce(self, message: str, style: str = "bold") -> None:
        self.messages.append(message)

    def phases(self) -> list:
        """Distinct phases in the order they were drawn."""
        seen = []
        for frame in self.frames:
            if not seen or seen[-1] is not frame.phase:
                seen.append(frame.phase)
        return seen


def string_console() -> tuple[Console, StringIO]:
    """Return a Console that writes to a StringIO buffer."""
    buf = StringIO()
    con = Console(file=buf, force_terminal=False, no_color=True, width=100)
    return con, buf


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _drop_file_handlers() -> None:
    logger = logging.getLogger("pompulse")
    for handler in list(logger.handlers):
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Send log output to tmp_path and reset the logger singleton."""
    import pompulse.utils.logger as logger_mod

    logger_mod._logger = None
    _drop_file_handlers()
    with patch("pompulse.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    _drop_file_handlers()
    logger_mod._logger = None


@pytest.fixture(autouse=True)
def clear_store_cache():
    get_settings_store.cache_clear()
    yield
    get_settings_store.cache_clear()


@pytest.fixture()
def memory_store() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture()
def sound_on_store() -> MemorySettingsStore:
    return MemorySettingsStore(
        PersistentStats(sound_enabled=True, permission_requested=True)
    )


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture()
def make_clock():
    """Factory for FakeClock instances."""
    return FakeClock


@pytest.fixture()
def make_notifier():
    """Factory for RecordingNotifier instances."""
    return RecordingNotifier


@pytest.fixture()
def console_buffer() -> tuple[Console, StringIO]:
    return string_console()
