"""End-of-phase cues.

Each platform gets its own ``Notifier`` implementation; ``select_notifier()``
picks one once at startup so the session loop never branches on the OS.
"""

from __future__ import annotations

import platform
import shutil
import subprocess
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from rich.console import Console

from pompulse.exceptions import PermissionDeniedError, PlaybackError
from pompulse.utils.ui.console import get_console

PLAYBACK_TIMEOUT_SECONDS = 10


class Cue(str, Enum):
    """Audible signals marking the end of a phase."""

    FOCUS_END = "focus_end"
    BREAK_END = "break_end"


class PermissionResult(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


class Notifier(ABC):
    """Capability interface for playing cues."""

    # Whether the user should be asked before sound is turned on
    needs_consent: bool = False

    @abstractmethod
    def play(self, cue: Cue) -> None:
        """Play a cue, blocking until it finishes.

        Raises:
            PlaybackError: If the cue could not be played
        """
        raise NotImplementedError("Notifier.play() must be implemented")

    def request_permission(self) -> PermissionResult:
        """Ask the platform for notification permission."""
        return PermissionResult.UNSUPPORTED


def _run_player(command: list[str]) -> None:
    """Run an external audio player and translate failures to PlaybackError."""
    try:
        result = subprocess.run(
            command,
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            timeout=PLAYBACK_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise PlaybackError(f"Could not run {command[0]}: {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or b"").decode("utf-8", errors="ignore").strip()
        raise PlaybackError(
            f"{command[0]} exited with status {result.returncode}: {stderr}"
        )


class MacNotifier(Notifier):
    """macOS: system sounds through ``afplay``, permission through ``osascript``."""

    needs_consent = True

    SOUNDS = {
        Cue.FOCUS_END: Path("/System/Library/Sounds/Glass.aiff"),
        Cue.BREAK_END: Path("/System/Library/Sounds/Ping.aiff"),
    }

    def play(self, cue: Cue) -> None:
        sound_file = self.SOUNDS[cue]
        if not sound_file.exists():
            raise PlaybackError(f"Sound file not found: {sound_file}")
        _run_player(["afplay", str(sound_file)])

    def request_permission(self) -> PermissionResult:
        script = (
            'tell application "System Events" to display notification '
            '"PomPulse is ready to help you stay productive!" with title "PomPulse"'
        )
        try:
            result = subprocess.run(
                ["osascript", "-e", script],
                check=False,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=PLAYBACK_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise PermissionDeniedError(f"Notification permission failed: {e}") from e

        if result.returncode != 0:
            raise PermissionDeniedError(
                "Please allow notifications in System Settings to hear PomPulse cues."
            )
        return PermissionResult.GRANTED


class LinuxNotifier(Notifier):
    """Linux: freedesktop sound theme through PulseAudio or ALSA."""

    SOUNDS = {
        Cue.FOCUS_END: Path("/usr/share/sounds/freedesktop/stereo/complete.oga"),
        Cue.BREAK_END: Path("/usr/share/sounds/freedesktop/stereo/bell.oga"),
    }
    PLAYERS = ("paplay", "pw-play", "aplay")

    def play(self, cue: Cue) -> None:
        sound_file = self.SOUNDS[cue]
        if not sound_file.exists():
            raise PlaybackError(f"Sound file not found: {sound_file}")

        for player in self.PLAYERS:
            if shutil.which(player):
                _run_player([player, str(sound_file)])
                return
        raise PlaybackError("No audio player found (tried paplay, pw-play, aplay)")


class WindowsNotifier(Notifier):
    """Windows: system sound aliases through ``winsound``."""

    ALIASES = {
        Cue.FOCUS_END: "SystemAsterisk",
        Cue.BREAK_END: "SystemExclamation",
    }

    def play(self, cue: Cue) -> None:
        import winsound

        try:
            winsound.PlaySound(self.ALIASES[cue], winsound.SND_ALIAS)
        except RuntimeError as e:
            raise PlaybackError(f"Could not play system sound: {e}") from e


class BellNotifier(Notifier):
    """Fallback that rings the terminal bell."""

    def __init__(self, console: Console | None = None):
        self.console = console or get_console()

    def play(self, cue: Cue) -> None:
        self.console.bell()


def select_notifier(system_name: str | None = None) -> Notifier:
    """Pick the notifier for the running platform."""
    system_name = (system_name or platform.system()).lower()

    if system_name == "darwin" and shutil.which("afplay"):
        return MacNotifier()
    if system_name == "linux" and any(shutil.which(p) for p in LinuxNotifier.PLAYERS):
        return LinuxNotifier()
    if system_name == "windows":
        return WindowsNotifier()
    return BellNotifier()
