"""Sound notification preferences: the one-time permission flow and toggling."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable

from rich.console import Console

from pompulse.exceptions import PermissionDeniedError, PlaybackError
from pompulse.models.stats import PERMISSION_REQUESTED, SOUND_ENABLED
from pompulse.services.notifier import Cue, Notifier, PermissionResult
from pompulse.services.settings_store import SettingsStore
from pompulse.utils.logger import get_logger
from pompulse.utils.ui.console import get_console

AskFn = Callable[[str], Awaitable[bool]]

YES_ANSWERS = ("y", "yes")


async def ask_yes_no(question: str) -> bool:
    """Wait for a single line of input on stdin and treat it as yes/no.

    The wait is a plain awaitable, so Ctrl-C cancels it like any other task.
    """
    get_console().print(f"[cyan]{question}[/cyan]")
    line = await _read_line()
    return line.strip().lower() in YES_ANSWERS


async def _read_line() -> str:
    loop = asyncio.get_running_loop()
    try:
        fd = sys.stdin.fileno()
        answer: asyncio.Future[str] = loop.create_future()

        def on_readable() -> None:
            if not answer.done():
                answer.set_result(sys.stdin.readline())

        loop.add_reader(fd, on_readable)
    except (AttributeError, ValueError, OSError, NotImplementedError):
        # No selectable stdin (Windows proactor loop, redirected streams)
        return await asyncio.to_thread(sys.stdin.readline)

    try:
        return await answer
    finally:
        loop.remove_reader(fd)


class SoundService:
    """Reads and updates the sound flags in the settings store."""

    def __init__(
        self,
        store: SettingsStore,
        notifier: Notifier,
        console: Console | None = None,
        ask: AskFn | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.console = console or get_console()
        self.ask = ask or ask_yes_no

    async def request_permission(self) -> bool | None:
        """Run the one-time permission flow.

        Returns the resulting sound flag. Does nothing if permission was
        already requested. If the prompt is cancelled nothing is persisted.
        """
        stats = self.store.load()
        if stats.permission_requested:
            return stats.sound_enabled

        if self.notifier.needs_consent:
            self.console.print(
                "\n[yellow]🔔 PomPulse works best with sound notifications![/yellow]"
            )
            accepted = await self.ask(
                "Would you like to enable sound notifications? (y/n)"
            )
            if accepted:
                enabled = await asyncio.to_thread(self._platform_permission)
            else:
                enabled = False
                self.console.print(
                    "\n[yellow]🔕 Sound notifications disabled. "
                    "You can enable them later with[/yellow] [cyan]pp sound[/cyan]"
                )
        else:
            enabled = True

        self.store.set(SOUND_ENABLED, enabled)
        self.store.set(PERMISSION_REQUESTED, True)
        get_logger().info("sound permission requested: enabled=%s", enabled)
        return enabled

    def _platform_permission(self) -> bool:
        try:
            result = self.notifier.request_permission()
        except PermissionDeniedError as e:
            get_logger().warning("notification permission denied: %s", e)
            self.console.print(f"\n[yellow]⚠️  {e}[/yellow]")
            return False

        if result is PermissionResult.DENIED:
            self.console.print(
                "\n[yellow]⚠️  Please allow notifications in your system settings "
                "to get the best experience.[/yellow]"
            )
            return False

        self.console.print("\n[green]✅ Sound notifications enabled![/green]")
        return True

    async def toggle(self) -> bool | None:
        """Flip the sound flag, or run the permission flow the first time."""
        stats = self.store.load()
        if not stats.permission_requested:
            return await self.request_permission()

        enabled = not stats.sound_enabled
        self.store.set(SOUND_ENABLED, enabled)
        get_logger().info("sound toggled: enabled=%s", enabled)

        if enabled:
            self.console.print(
                "[yellow]Sound notifications[/yellow] [green]enabled 🔔[/green]"
            )
            self.console.print("[cyan]Playing test notification...[/cyan]")
            self.play_confirmation()
        else:
            self.console.print(
                "[yellow]Sound notifications[/yellow] [red]disabled 🔕[/red]"
            )
        return enabled

    def play_confirmation(self) -> bool:
        """Play the focus cue; failures are reported, not raised."""
        try:
            self.notifier.play(Cue.FOCUS_END)
        except PlaybackError as e:
            get_logger().warning("confirmation cue failed: %s", e)
            self.console.print(
                "[red]Error playing sound. You can disable sounds with[/red] "
                "[cyan]pp sound[/cyan]"
            )
            return False
        return True
