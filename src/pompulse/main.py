"""Main entry point for PomPulse (``pp``)."""

import asyncio
import signal
from contextlib import contextmanager

import typer

from pompulse import __version__
from pompulse.commands.decorators import command_wrapper
from pompulse.models.focus.cycling import SessionConfig
from pompulse.models.focus.session import PomodoroSession
from pompulse.models.focus.ui import SummaryView, TimerDisplay, show_summary
from pompulse.services.notifier import select_notifier
from pompulse.services.settings_store import get_settings_store
from pompulse.services.sound_service import SoundService
from pompulse.utils.clock import MonotonicClock
from pompulse.utils.typer_helpers import SuggestingGroup
from pompulse.utils.ui.console import get_console

app = typer.Typer(
    name="pp",
    cls=SuggestingGroup,
    help="PomPulse - A beautiful Pomodoro timer for your terminal",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        get_console().print(f"[bold]PomPulse[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """PomPulse - A beautiful Pomodoro timer for your terminal."""


@contextmanager
def cancel_on_interrupt(session: PomodoroSession):
    """Route SIGINT to ``session.cancel()`` for the duration of the block."""
    previous = signal.signal(signal.SIGINT, lambda signum, frame: session.cancel())
    try:
        yield session
    finally:
        signal.signal(signal.SIGINT, previous)


@app.command()
@command_wrapper
def start() -> None:
    """Start the Pomodoro timer."""
    console = get_console()
    store = get_settings_store()
    notifier = select_notifier()
    config = SessionConfig()

    if store.load().sound_enabled is None:
        try:
            asyncio.run(SoundService(store, notifier, console).request_permission())
        except KeyboardInterrupt:
            console.print("\n[yellow]Cancelled.[/yellow]")
            show_summary(_persisted_summary(config), console)
            return

    session = PomodoroSession(
        store=store,
        notifier=notifier,
        display=TimerDisplay(console),
        config=config,
        clock=MonotonicClock(),
    )
    with cancel_on_interrupt(session):
        session.run()

    console.clear()
    show_summary(session.summary_view(), console)


@app.command()
@command_wrapper
def summary() -> None:
    """Show productivity summary."""
    show_summary(_persisted_summary(SessionConfig()), get_console())


@app.command()
@command_wrapper
def sound() -> None:
    """Toggle sound notifications."""
    console = get_console()
    service = SoundService(get_settings_store(), select_notifier(), console)
    try:
        asyncio.run(service.toggle())
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")


def _persisted_summary(config: SessionConfig) -> SummaryView:
    stats = get_settings_store().load()
    return SummaryView(
        total_completed=stats.total_pomodoros,
        completed_in_cycle=stats.current_streak,
        intervals_before_long_break=config.intervals_before_long_break,
        focus_minutes=config.focus_minutes,
        sound_enabled=stats.sound_enabled,
    )


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
