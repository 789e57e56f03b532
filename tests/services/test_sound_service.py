"""Tests for the sound permission flow and the sound toggle."""

from __future__ import annotations

import asyncio
import threading
from io import StringIO

import pytest
from rich.console import Console

from pompulse.exceptions import PermissionDeniedError
from pompulse.models.stats import PERMISSION_REQUESTED, SOUND_ENABLED, PersistentStats
from pompulse.services.notifier import Cue, PermissionResult
from pompulse.services.settings_store import MemorySettingsStore
from pompulse.services.sound_service import SoundService, ask_yes_no


def _answer(value: bool):
    """Return an ask function that always answers ``value``."""
    questions: list[str] = []

    async def ask(question: str) -> bool:
        questions.append(question)
        return value

    ask.questions = questions
    return ask


@pytest.fixture()
def quiet_console():
    buf = StringIO()
    return Console(file=buf, force_terminal=False, no_color=True, width=120), buf


# ---------------------------------------------------------------------------
# request_permission
# ---------------------------------------------------------------------------


class TestRequestPermission:
    @pytest.mark.asyncio
    async def test_declined_disables_sound(self, memory_store, make_notifier, quiet_console):
        con, buf = quiet_console
        notifier = make_notifier(needs_consent=True)
        service = SoundService(memory_store, notifier, con, ask=_answer(False))

        result = await service.request_permission()

        assert result is False
        assert memory_store.get(SOUND_ENABLED) is False
        assert memory_store.get(PERMISSION_REQUESTED) is True
        assert notifier.permission_calls == 0
        assert notifier.played == []
        assert "pp sound" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_accepted_and_granted(self, memory_store, make_notifier, quiet_console):
        con, buf = quiet_console
        notifier = make_notifier(needs_consent=True)
        ask = _answer(True)
        service = SoundService(memory_store, notifier, con, ask=ask)

        assert await service.request_permission() is True
        assert memory_store.get(SOUND_ENABLED) is True
        assert memory_store.get(PERMISSION_REQUESTED) is True
        assert notifier.permission_calls == 1
        assert len(ask.questions) == 1
        assert "Sound notifications enabled" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_accepted_but_platform_denied(self, memory_store, make_notifier, quiet_console):
        con, _ = quiet_console
        notifier = make_notifier(needs_consent=True, permission=PermissionResult.DENIED)
        service = SoundService(memory_store, notifier, con, ask=_answer(True))

        assert await service.request_permission() is False
        assert memory_store.get(SOUND_ENABLED) is False
        assert memory_store.get(PERMISSION_REQUESTED) is True

    @pytest.mark.asyncio
    async def test_platform_request_runs_off_the_event_loop(
        self, memory_store, make_notifier, quiet_console, mocker
    ):
        con, _ = quiet_console
        notifier = make_notifier(needs_consent=True)
        threads: list[int] = []

        def request() -> PermissionResult:
            threads.append(threading.get_ident())
            return PermissionResult.GRANTED

        mocker.patch.object(notifier, "request_permission", side_effect=request)
        service = SoundService(memory_store, notifier, con, ask=_answer(True))

        assert await service.request_permission() is True
        assert threads and threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_permission_error_is_not_fatal(self, memory_store, make_notifier, quiet_console):
        con, buf = quiet_console
        notifier = make_notifier(
            needs_consent=True,
            permission_error=PermissionDeniedError("notifications blocked"),
        )
        service = SoundService(memory_store, notifier, con, ask=_answer(True))

        assert await service.request_permission() is False
        assert memory_store.get(PERMISSION_REQUESTED) is True
        assert "notifications blocked" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_no_consent_needed_enables_without_asking(
        self, memory_store, make_notifier, quiet_console
    ):
        con, _ = quiet_console
        ask = _answer(False)
        service = SoundService(memory_store, make_notifier(), con, ask=ask)

        assert await service.request_permission() is True
        assert ask.questions == []
        assert memory_store.get(SOUND_ENABLED) is True
        assert memory_store.get(PERMISSION_REQUESTED) is True

    @pytest.mark.asyncio
    async def test_already_requested_is_a_no_op(self, make_notifier, quiet_console):
        con, _ = quiet_console
        store = MemorySettingsStore(
            PersistentStats(sound_enabled=False, permission_requested=True)
        )
        ask = _answer(True)
        service = SoundService(store, make_notifier(needs_consent=True), con, ask=ask)

        assert await service.request_permission() is False
        assert ask.questions == []
        assert store.writes == 0

    @pytest.mark.asyncio
    async def test_cancelled_prompt_persists_nothing(self, memory_store, make_notifier, quiet_console):
        con, _ = quiet_console

        async def cancelled(question: str) -> bool:
            raise asyncio.CancelledError

        service = SoundService(
            memory_store, make_notifier(needs_consent=True), con, ask=cancelled
        )

        with pytest.raises(asyncio.CancelledError):
            await service.request_permission()

        assert memory_store.writes == 0
        assert memory_store.get(SOUND_ENABLED) is None
        assert memory_store.get(PERMISSION_REQUESTED) is False


# ---------------------------------------------------------------------------
# toggle
# ---------------------------------------------------------------------------


class TestToggle:
    @pytest.mark.asyncio
    async def test_toggle_off(self, sound_on_store, make_notifier, quiet_console):
        con, buf = quiet_console
        notifier = make_notifier()
        service = SoundService(sound_on_store, notifier, con)

        assert await service.toggle() is False
        assert sound_on_store.get(SOUND_ENABLED) is False
        assert notifier.played == []
        assert "disabled" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_toggle_on_plays_confirmation(self, make_notifier, quiet_console):
        con, buf = quiet_console
        store = MemorySettingsStore(
            PersistentStats(sound_enabled=False, permission_requested=True)
        )
        notifier = make_notifier()
        service = SoundService(store, notifier, con)

        assert await service.toggle() is True
        assert store.get(SOUND_ENABLED) is True
        assert notifier.played == [Cue.FOCUS_END]
        assert "Playing test notification" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_value(self, sound_on_store, make_notifier, quiet_console):
        con, _ = quiet_console
        service = SoundService(sound_on_store, make_notifier(), con)

        await service.toggle()
        await service.toggle()

        assert sound_on_store.get(SOUND_ENABLED) is True

    @pytest.mark.asyncio
    async def test_unset_flag_is_treated_as_off(self, make_notifier, quiet_console):
        con, _ = quiet_console
        store = MemorySettingsStore(PersistentStats(permission_requested=True))
        service = SoundService(store, make_notifier(), con)

        assert await service.toggle() is True

    @pytest.mark.asyncio
    async def test_first_toggle_runs_permission_flow(self, memory_store, make_notifier, quiet_console):
        con, _ = quiet_console
        ask = _answer(False)
        service = SoundService(memory_store, make_notifier(needs_consent=True), con, ask=ask)

        assert await service.toggle() is False
        assert len(ask.questions) == 1
        assert memory_store.get(PERMISSION_REQUESTED) is True

    @pytest.mark.asyncio
    async def test_playback_failure_keeps_new_value(self, make_notifier, quiet_console):
        con, buf = quiet_console
        store = MemorySettingsStore(
            PersistentStats(sound_enabled=False, permission_requested=True)
        )
        service = SoundService(store, make_notifier(fail=True), con)

        assert await service.toggle() is True
        assert store.get(SOUND_ENABLED) is True
        assert "Error playing sound" in buf.getvalue()


class TestPlayConfirmation:
    def test_success(self, memory_store, make_notifier, quiet_console):
        con, _ = quiet_console
        notifier = make_notifier()
        assert SoundService(memory_store, notifier, con).play_confirmation() is True
        assert notifier.played == [Cue.FOCUS_END]

    def test_failure_reported(self, memory_store, make_notifier, quiet_console):
        con, buf = quiet_console
        service = SoundService(memory_store, make_notifier(fail=True), con)

        assert service.play_confirmation() is False
        assert "pp sound" in buf.getvalue()


# ---------------------------------------------------------------------------
# ask_yes_no
# ---------------------------------------------------------------------------


class TestAskYesNo:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "line, expected",
        [("y\n", True), ("YES\n", True), ("n\n", False), ("\n", False), ("maybe\n", False)],
    )
    async def test_parses_answer(self, mocker, line, expected):
        mocker.patch("pompulse.services.sound_service.get_console")
        mocker.patch(
            "pompulse.services.sound_service._read_line",
            new=mocker.AsyncMock(return_value=line),
        )

        assert await ask_yes_no("Enable? (y/n)") is expected
