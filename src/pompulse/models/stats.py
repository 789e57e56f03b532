"""Persisted counters and flags.

The settings file holds exactly four fields, stored under the camelCase
keys used since the first release.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

TOTAL_POMODOROS = "totalPomodoros"
CURRENT_STREAK = "currentStreak"
SOUND_ENABLED = "soundEnabled"
PERMISSION_REQUESTED = "permissionRequested"

STAT_KEYS = (TOTAL_POMODOROS, CURRENT_STREAK, SOUND_ENABLED, PERMISSION_REQUESTED)


class PersistentStats(BaseModel):
    """Cross-run statistics and sound preferences."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_pomodoros: int = Field(default=0, ge=0, alias=TOTAL_POMODOROS)
    current_streak: int = Field(default=0, ge=0, alias=CURRENT_STREAK)
    # None means the user has not been asked yet
    sound_enabled: bool | None = Field(default=None, alias=SOUND_ENABLED)
    permission_requested: bool = Field(default=False, alias=PERMISSION_REQUESTED)

    def to_record(self) -> dict:
        """Dump using the on-disk key names."""
        return self.model_dump(by_alias=True)
