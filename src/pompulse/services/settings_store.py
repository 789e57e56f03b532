"""Settings store for PomPulse counters and sound preferences.

The session state machine receives a store handle at construction instead
of reaching for a module-level config object, so tests can hand it a
``MemorySettingsStore``. The CLI uses ``get_settings_store()`` which returns
a ``JsonSettingsStore`` rooted in the platform config directory.

Every ``set`` is written to disk before it returns. There is no batching:
a crash loses at most the phase in progress, never a committed counter.
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir
from pydantic import ValidationError

from pompulse.exceptions import PersistenceError
from pompulse.models.stats import STAT_KEYS, PersistentStats
from pompulse.utils.logger import get_logger


class SettingsStore(ABC):
    """Durable key-value store for the four persisted fields."""

    @abstractmethod
    def load(self) -> PersistentStats:
        """Return the current stats snapshot."""
        raise NotImplementedError("SettingsStore.load() must be implemented")

    @abstractmethod
    def _write(self, stats: PersistentStats) -> None:
        """Persist a full stats snapshot."""
        raise NotImplementedError("SettingsStore._write() must be implemented")

    def get(self, key: str) -> Any:
        """Get a persisted value by its record key (e.g. ``totalPomodoros``)."""
        _check_key(key)
        return self.load().to_record()[key]

    def set(self, key: str, value: Any) -> None:
        """Set a single persisted value and write it through."""
        _check_key(key)
        record = self.load().to_record()
        record[key] = value
        stats = PersistentStats.model_validate(record)
        self._write(stats)


def _check_key(key: str) -> None:
    if key not in STAT_KEYS:
        raise KeyError(f"Unknown setting: {key}")


class MemorySettingsStore(SettingsStore):
    """In-memory store with the same contract, for tests and dry runs."""

    def __init__(self, stats: PersistentStats | None = None):
        self._stats = stats or PersistentStats()
        self.writes = 0

    def load(self) -> PersistentStats:
        return self._stats.model_copy()

    def _write(self, stats: PersistentStats) -> None:
        self._stats = stats
        self.writes += 1


class JsonSettingsStore(SettingsStore):
    """Settings persisted as a small JSON document."""

    def __init__(self, path: Path | None = None):
        if path is None:
            path = Path(user_config_dir("pompulse")) / "config.json"
        self.path = path
        self._stats: PersistentStats | None = None

    def load(self) -> PersistentStats:
        if self._stats is None:
            self._stats = self._read()
        return self._stats.model_copy()

    def _read(self) -> PersistentStats:
        if not self.path.exists():
            return PersistentStats()

        try:
            return PersistentStats.model_validate_json(self.path.read_bytes())
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            get_logger().error("failed to read settings from %s: %s", self.path, e)
            raise PersistenceError(f"Failed to read settings: {e}") from e

    def _write(self, stats: PersistentStats) -> None:
        tmp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(stats.to_record(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            get_logger().error("failed to write settings to %s: %s", self.path, e)
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to save settings: {e}") from e

        self._stats = stats


@lru_cache(maxsize=1)
def get_settings_store() -> SettingsStore:
    """Get the store used by the CLI commands."""
    return JsonSettingsStore()
