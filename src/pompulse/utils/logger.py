"""Application-wide logger writing to platformdirs user_log_dir.

Output goes to a rotating file only; anything written to the terminal
would tear the live countdown frame.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "pompulse"
_LOG_FILE = "pompulse.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    """Location of the current log file."""
    return Path(user_log_dir(_APP_NAME)) / _LOG_FILE


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def get_logger() -> logging.Logger:
    """Return the singleton application logger, initialising it on first call."""
    global _logger
    if _logger is not None:
        return _logger

    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(logging.DEBUG)
    # Handlers attached by a host (e.g. log capture) do not replace the file
    if not any(
        isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers
    ):
        logger.addHandler(_file_handler(log_file_path()))
    logger.propagate = False

    _logger = logger
    return _logger
