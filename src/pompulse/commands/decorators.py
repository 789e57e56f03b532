"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer

from pompulse.exceptions import PomPulseError
from pompulse.utils.exit_codes import ERROR_GENERAL, get_exit_code_name
from pompulse.utils.logger import get_logger
from pompulse.utils.ui.formatters import format_error


def command_wrapper(func: Callable):
    """Log the command and turn failures into a clean message and exit code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            result = func(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except PomPulseError as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) [%s] - %s",
                cmd,
                elapsed,
                get_exit_code_name(e.exit_code),
                str(e),
            )
            format_error(str(e))
            raise typer.Exit(code=e.exit_code) from e

        except typer.Exit:
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=ERROR_GENERAL) from e

    return wrapper
