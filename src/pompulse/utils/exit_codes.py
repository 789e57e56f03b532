"""
Exit codes for PomPulse.

Semantic exit codes so scripts wrapping ``pp`` can tell what happened.
An interrupted ``pp start`` is a normal exit and reports SUCCESS.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Settings file could not be read or written; counters cannot be trusted
ERROR_PERSISTENCE = 3

# Sound playback or notification permission problem
ERROR_NOTIFICATION = 4


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for log lines."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_PERSISTENCE: "ERROR_PERSISTENCE",
        ERROR_NOTIFICATION: "ERROR_NOTIFICATION",
    }
    return code_names.get(code, f"UNKNOWN({code})")
