"""
Exit codes for the recur CLI.

Semantic exit codes so scripts can tell what went wrong without parsing output.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or an unsupported recurrence rule
ERROR_INVALID_ARGS = 2

# Pattern or series not found
ERROR_NOT_FOUND = 5

# Write lost to concurrent writers after retries
ERROR_CONFLICT = 7


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_CONFLICT: "ERROR_CONFLICT",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or unsupported recurrence rule",
        ERROR_NOT_FOUND: "Pattern or series not found",
        ERROR_CONFLICT: "Concurrent writers kept colliding; retry the command",
    }
    return descriptions.get(code, "Unknown error")
