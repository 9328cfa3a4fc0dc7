"""Exceptions raised while resolving and running configured commands."""

from pathlib import Path


class CommandError(Exception):
    """Base exception for command execution failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(CommandError):
    """Raised for unreadable or invalid configuration and unknown command keys."""


class ArgumentRejected(CommandError):
    """Raised when extra arguments are not allowed or contain forbidden characters."""


class WorkdirNotFound(CommandError):
    """Raised when a command's working directory does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Working directory does not exist: {path}")


class SpawnFailure(CommandError):
    """Raised when the shell process cannot be started."""


class ExecutionError(CommandError):
    """Raised for any other failure while the process is running."""
